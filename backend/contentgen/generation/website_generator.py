import html
import logging

from contentgen.generation.artifacts import WebsiteArtifact, WebsiteRequest
from contentgen.generation.base import BaseGenerator
from contentgen.generation.prompts.website import WEBSITE_SYSTEM_PROMPT, WEBSITE_USER_PROMPT

logger = logging.getLogger(__name__)

FALLBACK_CSS = """
* { margin: 0; padding: 0; box-sizing: border-box; }
body { font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; }
"""


def fallback_website(input_data: WebsiteRequest) -> WebsiteArtifact:
    """Minimal page used when the model answers with something that is not a website."""
    name = html.escape(input_data.project_name)
    body = html.escape(input_data.content_requirements or "Your amazing website is being created.")
    color = html.escape(input_data.color_scheme.split(",")[0].strip() or "#3B82F6")
    page = f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{name}</title>
  <link rel="stylesheet" href="https://cdnjs.cloudflare.com/ajax/libs/font-awesome/6.4.0/css/all.min.css">
</head>
<body>
  <header style="background: {color}; padding: 20px; color: white;">
    <h1>{name}</h1>
  </header>
  <main style="padding: 40px;">
    <section>
      <h2>Welcome to {name}</h2>
      <p>{body}</p>
    </section>
  </main>
  <footer style="background: #1a1a1a; color: white; padding: 20px; text-align: center;">
    <p>&copy; {name}. All rights reserved.</p>
  </footer>
</body>
</html>"""
    return WebsiteArtifact(
        html=page,
        css=FALLBACK_CSS,
        description=f"A {input_data.template} website for {input_data.business_type}",
        sections=["Header", "Main", "Footer"],
    )


class WebsiteGenerator(BaseGenerator[WebsiteRequest, WebsiteArtifact]):
    async def run(self, input_data: WebsiteRequest) -> WebsiteArtifact:
        logger.info(
            "Generating %s website for %s (%s)",
            input_data.template,
            input_data.project_name,
            input_data.business_type,
        )
        user_prompt = WEBSITE_USER_PROMPT.format(
            template=input_data.template,
            business_type=input_data.business_type,
            project_name=input_data.project_name,
            color_scheme=input_data.color_scheme or "designer's choice",
            content_requirements=input_data.content_requirements or "none",
        )
        try:
            artifact = await self.llm.generate_structured(
                system_prompt=WEBSITE_SYSTEM_PROMPT,
                user_prompt=user_prompt,
                response_schema=WebsiteArtifact,
            )
        except ValueError as exc:
            logger.warning("Website response was not parseable, using fallback page: %s", exc)
            return fallback_website(input_data)

        if not artifact.description:
            artifact.description = f"A {input_data.template} website for {input_data.business_type}"
        return artifact
