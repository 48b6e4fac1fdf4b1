from contentgen.generation.artifacts import BlogRequest, BlogResponse
from contentgen.generation.base import BaseGenerator
from contentgen.generation.prompts.blog import BLOG_SYSTEM_PROMPT, BLOG_USER_PROMPT


class BlogGenerator(BaseGenerator[BlogRequest, BlogResponse]):
    """Writes a full Markdown blog post for a topic."""

    async def run(self, input_data: BlogRequest) -> BlogResponse:
        user_prompt = BLOG_USER_PROMPT.format(
            topic=input_data.topic,
            keywords=input_data.keywords or "none",
            tone=input_data.tone,
            language=input_data.language,
            word_count=input_data.word_count,
        )
        blog = await self.llm.generate_text(BLOG_SYSTEM_PROMPT, user_prompt)
        return BlogResponse(blog=blog)
