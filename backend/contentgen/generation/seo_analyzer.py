from contentgen.generation.artifacts import SeoAnalysisResult, SeoRequest, SeoResponse
from contentgen.generation.base import BaseGenerator
from contentgen.generation.prompts.seo import SEO_SYSTEM_PROMPT, SEO_USER_PROMPT


class SeoAnalyzer(BaseGenerator[SeoRequest, SeoResponse]):
    async def run(self, input_data: SeoRequest) -> SeoResponse:
        analysis = await self.llm.generate_structured(
            system_prompt=SEO_SYSTEM_PROMPT,
            user_prompt=SEO_USER_PROMPT.format(
                target_keywords=input_data.target_keywords or "none given",
                content=input_data.content,
            ),
            response_schema=SeoAnalysisResult,
        )
        return SeoResponse(analysis=analysis)
