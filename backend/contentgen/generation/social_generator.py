from contentgen.generation.artifacts import SocialPostRequest, SocialPostResponse
from contentgen.generation.base import BaseGenerator
from contentgen.generation.prompts.social import SOCIAL_SYSTEM_PROMPT, SOCIAL_USER_PROMPT


class SocialPostGenerator(BaseGenerator[SocialPostRequest, SocialPostResponse]):
    async def run(self, input_data: SocialPostRequest) -> SocialPostResponse:
        user_prompt = SOCIAL_USER_PROMPT.format(
            platform=input_data.platform,
            topic=input_data.topic,
            tone=input_data.tone,
            target_audience=input_data.target_audience or "general",
            call_to_action=input_data.call_to_action or "none",
            hashtags="include 3-8 relevant hashtags" if input_data.include_hashtags else "do not use hashtags",
            emoji="use a few fitting emoji" if input_data.include_emoji else "do not use emoji",
        )
        post = await self.llm.generate_text(SOCIAL_SYSTEM_PROMPT, user_prompt, temperature=0.9)
        return SocialPostResponse(post=post)
