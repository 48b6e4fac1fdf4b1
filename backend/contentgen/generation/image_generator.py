from contentgen.generation.artifacts import ImageRequest, ImageResponse
from contentgen.generation.base import BaseGenerator


class ImageGenerator(BaseGenerator[ImageRequest, ImageResponse]):
    async def run(self, input_data: ImageRequest) -> ImageResponse:
        image_url = await self.llm.generate_image(input_data.prompt.strip())
        return ImageResponse(image_url=image_url)
