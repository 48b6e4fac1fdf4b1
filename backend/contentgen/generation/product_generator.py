from contentgen.generation.artifacts import ProductData, ProductRequest, ProductResponse
from contentgen.generation.base import BaseGenerator
from contentgen.generation.prompts.product import PRODUCT_SYSTEM_PROMPT, PRODUCT_USER_PROMPT


class ProductListingGenerator(BaseGenerator[ProductRequest, ProductResponse]):
    """Produces one marketplace listing; the category doubles as the target platform."""

    async def run(self, input_data: ProductRequest) -> ProductResponse:
        user_prompt = PRODUCT_USER_PROMPT.format(
            product_name=input_data.product_name,
            category=input_data.category,
            features=input_data.features or "not specified",
            target_audience=input_data.target_audience or "general shoppers",
            content_types=", ".join(input_data.content_types) or "titles, descriptions",
        )
        product_data = await self.llm.generate_structured(
            system_prompt=PRODUCT_SYSTEM_PROMPT,
            user_prompt=user_prompt,
            response_schema=ProductData,
        )
        return ProductResponse(product_data=product_data)
