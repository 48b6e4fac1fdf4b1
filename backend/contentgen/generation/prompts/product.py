PRODUCT_SYSTEM_PROMPT = """
You are an e-commerce product content expert.
You write listings that convert and rank on marketplace search.
Always respond with valid JSON only.
"""

PRODUCT_USER_PROMPT = """Generate e-commerce product content for:
Product: {product_name}
Category: {category}
Features: {features}
Target Audience: {target_audience}
Content focus: {content_types}

Provide:
1. Compelling product title (SEO optimized)
2. Detailed product description (150-200 words)
3. 5-7 relevant tags/keywords
4. Meta description for SEO
5. Key selling points (bullet points)"""
