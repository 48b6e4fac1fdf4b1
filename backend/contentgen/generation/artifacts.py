from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Wire models use camelCase keys; Python code uses snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Requests accepted by the generation endpoints

class BlogRequest(CamelModel):
    topic: str
    keywords: str = ""
    tone: str = "professional"
    word_count: int = Field(default=800, ge=50, le=5000)
    language: str = "english"


class SocialPostRequest(CamelModel):
    topic: str
    platform: str = "instagram"
    tone: str = "engaging"
    include_hashtags: bool = True
    include_emoji: bool = True
    target_audience: str = ""
    call_to_action: str = ""


class ProductRequest(CamelModel):
    product_name: str
    category: str
    features: str = ""
    target_audience: str = ""
    content_types: list[str] = Field(default_factory=list)


class SeoRequest(CamelModel):
    content: str
    target_keywords: str = ""


class ImageRequest(CamelModel):
    prompt: str


class WebsiteRequest(CamelModel):
    template: str
    business_type: str
    project_name: str
    color_scheme: str = ""
    content_requirements: str = ""


class AuditRequest(CamelModel):
    url: str


# Artifacts produced by the model

class BlogResponse(CamelModel):
    blog: str


class SocialPostResponse(CamelModel):
    post: str


class ProductData(CamelModel):
    """Artifact produced for one product listing."""
    title: str = Field(description="SEO optimized product title")
    description: str = Field(description="Detailed product description, 150-200 words")
    tags: list[str] = Field(default_factory=list, description="5-7 relevant tags or keywords")
    meta_description: str = Field(default="", description="Meta description for SEO")
    selling_points: list[str] = Field(default_factory=list, description="Key selling points")


class ProductResponse(CamelModel):
    product_data: ProductData


class SeoAnalysisResult(CamelModel):
    """Artifact produced by the SEO analyzer."""
    seo_score: int = Field(ge=0, le=100, description="Overall SEO score from 0 to 100")
    readability_score: int = Field(ge=0, le=100, description="Readability score from 0 to 100")
    meta_description: str = Field(description="Suggested meta description, at most 160 characters")
    suggestions: list[str] = Field(default_factory=list, description="Actionable improvements")
    missing_keywords: list[str] = Field(
        default_factory=list,
        description="Target keywords that are absent or underused in the content",
    )


class SeoResponse(CamelModel):
    analysis: SeoAnalysisResult


class ImageResponse(CamelModel):
    image_url: str


class WebsiteArtifact(BaseModel):
    """Single-page website produced by the website generator."""
    html: str = Field(description="Complete HTML document starting with <!DOCTYPE html>")
    css: str = Field(description="Stylesheet for the page")
    description: str = Field(default="", description="Brief description of the generated website")
    sections: list[str] = Field(default_factory=list, description="Main sections included")


class AuditSuggestion(BaseModel):
    category: Literal["performance", "seo", "accessibility", "security", "mobile"]
    severity: Literal["critical", "warning", "info"]
    title: str
    description: str


class AuditDetails(BaseModel):
    issues: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class AuditReport(BaseModel):
    """Scores and findings produced by the website auditor."""
    overall_score: int = Field(ge=0, le=100)
    performance_score: int = Field(ge=0, le=100)
    seo_score: int = Field(ge=0, le=100)
    accessibility_score: int = Field(ge=0, le=100)
    security_score: int = Field(ge=0, le=100)
    mobile_score: int = Field(ge=0, le=100)
    suggestions: list[AuditSuggestion] = Field(default_factory=list)
    details: dict[str, AuditDetails] = Field(default_factory=dict)
