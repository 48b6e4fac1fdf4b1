import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from fastapi import APIRouter, HTTPException

from contentgen.generation.artifacts import (
    AuditReport,
    AuditRequest,
    BlogRequest,
    BlogResponse,
    ImageRequest,
    ImageResponse,
    ProductRequest,
    ProductResponse,
    SeoRequest,
    SeoResponse,
    SocialPostRequest,
    SocialPostResponse,
    WebsiteArtifact,
    WebsiteRequest,
)
from contentgen.generation.blog_generator import BlogGenerator
from contentgen.generation.image_generator import ImageGenerator
from contentgen.generation.llm_client import ProviderError
from contentgen.generation.product_generator import ProductListingGenerator
from contentgen.generation.seo_analyzer import SeoAnalyzer
from contentgen.generation.social_generator import SocialPostGenerator
from contentgen.generation.website_auditor import WebsiteAuditor
from contentgen.generation.website_generator import WebsiteGenerator

router = APIRouter()
logger = logging.getLogger(__name__)

T = TypeVar("T")


def _require(value: str | None, message: str) -> None:
    if not (value or "").strip():
        raise HTTPException(status_code=400, detail=message)


async def _run(function: str, call: Callable[[], Awaitable[T]]) -> T:
    """Single provider call; provider failures keep their status and message."""
    try:
        return await call()
    except ProviderError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc
    except ValueError as exc:
        logger.error("%s produced an unusable response: %s", function, exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.post("/generate-blog", response_model=BlogResponse)
async def generate_blog(payload: BlogRequest) -> BlogResponse:
    _require(payload.topic, "Topic is required")
    logger.info("Generating blog about: %s", payload.topic)
    return await _run("generate-blog", lambda: BlogGenerator().run(payload))


@router.post("/generate-social", response_model=SocialPostResponse)
async def generate_social(payload: SocialPostRequest) -> SocialPostResponse:
    _require(payload.topic, "Topic is required")
    _require(payload.platform, "Platform is required")
    logger.info("Generating %s post about: %s", payload.platform, payload.topic)
    return await _run("generate-social", lambda: SocialPostGenerator().run(payload))


@router.post("/generate-product", response_model=ProductResponse)
async def generate_product(payload: ProductRequest) -> ProductResponse:
    _require(payload.product_name, "Product name is required")
    _require(payload.category, "Category is required")
    logger.info("Generating product listing for %s on %s", payload.product_name, payload.category)
    return await _run("generate-product", lambda: ProductListingGenerator().run(payload))


@router.post("/analyze-seo", response_model=SeoResponse)
async def analyze_seo(payload: SeoRequest) -> SeoResponse:
    _require(payload.content, "Content is required")
    return await _run("analyze-seo", lambda: SeoAnalyzer().run(payload))


@router.post("/generate-image", response_model=ImageResponse)
async def generate_image(payload: ImageRequest) -> ImageResponse:
    _require(payload.prompt, "Prompt is required")
    return await _run("generate-image", lambda: ImageGenerator().run(payload))


@router.post("/generate-website", response_model=WebsiteArtifact)
async def generate_website(payload: WebsiteRequest) -> WebsiteArtifact:
    _require(payload.template, "Template is required")
    _require(payload.business_type, "Business type is required")
    _require(payload.project_name, "Project name is required")
    return await _run("generate-website", lambda: WebsiteGenerator().run(payload))


@router.post("/audit-website", response_model=AuditReport)
async def audit_website(payload: AuditRequest) -> AuditReport:
    _require(payload.url, "URL is required")
    return await _run("audit-website", lambda: WebsiteAuditor().run(payload))
