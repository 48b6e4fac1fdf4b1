"""
Content domains handled by the generation controller.

A domain knows its required form fields, how to template form fields into
Generation Service payloads, and how to turn each response into the row that
is previewed and, on save, persisted. Payload building is plain templating.
"""
from abc import ABC, abstractmethod
from typing import Any

from contentgen.errors import GenerationError, ValidationError
from contentgen.generation.website_auditor import normalize_url
from contentgen.models import (
    EcommerceProduct,
    GeneratedBlog,
    SeoAnalysis,
    SocialMediaPost,
    WebsiteAudit,
    WebsiteProject,
)

WEBSITE_TEMPLATES = ("portfolio", "business", "ecommerce", "blog", "landing", "saas")

COLOR_SCHEMES = {
    "blue": "#3B82F6, #1E40AF, #DBEAFE",
    "purple": "#9333EA, #6B21A8, #F3E8FF",
    "green": "#10B981, #047857, #D1FAE5",
    "orange": "#F97316, #C2410C, #FED7AA",
    "dark": "#1F2937, #111827, #F9FAFB",
    "minimal": "#000000, #374151, #FFFFFF",
}

MARKETPLACES = ("amazon", "meesho", "flipkart", "shopify", "instagram", "facebook")


def _is_filled(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) > 0
    return True


def _require_key(response: dict[str, Any], key: str, function: str) -> Any:
    value = response.get(key)
    if value in (None, ""):
        raise GenerationError(f"{function} returned no {key}")
    return value


def _score(value: Any, key: str, function: str, default: int | None = 0) -> int | None:
    if value in (None, ""):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise GenerationError(f"{function} returned a non-numeric {key}") from None


def platform_label(platform: str) -> str:
    return platform[:1].upper() + platform[1:]


class ContentDomain(ABC):
    name: str
    function: str
    table: str
    required: tuple[tuple[str, str], ...] = ()
    stores_image: bool = False

    def defaults(self) -> dict[str, Any]:
        return {}

    def validate(self, form: dict[str, Any]) -> None:
        for field, message in self.required:
            if not _is_filled(form.get(field)):
                raise ValidationError(message)

    @abstractmethod
    def build_requests(self, form: dict[str, Any]) -> list[dict[str, Any]]:
        """One payload per Generation Service call, in call order."""
        pass

    @abstractmethod
    def to_row(self, form: dict[str, Any], payload: dict[str, Any], response: dict[str, Any]) -> dict[str, Any]:
        pass

    @abstractmethod
    def describe(self, row: dict[str, Any]) -> str:
        """Card title shown in the history list."""
        pass


class BlogDomain(ContentDomain):
    name = "blog"
    function = "generate-blog"
    table = GeneratedBlog.__tablename__
    required = (("topic", "Please enter a topic for your blog post."),)
    stores_image = True

    def defaults(self) -> dict[str, Any]:
        return {"topic": "", "keywords": "", "tone": "professional", "language": "english", "word_count": 800}

    def validate(self, form):
        super().validate(form)
        try:
            word_count = int(form.get("word_count") or 800)
        except (TypeError, ValueError):
            raise ValidationError("Please enter a valid word count.") from None
        if word_count <= 0:
            raise ValidationError("Please enter a valid word count.")

    def build_requests(self, form: dict[str, Any]) -> list[dict[str, Any]]:
        return [
            {
                "topic": form["topic"].strip(),
                "keywords": form.get("keywords") or "",
                "tone": form.get("tone") or "professional",
                "wordCount": int(form.get("word_count") or 800),
                "language": form.get("language") or "english",
            }
        ]

    def to_row(self, form, payload, response):
        return {
            "title": payload["topic"],
            "content": _require_key(response, "blog", self.function),
            "topic": payload["topic"],
            "keywords": payload["keywords"] or None,
            "tone": payload["tone"],
            "language": payload["language"],
            "word_count": payload["wordCount"],
        }

    def describe(self, row):
        return row["title"]


class SocialDomain(ContentDomain):
    name = "social"
    function = "generate-social"
    table = SocialMediaPost.__tablename__
    required = (("topic", "Please enter a topic for your social media post."),)
    stores_image = True

    def defaults(self) -> dict[str, Any]:
        return {
            "topic": "",
            "platform": "instagram",
            "tone": "engaging",
            "include_hashtags": True,
            "include_emoji": True,
            "target_audience": "",
            "call_to_action": "",
        }

    def build_requests(self, form):
        return [
            {
                "topic": form["topic"].strip(),
                "platform": form.get("platform") or "instagram",
                "tone": form.get("tone") or "engaging",
                "includeHashtags": bool(form.get("include_hashtags", True)),
                "includeEmoji": bool(form.get("include_emoji", True)),
                "targetAudience": form.get("target_audience") or "",
                "callToAction": form.get("call_to_action") or "",
            }
        ]

    def to_row(self, form, payload, response):
        return {
            "topic": payload["topic"],
            "platform": payload["platform"],
            "post_content": _require_key(response, "post", self.function),
            "tone": payload["tone"],
            "include_hashtags": payload["includeHashtags"],
        }

    def describe(self, row):
        return f"{platform_label(row['platform'])}: {row['topic']}"


class ProductDomain(ContentDomain):
    """Multi-platform listings: one generation call per selected platform."""

    name = "ecommerce"
    function = "generate-product"
    table = EcommerceProduct.__tablename__
    required = (
        ("product_input", "Please enter product details."),
        ("platforms", "Please select at least one platform."),
    )

    def defaults(self) -> dict[str, Any]:
        return {"product_input": "", "platforms": [], "content_types": ["titles", "descriptions"]}

    @staticmethod
    def product_name(product_input: str) -> str:
        first_line = product_input.strip().split("\n")[0].strip()
        return first_line or product_input.strip()

    def build_requests(self, form):
        product_input = form["product_input"].strip()
        platforms = list(dict.fromkeys(form["platforms"]))
        return [
            {
                "productName": self.product_name(product_input),
                "category": platform,
                "features": product_input,
                "targetAudience": f"{platform} shoppers",
                "contentTypes": list(form.get("content_types") or []),
            }
            for platform in platforms
        ]

    def to_row(self, form, payload, response):
        data = _require_key(response, "productData", self.function)
        if not isinstance(data, dict):
            raise GenerationError(f"{self.function} returned malformed productData")
        return {
            "product_name": payload["productName"],
            "category": payload["category"],
            "title": data.get("title") or "",
            "description": data.get("description") or "",
            "features": payload["features"],
            "target_audience": payload["targetAudience"],
            "meta_description": data.get("metaDescription") or None,
            "selling_points": list(data.get("sellingPoints") or []),
            "tags": list(data.get("tags") or []),
            "status": "draft",
        }

    def describe(self, row):
        return f"{row['product_name']} ({platform_label(row['category'])})"


class SeoDomain(ContentDomain):
    name = "seo"
    function = "analyze-seo"
    table = SeoAnalysis.__tablename__
    required = (("content", "Please enter content to analyze."),)

    def defaults(self) -> dict[str, Any]:
        return {"content": "", "target_keywords": ""}

    def build_requests(self, form):
        return [{"content": form["content"], "targetKeywords": form.get("target_keywords") or ""}]

    def to_row(self, form, payload, response):
        analysis = _require_key(response, "analysis", self.function)
        if not isinstance(analysis, dict):
            raise GenerationError(f"{self.function} returned malformed analysis")
        return {
            "content": payload["content"],
            "target_keywords": payload["targetKeywords"] or None,
            "seo_score": _score(analysis.get("seoScore"), "seoScore", self.function, None),
            "readability_score": _score(analysis.get("readabilityScore"), "readabilityScore", self.function, None),
            "meta_description": analysis.get("metaDescription"),
            "suggestions": list(analysis.get("suggestions") or []),
            "missing_keywords": list(analysis.get("missingKeywords") or []),
        }

    def describe(self, row):
        return row.get("target_keywords") or "Content analysis"


class WebsiteDomain(ContentDomain):
    name = "website"
    function = "generate-website"
    table = WebsiteProject.__tablename__
    required = (
        ("template", "Please fill in all required fields"),
        ("project_name", "Please fill in all required fields"),
        ("business_type", "Please fill in all required fields"),
    )

    def defaults(self) -> dict[str, Any]:
        return {"template": "", "project_name": "", "business_type": "", "color_scheme": "", "content_requirements": ""}

    def validate(self, form):
        super().validate(form)
        if form["template"] not in WEBSITE_TEMPLATES:
            raise ValidationError(f"Unknown website template: {form['template']}")

    def build_requests(self, form):
        colors = COLOR_SCHEMES.get(form.get("color_scheme") or "", COLOR_SCHEMES["blue"])
        return [
            {
                "template": form["template"],
                "businessType": form["business_type"].strip(),
                "colorScheme": colors,
                "contentRequirements": form.get("content_requirements") or "",
                "projectName": form["project_name"].strip(),
            }
        ]

    def to_row(self, form, payload, response):
        return {
            "name": payload["projectName"],
            "template": payload["template"],
            "description": response.get("description")
            or f"A {payload['template']} website for {payload['businessType']}",
            "html_content": _require_key(response, "html", self.function),
            "css_content": response.get("css") or "",
            "status": "draft",
        }

    def describe(self, row):
        return row["name"]


class AuditDomain(ContentDomain):
    name = "audit"
    function = "audit-website"
    table = WebsiteAudit.__tablename__
    required = (("url", "Please enter a website URL to audit"),)

    def defaults(self) -> dict[str, Any]:
        return {"url": ""}

    def build_requests(self, form):
        return [{"url": normalize_url(form["url"])}]

    def to_row(self, form, payload, response):
        row = {"url": payload["url"]}
        for key in (
            "overall_score",
            "performance_score",
            "seo_score",
            "accessibility_score",
            "security_score",
            "mobile_score",
        ):
            row[key] = _score(response.get(key), key, self.function)
        row["suggestions"] = list(response.get("suggestions") or [])
        row["details"] = dict(response.get("details") or {})
        return row

    def describe(self, row):
        return row["url"]


DOMAINS: dict[str, ContentDomain] = {
    domain.name: domain
    for domain in (BlogDomain(), SocialDomain(), ProductDomain(), SeoDomain(), WebsiteDomain(), AuditDomain())
}


def get_domain(name: str) -> ContentDomain:
    try:
        return DOMAINS[name]
    except KeyError:
        raise ValueError(f"Unknown content domain: {name}") from None
