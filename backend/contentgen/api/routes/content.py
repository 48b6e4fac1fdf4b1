import uuid
from typing import Any

from fastapi import APIRouter, Body, HTTPException, Query
from pydantic import ValidationError
from sqlmodel import SQLModel

from contentgen.api.deps import DataServiceDep
from contentgen.core.config import settings
from contentgen.data_service import OwnerScope
from contentgen.errors import PersistenceError
from contentgen.models import (
    EcommerceProduct,
    EcommerceProductCreate,
    EcommerceProductPublic,
    GeneratedBlog,
    GeneratedBlogCreate,
    GeneratedBlogPublic,
    Message,
    SeoAnalysis,
    SeoAnalysisCreate,
    SeoAnalysisPublic,
    SocialMediaPost,
    SocialMediaPostCreate,
    SocialMediaPostPublic,
    WebsiteAudit,
    WebsiteAuditCreate,
    WebsiteAuditPublic,
    WebsiteProject,
    WebsiteProjectCreate,
    WebsiteProjectPublic,
)

router = APIRouter()

# domain -> (table, create model, public model)
CONTENT_DOMAINS: dict[str, tuple[str, type[SQLModel], type[SQLModel]]] = {
    "blog": (GeneratedBlog.__tablename__, GeneratedBlogCreate, GeneratedBlogPublic),
    "social": (SocialMediaPost.__tablename__, SocialMediaPostCreate, SocialMediaPostPublic),
    "ecommerce": (EcommerceProduct.__tablename__, EcommerceProductCreate, EcommerceProductPublic),
    "seo": (SeoAnalysis.__tablename__, SeoAnalysisCreate, SeoAnalysisPublic),
    "website": (WebsiteProject.__tablename__, WebsiteProjectCreate, WebsiteProjectPublic),
    "audit": (WebsiteAudit.__tablename__, WebsiteAuditCreate, WebsiteAuditPublic),
}


def _content_domain(domain: str) -> tuple[str, type[SQLModel], type[SQLModel]]:
    try:
        return CONTENT_DOMAINS[domain]
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown content domain: {domain}")


def persistence_http_error(exc: PersistenceError) -> HTTPException:
    return HTTPException(status_code=exc.status_code or 500, detail=exc.message)


@router.get("/{domain}")
async def read_content(
    domain: str,
    data: DataServiceDep,
    team_id: uuid.UUID | None = None,
    all_users: bool = False,
    limit: int = Query(default=settings.HISTORY_LIMIT, ge=1, le=settings.MAX_LIST_LIMIT),
) -> Any:
    """Saved rows for the caller, a team the caller belongs to, or everyone (admins), newest first."""
    table, _, public_model = _content_domain(domain)
    scope = OwnerScope(team_id=team_id, all_users=all_users) if (team_id or all_users) else None
    try:
        rows = await data.select(table, scope=scope, limit=limit)
    except PersistenceError as exc:
        raise persistence_http_error(exc) from exc
    return [public_model.model_validate(row) for row in rows]


@router.post("/{domain}")
async def create_content(
    domain: str,
    data: DataServiceDep,
    rows_in: list[dict[str, Any]] = Body(...),
) -> Any:
    """Insert one or more rows in a single transaction."""
    table, create_model, public_model = _content_domain(domain)
    if not rows_in:
        raise HTTPException(status_code=400, detail="Nothing to save")
    try:
        rows = [create_model.model_validate(row).model_dump() for row in rows_in]
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=exc.errors()[0]["msg"]) from exc

    try:
        saved = await data.insert(table, rows)
    except PersistenceError as exc:
        raise persistence_http_error(exc) from exc
    return [public_model.model_validate(row) for row in saved]


@router.delete("/{domain}/{id}", response_model=Message)
async def delete_content(domain: str, id: uuid.UUID, data: DataServiceDep) -> Message:
    table, _, _ = _content_domain(domain)
    try:
        deleted = await data.delete(table, id)
    except PersistenceError as exc:
        raise persistence_http_error(exc) from exc
    if not deleted:
        raise HTTPException(status_code=404, detail="Content not found")
    return Message(message="Content deleted successfully")
