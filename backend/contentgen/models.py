import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import EmailStr
from sqlalchemy import DateTime, JSON, UniqueConstraint
from sqlmodel import Field, SQLModel


def get_datetime_utc() -> datetime:
    return datetime.now(timezone.utc)


# Shared properties
class UserBase(SQLModel):
    email: EmailStr = Field(unique=True, index=True, max_length=255)
    is_active: bool = True
    is_superuser: bool = False
    full_name: str | None = Field(default=None, max_length=255)


class UserCreate(UserBase):
    pass


# Database model, owner of every generated artifact
class User(UserBase, table=True):
    __tablename__ = "users"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class UserPublic(UserBase):
    id: uuid.UUID
    created_at: datetime | None = None


# Generic message
class Message(SQLModel):
    message: str


# JSON payload containing access token
class Token(SQLModel):
    access_token: str
    token_type: str = "bearer"


# Contents of JWT token
class TokenPayload(SQLModel):
    sub: str | None = None


# Generated content tables. Rows are created on explicit save and never updated in place.

class GeneratedBlogBase(SQLModel):
    title: str = Field(max_length=500)
    content: str
    topic: str = Field(max_length=500)
    keywords: str | None = None
    tone: str = Field(default="professional", max_length=50)
    language: str = Field(default="english", max_length=50)
    word_count: int = 800
    image_url: str | None = None
    image_prompt: str | None = None


class GeneratedBlogCreate(GeneratedBlogBase):
    pass


class GeneratedBlog(GeneratedBlogBase, table=True):
    __tablename__ = "generated_blogs"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(
        foreign_key="users.id", nullable=False, ondelete="CASCADE", index=True
    )
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class GeneratedBlogPublic(GeneratedBlogBase):
    id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime | None = None


class SocialMediaPostBase(SQLModel):
    topic: str = Field(max_length=500)
    platform: str = Field(max_length=50)  # instagram, facebook, twitter, linkedin
    post_content: str
    tone: str = Field(default="engaging", max_length=50)
    include_hashtags: bool = True
    image_url: str | None = None
    image_prompt: str | None = None


class SocialMediaPostCreate(SocialMediaPostBase):
    pass


class SocialMediaPost(SocialMediaPostBase, table=True):
    __tablename__ = "social_media_posts"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(
        foreign_key="users.id", nullable=False, ondelete="CASCADE", index=True
    )
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class SocialMediaPostPublic(SocialMediaPostBase):
    id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime | None = None


class EcommerceProductBase(SQLModel):
    product_name: str = Field(max_length=500)
    category: str = Field(max_length=100)  # marketplace the listing targets
    title: str
    description: str
    features: str | None = None
    target_audience: str | None = None
    meta_description: str | None = None
    selling_points: list[str] = Field(default_factory=list, sa_type=JSON)
    tags: list[str] = Field(default_factory=list, sa_type=JSON)
    status: str = Field(default="draft", max_length=20)


class EcommerceProductCreate(EcommerceProductBase):
    pass


class EcommerceProduct(EcommerceProductBase, table=True):
    __tablename__ = "ecommerce_products"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(
        foreign_key="users.id", nullable=False, ondelete="CASCADE", index=True
    )
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class EcommerceProductPublic(EcommerceProductBase):
    id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime | None = None


class SeoAnalysisBase(SQLModel):
    content: str
    target_keywords: str | None = None
    seo_score: int | None = None
    readability_score: int | None = None
    meta_description: str | None = None
    suggestions: list[str] = Field(default_factory=list, sa_type=JSON)
    missing_keywords: list[str] = Field(default_factory=list, sa_type=JSON)


class SeoAnalysisCreate(SeoAnalysisBase):
    pass


class SeoAnalysis(SeoAnalysisBase, table=True):
    __tablename__ = "seo_analyses"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(
        foreign_key="users.id", nullable=False, ondelete="CASCADE", index=True
    )
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class SeoAnalysisPublic(SeoAnalysisBase):
    id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime | None = None


class WebsiteProjectBase(SQLModel):
    name: str = Field(min_length=1, max_length=255)
    template: str = Field(max_length=50)  # portfolio, business, ecommerce, blog, landing, saas
    description: str | None = None
    html_content: str | None = None
    css_content: str | None = None
    status: str = Field(default="draft", max_length=20)


class WebsiteProjectCreate(WebsiteProjectBase):
    pass


class WebsiteProject(WebsiteProjectBase, table=True):
    __tablename__ = "website_projects"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(
        foreign_key="users.id", nullable=False, ondelete="CASCADE", index=True
    )
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class WebsiteProjectPublic(WebsiteProjectBase):
    id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime | None = None


class WebsiteAuditBase(SQLModel):
    url: str = Field(max_length=2048)
    overall_score: int = Field(default=0, ge=0, le=100)
    performance_score: int = Field(default=0, ge=0, le=100)
    seo_score: int = Field(default=0, ge=0, le=100)
    accessibility_score: int = Field(default=0, ge=0, le=100)
    security_score: int = Field(default=0, ge=0, le=100)
    mobile_score: int = Field(default=0, ge=0, le=100)
    suggestions: list[dict] = Field(default_factory=list, sa_type=JSON)
    details: dict = Field(default_factory=dict, sa_type=JSON)


class WebsiteAuditCreate(WebsiteAuditBase):
    pass


class WebsiteAudit(WebsiteAuditBase, table=True):
    __tablename__ = "website_audits"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(
        foreign_key="users.id", nullable=False, ondelete="CASCADE", index=True
    )
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class WebsiteAuditPublic(WebsiteAuditBase):
    id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime | None = None


# Brand kit, one row per user, upserted wholesale

class BrandAssetBase(SQLModel):
    logo_url: str | None = None
    brand_colors: list[str] = Field(default_factory=list, sa_type=JSON)
    heading_font: str | None = Field(default=None, max_length=100)
    body_font: str | None = Field(default=None, max_length=100)
    hashtags: list[str] = Field(default_factory=list, sa_type=JSON)


class BrandAssetUpdate(BrandAssetBase):
    pass


class BrandAsset(BrandAssetBase, table=True):
    __tablename__ = "brand_assets"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(
        foreign_key="users.id", nullable=False, ondelete="CASCADE", unique=True
    )
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class BrandAssetPublic(BrandAssetBase):
    id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime | None = None


# Teams

class TeamRole(str, Enum):
    owner = "owner"
    admin = "admin"
    member = "member"


class InvitationStatus(str, Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"


class TeamBase(SQLModel):
    name: str = Field(min_length=1, max_length=255)


class TeamCreate(TeamBase):
    pass


class Team(TeamBase, table=True):
    __tablename__ = "teams"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    created_by: uuid.UUID = Field(foreign_key="users.id", nullable=False)
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class TeamPublic(TeamBase):
    id: uuid.UUID
    created_by: uuid.UUID
    created_at: datetime | None = None


class TeamMember(SQLModel, table=True):
    __tablename__ = "team_members"
    __table_args__ = (UniqueConstraint("team_id", "user_id"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    team_id: uuid.UUID = Field(
        foreign_key="teams.id", nullable=False, ondelete="CASCADE", index=True
    )
    user_id: uuid.UUID = Field(
        foreign_key="users.id", nullable=False, ondelete="CASCADE"
    )
    role: TeamRole = Field(default=TeamRole.member)
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class TeamMemberPublic(SQLModel):
    id: uuid.UUID
    team_id: uuid.UUID
    user_id: uuid.UUID
    role: TeamRole
    created_at: datetime | None = None


class TeamInvitationCreate(SQLModel):
    email: EmailStr = Field(max_length=255)
    role: TeamRole = TeamRole.member


class TeamInvitation(SQLModel, table=True):
    __tablename__ = "team_invitations"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    team_id: uuid.UUID = Field(
        foreign_key="teams.id", nullable=False, ondelete="CASCADE", index=True
    )
    email: str = Field(max_length=255)
    role: TeamRole = Field(default=TeamRole.member)
    token: str = Field(unique=True, index=True, max_length=256)
    status: InvitationStatus = Field(default=InvitationStatus.pending)
    invited_by: uuid.UUID = Field(foreign_key="users.id", nullable=False)
    expires_at: datetime = Field(sa_type=DateTime(timezone=True))  # type: ignore
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class TeamInvitationPublic(SQLModel):
    id: uuid.UUID
    team_id: uuid.UUID
    email: str
    role: TeamRole
    status: InvitationStatus
    expires_at: datetime
    created_at: datetime | None = None


class InvitationDecision(SQLModel):
    token: str = Field(min_length=1, max_length=256)


class InvitationAccepted(SQLModel):
    success: bool = True
    team_id: uuid.UUID


# Realtime change notification

class ChangeEventPublic(SQLModel):
    table: str
    event_type: str
    record_id: uuid.UUID | None = None
    user_id: uuid.UUID | None = None
    commit_timestamp: datetime


# Admin platform statistics

class PlatformStats(SQLModel):
    total_users: int
    total_blogs: int
    total_social_posts: int
    total_products: int
    total_seo_analyses: int
    total_teams: int
    users_this_week: int
    blogs_this_week: int
    posts_this_week: int
