from datetime import timedelta
from typing import Any

from fastapi import APIRouter, Depends

from contentgen import crud
from contentgen.api.deps import SessionDep, get_current_active_superuser
from contentgen.models import (
    EcommerceProduct,
    GeneratedBlog,
    PlatformStats,
    SeoAnalysis,
    SocialMediaPost,
    Team,
    User,
    get_datetime_utc,
)

router = APIRouter(prefix="/stats", tags=["stats"])

RECENT_DAYS = 7


@router.get("/", dependencies=[Depends(get_current_active_superuser)], response_model=PlatformStats)
def read_platform_stats(session: SessionDep) -> Any:
    """Platform-wide totals, plus what was created over the last week."""
    since = get_datetime_utc() - timedelta(days=RECENT_DAYS)
    return PlatformStats(
        total_users=crud.count_rows(session=session, model=User),
        total_blogs=crud.count_rows(session=session, model=GeneratedBlog),
        total_social_posts=crud.count_rows(session=session, model=SocialMediaPost),
        total_products=crud.count_rows(session=session, model=EcommerceProduct),
        total_seo_analyses=crud.count_rows(session=session, model=SeoAnalysis),
        total_teams=crud.count_rows(session=session, model=Team),
        users_this_week=crud.count_rows(session=session, model=User, since=since),
        blogs_this_week=crud.count_rows(session=session, model=GeneratedBlog, since=since),
        posts_this_week=crud.count_rows(session=session, model=SocialMediaPost, since=since),
    )
