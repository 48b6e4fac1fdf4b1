from typing import Any

from fastapi import APIRouter, HTTPException

from contentgen.api.deps import DataServiceDep
from contentgen.api.routes.content import persistence_http_error
from contentgen.errors import PersistenceError
from contentgen.models import BrandAsset, BrandAssetPublic, BrandAssetUpdate

router = APIRouter(prefix="/brand", tags=["brand"])


@router.get("/", response_model=BrandAssetPublic)
async def read_brand_kit(data: DataServiceDep) -> Any:
    try:
        rows = await data.select(BrandAsset.__tablename__, limit=1)
    except PersistenceError as exc:
        raise persistence_http_error(exc) from exc
    if not rows:
        raise HTTPException(status_code=404, detail="Brand kit not found")
    return rows[0]


@router.put("/", response_model=BrandAssetPublic)
async def save_brand_kit(brand_in: BrandAssetUpdate, data: DataServiceDep) -> Any:
    """One brand kit per user: insert on first save, overwrite afterwards."""
    try:
        return await data.upsert(BrandAsset.__tablename__, brand_in.model_dump(), on_conflict=("user_id",))
    except PersistenceError as exc:
        raise persistence_http_error(exc) from exc
