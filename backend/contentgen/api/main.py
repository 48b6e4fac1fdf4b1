from fastapi import APIRouter

from contentgen.api.routes import brand, content, generate, realtime, stats, teams, utils

api_router = APIRouter()
api_router.include_router(utils.router, tags=["utils"])
api_router.include_router(generate.router, prefix="/functions", tags=["functions"])
api_router.include_router(content.router, prefix="/content", tags=["content"])
api_router.include_router(brand.router)
api_router.include_router(teams.router)
api_router.include_router(realtime.router)
api_router.include_router(stats.router)
