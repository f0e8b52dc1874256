from fastapi import APIRouter

from translate_manager.api.routes import (
    dictionary,
    health,
    storage,
    terminology,
    translation,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(translation.router, prefix="/translation", tags=["translation"])
api_router.include_router(dictionary.router, prefix="/dictionary", tags=["dictionary"])
api_router.include_router(terminology.router, prefix="/terminology", tags=["terminology"])
api_router.include_router(storage.router, prefix="/storage", tags=["storage"])
