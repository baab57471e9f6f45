"""Top-level API router."""

from fastapi import APIRouter

from .endpoints import exports, health

api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(exports.router, prefix="/exports", tags=["exports"])
