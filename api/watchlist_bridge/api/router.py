"""API router composition for all route groups."""

from fastapi import APIRouter

from .routes import admin, lists

api_router = APIRouter()
api_router.include_router(lists.router, tags=["lists"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
