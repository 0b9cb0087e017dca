"""API route definitions for the address screening service."""

from fastapi import APIRouter

from .screening import router as screening_router


api_router = APIRouter()
api_router.include_router(screening_router)


__all__ = ["api_router"]
