"""API v1 routes."""

from fastapi import APIRouter

from app.api.v1 import admin, auth, comments, health, posts, profile

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(profile.router, prefix="/profile", tags=["profile"])
router.include_router(posts.router, prefix="/posts", tags=["posts"])
router.include_router(comments.router, prefix="/comments", tags=["comments"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
