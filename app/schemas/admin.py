"""Schemas for the admin dashboard."""

from pydantic import BaseModel


class DashboardStats(BaseModel):
    total_users: int
    verified_users: int
    admin_users: int
    total_posts: int
    published_posts: int
    draft_posts: int
    archived_posts: int
    total_comments: int
