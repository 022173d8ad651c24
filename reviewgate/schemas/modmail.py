"""Schemas for modmail thread routing."""

from pydantic import BaseModel, Field


class ThreadOpenRequest(BaseModel):
    guild_id: str
    application_id: str | None = Field(default=None, description="Linked application")


class ThreadStatusResponse(BaseModel):
    thread_id: str
    is_open: bool
