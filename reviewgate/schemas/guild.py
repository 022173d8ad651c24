"""Schemas for guild-level review controls."""

from pydantic import BaseModel, Field


class PanicRequest(BaseModel):
    enabled: bool
    actor_id: str = Field(..., description="Staff user toggling the switch")


class PanicResponse(BaseModel):
    guild_id: str
    panic_mode: bool
