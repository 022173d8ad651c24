"""API routes for guild-level review controls."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from reviewgate.core.storage import Database, get_database
from reviewgate.schemas.guild import PanicRequest, PanicResponse
from reviewgate.services.panic import panic_switch

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/guilds", tags=["guilds"])


@router.get("/{guild_id}/panic", response_model=PanicResponse)
async def get_panic(guild_id: str):
    return PanicResponse(guild_id=guild_id, panic_mode=panic_switch.is_active(guild_id))


@router.post("/{guild_id}/panic", response_model=PanicResponse)
async def set_panic(
    guild_id: str,
    request: PanicRequest,
    db: Database = Depends(get_database),
):
    """Suspend or resume claims for a guild."""
    try:
        await panic_switch.set(db, guild_id, request.enabled, request.actor_id)
    except SQLAlchemyError as e:
        logger.error(f"Database error toggling panic mode for {guild_id}: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    return PanicResponse(guild_id=guild_id, panic_mode=panic_switch.is_active(guild_id))
