"""API routes for modmail thread routing."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from reviewgate.core.exceptions import ReviewError, to_http_exception
from reviewgate.core.storage import Database, get_database
from reviewgate.schemas.modmail import ThreadOpenRequest, ThreadStatusResponse
from reviewgate.services import ModmailThreadStore, create_thread_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/modmail", tags=["modmail"])


async def get_thread_store(db: Database = Depends(get_database)) -> ModmailThreadStore:
    return create_thread_store(db)


@router.get("/threads/{thread_id}", response_model=ThreadStatusResponse)
async def thread_status(
    thread_id: str,
    store: ModmailThreadStore = Depends(get_thread_store),
):
    """Answer from the routing cache whether a thread is open."""
    return ThreadStatusResponse(thread_id=thread_id, is_open=store.cache.is_open(thread_id))


@router.post("/threads/{thread_id}/open", response_model=ThreadStatusResponse)
async def open_thread(
    thread_id: str,
    request: ThreadOpenRequest,
    store: ModmailThreadStore = Depends(get_thread_store),
):
    """Open or reopen a thread."""
    try:
        await store.open(thread_id, request.guild_id, request.application_id)
    except SQLAlchemyError as e:
        logger.error(f"Database error opening thread {thread_id}: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    return ThreadStatusResponse(thread_id=thread_id, is_open=True)


@router.post("/threads/{thread_id}/close", response_model=ThreadStatusResponse)
async def close_thread(
    thread_id: str,
    store: ModmailThreadStore = Depends(get_thread_store),
):
    try:
        await store.close(thread_id)
    except ReviewError as e:
        raise to_http_exception(e)
    except SQLAlchemyError as e:
        logger.error(f"Database error closing thread {thread_id}: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    return ThreadStatusResponse(thread_id=thread_id, is_open=False)
