"""API routes for short-code lookup."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from reviewgate.core.config import settings
from reviewgate.core.exceptions import ReviewError, to_http_exception
from reviewgate.core.storage import Database, get_database
from reviewgate.routers.applications import to_response
from reviewgate.schemas.review import ActionLogItem, LookupResponse
from reviewgate.services import ActionLog, ApplicationStore, ShortCodeResolver
from reviewgate.services.short_codes import normalize_code

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/lookup", tags=["lookup"])


@router.get("/{code}", response_model=LookupResponse)
async def lookup_by_code(code: str, db: Database = Depends(get_database)):
    """Resolve a short code to its application and latest actions."""
    try:
        application_id = await ShortCodeResolver(db).resolve(code)
        store = ApplicationStore(db)
        application = await store.get(application_id)
        claim = await store.get_claim(application_id)
        entries = await ActionLog(db).recent_for(
            application_id, settings.review_history_limit
        )
        return LookupResponse(
            code=normalize_code(code),
            application=to_response(application, claim),
            recent_actions=[ActionLogItem.model_validate(entry) for entry in entries],
        )
    except ReviewError as e:
        raise to_http_exception(e)
    except SQLAlchemyError as e:
        logger.error(f"Database error looking up code {code}: {e}")
        raise HTTPException(status_code=500, detail="Database error")
