"""API routes for submitting and browsing applications."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError

from reviewgate.core.exceptions import ReviewError, to_http_exception
from reviewgate.core.storage import Database, get_database
from reviewgate.models.application import Application, ReviewClaim
from reviewgate.schemas.review import (
    ApplicationResponse,
    OpenApplicationsResponse,
    SubmitRequest,
)
from reviewgate.services.application_store import ApplicationStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["applications"])


async def get_application_store(db: Database = Depends(get_database)) -> ApplicationStore:
    """Create application store with dependencies."""
    return ApplicationStore(db)


def to_response(
    application: Application, claim: ReviewClaim | None = None
) -> ApplicationResponse:
    return ApplicationResponse(
        id=application.id,
        guild_id=application.guild_id,
        applicant_id=application.applicant_id,
        status=application.status,
        answers=application.answers or [],
        submitted_at_s=application.submitted_at_s,
        short_code=application.short_code,
        claimed_by=claim.staff_id if claim else None,
        claimed_at_s=claim.claimed_at_s if claim else None,
    )


@router.post("", response_model=ApplicationResponse, status_code=status.HTTP_201_CREATED)
async def submit_application(
    request: SubmitRequest,
    store: ApplicationStore = Depends(get_application_store),
):
    """Record a completed application form as pending."""
    try:
        application = await store.submit(
            request.guild_id,
            request.applicant_id,
            [item.model_dump() for item in request.answers],
            submitted_at_s=request.submitted_at_s,
        )
        return to_response(application)
    except ReviewError as e:
        raise to_http_exception(e)
    except SQLAlchemyError as e:
        logger.error(f"Database error submitting application: {e}")
        raise HTTPException(status_code=500, detail="Database error")


@router.get("", response_model=OpenApplicationsResponse)
async def list_open_applications(
    guild_id: str = Query(..., description="Guild to list"),
    claimed_by: str | None = Query(default=None, description="Only claims held by this staff member"),
    limit: int = Query(default=25, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    store: ApplicationStore = Depends(get_application_store),
):
    """List applications still under review."""
    try:
        rows, total = await store.list_open(
            guild_id, claimed_by=claimed_by, limit=limit, offset=offset
        )
        return OpenApplicationsResponse(
            items=[to_response(application, claim) for application, claim in rows],
            total=total,
        )
    except SQLAlchemyError as e:
        logger.error(f"Database error listing applications: {e}")
        raise HTTPException(status_code=500, detail="Database error")


@router.get("/{application_id}", response_model=ApplicationResponse)
async def get_application(
    application_id: str,
    store: ApplicationStore = Depends(get_application_store),
):
    """Get an application with its current claim holder."""
    try:
        application = await store.get(application_id)
        claim = await store.get_claim(application_id)
        return to_response(application, claim)
    except ReviewError as e:
        raise to_http_exception(e)
    except SQLAlchemyError as e:
        logger.error(f"Database error getting application {application_id}: {e}")
        raise HTTPException(status_code=500, detail="Database error")
