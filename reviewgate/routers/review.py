"""API routes for claiming and deciding applications."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError

from reviewgate.core.exceptions import ReviewError, to_http_exception
from reviewgate.core.storage import Database, get_database
from reviewgate.schemas.review import (
    ActionLogItem,
    ClaimResult,
    CopyUidResult,
    DecisionOutcome,
    DecisionRequest,
    HistoryResponse,
    StaffRequest,
    UnclaimResult,
)
from reviewgate.services import (
    ActionLog,
    ApplicationStore,
    ClaimGuard,
    DecisionExecutor,
    create_claim_guard,
    create_decision_executor,
)
from reviewgate.services.notify import Notifier
from reviewgate.services.notify.dependencies import notifier_dep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/review", tags=["review"])


async def get_claim_guard(db: Database = Depends(get_database)) -> ClaimGuard:
    """Create claim guard with dependencies."""
    return create_claim_guard(db)


async def get_decision_executor(
    db: Database = Depends(get_database),
    notifier: Notifier = Depends(notifier_dep),
) -> DecisionExecutor:
    """Create decision executor with dependencies."""
    return create_decision_executor(db, notifier)


@router.post("/{application_id}/claim", response_model=ClaimResult)
async def claim_application(
    application_id: str,
    request: StaffRequest,
    guard: ClaimGuard = Depends(get_claim_guard),
):
    """Take exclusive handling of a pending application."""
    try:
        return await guard.claim(application_id, request.staff_id)
    except ReviewError as e:
        raise to_http_exception(e)
    except SQLAlchemyError as e:
        logger.error(f"Database error claiming {application_id}: {e}")
        raise HTTPException(status_code=500, detail="Database error")


@router.post("/{application_id}/unclaim", response_model=UnclaimResult)
async def unclaim_application(
    application_id: str,
    request: StaffRequest,
    guard: ClaimGuard = Depends(get_claim_guard),
):
    """Return a claimed application to the queue."""
    try:
        return await guard.unclaim(application_id, request.staff_id)
    except ReviewError as e:
        raise to_http_exception(e)
    except SQLAlchemyError as e:
        logger.error(f"Database error unclaiming {application_id}: {e}")
        raise HTTPException(status_code=500, detail="Database error")


@router.post("/{application_id}/release", response_model=UnclaimResult)
async def force_release_claim(
    application_id: str,
    request: StaffRequest,
    guard: ClaimGuard = Depends(get_claim_guard),
):
    """Release a stuck claim held by anyone."""
    try:
        return await guard.force_release(application_id, request.staff_id)
    except ReviewError as e:
        raise to_http_exception(e)
    except SQLAlchemyError as e:
        logger.error(f"Database error releasing {application_id}: {e}")
        raise HTTPException(status_code=500, detail="Database error")


@router.post("/{application_id}/decide", response_model=DecisionOutcome)
async def decide_application(
    application_id: str,
    request: DecisionRequest,
    executor: DecisionExecutor = Depends(get_decision_executor),
):
    """Apply a decision; a failed notification comes back as ``warning``."""
    try:
        return await executor.decide(
            application_id,
            request.staff_id,
            request.action,
            meta=request.meta,
            expected_status=request.expected_status,
            reason=request.reason,
            guild_name=request.guild_name,
        )
    except ReviewError as e:
        raise to_http_exception(e)
    except SQLAlchemyError as e:
        logger.error(f"Database error deciding {application_id}: {e}")
        raise HTTPException(status_code=500, detail="Database error")


@router.post("/{application_id}/copy-uid", response_model=CopyUidResult)
async def copy_applicant_uid(
    application_id: str,
    request: StaffRequest,
    executor: DecisionExecutor = Depends(get_decision_executor),
):
    """Log a copy of the applicant's user id."""
    try:
        return await executor.copy_uid(application_id, request.staff_id)
    except ReviewError as e:
        raise to_http_exception(e)
    except SQLAlchemyError as e:
        logger.error(f"Database error copying uid for {application_id}: {e}")
        raise HTTPException(status_code=500, detail="Database error")


@router.get("/{application_id}/history", response_model=HistoryResponse)
async def get_history(
    application_id: str,
    limit: int | None = Query(
        default=None, ge=1, le=100, description="Newest N actions; all when omitted"
    ),
    db: Database = Depends(get_database),
):
    """Get the action history of an application."""
    try:
        await ApplicationStore(db).get(application_id)
        action_log = ActionLog(db)
        if limit is None:
            entries = await action_log.history_for(application_id)
        else:
            entries = await action_log.recent_for(application_id, limit)
        return HistoryResponse(
            application_id=application_id,
            actions=[ActionLogItem.model_validate(entry) for entry in entries],
        )
    except ReviewError as e:
        raise to_http_exception(e)
    except SQLAlchemyError as e:
        logger.error(f"Database error reading history of {application_id}: {e}")
        raise HTTPException(status_code=500, detail="Database error")
