"""Pydantic schemas for request/response validation."""

from reviewgate.schemas.review import (
    ClaimResult,
    DecisionOutcome,
    DecisionRequest,
    SubmitRequest,
    UnclaimResult,
)

__all__ = [
    "ClaimResult",
    "DecisionOutcome",
    "DecisionRequest",
    "SubmitRequest",
    "UnclaimResult",
]
