"""Pydantic wire models shared by the API and its client."""

from releasecheck.schemas.release import (
    Checklist,
    ChecklistProgress,
    CreateReleaseRequest,
    ReleaseResponse,
    UpdateReleaseRequest,
)

__all__ = [
    "Checklist",
    "ChecklistProgress",
    "CreateReleaseRequest",
    "ReleaseResponse",
    "UpdateReleaseRequest",
]
