"""Release schemas.

JSON keys are camelCase on the wire; Python attributes stay snake_case.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from releasecheck.domain.checklist import CHECKLIST_KEYS
from releasecheck.services.release_store import ReleasePatch


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Checklist(CamelModel):
    """The fixed seven release-readiness tasks."""

    prs_merged: bool = False
    changelog_updated: bool = False
    tests_passing: bool = False
    github_release_created: bool = False
    deployed_demo: bool = False
    tested_demo: bool = False
    deployed_production: bool = False

    def as_mapping(self) -> dict[str, bool]:
        return self.model_dump(by_alias=True)


class ChecklistProgress(CamelModel):
    total: int = len(CHECKLIST_KEYS)
    completed: int = 0
    percentage: int = 0


class CreateReleaseRequest(CamelModel):
    release_name: str = Field(max_length=255)
    version: str = Field(max_length=50)
    release_date: date
    remarks: str | None = None
    checklist: Checklist | None = None
    checklist_progress: ChecklistProgress | None = None

    def to_values(self) -> dict[str, Any]:
        values: dict[str, Any] = {
            "release_name": self.release_name,
            "version": self.version,
            "release_date": self.release_date,
            "remarks": self.remarks or None,
        }
        if self.checklist is not None:
            values["checklist"] = self.checklist.as_mapping()
        if self.checklist_progress is not None:
            values["checklist_progress"] = self.checklist_progress.model_dump()
        return values


class UpdateReleaseRequest(CamelModel):
    """Partial update; only keys present in the request body are applied."""

    release_name: str | None = Field(default=None, max_length=255)
    version: str | None = Field(default=None, max_length=50)
    release_date: date | None = None
    remarks: str | None = None
    checklist: Checklist | None = None
    checklist_progress: ChecklistProgress | None = None

    def to_patch(self) -> ReleasePatch:
        changes: dict[str, Any] = {}
        for name in self.model_fields_set:
            value = getattr(self, name)
            if isinstance(value, Checklist):
                value = value.as_mapping()
            elif isinstance(value, ChecklistProgress):
                value = value.model_dump()
            changes[name] = value
        return ReleasePatch(changes)


class ReleaseResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    release_name: str
    version: str
    release_date: date
    remarks: str | None = None
    checklist: Checklist
    checklist_progress: ChecklistProgress
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
