from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from releasecheck.domain.checklist import default_checklist, default_checklist_progress
from releasecheck.models import Release
from releasecheck.models.common import utcnow

REQUIRED_FIELDS = ("release_name", "version", "release_date")
PATCHABLE_FIELDS = frozenset(
    {
        "release_name",
        "version",
        "release_date",
        "remarks",
        "checklist",
        "checklist_progress",
    }
)
NON_NULLABLE_FIELDS = PATCHABLE_FIELDS - {"remarks"}


class ReleaseOperationError(RuntimeError):
    """Raised when the release store cannot complete an operation."""


class ReleaseConstraintError(ReleaseOperationError):
    """Raised when a release row would violate the table constraints."""


class EmptyReleasePatchError(ValueError):
    """Raised when an update supplies no fields."""


@dataclass(frozen=True)
class ReleasePatch:
    """Fields to change on an existing release.

    A key being present means the caller supplied it, even when its value
    is ``None``; absent keys keep their stored value.
    """

    changes: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        unknown = set(self.changes) - PATCHABLE_FIELDS
        if unknown:
            raise ValueError(f"unknown_release_fields:{','.join(sorted(unknown))}")
        nulled = sorted(
            name for name in NON_NULLABLE_FIELDS if name in self.changes and self.changes[name] is None
        )
        if nulled:
            raise ValueError(f"non_nullable_release_fields:{','.join(nulled)}")

    def __contains__(self, name: object) -> bool:
        return name in self.changes

    def __iter__(self) -> Iterator[tuple[str, Any]]:
        return iter(self.changes.items())

    def is_empty(self) -> bool:
        return not self.changes


def list_releases(*, db: Session) -> list[Release]:
    try:
        return (
            db.query(Release)
            .order_by(Release.release_date.desc(), Release.created_at.desc(), Release.id.desc())
            .all()
        )
    except SQLAlchemyError as exc:
        raise ReleaseOperationError(f"list_releases_failed:{exc}") from exc


def get_release(*, db: Session, release_id: int) -> Release | None:
    try:
        return db.query(Release).filter(Release.id == release_id).first()
    except SQLAlchemyError as exc:
        raise ReleaseOperationError(f"get_release_failed:{exc}") from exc


def insert_release(*, db: Session, values: Mapping[str, Any]) -> Release:
    missing = [name for name in REQUIRED_FIELDS if values.get(name) is None]
    if missing:
        raise ReleaseConstraintError(f"missing_required_fields:{','.join(missing)}")

    checklist = values.get("checklist")
    progress = values.get("checklist_progress")
    release = Release(
        release_name=values["release_name"],
        version=values["version"],
        release_date=values["release_date"],
        remarks=values.get("remarks"),
        checklist=dict(checklist) if checklist is not None else default_checklist(),
        checklist_progress=dict(progress) if progress is not None else default_checklist_progress(),
    )
    try:
        db.add(release)
        db.commit()
        db.refresh(release)
    except SQLAlchemyError as exc:
        db.rollback()
        raise ReleaseOperationError(f"insert_release_failed:{exc}") from exc
    return release


def update_release(*, db: Session, release_id: int, patch: ReleasePatch) -> Release | None:
    if patch.is_empty():
        raise EmptyReleasePatchError("No fields to update")

    release = get_release(db=db, release_id=release_id)
    if release is None:
        return None

    for name, value in patch:
        if name in ("checklist", "checklist_progress") and value is not None:
            value = dict(value)
        setattr(release, name, value)
    release.updated_at = utcnow()

    try:
        db.commit()
        db.refresh(release)
    except SQLAlchemyError as exc:
        db.rollback()
        raise ReleaseOperationError(f"update_release_failed:{exc}") from exc
    return release


def delete_release(*, db: Session, release_id: int) -> Release | None:
    release = get_release(db=db, release_id=release_id)
    if release is None:
        return None

    try:
        db.delete(release)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise ReleaseOperationError(f"delete_release_failed:{exc}") from exc
    return release
