from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from releasecheck.db.session import get_db_session
from releasecheck.schemas import CreateReleaseRequest, ReleaseResponse, UpdateReleaseRequest
from releasecheck.services.observability import emit_structured_log
from releasecheck.services.release_store import (
    ReleaseOperationError,
    delete_release,
    get_release,
    insert_release,
    list_releases,
    update_release,
)

router = APIRouter(prefix="/api/releases", tags=["releases"])

RELEASE_NOT_FOUND = "Release not found"
_MAX_RELEASE_ID = 2**63 - 1


def _envelope(status_code: int, *, success: bool, **fields: Any) -> JSONResponse:
    content: dict[str, Any] = {"success": success}
    content.update({key: value for key, value in fields.items() if value is not None})
    return JSONResponse(status_code=status_code, content=content)


def _to_payload(item) -> dict[str, Any]:
    return ReleaseResponse.model_validate(item).to_payload()


def _parse_release_id(raw: str) -> int | None:
    value = raw.strip()
    if not (value.isascii() and value.isdigit()):
        return None
    release_id = int(value)
    if release_id > _MAX_RELEASE_ID:
        return None
    return release_id


def _log_failure(operation: str, exc: Exception, release_id: int | str | None = None) -> None:
    emit_structured_log(
        component="api",
        event="release_operation_failed",
        level=logging.ERROR,
        release_id=release_id,
        operation=operation,
        error_type=type(exc).__name__,
        error=str(exc),
    )


def _not_found() -> JSONResponse:
    return _envelope(404, success=False, error=RELEASE_NOT_FOUND)


@router.get("")
def get_releases(db: Session = Depends(get_db_session)) -> JSONResponse:
    try:
        records = list_releases(db=db)
        items = [_to_payload(item) for item in records]
    except (ReleaseOperationError, ValueError) as exc:
        _log_failure("list", exc)
        return _envelope(500, success=False, error="Failed to fetch releases")
    return _envelope(200, success=True, data=items, count=len(items))


@router.get("/{release_id}")
def get_release_by_id(release_id: str, db: Session = Depends(get_db_session)) -> JSONResponse:
    parsed_id = _parse_release_id(release_id)
    if parsed_id is None:
        return _not_found()
    try:
        record = get_release(db=db, release_id=parsed_id)
        if record is None:
            return _not_found()
        payload = _to_payload(record)
    except (ReleaseOperationError, ValueError) as exc:
        _log_failure("get", exc, parsed_id)
        return _envelope(500, success=False, error="Failed to fetch release")
    return _envelope(200, success=True, data=payload)


@router.post("")
async def create_release(request: Request, db: Session = Depends(get_db_session)) -> JSONResponse:
    # Malformed or incomplete payloads answer 500, not 400, to keep the public contract.
    try:
        body = await request.json()
        payload = CreateReleaseRequest.model_validate(body)
        record = await run_in_threadpool(insert_release, db=db, values=payload.to_values())
        data = _to_payload(record)
    except (ReleaseOperationError, ValueError) as exc:
        _log_failure("create", exc)
        return _envelope(500, success=False, error="Failed to create release")

    emit_structured_log(component="api", event="release_created", release_id=data["id"])
    return _envelope(201, success=True, data=data, message="Release created successfully")


@router.put("/{release_id}")
async def update_release_by_id(
    release_id: str,
    request: Request,
    db: Session = Depends(get_db_session),
) -> JSONResponse:
    try:
        body = await request.json()
        if not isinstance(body, dict):
            body = {}
        patch = UpdateReleaseRequest.model_validate(body).to_patch()
    except ValueError as exc:
        _log_failure("update", exc, release_id)
        return _envelope(500, success=False, error="Failed to update release")

    if patch.is_empty():
        return _envelope(400, success=False, error="No fields to update")

    parsed_id = _parse_release_id(release_id)
    if parsed_id is None:
        return _not_found()

    try:
        record = await run_in_threadpool(update_release, db=db, release_id=parsed_id, patch=patch)
        if record is None:
            return _not_found()
        data = _to_payload(record)
    except (ReleaseOperationError, ValueError) as exc:
        _log_failure("update", exc, parsed_id)
        return _envelope(500, success=False, error="Failed to update release")

    emit_structured_log(
        component="api",
        event="release_updated",
        release_id=parsed_id,
        fields=sorted(patch.changes),
    )
    return _envelope(200, success=True, data=data, message="Release updated successfully")


@router.delete("/{release_id}")
def delete_release_by_id(release_id: str, db: Session = Depends(get_db_session)) -> JSONResponse:
    parsed_id = _parse_release_id(release_id)
    if parsed_id is None:
        return _not_found()
    try:
        record = delete_release(db=db, release_id=parsed_id)
    except ReleaseOperationError as exc:
        _log_failure("delete", exc, parsed_id)
        return _envelope(500, success=False, error="Failed to delete release")
    if record is None:
        return _not_found()

    emit_structured_log(component="api", event="release_deleted", release_id=parsed_id)
    return _envelope(200, success=True, message="Release deleted successfully")
