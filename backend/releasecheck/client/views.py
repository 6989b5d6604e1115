"""Terminal-facing views over the releases API.

Views hold screen state only; rendering is left to the caller. They talk
to the server exclusively through :class:`ReleaseApiClient` and compute
progress and status with the shared checklist calculator.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Callable, Protocol

from releasecheck.client.api import ReleaseApiError, calculate_release_status
from releasecheck.domain.checklist import compute_progress, default_checklist
from releasecheck.domain.detail_view_state import (
    READY_STATES,
    DetailViewState,
    ViewTransitionError,
    ensure_transition_allowed,
)
from releasecheck.schemas import ReleaseResponse

EDITABLE_FIELDS = ("release_name", "version", "release_date", "remarks")


class ReleaseApi(Protocol):
    def list_releases(self) -> list[ReleaseResponse]: ...

    def get_release(self, release_id: int) -> ReleaseResponse: ...

    def create_release(self, payload: dict[str, Any]) -> ReleaseResponse: ...

    def update_release(self, release_id: int, changes: dict[str, Any]) -> ReleaseResponse: ...

    def delete_release(self, release_id: int) -> str | None: ...


def delete_prompt(release_name: str) -> str:
    return f'Are you sure you want to delete "{release_name}"? This action cannot be undone.'


def _toggle(checklist: dict[str, bool], key: str) -> None:
    if key not in checklist:
        raise KeyError(f"unknown_checklist_item:{key}")
    checklist[key] = not checklist[key]


def _release_payload(
    *,
    release_name: str,
    version: str,
    release_date: date | str,
    remarks: str | None,
    checklist: dict[str, bool],
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "releaseName": release_name,
        "version": version,
        "releaseDate": release_date.isoformat() if isinstance(release_date, date) else release_date,
        "checklist": dict(checklist),
        "checklistProgress": compute_progress(checklist),
    }
    if remarks:
        payload["remarks"] = remarks
    return payload


class ReleaseListView:
    def __init__(self, api: ReleaseApi, confirm: Callable[[str], bool]) -> None:
        self.api = api
        self.confirm = confirm
        self.releases: list[ReleaseResponse] = []
        self.loading = False
        self.error: str | None = None

    def load(self) -> None:
        self.loading = True
        try:
            self.releases = self.api.list_releases()
            self.error = None
        except ReleaseApiError as exc:
            self.releases = []
            self.error = exc.message
        finally:
            self.loading = False

    def rows(self) -> list[dict[str, Any]]:
        return [
            {
                "id": item.id,
                "release_name": item.release_name,
                "version": item.version,
                "release_date": item.release_date.isoformat(),
                "status": calculate_release_status(
                    item.checklist_progress.completed, item.checklist_progress.total
                ),
                "percentage": item.checklist_progress.percentage,
            }
            for item in self.releases
        ]

    def delete(self, release_id: int) -> bool:
        target = next((item for item in self.releases if item.id == release_id), None)
        release_name = target.release_name if target is not None else str(release_id)
        if not self.confirm(delete_prompt(release_name)):
            return False

        try:
            self.api.delete_release(release_id)
        except ReleaseApiError as exc:
            self.error = exc.message
            return False

        self.load()
        return True


class NewReleaseForm:
    def __init__(self, api: ReleaseApi) -> None:
        self.api = api
        self.release_name = ""
        self.version = ""
        self.release_date = ""
        self.remarks = ""
        self.checklist = default_checklist()
        self.submitting = False
        self.error: str | None = None

    def toggle(self, key: str) -> None:
        _toggle(self.checklist, key)

    def progress(self) -> dict[str, int]:
        return compute_progress(self.checklist)

    def submit(self) -> int | None:
        """Create the release; return its id, or ``None`` with ``error`` set."""
        if not (self.release_name.strip() and self.version.strip() and self.release_date.strip()):
            self.error = "Release name, version and release date are required"
            return None

        self.submitting = True
        self.error = None
        try:
            created = self.api.create_release(
                _release_payload(
                    release_name=self.release_name.strip(),
                    version=self.version.strip(),
                    release_date=self.release_date.strip(),
                    remarks=self.remarks,
                    checklist=self.checklist,
                )
            )
        except ReleaseApiError as exc:
            self.error = exc.message or "Failed to create release"
            return None
        finally:
            self.submitting = False
        return created.id


class ReleaseDetailView:
    def __init__(self, api: ReleaseApi, release_id: int) -> None:
        self.api = api
        self.release_id = release_id
        self.state = DetailViewState.LOADING
        self.release: ReleaseResponse | None = None
        self.draft: dict[str, Any] | None = None

        self.fetching = False
        self.saving = False
        self.deleting = False
        self.fetch_error: str | None = None
        self.save_error: str | None = None
        self.delete_error: str | None = None

    def _transition(self, target: DetailViewState) -> None:
        ensure_transition_allowed(self.state, target)
        self.state = target

    @property
    def ready(self) -> bool:
        return self.state in READY_STATES

    def load(self) -> None:
        if self.state != DetailViewState.LOADING:
            self._transition(DetailViewState.LOADING)

        self.fetching = True
        try:
            self.release = self.api.get_release(self.release_id)
        except ReleaseApiError as exc:
            self.fetch_error = exc.message
            self._transition(DetailViewState.ERROR)
            return
        finally:
            self.fetching = False

        self.fetch_error = None
        self._transition(DetailViewState.VIEWING)

    def progress(self) -> dict[str, int]:
        if self.state == DetailViewState.EDITING and self.draft is not None:
            return compute_progress(self.draft["checklist"])
        if self.release is None:
            return compute_progress(default_checklist())
        return self.release.checklist_progress.model_dump()

    def status(self) -> str:
        progress = self.progress()
        return calculate_release_status(progress["completed"], progress["total"])

    def start_edit(self) -> None:
        self._transition(DetailViewState.EDITING)
        release = self.release
        self.draft = {
            "release_name": release.release_name,
            "version": release.version,
            "release_date": release.release_date.isoformat(),
            "remarks": release.remarks or "",
            "checklist": release.checklist.as_mapping(),
        }
        self.save_error = None

    def set_field(self, name: str, value: str) -> None:
        if self.state != DetailViewState.EDITING:
            raise ViewTransitionError("Fields can only be changed while editing.")
        if name not in EDITABLE_FIELDS:
            raise KeyError(f"unknown_release_field:{name}")
        self.draft[name] = value

    def toggle(self, key: str) -> None:
        if self.state != DetailViewState.EDITING:
            raise ViewTransitionError("Checklist can only be changed while editing.")
        _toggle(self.draft["checklist"], key)

    def cancel_edit(self) -> None:
        self._transition(DetailViewState.VIEWING)
        self.draft = None
        self.save_error = None

    def save(self) -> bool:
        if self.state != DetailViewState.EDITING:
            raise ViewTransitionError(f"Cannot save from '{self.state.value}'.")

        changes = _release_payload(
            release_name=self.draft["release_name"],
            version=self.draft["version"],
            release_date=self.draft["release_date"],
            remarks=None,
            checklist=self.draft["checklist"],
        )
        changes["remarks"] = self.draft["remarks"] or None

        self.saving = True
        try:
            updated = self.api.update_release(self.release_id, changes)
        except ReleaseApiError as exc:
            self.save_error = exc.message
            return False
        finally:
            self.saving = False

        self.release = updated
        self.draft = None
        self.save_error = None
        self._transition(DetailViewState.VIEWING)
        return True

    def request_delete(self) -> str:
        self._transition(DetailViewState.CONFIRM_DELETE)
        self.delete_error = None
        return delete_prompt(self.release.release_name)

    def cancel_delete(self) -> None:
        self._transition(DetailViewState.VIEWING)

    def confirm_delete(self) -> bool:
        if self.state != DetailViewState.CONFIRM_DELETE:
            raise ViewTransitionError(f"Cannot delete from '{self.state.value}'.")

        self.deleting = True
        try:
            self.api.delete_release(self.release_id)
        except ReleaseApiError as exc:
            self.delete_error = exc.message
            self._transition(DetailViewState.VIEWING)
            return False
        finally:
            self.deleting = False

        self._transition(DetailViewState.DELETED)
        return True

