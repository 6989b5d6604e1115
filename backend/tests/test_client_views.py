from __future__ import annotations

from datetime import date
from pathlib import Path
import sys
import unittest

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from releasecheck.client.api import ReleaseApiError
from releasecheck.client.views import (
    NewReleaseForm,
    ReleaseDetailView,
    ReleaseListView,
    delete_prompt,
)
from releasecheck.domain.checklist import CHECKLIST_KEYS, compute_progress
from releasecheck.domain.detail_view_state import DetailViewState, ViewTransitionError
from releasecheck.schemas import ReleaseResponse


def _checklist_with(completed: int) -> dict[str, bool]:
    return {key: index < completed for index, key in enumerate(CHECKLIST_KEYS)}


class FakeReleaseApi:
    def __init__(self) -> None:
        self.releases: dict[int, ReleaseResponse] = {}
        self.next_id = 1
        self.calls: list[tuple[str, object]] = []
        self.fail_with: dict[str, ReleaseApiError] = {}

    def add(self, release_name: str, release_date: date, completed: int = 0) -> ReleaseResponse:
        checklist = _checklist_with(completed)
        release = ReleaseResponse(
            id=self.next_id,
            release_name=release_name,
            version="1.0.0",
            release_date=release_date,
            remarks=None,
            checklist=checklist,
            checklist_progress=compute_progress(checklist),
        )
        self.releases[release.id] = release
        self.next_id += 1
        return release

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.fail_with:
            raise self.fail_with[operation]

    def list_releases(self) -> list[ReleaseResponse]:
        self.calls.append(("list", None))
        self._maybe_fail("list")
        return sorted(self.releases.values(), key=lambda item: item.release_date, reverse=True)

    def get_release(self, release_id: int) -> ReleaseResponse:
        self.calls.append(("get", release_id))
        self._maybe_fail("get")
        if release_id not in self.releases:
            raise ReleaseApiError("Release not found", status_code=404)
        return self.releases[release_id]

    def create_release(self, payload: dict) -> ReleaseResponse:
        self.calls.append(("create", payload))
        self._maybe_fail("create")
        release = ReleaseResponse.model_validate({**payload, "id": self.next_id})
        self.releases[release.id] = release
        self.next_id += 1
        return release

    def update_release(self, release_id: int, changes: dict) -> ReleaseResponse:
        self.calls.append(("update", changes))
        self._maybe_fail("update")
        current = self.releases[release_id].model_dump(by_alias=True)
        updated = ReleaseResponse.model_validate({**current, **changes})
        self.releases[release_id] = updated
        return updated

    def delete_release(self, release_id: int) -> str:
        self.calls.append(("delete", release_id))
        self._maybe_fail("delete")
        if release_id not in self.releases:
            raise ReleaseApiError("Release not found", status_code=404)
        del self.releases[release_id]
        return "Release deleted successfully"


class ReleaseListViewTests(unittest.TestCase):
    def setUp(self) -> None:
        self.api = FakeReleaseApi()
        self.api.add("Planned", date(2026, 2, 1), completed=0)
        self.api.add("Done", date(2026, 4, 1), completed=7)
        self.api.add("Ongoing", date(2026, 3, 1), completed=3)
        self.prompts: list[str] = []
        self.answer = True

    def _confirm(self, message: str) -> bool:
        self.prompts.append(message)
        return self.answer

    def test_rows_show_status_and_progress(self) -> None:
        view = ReleaseListView(self.api, confirm=self._confirm)
        view.load()

        rows = view.rows()

        self.assertEqual([row["release_name"] for row in rows], ["Done", "Ongoing", "Planned"])
        self.assertEqual([row["status"] for row in rows], ["done", "ongoing", "planned"])
        self.assertEqual([row["percentage"] for row in rows], [100, 43, 0])
        self.assertEqual(rows[0]["release_date"], "2026-04-01")
        self.assertFalse(view.loading)
        self.assertIsNone(view.error)

    def test_delete_requires_confirmation(self) -> None:
        view = ReleaseListView(self.api, confirm=self._confirm)
        view.load()
        self.answer = False

        self.assertFalse(view.delete(2))

        self.assertEqual(self.prompts, [delete_prompt("Done")])
        self.assertNotIn(("delete", 2), self.api.calls)
        self.assertEqual(len(view.rows()), 3)

    def test_confirmed_delete_refetches_list(self) -> None:
        view = ReleaseListView(self.api, confirm=self._confirm)
        view.load()

        self.assertTrue(view.delete(2))

        self.assertEqual(self.api.calls[-2:], [("delete", 2), ("list", None)])
        self.assertEqual([row["release_name"] for row in view.rows()], ["Ongoing", "Planned"])

    def test_load_failure_sets_error(self) -> None:
        self.api.fail_with["list"] = ReleaseApiError("Failed to fetch releases", status_code=500)
        view = ReleaseListView(self.api, confirm=self._confirm)

        view.load()

        self.assertEqual(view.error, "Failed to fetch releases")
        self.assertEqual(view.rows(), [])


class NewReleaseFormTests(unittest.TestCase):
    def setUp(self) -> None:
        self.api = FakeReleaseApi()
        self.form = NewReleaseForm(self.api)
        self.form.release_name = "Release 3.0"
        self.form.version = "3.0.0"
        self.form.release_date = "2026-05-01"

    def test_submit_sends_client_computed_progress(self) -> None:
        self.form.toggle("prsMerged")
        self.form.toggle("testsPassing")
        self.form.toggle("deployedDemo")

        release_id = self.form.submit()

        self.assertEqual(release_id, 1)
        operation, payload = self.api.calls[-1]
        self.assertEqual(operation, "create")
        self.assertEqual(payload["checklistProgress"], {"total": 7, "completed": 3, "percentage": 43})
        self.assertTrue(payload["checklist"]["deployedDemo"])
        self.assertNotIn("remarks", payload)
        self.assertIsNone(self.form.error)

    def test_toggle_twice_restores_item(self) -> None:
        self.form.toggle("testedDemo")
        self.form.toggle("testedDemo")
        self.assertEqual(self.form.progress()["completed"], 0)

    def test_toggle_rejects_unknown_item(self) -> None:
        with self.assertRaises(KeyError):
            self.form.toggle("docsWritten")

    def test_missing_required_field_stays_on_form(self) -> None:
        self.form.version = "  "

        self.assertIsNone(self.form.submit())

        self.assertIsNotNone(self.form.error)
        self.assertEqual(self.api.calls, [])

    def test_server_failure_stays_on_form_with_error(self) -> None:
        self.api.fail_with["create"] = ReleaseApiError("Failed to create release", status_code=500)

        self.assertIsNone(self.form.submit())

        self.assertEqual(self.form.error, "Failed to create release")
        self.assertFalse(self.form.submitting)


class ReleaseDetailViewTests(unittest.TestCase):
    def setUp(self) -> None:
        self.api = FakeReleaseApi()
        self.release = self.api.add("Release 1.0", date(2026, 3, 1), completed=3)
        self.view = ReleaseDetailView(self.api, self.release.id)

    def test_load_moves_to_viewing(self) -> None:
        self.assertEqual(self.view.state, DetailViewState.LOADING)

        self.view.load()

        self.assertEqual(self.view.state, DetailViewState.VIEWING)
        self.assertTrue(self.view.ready)
        self.assertEqual(self.view.status(), "ongoing")
        self.assertFalse(self.view.fetching)

    def test_load_failure_moves_to_error_and_can_retry(self) -> None:
        missing = ReleaseDetailView(self.api, 404)

        missing.load()

        self.assertEqual(missing.state, DetailViewState.ERROR)
        self.assertEqual(missing.fetch_error, "Release not found")
        self.assertFalse(missing.ready)
        missing.load()
        self.assertEqual(missing.state, DetailViewState.ERROR)

    def test_edit_recomputes_progress_and_saves(self) -> None:
        self.view.load()
        self.view.start_edit()
        self.view.toggle("githubReleaseCreated")
        self.view.set_field("remarks", "Almost there")

        self.assertEqual(self.view.progress(), {"total": 7, "completed": 4, "percentage": 57})
        self.assertEqual(self.view.release.checklist_progress.completed, 3)

        self.assertTrue(self.view.save())

        self.assertEqual(self.view.state, DetailViewState.VIEWING)
        self.assertEqual(self.view.release.checklist_progress.percentage, 57)
        self.assertEqual(self.view.release.remarks, "Almost there")
        _, changes = self.api.calls[-1]
        self.assertEqual(changes["checklistProgress"], {"total": 7, "completed": 4, "percentage": 57})

    def test_cancel_edit_discards_draft(self) -> None:
        self.view.load()
        self.view.start_edit()
        self.view.toggle("deployedProduction")

        self.view.cancel_edit()

        self.assertEqual(self.view.state, DetailViewState.VIEWING)
        self.assertIsNone(self.view.draft)
        self.assertEqual(self.view.progress()["completed"], 3)

    def test_failed_save_stays_in_editing(self) -> None:
        self.view.load()
        self.view.start_edit()
        self.api.fail_with["update"] = ReleaseApiError("Failed to update release", status_code=500)

        self.assertFalse(self.view.save())

        self.assertEqual(self.view.state, DetailViewState.EDITING)
        self.assertEqual(self.view.save_error, "Failed to update release")
        self.assertFalse(self.view.saving)

    def test_delete_goes_through_confirmation(self) -> None:
        self.view.load()

        prompt = self.view.request_delete()

        self.assertEqual(prompt, delete_prompt("Release 1.0"))
        self.assertEqual(self.view.state, DetailViewState.CONFIRM_DELETE)
        self.assertTrue(self.view.confirm_delete())
        self.assertEqual(self.view.state, DetailViewState.DELETED)
        self.assertNotIn(self.release.id, self.api.releases)

    def test_cancel_delete_returns_to_viewing(self) -> None:
        self.view.load()
        self.view.request_delete()

        self.view.cancel_delete()

        self.assertEqual(self.view.state, DetailViewState.VIEWING)
        self.assertNotIn(("delete", self.release.id), self.api.calls)

    def test_failed_delete_returns_to_viewing_with_error(self) -> None:
        self.view.load()
        self.view.request_delete()
        self.api.fail_with["delete"] = ReleaseApiError("Failed to delete release", status_code=500)

        self.assertFalse(self.view.confirm_delete())

        self.assertEqual(self.view.state, DetailViewState.VIEWING)
        self.assertEqual(self.view.delete_error, "Failed to delete release")

    def test_invalid_transitions_are_rejected(self) -> None:
        with self.assertRaises(ViewTransitionError):
            self.view.start_edit()

        self.view.load()
        with self.assertRaises(ViewTransitionError):
            self.view.save()
        with self.assertRaises(ViewTransitionError):
            self.view.confirm_delete()

        self.view.start_edit()
        with self.assertRaises(ViewTransitionError):
            self.view.request_delete()

    def test_deleted_view_is_closed(self) -> None:
        self.view.load()
        self.view.request_delete()
        self.view.confirm_delete()

        with self.assertRaisesRegex(ViewTransitionError, "deleted"):
            self.view.load()


if __name__ == "__main__":
    unittest.main()
