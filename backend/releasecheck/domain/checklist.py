from __future__ import annotations

from collections.abc import Mapping
from enum import Enum


class ChecklistItem(str, Enum):
    PRS_MERGED = "prsMerged"
    CHANGELOG_UPDATED = "changelogUpdated"
    TESTS_PASSING = "testsPassing"
    GITHUB_RELEASE_CREATED = "githubReleaseCreated"
    DEPLOYED_DEMO = "deployedDemo"
    TESTED_DEMO = "testedDemo"
    DEPLOYED_PRODUCTION = "deployedProduction"


class ReleaseStatus(str, Enum):
    PLANNED = "planned"
    ONGOING = "ongoing"
    DONE = "done"


CHECKLIST_ITEMS: dict[ChecklistItem, str] = {
    ChecklistItem.PRS_MERGED: "All relevant GitHub pull requests have been merged",
    ChecklistItem.CHANGELOG_UPDATED: "CHANGELOG.md files have been updated",
    ChecklistItem.TESTS_PASSING: "All tests are passing",
    ChecklistItem.GITHUB_RELEASE_CREATED: "Releases in Github created",
    ChecklistItem.DEPLOYED_DEMO: "Deployed in demo",
    ChecklistItem.TESTED_DEMO: "Tested thoroughly in demo",
    ChecklistItem.DEPLOYED_PRODUCTION: "Deployed in production",
}

CHECKLIST_KEYS: tuple[str, ...] = tuple(item.value for item in ChecklistItem)


def default_checklist() -> dict[str, bool]:
    return {key: False for key in CHECKLIST_KEYS}


def default_checklist_progress() -> dict[str, int]:
    return {"total": len(CHECKLIST_KEYS), "completed": 0, "percentage": 0}


def rounded_percentage(completed: int, total: int) -> int:
    """Return ``completed/total`` as a whole percentage, rounding halves up.

    Integer arithmetic keeps exact halves (e.g. 1/8 -> 12.5) from being
    subject to float error or banker's rounding.
    """
    if total <= 0:
        return 0
    return (200 * completed + total) // (2 * total)


def compute_progress(checklist: Mapping[str, bool]) -> dict[str, int]:
    total = len(checklist)
    completed = sum(1 for value in checklist.values() if value is True)
    return {
        "total": total,
        "completed": completed,
        "percentage": rounded_percentage(completed, total),
    }


def classify_status(completed: int, total: int) -> ReleaseStatus:
    # completed == 0 wins over completed == total, so an empty checklist is planned
    if completed == 0:
        return ReleaseStatus.PLANNED
    if completed == total:
        return ReleaseStatus.DONE
    return ReleaseStatus.ONGOING


def status_color(percentage: int) -> str:
    if percentage == 100:
        return "success"
    if percentage >= 50:
        return "warning"
    return "error"
