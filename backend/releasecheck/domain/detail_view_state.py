from __future__ import annotations

from enum import Enum


class DetailViewState(str, Enum):
    LOADING = "loading"
    ERROR = "error"
    VIEWING = "viewing"
    EDITING = "editing"
    CONFIRM_DELETE = "confirm_delete"
    DELETED = "deleted"


READY_STATES = {
    DetailViewState.VIEWING,
    DetailViewState.EDITING,
    DetailViewState.CONFIRM_DELETE,
}

VALID_TRANSITIONS: dict[DetailViewState, set[DetailViewState]] = {
    DetailViewState.LOADING: {DetailViewState.VIEWING, DetailViewState.ERROR},
    DetailViewState.ERROR: {DetailViewState.LOADING},
    DetailViewState.VIEWING: {DetailViewState.EDITING, DetailViewState.CONFIRM_DELETE, DetailViewState.LOADING},
    DetailViewState.EDITING: {DetailViewState.VIEWING},
    DetailViewState.CONFIRM_DELETE: {DetailViewState.VIEWING, DetailViewState.DELETED},
    DetailViewState.DELETED: set(),
}


class ViewTransitionError(ValueError):
    """Raised when the detail view is asked for a transition its current state forbids."""


def ensure_transition_allowed(current: DetailViewState, target: DetailViewState) -> None:
    if current == DetailViewState.DELETED:
        raise ViewTransitionError("Release was deleted; the view is closed.")

    allowed_targets = VALID_TRANSITIONS[current]
    if target not in allowed_targets:
        allowed_text = ", ".join(sorted(state.value for state in allowed_targets))
        raise ViewTransitionError(
            f"Invalid transition '{current.value}' -> '{target.value}'. Allowed: [{allowed_text}]"
        )
