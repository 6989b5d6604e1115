from __future__ import annotations

import argparse
import json
from typing import Any

from releasecheck.client.api import ReleaseApiClient
from releasecheck.client.views import NewReleaseForm, ReleaseDetailView, ReleaseListView
from releasecheck.domain.checklist import CHECKLIST_ITEMS, CHECKLIST_KEYS, status_color


def _prompt_confirm(message: str) -> bool:
    answer = input(f"{message} [y/N] ")
    return answer.strip().lower() in {"y", "yes"}


def _detail_payload(view: ReleaseDetailView) -> dict[str, Any]:
    release = view.release
    progress = view.progress()
    checklist = release.checklist.as_mapping()
    return {
        "id": release.id,
        "release_name": release.release_name,
        "version": release.version,
        "release_date": release.release_date.isoformat(),
        "remarks": release.remarks,
        "status": view.status(),
        "progress": progress,
        "progress_color": status_color(progress["percentage"]),
        "checklist": [
            {"key": item.value, "label": label, "done": checklist.get(item.value, False)}
            for item, label in CHECKLIST_ITEMS.items()
        ],
    }


def _print(payload: Any) -> None:
    print(json.dumps(payload))


def _cmd_list(api: ReleaseApiClient, args: argparse.Namespace) -> int:
    view = ReleaseListView(api, confirm=_prompt_confirm)
    view.load()
    if view.error:
        _print({"error": view.error})
        return 1
    _print(view.rows())
    return 0


def _cmd_new(api: ReleaseApiClient, args: argparse.Namespace) -> int:
    form = NewReleaseForm(api)
    form.release_name = args.name
    form.version = args.version
    form.release_date = args.date
    form.remarks = args.remarks or ""
    for key in args.check:
        form.toggle(key)

    release_id = form.submit()
    if release_id is None:
        _print({"error": form.error})
        return 1

    view = ReleaseDetailView(api, release_id)
    view.load()
    if view.fetch_error:
        _print({"id": release_id, "error": view.fetch_error})
        return 1
    _print(_detail_payload(view))
    return 0


def _cmd_show(api: ReleaseApiClient, args: argparse.Namespace) -> int:
    view = ReleaseDetailView(api, args.id)
    view.load()
    if view.fetch_error:
        _print({"error": view.fetch_error, "id": args.id})
        return 2
    _print(_detail_payload(view))
    return 0


def _cmd_edit(api: ReleaseApiClient, args: argparse.Namespace) -> int:
    view = ReleaseDetailView(api, args.id)
    view.load()
    if view.fetch_error:
        _print({"error": view.fetch_error, "id": args.id})
        return 2

    view.start_edit()
    for name in ("release_name", "version", "release_date", "remarks"):
        value = getattr(args, name)
        if value is not None:
            view.set_field(name, value)
    for key in args.toggle:
        view.toggle(key)

    if not view.save():
        _print({"error": view.save_error, "id": args.id})
        return 1
    _print(_detail_payload(view))
    return 0


def _cmd_delete(api: ReleaseApiClient, args: argparse.Namespace) -> int:
    view = ReleaseDetailView(api, args.id)
    view.load()
    if view.fetch_error:
        _print({"error": view.fetch_error, "id": args.id})
        return 2

    prompt = view.request_delete()
    if not (args.yes or _prompt_confirm(prompt)):
        view.cancel_delete()
        _print({"deleted": False, "id": args.id})
        return 0

    if not view.confirm_delete():
        _print({"error": view.delete_error, "id": args.id})
        return 1
    _print({"deleted": True, "id": args.id})
    return 0


COMMANDS = {
    "list": _cmd_list,
    "new": _cmd_new,
    "show": _cmd_show,
    "edit": _cmd_edit,
    "delete": _cmd_delete,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Track release checklists through the ReleaseCheck API")
    parser.add_argument("--api-url", default=None, help="Base URL of the API, e.g. http://localhost:5000/api")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list")

    new_parser = subparsers.add_parser("new")
    new_parser.add_argument("--name", required=True)
    new_parser.add_argument("--version", required=True)
    new_parser.add_argument("--date", required=True, help="Release date as YYYY-MM-DD")
    new_parser.add_argument("--remarks", default=None)
    new_parser.add_argument("--check", action="append", default=[], choices=CHECKLIST_KEYS)

    show_parser = subparsers.add_parser("show")
    show_parser.add_argument("--id", type=int, required=True)

    edit_parser = subparsers.add_parser("edit")
    edit_parser.add_argument("--id", type=int, required=True)
    edit_parser.add_argument("--name", dest="release_name", default=None)
    edit_parser.add_argument("--version", default=None)
    edit_parser.add_argument("--date", dest="release_date", default=None)
    edit_parser.add_argument("--remarks", default=None)
    edit_parser.add_argument("--toggle", action="append", default=[], choices=CHECKLIST_KEYS)

    delete_parser = subparsers.add_parser("delete")
    delete_parser.add_argument("--id", type=int, required=True)
    delete_parser.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    api = ReleaseApiClient(base_url=args.api_url)
    return COMMANDS[args.command](api, args)


if __name__ == "__main__":
    raise SystemExit(main())
