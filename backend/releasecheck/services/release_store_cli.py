from __future__ import annotations

import argparse
import json

from releasecheck.db.seed import seed_local_data
from releasecheck.db.session import SessionLocal
from releasecheck.domain.checklist import classify_status
from releasecheck.services.release_store import delete_release, get_release, list_releases


def _to_payload(item) -> dict[str, object]:
    progress = item.checklist_progress or {}
    return {
        "id": item.id,
        "release_name": item.release_name,
        "version": item.version,
        "release_date": item.release_date.isoformat(),
        "remarks": item.remarks,
        "checklist": item.checklist,
        "checklist_progress": progress,
        "status": classify_status(progress.get("completed", 0), progress.get("total", 0)).value,
    }


def main() -> int:
    parser = argparse.ArgumentParser(description="Inspect and maintain release records in the ReleaseCheck DB")
    subparsers = parser.add_subparsers(dest="command", required=True)

    get_parser = subparsers.add_parser("get")
    get_parser.add_argument("--id", type=int, required=True)

    subparsers.add_parser("list")

    delete_parser = subparsers.add_parser("delete")
    delete_parser.add_argument("--id", type=int, required=True)

    subparsers.add_parser("seed")

    args = parser.parse_args()

    if args.command == "seed":
        print(json.dumps({"seeded": seed_local_data()}))
        return 0

    db = SessionLocal()
    try:
        if args.command == "get":
            release = get_release(db=db, release_id=args.id)
            if release is None:
                print(json.dumps({"error": "release_not_found", "id": args.id}))
                return 2
            print(json.dumps(_to_payload(release)))
            return 0

        if args.command == "list":
            records = list_releases(db=db)
            print(json.dumps([_to_payload(item) for item in records]))
            return 0

        if args.command == "delete":
            release = delete_release(db=db, release_id=args.id)
            if release is None:
                print(json.dumps({"error": "release_not_found", "id": args.id}))
                return 2
            print(json.dumps({"deleted": args.id}))
            return 0

        print(json.dumps({"error": "unsupported_command"}))
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    raise SystemExit(main())
