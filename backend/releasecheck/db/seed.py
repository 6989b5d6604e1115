from __future__ import annotations

from datetime import date

from releasecheck.db.session import SessionLocal
from releasecheck.domain.checklist import CHECKLIST_KEYS, compute_progress
from releasecheck.models import Release

SAMPLE_RELEASES = [
    ("Sample Release v0.5", "0.5.0", date(2026, 2, 1), None, 0),
    ("Sample Release v1.0", "1.0.0", date(2026, 3, 1), "Seeded release in progress", 3),
    ("Sample Release v2.0", "2.0.0", date(2026, 4, 1), "Seeded completed release", 7),
]


def _checklist_with_completed(count: int) -> dict[str, bool]:
    return {key: index < count for index, key in enumerate(CHECKLIST_KEYS)}


def seed_local_data() -> int:
    db = SessionLocal()
    try:
        if db.query(Release).first() is not None:
            return 0

        for release_name, version, release_date, remarks, completed in SAMPLE_RELEASES:
            checklist = _checklist_with_completed(completed)
            db.add(
                Release(
                    release_name=release_name,
                    version=version,
                    release_date=release_date,
                    remarks=remarks,
                    checklist=checklist,
                    checklist_progress=compute_progress(checklist),
                )
            )

        db.commit()
        return len(SAMPLE_RELEASES)
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed_local_data()
