"""SQLAlchemy model package for the ReleaseCheck backend."""

from releasecheck.models.release import Release

__all__ = [
    "Release",
]
