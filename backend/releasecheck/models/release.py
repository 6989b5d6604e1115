from __future__ import annotations

from datetime import date, datetime
from typing import Any

from sqlalchemy import JSON, Date, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from releasecheck.db.base import Base
from releasecheck.domain.checklist import default_checklist, default_checklist_progress
from releasecheck.models.common import utcnow


class Release(Base):
    __tablename__ = "releases"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    release_name: Mapped[str] = mapped_column(String(255))
    version: Mapped[str] = mapped_column(String(50))
    release_date: Mapped[date] = mapped_column(Date)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)
    checklist: Mapped[dict[str, Any]] = mapped_column(JSON, default=default_checklist)
    checklist_progress: Mapped[dict[str, Any]] = mapped_column(JSON, default=default_checklist_progress)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_releases_release_date_created_at", "release_date", "created_at"),
    )
