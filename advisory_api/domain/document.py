"""SQLAlchemy ORM model for uploaded advisory agreements.

Status lifecycle:
  pending  — uploaded, not analyzed yet
  igo/nigo — analyzed; ``data`` and ``validation_errors`` are populated
  pushed   — IGO push completed (terminal); file lives under ``processed/``
A NIGO document stays ``nigo`` after its Jira reply until it is resubmitted.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from advisory_api.db.base import Base
from advisory_api.domain.mixins import SoftDeleteMixin, TenantMixin, TimestampMixin

DOCUMENT_STATUSES = ("pending", "igo", "nigo", "pushed")


class AdvisoryDocument(Base, TenantMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "advisory_documents"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    file_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    file_path: Mapped[str] = mapped_column(String(1024), nullable=False)

    status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False, index=True)
    template_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # AdvisoryRecord as camelCase JSON, validation labels in required-field order
    data: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)
    validation_errors: Mapped[Optional[list[str]]] = mapped_column(JSON, nullable=True)

    jira_ticket_id: Mapped[Optional[str]] = mapped_column(String(50), index=True, nullable=True)
    jira_attachment_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    analyzed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    pushed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    last_push_action: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
