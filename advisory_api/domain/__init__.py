"""Domain package — all ORM models are imported here so Alembic autogenerate detects them.

Folder intent:
  document.py  — uploaded advisory agreements and their review state
  audit.py     — immutable audit trail (never updated or deleted)
  mixins.py    — shared TimestampMixin, SoftDeleteMixin, TenantMixin
"""

from advisory_api.domain.audit import AuditTrail
from advisory_api.domain.document import AdvisoryDocument

__all__ = [
    "AdvisoryDocument",
    "AuditTrail",
]
