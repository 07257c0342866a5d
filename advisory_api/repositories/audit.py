"""Audit trail repository — insert only."""


from advisory_api.domain.audit import AuditTrail
from advisory_api.repositories.base import BaseRepository


class AuditRepository(BaseRepository[AuditTrail]):
    model = AuditTrail
