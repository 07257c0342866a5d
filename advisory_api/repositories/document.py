"""Advisory document repository."""


from sqlalchemy import select

from advisory_api.domain.document import AdvisoryDocument
from advisory_api.repositories.base import BaseRepository


class DocumentRepository(BaseRepository[AdvisoryDocument]):
    model = AdvisoryDocument

    async def get_by_jira_attachment(
        self, ticket_id: str, attachment_id: str,
    ) -> AdvisoryDocument | None:
        """Find a document already imported from this Jira attachment (deleted ones included)."""
        result = await self._session.execute(
            select(AdvisoryDocument)
            .where(AdvisoryDocument.client_id == self._client_id)
            .where(AdvisoryDocument.jira_ticket_id == ticket_id)
            .where(AdvisoryDocument.jira_attachment_id == attachment_id)
        )
        return result.scalars().first()

    async def file_names(self) -> set[str]:
        result = await self._session.execute(
            select(AdvisoryDocument.file_name)
            .where(AdvisoryDocument.client_id == self._client_id)
            .where(AdvisoryDocument.deleted_at.is_(None))
        )
        return set(result.scalars().all())
