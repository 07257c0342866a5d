"""Advisory document service — upload, analyze, push, view, delete, Jira sync.

Rule: No FastAPI here. Routers pass plain values in; this service owns the
files under ``settings.documents_dir`` and delegates DB work to the
repositories.
"""


import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncSession

from advisory_api.core.config import Settings, settings as default_settings
from advisory_api.core.exceptions import ConflictError, NotFoundError, ValidationError
from advisory_api.core.pagination import PaginationParams
from advisory_api.domain.document import AdvisoryDocument
from advisory_api.domain.mixins import utcnow
from advisory_api.repositories.audit import AuditRepository
from advisory_api.repositories.document import DocumentRepository
from advisory_api.schemas.advisory import (
    AdvisoryRecord,
    AnalysisResult,
    DocumentHandle,
    PushResult,
)
from advisory_api.services import dispatcher
from advisory_api.services.extractor import AdvisoryExtractor
from advisory_api.services.integrations import (
    LedgerClient,
    TicketClient,
    get_ledger_client,
    get_ticket_client,
)
from advisory_api.services.processor import process_advisory_document

logger = logging.getLogger(__name__)


def unique_file_name(directory: Path, file_name: str, taken: set[str] | None = None) -> str:
    """Return *file_name*, or "name (2).pdf", "name (3).pdf"... if it is already used."""
    taken = taken or set()
    candidate = Path(file_name).name
    stem, suffix = Path(candidate).stem, Path(candidate).suffix
    n = 1
    while candidate in taken or (directory / candidate).exists():
        n += 1
        candidate = f"{stem} ({n}){suffix}"
    return candidate


def to_handle(doc: AdvisoryDocument) -> DocumentHandle:
    return DocumentHandle(
        id=doc.id,
        file_name=doc.file_name,
        file_path=doc.file_path,
        status=doc.status,
        data=AdvisoryRecord.model_validate(doc.data) if doc.data else None,
        jira_ticket_id=doc.jira_ticket_id,
    )


class DocumentService:
    def __init__(
        self,
        session: AsyncSession,
        client_id: str,
        *,
        settings: Settings = default_settings,
        extractor: AdvisoryExtractor | None = None,
        ledger: LedgerClient | None = None,
        tickets: TicketClient | None = None,
    ):
        self._repo = DocumentRepository(session, client_id)
        self._audit = AuditRepository(session, client_id)
        self._settings = settings
        self._extractor = extractor
        self._ledger = ledger
        self._tickets = tickets

    # ------------------------------------------------------------------
    # Collaborators (injected in tests, built from settings otherwise)
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _ledger_client(self) -> AsyncIterator[LedgerClient]:
        if self._ledger is not None:
            yield self._ledger
            return
        async with get_ledger_client(self._settings) as client:
            yield client

    @asynccontextmanager
    async def _ticket_client(self) -> AsyncIterator[TicketClient]:
        if self._tickets is not None:
            yield self._tickets
            return
        async with get_ticket_client(self._settings) as client:
            yield client

    def _get_extractor(self) -> AdvisoryExtractor:
        if self._extractor is None:
            self._extractor = AdvisoryExtractor(self._settings)
        return self._extractor

    def _store(self, file_name: str, contents: bytes, taken: set[str]) -> Path:
        directory = self._settings.documents_dir
        directory.mkdir(parents=True, exist_ok=True)
        name = unique_file_name(directory, file_name, taken)
        path = directory / name
        path.write_bytes(contents)
        taken.add(name)
        return path

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def list_documents(self, pagination: PaginationParams, status: str | None = None):
        return await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            filters={"status": status} if status else None,
        )

    async def get_document(self, document_id: str) -> AdvisoryDocument:
        doc = await self._repo.get_by_id(document_id)
        if not doc:
            raise NotFoundError("Document", document_id)
        return doc

    async def get_document_file(self, document_id: str) -> Path:
        doc = await self.get_document(document_id)
        path = Path(doc.file_path)
        if not path.is_file():
            raise NotFoundError("Document file", document_id)
        return path

    # ------------------------------------------------------------------
    # Upload / delete
    # ------------------------------------------------------------------

    async def upload_documents(
        self, files: Sequence[tuple[str, bytes]],
    ) -> list[AdvisoryDocument]:
        """Store each ``(file_name, contents)`` pair and register it as pending."""
        if not files:
            raise ValidationError("No files provided")

        taken = await self._repo.file_names()
        created = []
        for file_name, contents in files:
            path = self._store(file_name, contents, taken)
            created.append(
                await self._repo.create(file_name=path.name, file_path=str(path), status="pending")
            )
        logger.info("Uploaded %d document(s)", len(created))
        return created

    async def delete_document(self, document_id: str) -> None:
        doc = await self.get_document(document_id)
        await self._repo.soft_delete(document_id)
        Path(doc.file_path).unlink(missing_ok=True)
        logger.info("Deleted document %s (%s)", document_id, doc.file_name)

    # ------------------------------------------------------------------
    # Analyze / push
    # ------------------------------------------------------------------

    async def analyze_document(self, document_id: str) -> AnalysisResult:
        doc = await self.get_document(document_id)
        if doc.status == "pushed":
            raise ConflictError(f"Document '{document_id}' was already pushed to Orion")

        analysis = await process_advisory_document(
            to_handle(doc),
            self._get_extractor(),
            treat_false_as_missing=self._settings.treat_false_as_missing,
        )
        await self._repo.update(
            document_id,
            status=analysis.status,
            data=analysis.data.model_dump(by_alias=True),
            validation_errors=analysis.errors,
            template_name=analysis.classification.template_name if analysis.classification else None,
            analyzed_at=utcnow(),
        )
        return analysis

    async def push_document(self, document_id: str) -> PushResult:
        doc = await self.get_document(document_id)
        if doc.status == "pushed":
            raise ConflictError(f"Document '{document_id}' was already pushed to Orion")

        old_status = doc.status
        async with self._ledger_client() as ledger, self._ticket_client() as tickets:
            result = await dispatcher.push(
                to_handle(doc),
                ledger=ledger,
                tickets=tickets,
                treat_false_as_missing=self._settings.treat_false_as_missing,
            )

        changes: dict = {"last_push_action": result.action}
        if result.action == "pushed":
            changes.update(
                status="pushed",
                pushed_at=utcnow(),
                file_path=str(self._move_to_processed(Path(doc.file_path))),
            )
        updated = await self._repo.update(document_id, **changes)

        await self._audit.create(
            action=f"push:{result.action}",
            entity_type="advisory_document",
            entity_id=document_id,
            old_value={"status": old_status},
            new_value=result.model_dump(by_alias=True, exclude_none=True),
            description=f"Push of {doc.file_name} -> {updated.status if updated else old_status}",
        )
        return result

    def _move_to_processed(self, path: Path) -> Path:
        if not path.is_file():
            logger.warning("Pushed document file %s is missing; nothing to move", path)
            return path
        processed = self._settings.processed_dir
        processed.mkdir(parents=True, exist_ok=True)
        target = processed / unique_file_name(processed, path.name)
        return path.rename(target)

    # ------------------------------------------------------------------
    # Jira intake
    # ------------------------------------------------------------------

    async def sync_jira_tickets(self) -> list[AdvisoryDocument]:
        """Import the PDF attachments of new Jira advisory tickets as pending documents."""
        created: list[AdvisoryDocument] = []
        taken = await self._repo.file_names()

        async with self._ticket_client() as tickets:
            for ticket in await tickets.fetch_new_advisory_tickets():
                for attachment in ticket.pdf_attachments:
                    if await self._repo.get_by_jira_attachment(ticket.key, attachment.id):
                        continue
                    contents = await tickets.download_attachment(attachment)
                    if not contents:
                        continue
                    path = self._store(attachment.filename, contents, taken)
                    created.append(
                        await self._repo.create(
                            file_name=path.name,
                            file_path=str(path),
                            status="pending",
                            jira_ticket_id=ticket.key,
                            jira_attachment_id=attachment.id,
                        )
                    )

        logger.info("Imported %d document(s) from Jira", len(created))
        return created
