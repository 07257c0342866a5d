"""Advisory document endpoints — thin HTTP layer.

Business logic lives in :mod:`advisory_api.services.documents`. This router
handles request parsing, upload validation and response shaping only.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from advisory_api.core.config import settings
from advisory_api.core.pagination import PaginationParams
from advisory_api.core.response import DataResponse, ListResponse, paginated
from advisory_api.db.base import get_db
from advisory_api.schemas.document import AnalysisOut, DocumentOut, PushOut, UploadResult
from advisory_api.services.documents import DocumentService

router = APIRouter(prefix="/advisory-documents", tags=["Advisory Documents"])

_PUSH_MESSAGES = {
    "pushed": "Account updated in Orion and Jira ticket notified",
    "nigo-replied": "Jira ticket notified with missing fields",
}


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _svc(session: AsyncSession) -> DocumentService:
    return DocumentService(session, settings.default_client_id)


async def _read_pdf(file: UploadFile) -> tuple[str, bytes]:
    """Validate one uploaded file and return ``(file_name, contents)``."""
    file_name = file.filename or ""
    if file.content_type != "application/pdf" and not file_name.lower().endswith(".pdf"):
        raise HTTPException(
            status_code=415,
            detail=f"Unsupported file type '{file.content_type}' for '{file_name}'. Only PDF is accepted.",
        )

    contents = await file.read()
    if len(contents) == 0:
        raise HTTPException(status_code=400, detail=f"Uploaded file '{file_name}' is empty.")
    if len(contents) > settings.max_upload_size_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"'{file_name}' exceeds the {settings.max_upload_size_mb}MB limit.",
        )
    return file_name, contents


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.get("", response_model=ListResponse[DocumentOut], response_model_by_alias=True)
async def list_documents(
    filter_status: Optional[str] = Query(
        default=None, alias="status", pattern="^(pending|igo|nigo|pushed)$",
    ),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
):
    """List uploaded documents. Filter by ?status=pending|igo|nigo|pushed."""
    items, total = await _svc(session).list_documents(pagination, status=filter_status)
    return paginated(
        [DocumentOut.model_validate(d) for d in items],
        total, pagination.page, pagination.limit,
    )


@router.post("", response_model=DataResponse[UploadResult], status_code=status.HTTP_201_CREATED)
async def upload_documents(
    files: list[UploadFile] = File(...),
    session: AsyncSession = Depends(get_db),
):
    """Upload one or more advisory agreement PDFs (multipart field ``files``)."""
    payload = [await _read_pdf(f) for f in files]
    docs = await _svc(session).upload_documents(payload)
    return {
        "message": f"Uploaded {len(docs)} file(s)",
        "data": UploadResult(
            files=[d.file_name for d in docs],
            documents=[DocumentOut.model_validate(d) for d in docs],
        ),
    }


@router.post("/sync", response_model=DataResponse[list[DocumentOut]])
async def sync_from_jira(session: AsyncSession = Depends(get_db)):
    """Import PDF attachments from new Jira advisory tickets."""
    docs = await _svc(session).sync_jira_tickets()
    return {
        "message": f"Imported {len(docs)} document(s) from Jira",
        "data": [DocumentOut.model_validate(d) for d in docs],
    }


@router.get("/{document_id}", response_model=DataResponse[DocumentOut])
async def get_document(document_id: str, session: AsyncSession = Depends(get_db)):
    doc = await _svc(session).get_document(document_id)
    return {"data": DocumentOut.model_validate(doc)}


@router.put("/{document_id}/analyze", response_model=DataResponse[AnalysisOut])
async def analyze_document(document_id: str, session: AsyncSession = Depends(get_db)):
    """Extract the agreement's fields and classify it IGO / NIGO."""
    analysis = await _svc(session).analyze_document(document_id)
    return {
        "message": "Document analyzed",
        "data": AnalysisOut(
            status=analysis.status,
            extracted_data=analysis.data,
            errors=analysis.errors,
            template_name=analysis.classification.template_name if analysis.classification else None,
        ),
    }


@router.put("/{document_id}/push", response_model=PushOut, response_model_exclude_none=True)
async def push_document(document_id: str, session: AsyncSession = Depends(get_db)):
    """IGO: update Orion and notify Jira. NIGO: notify Jira with the missing fields."""
    result = await _svc(session).push_document(document_id)
    return PushOut(
        success=result.success,
        message=_PUSH_MESSAGES.get(result.action, "Push failed"),
        result=result,
    )


@router.get("/{document_id}/pdf", response_class=FileResponse)
async def view_pdf(document_id: str, session: AsyncSession = Depends(get_db)):
    """Stream the stored PDF inline for the dashboard viewer."""
    path = await _svc(session).get_document_file(document_id)
    return FileResponse(
        path,
        media_type="application/pdf",
        filename=path.name,
        content_disposition_type="inline",
    )


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(document_id: str, session: AsyncSession = Depends(get_db)):
    await _svc(session).delete_document(document_id)
