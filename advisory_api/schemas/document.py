"""Document and PDF-generation request / response schemas."""


from datetime import datetime
from typing import Any

from pydantic import Field

from advisory_api.schemas.advisory import (
    AdvisoryRecord,
    DocumentStatus,
    PushResult,
    ReviewStatus,
)
from advisory_api.schemas.common import CamelModel

class DocumentOut(CamelModel):
    id: str
    file_name: str
    file_path: str
    status: DocumentStatus
    template_name: str | None = None
    data: AdvisoryRecord | None = None
    validation_errors: list[str] | None = None
    jira_ticket_id: str | None = None
    created_at: datetime
    analyzed_at: datetime | None = None
    pushed_at: datetime | None = None

class UploadResult(CamelModel):
    files: list[str]
    documents: list[DocumentOut]

class AnalysisOut(CamelModel):
    status: ReviewStatus
    extracted_data: AdvisoryRecord
    errors: list[str]
    template_name: str | None = None

class PushOut(CamelModel):
    success: bool
    message: str
    result: PushResult

class GeneratePdfsRequest(CamelModel):
    # range is checked by the service so the error message matches the dashboard's
    count: int = 10
    template: str | None = None
    nigo_ratio: float = Field(default=0.33, ge=0.0, le=1.0)

class GeneratePdfsResponse(CamelModel):
    success: bool = True
    message: str
    file_paths: list[str]
    metadata: dict[str, Any]
