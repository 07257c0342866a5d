"""Payloads exchanged with Orion and Jira."""

from __future__ import annotations

from pydantic import BaseModel, Field

from advisory_api.schemas.common import CamelModel


# ---------------------------------------------------------------------------
# Orion
# ---------------------------------------------------------------------------

class AccountCheck(BaseModel):
    exists: bool
    message: str


class LedgerPushResult(BaseModel):
    success: bool
    message: str


class OrionAccountUpdate(CamelModel):
    """Subset of an AdvisoryRecord written to the Orion account."""

    account_number: str
    discretionary: bool
    wrap: bool
    client_name: str
    effective_date: str
    fee_type: str
    fee_amount: str
    advisor_name: str
    rep_code: str


# ---------------------------------------------------------------------------
# Jira
# ---------------------------------------------------------------------------

class TicketReply(BaseModel):
    success: bool
    comment_id: str | None = None


class JiraAttachment(CamelModel):
    id: str
    filename: str
    mime_type: str = "application/octet-stream"
    size: int = 0
    content_url: str | None = None


class JiraTicket(CamelModel):
    id: str
    key: str
    summary: str = ""
    status: str = ""
    reporter: str | None = None
    attachments: list[JiraAttachment] = Field(default_factory=list)

    @property
    def pdf_attachments(self) -> list[JiraAttachment]:
        return [
            a for a in self.attachments
            if a.mime_type == "application/pdf" or a.filename.lower().endswith(".pdf")
        ]
