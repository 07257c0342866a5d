"""Advisory agreement schemas: extracted fields, validation and push outcomes."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from advisory_api.schemas.common import CamelModel

ReviewStatus = Literal["igo", "nigo"]
DocumentStatus = Literal["pending", "igo", "nigo", "pushed"]
PushAction = Literal["pushed", "nigo-replied", "error"]


class AdvisoryRecord(CamelModel):
    """Fields extracted from one advisory agreement, grouped by form page.

    Every field has a default so a record is always complete; extraction
    leaves unknown values empty / ``False``. The ``client2_*`` fields only
    apply to two-holder accounts.
    """

    # Page 1
    discretionary: bool = False
    wrap: bool = False
    advisor_name: str = ""
    rep_code: str = ""
    client_name: str = ""
    effective_date: str = ""
    account_holders: int = Field(default=1, ge=1, le=2)

    # Page 10
    adv_received_date: str = ""

    # Page 11
    client_signed_p11: bool = False
    client_name_p11: str = ""
    client_date_p11: str = ""
    client2_signed_p11: bool | None = None
    client2_name_p11: str | None = None
    client2_date_p11: str | None = None
    advisor_signed_p11: bool = False
    advisor_name_p11: str = ""
    advisor_date_p11: str = ""

    # Page 12
    account_number: str = ""

    # Page 13
    fee_type: str = ""  # "Flat" | "Tiered"
    fee_amount: str = ""

    # Page 14
    client_signed_p14: bool = False
    client_name_p14: str = ""
    client_date_p14: str = ""
    client2_signed_p14: bool | None = None
    client2_name_p14: str | None = None
    client2_date_p14: str | None = None
    advisor_signed_p14: bool = False
    advisor_name_p14: str = ""
    advisor_date_p14: str = ""


class ValidationResult(CamelModel):
    status: ReviewStatus
    errors: list[str] = Field(default_factory=list)


class Classification(CamelModel):
    """Which of the 16 reference templates a submitted agreement matches."""

    template_name: str
    reference_path: str
    discretionary: bool
    wrap: bool
    fee_structure: Literal["Flat", "Tiered"]
    account_holders: Literal[1, 2]


class AnalysisResult(CamelModel):
    status: ReviewStatus
    data: AdvisoryRecord
    errors: list[str] = Field(default_factory=list)
    classification: Classification | None = None


class DocumentHandle(CamelModel):
    """Read-only view of a stored document, handed to the push workflow."""

    id: str
    file_name: str
    file_path: str
    status: DocumentStatus = "pending"
    data: AdvisoryRecord | None = None
    jira_ticket_id: str | None = None


class PushResult(CamelModel):
    success: bool
    action: PushAction
    orion_updated: bool | None = None
    jira_comment_id: str | None = None
    errors: list[str] | None = None
