"""Jira reply bodies for IGO confirmations and NIGO rejection notices."""


from collections.abc import Sequence

from advisory_api.schemas.advisory import AdvisoryRecord


def format_igo_response(record: AdvisoryRecord) -> str:
    kind = "Discretionary" if record.discretionary else "Non-Discretionary"
    wrap = "WRAP" if record.wrap else "Non-WRAP"
    return "\n".join([
        "Advisory Agreement — IN GOOD ORDER (IGO)",
        "",
        f"Account: {record.account_number}",
        f"Client: {record.client_name}",
        f"Type: {kind} / {wrap}",
        f"Fee: {record.fee_type} — {record.fee_amount}",
        f"Effective Date: {record.effective_date}",
        "",
        "The account has been updated in Orion. No further action is required.",
    ])


def format_nigo_response(errors: Sequence[str]) -> str:
    return "\n".join([
        "Advisory Agreement — NOT IN GOOD ORDER (NIGO)",
        "",
        "The following items are missing or incomplete:",
        *(f"  • {error}" for error in errors),
        "",
        "Please resubmit the advisory agreement with the missing information.",
    ])
