"""IGO / NIGO validation of extracted advisory agreement fields.

A document is In Good Order only when every field in :data:`REQUIRED_FIELDS`
is present. Errors are reported as human-readable labels, in the order of
:data:`REQUIRED_FIELDS`.
"""


from typing import Any

from advisory_api.schemas.advisory import AdvisoryRecord, ValidationResult

# Order matters: it is the order of the labels in every NIGO reply.
REQUIRED_FIELDS: tuple[str, ...] = (
    "discretionary",
    "wrap",
    "client_name",
    "effective_date",
    "account_number",
    "fee_type",
    "fee_amount",
    "adv_received_date",
    "client_signed_p11",
    "client_date_p11",
    "client_signed_p14",
    "client_date_p14",
)

FIELD_LABELS: dict[str, str] = {
    "discretionary": "Discretionary v. Non-Discretionary",
    "wrap": "WRAP v. Non-WRAP",
    "client_name": "Client's Name",
    "effective_date": "Effective Date",
    "account_number": "Account Number",
    "fee_type": "Fee Type (Flat v. Tiered)",
    "fee_amount": "Fee Amount",
    "adv_received_date": "ADV Received Date",
    "client_signed_p11": "Client Signature (Page 11)",
    "client_date_p11": "Client Date (Page 11)",
    "client_signed_p14": "Client Signature (Page 14)",
    "client_date_p14": "Client Date (Page 14)",
}


def field_to_label(field: str) -> str:
    return FIELD_LABELS.get(field, field)


def _is_missing(value: Any, treat_false_as_missing: bool) -> bool:
    if value is None or value == "":
        return True
    # NOTE: with the default policy an unchecked box ("discretionary" = False)
    # is indistinguishable from a field the extractor could not find.
    return value is False and treat_false_as_missing


def get_validation_errors(
    record: AdvisoryRecord, *, treat_false_as_missing: bool = True,
) -> list[str]:
    """Return the labels of all missing required fields, in required-field order."""
    return [
        field_to_label(field)
        for field in REQUIRED_FIELDS
        if _is_missing(getattr(record, field, None), treat_false_as_missing)
    ]


def validate(
    record: AdvisoryRecord, *, treat_false_as_missing: bool = True,
) -> ValidationResult:
    """Classify *record* as ``igo`` (nothing missing) or ``nigo``."""
    errors = get_validation_errors(record, treat_false_as_missing=treat_false_as_missing)
    return ValidationResult(status="igo" if not errors else "nigo", errors=errors)
