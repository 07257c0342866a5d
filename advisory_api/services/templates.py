"""The 16 reference advisory agreement templates.

4 form types (Discretionary / Non-Discretionary x WRAP / NON-WRAP) x 2 fee
structures x 1 or 2 account holders. Each reference PDF carries "XXXXXX" in
every field the extractor has to find, and is named after its template:
``{Discretionary|Non-Discretionary} {WRAP|NON-WRAP} {Flat|Tiered} ({1|2})``.
"""


import re
from pathlib import Path

from advisory_api.core.config import settings
from advisory_api.schemas.advisory import Classification

FEE_STRUCTURES = ("Flat", "Tiered")

_NAME_RE = re.compile(
    r"^(Discretionary|Non-Discretionary) (WRAP|NON-WRAP) (Flat|Tiered) \(([12])\)$"
)


def template_name(discretionary: bool, wrap: bool, fee_structure: str, account_holders: int) -> str:
    kind = "Discretionary" if discretionary else "Non-Discretionary"
    wrap_label = "WRAP" if wrap else "NON-WRAP"
    return f"{kind} {wrap_label} {fee_structure} ({account_holders})"


REFERENCE_TEMPLATES: tuple[str, ...] = tuple(
    template_name(discretionary, wrap, fee, holders)
    for discretionary in (True, False)
    for wrap in (False, True)
    for fee in FEE_STRUCTURES
    for holders in (1, 2)
)


def get_reference_path(name: str, reference_dir: Path | None = None) -> Path:
    return (reference_dir or settings.reference_docs_dir) / f"{name}.pdf"


def parse_template_name(name: str) -> Classification | None:
    """Turn a template name back into its classification; ``None`` if unknown."""
    m = _NAME_RE.match(name.strip())
    if not m:
        return None
    return Classification(
        template_name=name.strip(),
        reference_path=str(get_reference_path(name.strip())),
        discretionary=m.group(1) == "Discretionary",
        wrap=m.group(2) == "WRAP",
        fee_structure=m.group(3),
        account_holders=int(m.group(4)),
    )


def classification_for(
    discretionary: bool, wrap: bool, fee_structure: str, account_holders: int,
) -> Classification:
    name = template_name(discretionary, wrap, fee_structure, account_holders)
    return Classification(
        template_name=name,
        reference_path=str(get_reference_path(name)),
        discretionary=discretionary,
        wrap=wrap,
        fee_structure=fee_structure,
        account_holders=account_holders,
    )
