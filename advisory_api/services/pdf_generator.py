"""Synthetic advisory agreement PDFs for testing the review pipeline.

Documents follow the layout of the real 14-page agreement: form selection on
page 1, ADV receipt on page 10, signatures on pages 11 and 14, account number
on page 12 and fee schedule on page 13. Pages 2-9 are boilerplate terms.

The same renderer produces the 16 reference templates, with "XXXXXX" in
every field the extractor has to fill.
"""


import logging
import random
from dataclasses import dataclass, field
from datetime import date, timedelta
from pathlib import Path

from reportlab.lib.pagesizes import letter
from reportlab.lib.units import inch
from reportlab.pdfgen import canvas

from advisory_api.core.exceptions import ValidationError
from advisory_api.schemas.advisory import AdvisoryRecord, Classification
from advisory_api.services.templates import REFERENCE_TEMPLATES, parse_template_name
from advisory_api.services.validator import REQUIRED_FIELDS

logger = logging.getLogger(__name__)

MAX_COUNT = 100
PLACEHOLDER = "XXXXXX"

_FIRST_NAMES = ["James", "Mary", "Robert", "Patricia", "Michael", "Linda", "David", "Susan", "Daniel", "Karen"]
_LAST_NAMES = ["Smith", "Johnson", "Brown", "Garcia", "Miller", "Davis", "Wilson", "Moore", "Taylor", "Clark"]
_FLAT_FEES = ["0.75%", "1.00%", "1.25%", "1.50%"]
_TIERED_FEES = [
    "1.25% first $1M / 1.00% next $4M / 0.75% above $5M",
    "1.50% first $500K / 1.15% next $1.5M / 0.85% above $2M",
]

_TERMS = (
    "The Client appoints the Advisor to provide investment advisory services for the "
    "Account described in this Agreement. The Advisor will manage the Account in "
    "accordance with the Client's stated objectives, risk tolerance and any reasonable "
    "restrictions the Client communicates in writing. This Agreement remains in effect "
    "until terminated by either party upon written notice."
)


@dataclass
class GenerationResult:
    file_paths: list[str] = field(default_factory=list)
    templates: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Record generation
# ---------------------------------------------------------------------------

def _person(rng: random.Random) -> str:
    return f"{rng.choice(_FIRST_NAMES)} {rng.choice(_LAST_NAMES)}"


def _fmt(d: date) -> str:
    return d.strftime("%m/%d/%Y")


def build_record(
    classification: Classification, rng: random.Random, *, nigo: bool = False,
) -> AdvisoryRecord:
    """Random, fully populated record for *classification*; NIGO blanks 1-3 required fields."""
    effective = date.today() - timedelta(days=rng.randint(0, 60))
    signed = effective - timedelta(days=rng.randint(1, 10))
    client = _person(rng)
    advisor = _person(rng)
    values: dict = dict(
        discretionary=classification.discretionary,
        wrap=classification.wrap,
        advisor_name=advisor,
        rep_code=f"R{rng.randint(100, 999)}",
        client_name=client,
        effective_date=_fmt(effective),
        account_holders=classification.account_holders,
        adv_received_date=_fmt(signed - timedelta(days=rng.randint(0, 5))),
        client_signed_p11=True,
        client_name_p11=client,
        client_date_p11=_fmt(signed),
        advisor_signed_p11=True,
        advisor_name_p11=advisor,
        advisor_date_p11=_fmt(signed),
        account_number=f"{rng.randint(10000000, 99999999)}",
        fee_type=classification.fee_structure,
        fee_amount=rng.choice(_FLAT_FEES if classification.fee_structure == "Flat" else _TIERED_FEES),
        client_signed_p14=True,
        client_name_p14=client,
        client_date_p14=_fmt(signed),
        advisor_signed_p14=True,
        advisor_name_p14=advisor,
        advisor_date_p14=_fmt(signed),
    )
    if classification.account_holders == 2:
        second = _person(rng)
        for page in ("p11", "p14"):
            values[f"client2_signed_{page}"] = True
            values[f"client2_name_{page}"] = second
            values[f"client2_date_{page}"] = _fmt(signed)

    if nigo:
        # Form-type flags are printed as checkboxes, so only blank the written fields
        blankable = [f for f in REQUIRED_FIELDS if f not in ("discretionary", "wrap")]
        for name in rng.sample(blankable, rng.randint(1, 3)):
            values[name] = False if isinstance(values[name], bool) else ""
    return AdvisoryRecord(**values)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

class _AgreementCanvas:
    """Thin helper over a reportlab canvas that writes one labelled line at a time."""

    def __init__(self, path: Path):
        self.c = canvas.Canvas(str(path), pagesize=letter)
        self.page = 0
        self.y = 0.0

    def new_page(self, title: str) -> None:
        if self.page:
            self.c.showPage()
        self.page += 1
        self.y = letter[1] - inch
        self.c.setFont("Helvetica-Bold", 14)
        self.c.drawString(inch, self.y, title)
        self.c.setFont("Helvetica", 8)
        self.c.drawRightString(letter[0] - inch, 0.5 * inch, f"Page {self.page}")
        self.y -= 0.5 * inch

    def line(self, label: str, value: str = "") -> None:
        self.c.setFont("Helvetica-Bold", 10)
        self.c.drawString(inch, self.y, f"{label}:")
        self.c.setFont("Helvetica", 10)
        self.c.drawString(3.2 * inch, self.y, value)
        self.y -= 0.3 * inch

    def checkbox(self, label: str, checked: bool) -> None:
        self.c.setFont("Helvetica", 10)
        self.c.drawString(inch, self.y, f"[{'X' if checked else ' '}] {label}")
        self.y -= 0.3 * inch

    def paragraph(self, text: str, width: int = 95) -> None:
        self.c.setFont("Helvetica", 9)
        words, current = text.split(), ""
        for word in words:
            if len(current) + len(word) + 1 > width:
                self.c.drawString(inch, self.y, current)
                self.y -= 0.2 * inch
                current = word
            else:
                current = f"{current} {word}".strip()
        if current:
            self.c.drawString(inch, self.y, current)
            self.y -= 0.3 * inch

    def signature(self, role: str, signed: bool | str, name: str, signed_on: str) -> None:
        if isinstance(signed, str):
            mark = signed
        else:
            mark = f"/s/ {name}" if signed and name else ""
        self.line(f"{role} Signature", mark)
        self.line(f"{role} Printed Name", name)
        self.line(f"{role} Date", signed_on)
        self.y -= 0.2 * inch

    def save(self) -> None:
        self.c.showPage()
        self.c.save()


def render_agreement(
    path: Path,
    classification: Classification,
    record: AdvisoryRecord | None = None,
) -> Path:
    """Write a 14-page agreement to *path*; ``record=None`` renders the reference template."""
    def v(value: str | None) -> str:
        return PLACEHOLDER if record is None else (value or "")

    def signed(value: bool | None) -> bool | str:
        return PLACEHOLDER if record is None else bool(value)

    r = record or AdvisoryRecord()
    holders = classification.account_holders
    doc = _AgreementCanvas(path)

    doc.new_page("INVESTMENT ADVISORY AGREEMENT")
    doc.checkbox("Discretionary", classification.discretionary)
    doc.checkbox("Non-Discretionary", not classification.discretionary)
    doc.checkbox("WRAP Fee Program", classification.wrap)
    doc.checkbox("NON-WRAP Program", not classification.wrap)
    doc.line("Advisor Name", v(r.advisor_name))
    doc.line("Rep Code", v(r.rep_code))
    doc.line("Client Name", v(r.client_name))
    doc.line("Effective Date", v(r.effective_date))
    doc.line("Number of Account Holders", str(holders))

    for page in range(2, 10):
        doc.new_page(f"TERMS AND CONDITIONS (continued {page - 1})")
        doc.paragraph(_TERMS)

    doc.new_page("FORM ADV ACKNOWLEDGEMENT")
    doc.paragraph("The Client acknowledges receipt of the Advisor's Form ADV Part 2A and 2B.")
    doc.line("ADV Received Date", v(r.adv_received_date))

    doc.new_page("CLIENT ACKNOWLEDGEMENT AND SIGNATURES")
    doc.signature("Client", signed(r.client_signed_p11), v(r.client_name_p11), v(r.client_date_p11))
    if holders == 2:
        doc.signature("Joint Client", signed(r.client2_signed_p11), v(r.client2_name_p11), v(r.client2_date_p11))
    doc.signature("Advisor", signed(r.advisor_signed_p11), v(r.advisor_name_p11), v(r.advisor_date_p11))

    doc.new_page("ACCOUNT INFORMATION")
    doc.line("Account Number", v(r.account_number))

    doc.new_page("FEE SCHEDULE")
    doc.checkbox("Flat Fee", classification.fee_structure == "Flat")
    doc.checkbox("Tiered Fee", classification.fee_structure == "Tiered")
    doc.line("Fee Type", v(r.fee_type))
    doc.line("Annual Fee", v(r.fee_amount))

    doc.new_page("AGREEMENT SIGNATURES")
    doc.signature("Client", signed(r.client_signed_p14), v(r.client_name_p14), v(r.client_date_p14))
    if holders == 2:
        doc.signature("Joint Client", signed(r.client2_signed_p14), v(r.client2_name_p14), v(r.client2_date_p14))
    doc.signature("Advisor", signed(r.advisor_signed_p14), v(r.advisor_name_p14), v(r.advisor_date_p14))

    doc.save()
    return path


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def generate_pdfs(
    count: int,
    template: str | None = None,
    *,
    output_dir: Path,
    nigo_ratio: float = 0.33,
    seed: int | None = None,
) -> GenerationResult:
    """Generate *count* synthetic agreements, from *template* or a random mix of all 16."""
    if count < 1 or count > MAX_COUNT:
        raise ValidationError(f"Count must be between 1 and {MAX_COUNT}")
    fixed = None
    if template:
        fixed = parse_template_name(template)
        if fixed is None or fixed.template_name not in REFERENCE_TEMPLATES:
            raise ValidationError(f"Unknown template '{template}'")

    rng = random.Random(seed)
    output_dir.mkdir(parents=True, exist_ok=True)
    stamp = date.today().strftime("%Y%m%d")
    result = GenerationResult(templates=[fixed.template_name] if fixed else ["all"])

    for i in range(1, count + 1):
        classification = fixed or parse_template_name(rng.choice(REFERENCE_TEMPLATES))
        nigo = rng.random() < nigo_ratio
        record = build_record(classification, rng, nigo=nigo)
        path = output_dir / (
            f"generated-{stamp}-{i:03d} {classification.template_name}{' NIGO' if nigo else ''}.pdf"
        )
        render_agreement(path, classification, record)
        result.file_paths.append(str(path))

    logger.info("Generated %d advisory agreement PDF(s) in %s", count, output_dir)
    return result


def generate_reference_templates(output_dir: Path) -> list[str]:
    """Render all 16 reference templates ("XXXXXX" in every field) into *output_dir*."""
    output_dir.mkdir(parents=True, exist_ok=True)
    paths = []
    for name in REFERENCE_TEMPLATES:
        classification = parse_template_name(name)
        paths.append(str(render_agreement(output_dir / f"{name}.pdf", classification)))
    logger.info("Rendered %d reference templates in %s", len(paths), output_dir)
    return paths
