"""Advisory agreement field extraction — pdfplumber text + OpenAI.

Two passes per document:
1. **Classification** — which of the 16 reference templates the submitted
   agreement matches (discretionary?, WRAP?, flat or tiered fee, holders).
2. **Extraction** — the matching reference PDF has "XXXXXX" wherever a value
   is expected; the model is given both texts and fills every field from the
   submitted document, leaving blank / unsigned fields empty.

Without an OpenAI key the extractor runs offline: it classifies every
document as "Discretionary NON-WRAP Flat (1)" and extracts nothing, so every
document reviews as NIGO.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

import pdfplumber
from openai import AsyncOpenAI, OpenAIError
from pydantic import ValidationError as PydanticValidationError

from advisory_api.core.config import Settings, settings as default_settings
from advisory_api.core.exceptions import ExtractionError
from advisory_api.schemas.advisory import AdvisoryRecord, Classification
from advisory_api.services.templates import FEE_STRUCTURES, classification_for

logger = logging.getLogger(__name__)

# ── Prompts ───────────────────────────────────────────────────────────────

CLASSIFICATION_PROMPT = """You are an operations analyst reviewing investment advisory agreements.

Identify which form variant the submitted agreement is. Look at page 1 (form title and
the program selection), page 13 (fee schedule) and the signature pages.

Output ONLY valid JSON:
{
  "discretionary": <true if the agreement grants discretionary authority, false if Non-Discretionary>,
  "wrap": <true for a WRAP fee program, false for NON-WRAP>,
  "feeStructure": "<Flat or Tiered>",
  "accountHolders": <1 or 2>
}"""

EXTRACTION_PROMPT = """You are an operations analyst extracting data from an investment advisory agreement.

You receive two texts:
- "Reference Template": the blank form. Every place that holds "XXXXXX" is a field to extract.
- "Submitted Agreement": the completed agreement sent in by the advisor.

For each "XXXXXX" location in the reference, extract the actual value from the submitted
agreement. If a field is blank, missing, illegible or unsigned, return null for it.
A signature field is true only when a signature is clearly present.

Output ONLY valid JSON:
{
  "data": {
    "discretionary": <bool>, "wrap": <bool>,
    "advisorName": <string|null>, "repCode": <string|null>, "clientName": <string|null>,
    "effectiveDate": <"MM/DD/YYYY"|null>, "accountHolders": <1|2>,
    "advReceivedDate": <"MM/DD/YYYY"|null>,
    "clientSignedP11": <bool>, "clientNameP11": <string|null>, "clientDateP11": <string|null>,
    "client2SignedP11": <bool|null>, "client2NameP11": <string|null>, "client2DateP11": <string|null>,
    "advisorSignedP11": <bool>, "advisorNameP11": <string|null>, "advisorDateP11": <string|null>,
    "accountNumber": <string|null>,
    "feeType": <"Flat"|"Tiered"|null>, "feeAmount": <string|null>,
    "clientSignedP14": <bool>, "clientNameP14": <string|null>, "clientDateP14": <string|null>,
    "client2SignedP14": <bool|null>, "client2NameP14": <string|null>, "client2DateP14": <string|null>,
    "advisorSignedP14": <bool>, "advisorNameP14": <string|null>, "advisorDateP14": <string|null>
  }
}

Rules:
1. Output ONLY valid JSON — no markdown, no commentary.
2. Never guess a value that is not written on the submitted agreement.
3. The client2* fields apply only to agreements with two account holders; otherwise null."""


def read_pdf_text(path: Path) -> str:
    """Extract the text of every page, prefixed with a page marker."""
    try:
        with pdfplumber.open(path) as pdf:
            pages = [
                f"--- Page {i} ---\n{page.extract_text() or ''}"
                for i, page in enumerate(pdf.pages, start=1)
            ]
    except FileNotFoundError as exc:
        raise ExtractionError(f"Document file not found: {path}") from exc
    except Exception as exc:
        raise ExtractionError(f"Unable to read PDF {path.name}: {exc}") from exc
    return "\n".join(pages)


def record_from_ai(raw: Any, classification: Classification) -> AdvisoryRecord:
    """Build an AdvisoryRecord from the model's JSON, falling back to defaults.

    Nulls keep the field default; the classification fills the form-type
    flags when the model left them out.
    """
    if not isinstance(raw, dict):
        raw = {}
    values: dict[str, Any] = {
        "discretionary": classification.discretionary,
        "wrap": classification.wrap,
        "account_holders": classification.account_holders,
    }
    for name, field in AdvisoryRecord.model_fields.items():
        value = raw.get(field.alias or name, raw.get(name))
        if value is None:
            continue
        # account numbers and fee amounts sometimes come back as JSON numbers
        if isinstance(value, (int, float)) and not isinstance(value, bool) and name != "account_holders":
            value = str(value)
        values[name] = value
    try:
        return AdvisoryRecord(**values)
    except PydanticValidationError as exc:
        raise ExtractionError(f"Extracted data did not match the advisory schema: {exc}") from exc


class AdvisoryExtractor:
    """Classifies and extracts advisory agreements; offline when AI is not configured."""

    def __init__(self, settings: Settings = default_settings) -> None:
        self._settings = settings
        self.client: AsyncOpenAI | None = None
        if settings.ai_enabled:
            self.client = AsyncOpenAI(
                api_key=settings.openai_api_key,
                timeout=settings.openai_timeout,
            )
        self.model = settings.openai_model
        self.max_tokens = settings.openai_max_tokens

    @property
    def offline(self) -> bool:
        return self.client is None

    # ── Core OpenAI call ──────────────────────────────────────────────────

    async def _call_openai(self, system_prompt: str, user_message: str) -> Dict[str, Any]:
        """Send an async request to OpenAI and return parsed JSON."""
        if self.client is None:
            raise ExtractionError("OpenAI is not configured")
        try:
            logger.info(
                "Calling OpenAI model=%s, input_length=%d", self.model, len(user_message),
            )
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_message},
                ],
                max_completion_tokens=self.max_tokens,
                response_format={"type": "json_object"},
            )
            content = response.choices[0].message.content
            if not content:
                raise ExtractionError("Empty response from OpenAI")
            return json.loads(content)

        except OpenAIError as exc:
            logger.error("OpenAI API error: %s", exc)
            raise ExtractionError(f"OpenAI service error: {exc}") from exc
        except json.JSONDecodeError as exc:
            logger.error("Invalid JSON from OpenAI: %s", exc)
            raise ExtractionError(f"Invalid JSON response: {exc}") from exc

    # ── Public methods ────────────────────────────────────────────────────

    async def classify(self, text: str) -> Classification:
        if self.offline:
            return classification_for(True, False, "Flat", 1)

        result = await self._call_openai(CLASSIFICATION_PROMPT, f"Submitted Agreement:\n{text}")
        fee = result.get("feeStructure")
        holders = result.get("accountHolders")
        return classification_for(
            bool(result.get("discretionary", True)),
            bool(result.get("wrap", False)),
            fee if fee in FEE_STRUCTURES else "Flat",
            holders if holders in (1, 2) else 1,
        )

    async def extract(self, text: str, classification: Classification) -> AdvisoryRecord:
        if self.offline:
            return AdvisoryRecord(
                discretionary=classification.discretionary,
                wrap=classification.wrap,
                account_holders=classification.account_holders,
            )

        parts = []
        reference = Path(classification.reference_path)
        if reference.exists():
            parts.append(f"Reference Template ({classification.template_name}):\n{read_pdf_text(reference)}")
        else:
            logger.warning("Reference template missing: %s", reference)
        parts.append(f"Submitted Agreement:\n{text}")

        result = await self._call_openai(EXTRACTION_PROMPT, "\n\n".join(parts))
        return record_from_ai(result.get("data"), classification)
