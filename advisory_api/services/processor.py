"""Analysis of one uploaded advisory agreement: classify → extract → validate."""


import logging
from pathlib import Path

from advisory_api.schemas.advisory import AnalysisResult, DocumentHandle
from advisory_api.services.extractor import AdvisoryExtractor, read_pdf_text
from advisory_api.services.validator import validate

logger = logging.getLogger(__name__)


async def process_advisory_document(
    document: DocumentHandle,
    extractor: AdvisoryExtractor,
    *,
    treat_false_as_missing: bool = True,
) -> AnalysisResult:
    """Extract the fields of *document* and classify it IGO / NIGO.

    Raises :class:`ExtractionError` if the PDF cannot be read or the AI call fails.
    """
    text = read_pdf_text(Path(document.file_path))

    classification = await extractor.classify(text)
    logger.info("Document %s classified as %s", document.id, classification.template_name)

    record = await extractor.extract(text, classification)
    result = validate(record, treat_false_as_missing=treat_false_as_missing)

    logger.info(
        "Document %s analyzed: %s (%d missing field(s))",
        document.id, result.status, len(result.errors),
    )
    return AnalysisResult(
        status=result.status,
        data=record,
        errors=result.errors,
        classification=classification,
    )
