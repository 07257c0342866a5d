"""Synthetic PDF generation endpoints (companion test-data page)."""

from fastapi import APIRouter

from advisory_api.core.config import settings
from advisory_api.core.response import DataResponse
from advisory_api.schemas.document import GeneratePdfsRequest, GeneratePdfsResponse
from advisory_api.services.pdf_generator import generate_pdfs, generate_reference_templates
from advisory_api.services.templates import REFERENCE_TEMPLATES

router = APIRouter(prefix="/generate-pdfs", tags=["PDF Generator"])


@router.get("/templates", response_model=DataResponse[list[str]])
async def list_templates():
    return {"data": list(REFERENCE_TEMPLATES)}


@router.post("", response_model=GeneratePdfsResponse)
async def generate(body: GeneratePdfsRequest):
    """Generate 1-100 synthetic advisory agreements, optionally from one named template."""
    result = generate_pdfs(
        body.count,
        body.template,
        output_dir=settings.generated_dir,
        nigo_ratio=body.nigo_ratio,
    )
    return GeneratePdfsResponse(
        message=f"Successfully generated {body.count} PDF document(s)",
        file_paths=result.file_paths,
        metadata={"count": body.count, "templates": result.templates},
    )


@router.post("/reference-templates", response_model=DataResponse[list[str]])
async def build_reference_templates():
    """(Re)render the 16 reference templates used by the extractor."""
    paths = generate_reference_templates(settings.reference_docs_dir)
    return {"message": f"Rendered {len(paths)} reference template(s)", "data": paths}
