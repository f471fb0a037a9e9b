"""Document API endpoints: templates, calculations, wizard, generation, history."""

import base64
from decimal import Decimal
from typing import Annotated, Any, Literal

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, status
from fastapi.responses import HTMLResponse, Response
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.api.deps import get_current_user, get_generator, get_history
from src.core.logging import get_logger
from src.core.sessions import DemoUser
from src.documents.calculations import normalize_request
from src.documents.generator import DocumentGenerator, GenerationResult
from src.documents.history import HistoryStore
from src.documents.models import DocumentRecord, OutputFormat
from src.documents.payment import process_demo_payment
from src.documents.templates import Template
from src.documents.wizard import STEPS, TransitionNotAllowed, create_wizard
from src.tax.calculator import annualize_pay, compute_taxes, federal_rate

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["documents"])

FormData = Annotated[dict[str, Any], Body()]


class CamelModel(BaseModel):
    """Response/request model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SectionResponse(CamelModel):
    key: str
    title: str
    required: list[str]


class TemplateResponse(CamelModel):
    """Template summary for form building."""

    type: str
    name: str
    fields: list[str]
    required: list[str]
    sections: list[SectionResponse]
    checks: list[str]
    price: Decimal


class TaxRequest(CamelModel):
    """Payload for a withholding estimate."""

    gross_pay: Decimal = Field(ge=0)
    pay_period: str | None = None


class TaxResponse(CamelModel):
    federal: Decimal
    state: Decimal
    social_security: Decimal
    medicare: Decimal
    total: Decimal
    annualized_pay: Decimal
    federal_rate: Decimal


class ValidationResponse(CamelModel):
    is_valid: bool
    errors: list[str]
    warnings: list[str]


class WizardRequest(CamelModel):
    """Payload for one wizard interaction."""

    step: str | None = None
    action: Literal["advance", "back", "status"] = "advance"
    data: dict[str, Any] = Field(default_factory=dict)


class WizardResponse(CamelModel):
    step: str
    steps: list[str]
    moved: bool
    missing_fields: list[str]


class HistoryResponse(CamelModel):
    items: list[DocumentRecord]
    total: int


def _template_or_404(generator: DocumentGenerator, document_type: str) -> Template:
    """Load template or raise 404."""
    if document_type not in generator.registry:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Template not found for document type: {document_type}",
        )
    return generator.registry.get(document_type)


def _raise_for_failure(result: GenerationResult) -> None:
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": result.error, "errors": result.errors},
        )


def _content_payload(content: str | bytes) -> dict[str, str]:
    if isinstance(content, bytes):
        return {"content": base64.b64encode(content).decode("ascii"), "encoding": "base64"}
    return {"content": content, "encoding": "utf-8"}


def _result_payload(result: GenerationResult) -> dict[str, Any]:
    """Serialize a successful generation for JSON responses."""
    document = result.document
    metadata = result.metadata
    return {
        "success": True,
        "timestamp": result.timestamp.isoformat(),
        "document": {
            "filename": document.filename,
            "format": document.format.value,
            "mediaType": document.media_type,
            **_content_payload(document.content),
        },
        "metadata": {
            "documentType": metadata.document_type.value,
            "documentId": metadata.document_id,
            "generatedAt": metadata.generated_at.isoformat(),
            "qualityScore": metadata.quality_score,
            "warnings": metadata.warnings,
            "suggestions": metadata.suggestions,
        },
        "record": result.record.model_dump(mode="json", by_alias=True),
    }


# =============================================================================
# Templates and calculations
# =============================================================================


@router.get("/templates", response_model=list[TemplateResponse], response_model_by_alias=True)
async def list_templates(
    request: Request,
    generator: Annotated[DocumentGenerator, Depends(get_generator)],
) -> list[TemplateResponse]:
    """List every registered document template."""
    price = request.app.state.document_price
    return [
        TemplateResponse(
            type=template.document_type.value,
            name=template.name,
            fields=list(template.fields),
            required=list(template.required),
            sections=[
                SectionResponse(key=s.key, title=s.title, required=list(s.required))
                for s in template.sections
            ],
            checks=list(template.checks),
            price=price,
        )
        for template in generator.registry
    ]


@router.post("/calculations/taxes", response_model=TaxResponse, response_model_by_alias=True)
async def calculate_taxes(
    payload: TaxRequest,
    generator: Annotated[DocumentGenerator, Depends(get_generator)],
) -> TaxResponse:
    """Estimate per-period withholding for a gross amount."""
    rates = generator.rates
    period = payload.pay_period or rates.default_pay_period
    breakdown = compute_taxes(payload.gross_pay, period, rates)
    annual = annualize_pay(payload.gross_pay, period, rates)
    return TaxResponse(
        federal=breakdown.federal,
        state=breakdown.state,
        social_security=breakdown.social_security,
        medicare=breakdown.medicare,
        total=breakdown.total,
        annualized_pay=annual,
        federal_rate=federal_rate(annual, rates),
    )


# =============================================================================
# Form handling
# =============================================================================


@router.post(
    "/documents/{document_type}/validate",
    response_model=ValidationResponse,
    response_model_by_alias=True,
)
async def validate_document(
    document_type: str,
    payload: FormData,
    generator: Annotated[DocumentGenerator, Depends(get_generator)],
) -> ValidationResponse:
    """Validate form data without generating anything."""
    template = _template_or_404(generator, document_type)
    result = generator.validator.validate(
        template.document_type, normalize_request(template, payload)
    )
    return ValidationResponse(
        is_valid=result.is_valid, errors=result.errors, warnings=result.warnings
    )


@router.post(
    "/documents/{document_type}/wizard",
    response_model=WizardResponse,
    response_model_by_alias=True,
)
async def wizard_step(
    document_type: str,
    payload: WizardRequest,
    generator: Annotated[DocumentGenerator, Depends(get_generator)],
) -> WizardResponse:
    """Advance, go back, or report the state of a form wizard step."""
    template = _template_or_404(generator, document_type)
    try:
        wizard = create_wizard(template, payload.data, generator.validator, payload.step)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc

    moved = False
    if payload.action != "status":
        try:
            getattr(wizard, payload.action)()
            moved = True
        except TransitionNotAllowed:
            moved = False

    return WizardResponse(
        step=wizard.step,
        steps=list(STEPS),
        moved=moved,
        missing_fields=wizard.missing_fields(),
    )


@router.post("/documents/{document_type}/preview", response_class=HTMLResponse)
async def preview_document(
    document_type: str,
    payload: FormData,
    generator: Annotated[DocumentGenerator, Depends(get_generator)],
) -> HTMLResponse:
    """Render an HTML preview fragment."""
    _template_or_404(generator, document_type)
    result = generator.preview(document_type, payload)
    _raise_for_failure(result)
    return HTMLResponse(content=result.document.content)


# =============================================================================
# Generation
# =============================================================================


@router.post("/documents/{document_type}/generate")
async def generate_document(
    request: Request,
    document_type: str,
    payload: FormData,
    user: Annotated[DemoUser, Depends(get_current_user)],
    generator: Annotated[DocumentGenerator, Depends(get_generator)],
    output_format: OutputFormat = Query(default=OutputFormat.HTML, alias="format"),
) -> dict[str, Any]:
    """Take the demo payment, generate the document and record it in history."""
    template = _template_or_404(generator, document_type)

    validation = generator.validator.validate(
        template.document_type, normalize_request(template, payload)
    )
    if not validation.is_valid:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "message": "Validation failed: " + ", ".join(validation.errors),
                "errors": validation.errors,
            },
        )

    receipt = await process_demo_payment(
        template.document_type,
        request.app.state.document_price,
        delay_seconds=request.app.state.payment_delay,
    )
    result = await generator.generate(
        template.document_type, payload, owner=user.id, output_format=output_format
    )
    _raise_for_failure(result)

    return {
        **_result_payload(result),
        "payment": {
            "confirmation": receipt.confirmation,
            "amount": str(receipt.amount),
            "paidAt": receipt.paid_at.isoformat(),
        },
    }


@router.post("/documents/{document_type}/download")
async def download_document(
    document_type: str,
    payload: FormData,
    generator: Annotated[DocumentGenerator, Depends(get_generator)],
    output_format: OutputFormat = Query(default=OutputFormat.HTML, alias="format"),
) -> Response:
    """Render the document as a file attachment."""
    _template_or_404(generator, document_type)
    result = await generator.generate(document_type, payload, output_format=output_format)
    _raise_for_failure(result)

    document = result.document
    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={"Content-Disposition": f'attachment; filename="{document.filename}"'},
    )


# =============================================================================
# History
# =============================================================================


@router.get("/history", response_model=HistoryResponse, response_model_by_alias=True)
async def list_history(
    user: Annotated[DemoUser, Depends(get_current_user)],
    history: Annotated[HistoryStore, Depends(get_history)],
) -> HistoryResponse:
    """List the signed-in user's generated documents, newest first."""
    items = await history.list(user.id)
    return HistoryResponse(items=items, total=len(items))


@router.delete("/history")
async def clear_history(
    user: Annotated[DemoUser, Depends(get_current_user)],
    history: Annotated[HistoryStore, Depends(get_history)],
) -> dict[str, int]:
    """Remove every history entry for the signed-in user."""
    removed = await history.clear(user.id)
    return {"removed": removed}
