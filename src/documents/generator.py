"""Document generation pipeline.

Steps, in order:
1. Look up the template (unknown types fail with "template not found")
2. Normalize the raw form record (derive gross pay from hourly inputs)
3. Validate, collecting every error
4. Coerce and enrich the record with computed amounts
5. Run quality checks (warnings only)
6. Assemble the header/body/footer structure
7. Render to the requested output format
8. Record the document in the owner's history

Failures at any step return a failure result and leave history untouched.

Example:
    >>> generator = build_generator(settings, HistoryStore("memory://docs"))
    >>> result = await generator.generate("paystub", form_data, owner="user-1")
    >>> result.success
    True
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from src.core.logging import document_context, get_logger
from src.documents.assembler import Clock, DocumentAssembler, utc_now
from src.documents.calculations import apply_calculations, normalize_request
from src.documents.errors import DocumentError, DocumentValidationError
from src.documents.history import HistoryStore
from src.documents.models import (
    DocumentRecord,
    DocumentStatus,
    DocumentStructure,
    DocumentType,
    OutputFormat,
)
from src.documents.quality import QualityChecker, QualityReport, QualityThresholds
from src.documents.renderers import RENDERERS, Renderer, render_html
from src.documents.templates import Template, TemplateRegistry, build_default_registry
from src.documents.validation import DocumentValidator
from src.tax.rates import PayrollRates

if TYPE_CHECKING:
    from src.core.config import Settings

logger = get_logger(__name__)


# =============================================================================
# Results
# =============================================================================


@dataclass
class RenderedDocument:
    """Rendered output ready to display or download."""

    format: OutputFormat
    content: str | bytes
    filename: str

    @property
    def media_type(self) -> str:
        """MIME type of the content."""
        return self.format.media_type


@dataclass
class GenerationMetadata:
    """Facts about a successful generation."""

    document_type: DocumentType
    generated_at: datetime
    document_id: str
    quality_score: int
    warnings: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)


@dataclass
class GenerationResult:
    """Outcome of a generation or preview call.

    Successful results carry the rendered document, metadata and structure.
    Failed results carry only the error message, any validation errors, and
    a timestamp.
    """

    success: bool
    timestamp: datetime
    document: RenderedDocument | None = None
    metadata: GenerationMetadata | None = None
    structure: DocumentStructure | None = None
    record: DocumentRecord | None = None
    quality: QualityReport | None = None
    error: str | None = None
    errors: list[str] = field(default_factory=list)

    @classmethod
    def failure(cls, exc: DocumentError, timestamp: datetime) -> "GenerationResult":
        """Build a failure result from a pipeline error."""
        errors = exc.errors if isinstance(exc, DocumentValidationError) else []
        return cls(success=False, timestamp=timestamp, error=str(exc), errors=errors)


# =============================================================================
# Helpers
# =============================================================================


def slugify(text: str) -> str:
    """Lower-case text with runs of non-alphanumerics collapsed to dashes."""
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
    return slug or "document"


def build_filename(
    template: Template, record: Mapping[str, Any], output_format: OutputFormat
) -> str:
    """`<type>-<slugified name>[-<date or year>].<ext>`.

    Paystubs end with the pay date and W-2s with the tax year; bank
    statements carry no suffix.
    """
    document_type = template.document_type
    name = record.get("employeeName") or record.get("accountHolder") or "document"
    parts = [document_type.value.replace("_", "-"), slugify(str(name))]

    suffix: object = None
    if document_type == DocumentType.PAYSTUB:
        suffix = record.get("payDate")
    elif document_type == DocumentType.W2:
        suffix = record.get("taxYear")
    if suffix:
        parts.append(slugify(str(suffix)))

    return "-".join(parts) + f".{output_format.extension}"


def describe_document(template: Template, record: Mapping[str, Any]) -> str:
    """History display name for a generated document."""
    if template.document_type == DocumentType.PAYSTUB:
        return f"Paystub - {record.get('employeeName')} ({record.get('payDate')})"
    if template.document_type == DocumentType.W2:
        return f"W-2 Form - {record.get('employeeName')} ({record.get('taxYear')})"
    if template.document_type == DocumentType.BANK_STATEMENT:
        return (
            f"Bank Statement - {record.get('accountHolder')} "
            f"({record.get('statementPeriod')})"
        )
    return template.name


# =============================================================================
# Generator
# =============================================================================


class DocumentGenerator:
    """Run the validate → calculate → check → assemble → render pipeline."""

    def __init__(
        self,
        registry: TemplateRegistry,
        rates: PayrollRates,
        assembler: DocumentAssembler,
        checker: QualityChecker,
        history: HistoryStore | None = None,
        generation_delay: float = 0.0,
        clock: Clock = utc_now,
    ) -> None:
        self.registry = registry
        self.rates = rates
        self.assembler = assembler
        self.checker = checker
        self.validator = DocumentValidator(registry)
        self.history = history
        self.generation_delay = generation_delay
        self.clock = clock

    def prepare(
        self, document_type: str | DocumentType, request: Mapping[str, Any]
    ) -> tuple[Template, dict[str, Any], QualityReport]:
        """Validate and enrich a request.

        Returns:
            The template, the enriched record and its quality report.

        Raises:
            TemplateNotFoundError: If the document type is unknown.
            DocumentValidationError: If validation fails.
        """
        template = self.registry.get(document_type)
        normalized = normalize_request(template, request)

        validation = self.validator.validate(template.document_type, normalized)
        if not validation.is_valid:
            raise DocumentValidationError(validation.errors)

        record = template.model.model_validate(normalized).to_record()
        enriched = apply_calculations(template, record, self.rates, self.clock())
        report = self.checker.run_checks(template.document_type, enriched)
        return template, enriched, report

    def _build(
        self,
        document_type: str | DocumentType,
        request: Mapping[str, Any],
        renderer: Renderer,
        output_format: OutputFormat,
    ) -> GenerationResult:
        template, record, report = self.prepare(document_type, request)
        structure = self.assembler.assemble(template.document_type, record)
        content = renderer(structure)
        generated_at = self.clock()

        return GenerationResult(
            success=True,
            timestamp=generated_at,
            document=RenderedDocument(
                format=output_format,
                content=content,
                filename=build_filename(template, record, output_format),
            ),
            metadata=GenerationMetadata(
                document_type=template.document_type,
                generated_at=generated_at,
                document_id=structure.document_id,
                quality_score=report.score,
                warnings=report.warnings,
                suggestions=report.suggestions,
            ),
            structure=structure,
            record=DocumentRecord(
                id=structure.document_id,
                type=template.document_type,
                name=describe_document(template, record),
                created_at=generated_at,
                status=DocumentStatus.GENERATED,
            ),
            quality=report,
        )

    async def generate(
        self,
        document_type: str | DocumentType,
        request: Mapping[str, Any],
        owner: str | None = None,
        output_format: OutputFormat = OutputFormat.HTML,
    ) -> GenerationResult:
        """Generate a document and record it in the owner's history.

        Args:
            document_type: Registered document type.
            request: Raw form record keyed by field name.
            owner: History owner; history is skipped when None.
            output_format: Rendered output format.

        Returns:
            GenerationResult. Failures never touch history.
        """
        with document_context(str(getattr(document_type, "value", document_type))):
            if self.generation_delay > 0:
                await asyncio.sleep(self.generation_delay)

            try:
                result = self._build(
                    document_type, request, RENDERERS[output_format], output_format
                )
            except DocumentError as exc:
                logger.warning("document_generation_failed", error=str(exc))
                return GenerationResult.failure(exc, self.clock())

            if owner is not None and self.history is not None and result.record:
                await self.history.add(owner, result.record)

            logger.info(
                "document_generated",
                document_id=result.metadata.document_id,
                output_format=output_format.value,
                quality_score=result.metadata.quality_score,
                warnings=len(result.metadata.warnings),
            )
            return result

    def preview(
        self, document_type: str | DocumentType, request: Mapping[str, Any]
    ) -> GenerationResult:
        """Render an HTML fragment without delay or history."""
        try:
            return self._build(document_type, request, render_html, OutputFormat.HTML)
        except DocumentError as exc:
            return GenerationResult.failure(exc, self.clock())


def build_generator(
    settings: "Settings",
    history: HistoryStore | None = None,
    registry: TemplateRegistry | None = None,
) -> DocumentGenerator:
    """Wire a generator from application settings."""
    registry = registry or build_default_registry()
    rates = PayrollRates.from_settings(settings)
    return DocumentGenerator(
        registry=registry,
        rates=rates,
        assembler=DocumentAssembler(registry, signature=settings.generator_signature),
        checker=QualityChecker(
            registry, rates, QualityThresholds.from_settings(settings)
        ),
        history=history,
        generation_delay=settings.generation_delay_seconds,
    )
