"""Document generation for paystubs, W-2 forms and bank statements.

This module provides:
- Pydantic request models and document enums
- Template registry with per-type fields, sections and checks
- Validation, calculation and quality checking of form records
- Assembly into a structure and rendering to HTML, JSON or XLSX
- Generation pipeline, per-owner history and a form wizard
"""

from src.documents.assembler import (
    DocumentAssembler,
    generate_document_id,
    mask_account_number,
)
from src.documents.calculations import apply_calculations, normalize_request
from src.documents.errors import (
    DocumentError,
    DocumentValidationError,
    TemplateNotFoundError,
)
from src.documents.generator import (
    DocumentGenerator,
    GenerationResult,
    build_filename,
    build_generator,
)
from src.documents.history import HistoryStore
from src.documents.models import (
    BankStatementRequest,
    DocumentRecord,
    DocumentStatus,
    DocumentStructure,
    DocumentType,
    OutputFormat,
    PaystubRequest,
    Transaction,
    W2Request,
    validate_ein,
    validate_ssn,
)
from src.documents.payment import PaymentReceipt, process_demo_payment
from src.documents.quality import QualityChecker, QualityReport, QualityThresholds
from src.documents.renderers import (
    RENDERERS,
    format_field_name,
    format_field_value,
    render_html,
    render_html_page,
    render_json,
    render_xlsx,
)
from src.documents.templates import Template, TemplateRegistry, build_default_registry
from src.documents.validation import DocumentValidator, ValidationResult
from src.documents.wizard import FormWizard, create_wizard

__all__ = [
    # Models
    "BankStatementRequest",
    "DocumentRecord",
    "DocumentStatus",
    "DocumentStructure",
    "DocumentType",
    "OutputFormat",
    "PaystubRequest",
    "Transaction",
    "W2Request",
    "validate_ein",
    "validate_ssn",
    # Errors
    "DocumentError",
    "DocumentValidationError",
    "TemplateNotFoundError",
    # Templates
    "Template",
    "TemplateRegistry",
    "build_default_registry",
    # Pipeline
    "DocumentValidator",
    "ValidationResult",
    "apply_calculations",
    "normalize_request",
    "QualityChecker",
    "QualityReport",
    "QualityThresholds",
    "DocumentAssembler",
    "generate_document_id",
    "mask_account_number",
    # Rendering
    "RENDERERS",
    "format_field_name",
    "format_field_value",
    "render_html",
    "render_html_page",
    "render_json",
    "render_xlsx",
    # Generation
    "DocumentGenerator",
    "GenerationResult",
    "build_filename",
    "build_generator",
    "HistoryStore",
    "PaymentReceipt",
    "process_demo_payment",
    "FormWizard",
    "create_wizard",
]
