"""Exceptions raised by the document pipeline."""

from __future__ import annotations


class DocumentError(Exception):
    """Base class for document generation failures."""


class TemplateNotFoundError(DocumentError):
    """Raised when no template is registered for a document type."""

    def __init__(self, document_type: str) -> None:
        self.document_type = document_type
        super().__init__(f"Template not found for document type: {document_type}")


class DocumentValidationError(DocumentError):
    """Raised when a request fails validation.

    Attributes:
        errors: Every validation message collected for the request.
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__(f"Validation failed: {', '.join(self.errors)}")
