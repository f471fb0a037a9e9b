"""Health check endpoint for infrastructure verification."""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from src.api.deps import get_generator, get_history
from src.documents.generator import DocumentGenerator
from src.documents.history import HistoryStore

router = APIRouter(prefix="/api", tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    storage: str
    templates: int


@router.get("/health", response_model=HealthResponse)
async def health_check(
    history: Annotated[HistoryStore, Depends(get_history)],
    generator: Annotated[DocumentGenerator, Depends(get_generator)],
) -> HealthResponse:
    """Check history storage and template availability."""
    storage_ok = await history.check()
    return HealthResponse(
        status="ok" if storage_ok else "degraded",
        storage="available" if storage_ok else "unavailable",
        templates=len(generator.registry),
    )
