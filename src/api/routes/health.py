"""Health check endpoint."""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter(tags=["health"])


@router.get("/_healthz", response_class=PlainTextResponse)
def healthz() -> str:
    """Liveness probe. Does not touch the database."""
    return "ok"
