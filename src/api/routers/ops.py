import os
import logging

from fastapi import APIRouter, Depends, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from api.dependencies import get_calendar_gate, get_session
from integration.client_ready import CalendarClientGate
from wizard.session import WizardSession

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check(
    gate: CalendarClientGate = Depends(get_calendar_gate),
    session: WizardSession = Depends(get_session),
) -> dict:
    """Health check endpoint for container orchestration."""
    return {
        "status": "healthy",
        "profile": os.getenv("DEPLOYMENT_PROFILE", "unknown"),
        "llm_provider": os.getenv("LLM_PROVIDER", "gemini"),
        "calendar_connected": gate.is_ready,
        "wizard_step": session.step.value,
    }


@router.get("/metrics")
async def metrics() -> Response:
    """
    Prometheus scrape endpoint.
    """
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
