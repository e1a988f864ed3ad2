import os
from typing import Optional

from fastapi import Depends, Request

from api.backend import BackendAPI
from api.state import AppState
from integration.calendar_integration import CalendarIntegration
from integration.client_ready import CalendarClientGate
from shift_sync.errors import CalendarNotReadyError
from storage.google_auth import GoogleAuthStore
from wizard.session import WizardSession

# Configuration
CALENDAR_READY_TIMEOUT_S = float(os.getenv("CALENDAR_READY_TIMEOUT_S", "5"))


def get_app_state(request: Request) -> AppState:
    return request.app.state.shift_sync


def get_session(app_state: AppState = Depends(get_app_state)) -> WizardSession:
    return app_state.session


def get_google_auth_store(app_state: AppState = Depends(get_app_state)) -> Optional[GoogleAuthStore]:
    return app_state.auth_store


def get_calendar_gate(app_state: AppState = Depends(get_app_state)) -> CalendarClientGate:
    return app_state.calendar_gate


def get_backend(app_state: AppState = Depends(get_app_state)) -> BackendAPI:
    return app_state.backend


async def get_calendar(
    gate: CalendarClientGate = Depends(get_calendar_gate),
) -> CalendarIntegration:
    return await gate.wait(timeout=CALENDAR_READY_TIMEOUT_S)


async def get_optional_calendar(
    gate: CalendarClientGate = Depends(get_calendar_gate),
) -> Optional[CalendarIntegration]:
    try:
        return await gate.wait(timeout=CALENDAR_READY_TIMEOUT_S)
    except CalendarNotReadyError:
        return None
