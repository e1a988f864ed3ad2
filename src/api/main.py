import logging
import os
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api.metrics import REQUESTS_TOTAL, REQUEST_LATENCY_SECONDS
from api.routers import auth, ops, wizard
from api.state import AppState
from integration.calendar_integration import CalendarIntegration
from shift_sync.errors import ShiftSyncError
from storage.google_auth import GoogleAuthStore
from storage.preferences_store import PreferencesStore
from wizard.session import WizardSession

# Logging configuration
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s"
)
logger = logging.getLogger(__name__)

PREFERENCES_PATH = os.getenv("PREFERENCES_PATH", "data/preferences.json")


def create_app(app_state: Optional[AppState] = None) -> FastAPI:
    app = FastAPI(title="shift-sync")
    app.state.shift_sync = app_state or AppState(
        session=WizardSession(PreferencesStore(path=PREFERENCES_PATH)),
        auth_store=GoogleAuthStore(),
    )

    app.include_router(auth.router)
    app.include_router(wizard.router)
    app.include_router(ops.router)

    @app.on_event("startup")
    async def startup() -> None:
        state: AppState = app.state.shift_sync
        if state.auth_store is None or state.calendar_gate.is_ready:
            return
        credentials = await state.auth_store.get_credentials()
        if credentials is not None:
            state.calendar_gate.resolve(CalendarIntegration(credentials))
            state.session.sign_in()
            logger.info("Restored Google Calendar connection from stored credentials")

    @app.middleware("http")
    async def record_metrics(request: Request, call_next):
        start = time.time()
        response = await call_next(request)
        route = request.scope.get("route")
        endpoint = getattr(route, "path", request.url.path)
        REQUESTS_TOTAL.labels(endpoint=endpoint, status=str(response.status_code)).inc()
        REQUEST_LATENCY_SECONDS.labels(endpoint=endpoint).observe(time.time() - start)
        return response

    @app.exception_handler(ShiftSyncError)
    async def shift_sync_error_handler(request: Request, exc: ShiftSyncError) -> JSONResponse:
        logger.warning(f"{request.url.path} failed: {exc.code}: {exc.user_message}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.user_message, "error": exc.code},
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content={"detail": ShiftSyncError.default_message, "error": ShiftSyncError.code},
        )

    return app


app = create_app()
