import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from api.backend import BackendAPI
from api.dependencies import get_backend, get_calendar, get_optional_calendar, get_session
from extraction.image_encoder import encode_upload
from integration.calendar_integration import CalendarIntegration
from shift_sync.errors import CalendarNotReadyError, ShiftSyncError
from wizard.session import WizardSession

router = APIRouter()
logger = logging.getLogger(__name__)


class ConfigIn(BaseModel):
    user_name: Optional[str] = None
    calendar_id: Optional[str] = None


@router.get("/wizard")
async def get_wizard(session: WizardSession = Depends(get_session)) -> dict:
    return session.snapshot()


@router.get("/calendars")
async def list_calendars(
    session: WizardSession = Depends(get_session),
    calendar: CalendarIntegration = Depends(get_calendar),
) -> dict:
    """Writable calendars of the signed-in user; picks a default on first load."""
    calendars = await calendar.list_calendars()
    session.set_calendars(calendars)
    return {
        "calendars": [c.model_dump() for c in calendars],
        "selectedCalendarId": session.selected_calendar_id,
    }


@router.put("/wizard/config")
async def update_config(
    payload: ConfigIn,
    session: WizardSession = Depends(get_session),
) -> dict:
    session.configure(user_name=payload.user_name, calendar_id=payload.calendar_id)
    return session.snapshot()


@router.post("/wizard/continue")
async def continue_to_upload(session: WizardSession = Depends(get_session)) -> dict:
    session.proceed_to_upload()
    return session.snapshot()


@router.post("/wizard/image")
async def upload_image(
    file: UploadFile = File(...),
    session: WizardSession = Depends(get_session),
) -> dict:
    image = await encode_upload(file)
    session.attach_image(image)
    logger.info(f"Attached schedule image {file.filename} ({image.mime_type})")
    return session.snapshot()


@router.post("/wizard/extract")
async def extract_shifts(
    session: WizardSession = Depends(get_session),
    backend: BackendAPI = Depends(get_backend),
    calendar: Optional[CalendarIntegration] = Depends(get_optional_calendar),
) -> dict:
    """Run extraction and the conflict check, then move to review."""
    image = session.begin_extraction()
    try:
        result = await backend.analyze_schedule(
            image,
            session.user_name,
            calendar,
            session.selected_calendar_id,
        )
    except ShiftSyncError as e:
        session.extraction_failed(e)
        raise

    session.begin_review(result)
    return session.snapshot()


@router.post("/wizard/shifts/{index}/toggle")
async def toggle_shift(index: int, session: WizardSession = Depends(get_session)) -> dict:
    try:
        session.toggle(index)
    except IndexError:
        raise HTTPException(status_code=404, detail=f"No shift at index {index}")
    return session.snapshot()


@router.post("/wizard/add")
async def add_to_calendar(
    session: WizardSession = Depends(get_session),
    backend: BackendAPI = Depends(get_backend),
    calendar: Optional[CalendarIntegration] = Depends(get_optional_calendar),
):
    selected = session.begin_adding()
    try:
        if calendar is None or not session.selected_calendar_id:
            raise CalendarNotReadyError()
        report = await backend.add_shifts(selected, calendar, session.selected_calendar_id)
    except ShiftSyncError as e:
        session.adding_failed(e)
        raise

    session.finish_adding(report)
    if not report.ok:
        return JSONResponse(
            status_code=502,
            content={
                "detail": report.summary(),
                "error": "insert_batch_failed",
                "wizard": session.snapshot(),
            },
        )
    return session.snapshot()


@router.post("/wizard/back/config")
async def back_to_config(session: WizardSession = Depends(get_session)) -> dict:
    session.back_to_config()
    return session.snapshot()


@router.post("/wizard/back/upload")
async def back_to_upload(session: WizardSession = Depends(get_session)) -> dict:
    session.back_to_upload()
    return session.snapshot()


@router.post("/wizard/start-over")
async def start_over(session: WizardSession = Depends(get_session)) -> dict:
    session.start_over()
    return session.snapshot()
