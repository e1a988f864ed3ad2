import asyncio
import logging
from typing import Optional

from api.metrics import (
    CONFLICTS_DETECTED_TOTAL,
    EVENTS_INSERTED_TOTAL,
    SHIFTS_DROPPED_TOTAL,
    SHIFTS_EXTRACTED_TOTAL,
)
from extraction.image_encoder import EncodedImage
from extraction.shift_extractor import ShiftExtractor
from integration.calendar_writer import CalendarWriter, WriteReport
from reconciliation.conflict_reconciler import ConflictReconciler, ReconciliationResult
from shift_sync.errors import AnalysisFailedError, ShiftSyncError
from shift_sync.models import ReviewShift, Shift

logger = logging.getLogger(__name__)


class BackendAPI:
    """Central orchestration of the shift pipeline.

    Every external failure leaves here as a ShiftSyncError with a user-facing
    message; nothing is retried automatically.
    """

    async def analyze_schedule(
        self,
        image: EncodedImage,
        user_name: str,
        calendar,
        calendar_id: Optional[str],
        tz_name: Optional[str] = None,
    ) -> ReconciliationResult:
        """Extract the user's shifts from the image and flag calendar conflicts."""

        # 1. Extract shifts (blocking provider SDKs run in a thread)
        extractor = ShiftExtractor()
        try:
            shifts = await asyncio.to_thread(extractor.extract, image, user_name)
        except ShiftSyncError:
            raise
        except Exception as e:
            logger.exception(f"Unexpected error while analyzing schedule: {e}")
            raise AnalysisFailedError() from e

        SHIFTS_EXTRACTED_TOTAL.inc(len(shifts))
        SHIFTS_DROPPED_TOTAL.inc(extractor.last_dropped)
        logger.info(f"Extracted {len(shifts)} shifts for {user_name!r}")

        if not shifts:
            return ReconciliationResult(shifts=[])

        # 2. Check for overlaps with existing events
        if calendar is None:
            return ReconciliationResult(
                shifts=[ReviewShift.from_shift(s) for s in shifts],
                advisory="Could not check for calendar conflicts: calendar is not connected",
            )
        reconciler = ConflictReconciler(calendar)
        result = await reconciler.reconcile(shifts, calendar_id, tz_name=tz_name)
        CONFLICTS_DETECTED_TOTAL.inc(sum(1 for s in result.shifts if s.is_conflicting))
        return result

    async def add_shifts(
        self,
        selected: list[Shift],
        calendar,
        calendar_id: str,
        tz_name: Optional[str] = None,
    ) -> WriteReport:
        """Insert the selected shifts as calendar events."""
        writer = CalendarWriter(calendar)
        report = await writer.write(selected, calendar_id, tz_name=tz_name)
        EVENTS_INSERTED_TOTAL.labels(status="success").inc(len(report.succeeded))
        EVENTS_INSERTED_TOTAL.labels(status="failed").inc(len(report.failed))
        return report
