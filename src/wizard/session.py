from __future__ import annotations

import logging
from typing import Any, Optional

from extraction.image_encoder import EncodedImage
from integration.calendar_integration import pick_default_calendar
from integration.calendar_writer import WriteReport
from reconciliation.conflict_reconciler import ReconciliationResult
from shift_sync.errors import InvalidTransitionError, NothingSelectedError, ShiftSyncError
from shift_sync.models import Calendar, ReviewShift, UserPreferences, WizardStep
from storage.preferences_store import PreferencesStore
from wizard.selection import SelectionState

logger = logging.getLogger(__name__)


class WizardSession:
    """State machine behind the upload wizard.

    CONFIG -> UPLOAD -> REVIEW -> ADDING -> DONE, with the back and
    start-over edges. Each user action is one method; calling it from the
    wrong step raises InvalidTransitionError. Network work happens outside,
    the session only records its outcome.
    """

    def __init__(self, prefs_store: Optional[PreferencesStore] = None):
        self.prefs_store = prefs_store
        prefs = prefs_store.load() if prefs_store else UserPreferences()

        self.user_name: str = prefs.user_name
        self.signed_in: bool = prefs.signed_in
        self.selected_calendar_id: Optional[str] = prefs.selected_calendar_id
        self.calendars: list[Calendar] = []

        self.step = WizardStep.CONFIG
        self.image: Optional[EncodedImage] = None
        self.selection = SelectionState()
        self.error: Optional[str] = None
        self.advisory: Optional[str] = None
        self.last_report: Optional[WriteReport] = None

    def _persist(self) -> None:
        if self.prefs_store is None:
            return
        self.prefs_store.save(
            UserPreferences(
                user_name=self.user_name,
                signed_in=self.signed_in,
                selected_calendar_id=self.selected_calendar_id,
            )
        )

    def _require(self, *steps: WizardStep) -> None:
        if self.step not in steps:
            allowed = ", ".join(s.value for s in steps)
            raise InvalidTransitionError(
                f"That action is only available at step {allowed} (current step: {self.step.value})."
            )

    def _move(self, step: WizardStep) -> None:
        logger.info(f"Wizard step {self.step.value} -> {step.value}")
        self.step = step

    @property
    def is_config_complete(self) -> bool:
        return bool(self.user_name.strip()) and self.signed_in and self.selected_calendar_id is not None

    # sign-in

    def sign_in(self) -> None:
        self.signed_in = True
        self.error = None
        self._persist()

    def sign_out(self) -> None:
        self.signed_in = False
        self.selected_calendar_id = None
        self.calendars = []
        self._reset_batch()
        self._move(WizardStep.CONFIG)
        if self.prefs_store is not None:
            self.prefs_store.clear_session()

    def set_calendars(self, calendars: list[Calendar]) -> None:
        self.calendars = list(calendars)
        if self.calendars and not self.selected_calendar_id:
            default = pick_default_calendar(self.calendars)
            self.selected_calendar_id = default.id if default else None
            self._persist()

    # CONFIG

    def configure(self, user_name: Optional[str] = None, calendar_id: Optional[str] = None) -> None:
        self._require(WizardStep.CONFIG)
        if user_name is not None:
            self.user_name = user_name
        if calendar_id is not None:
            if self.calendars and calendar_id not in {c.id for c in self.calendars}:
                raise InvalidTransitionError(f"Unknown or read-only calendar: {calendar_id}")
            self.selected_calendar_id = calendar_id
        self._persist()

    def proceed_to_upload(self) -> None:
        self._require(WizardStep.CONFIG)
        if not self.is_config_complete:
            raise InvalidTransitionError(
                "Enter your name, sign in and choose a calendar before uploading a schedule."
            )
        self.error = None
        self._move(WizardStep.UPLOAD)

    # UPLOAD

    def attach_image(self, image: EncodedImage) -> None:
        self._require(WizardStep.UPLOAD)
        self.image = image
        self.error = None

    def begin_extraction(self) -> EncodedImage:
        self._require(WizardStep.UPLOAD)
        if self.image is None or not self.user_name.strip():
            raise InvalidTransitionError("Upload a schedule image first.")
        self.error = None
        self.advisory = None
        return self.image

    def extraction_failed(self, error: ShiftSyncError) -> None:
        self.error = error.user_message
        self._move(WizardStep.UPLOAD)

    def begin_review(self, result: ReconciliationResult) -> None:
        self._require(WizardStep.UPLOAD)
        if not result.shifts:
            self.error = (
                f'No shifts found for "{self.user_name}". '
                "Please check the name spelling or upload a different image."
            )
            self.selection = SelectionState()
            return
        self.selection = SelectionState(result.shifts)
        self.advisory = result.advisory
        self._move(WizardStep.REVIEW)

    # REVIEW

    def toggle(self, index: int) -> ReviewShift:
        self._require(WizardStep.REVIEW)
        return self.selection.toggle(index)

    def begin_adding(self) -> list[ReviewShift]:
        self._require(WizardStep.REVIEW)
        if not self.selection.can_write:
            self.error = NothingSelectedError.default_message
            raise NothingSelectedError()
        self.error = None
        self._move(WizardStep.ADDING)
        return self.selection.selected()

    # ADDING

    def finish_adding(self, report: WriteReport) -> None:
        self._require(WizardStep.ADDING)
        self.last_report = report
        if report.ok:
            self._move(WizardStep.DONE)
            return
        self.error = report.summary()
        self._move(WizardStep.REVIEW)

    def adding_failed(self, error: ShiftSyncError) -> None:
        self._require(WizardStep.ADDING)
        self.error = f"Failed to add events: {error.user_message}"
        self._move(WizardStep.REVIEW)

    # navigation

    def back_to_config(self) -> None:
        self._require(WizardStep.UPLOAD, WizardStep.REVIEW)
        self._move(WizardStep.CONFIG)

    def back_to_upload(self) -> None:
        self._require(WizardStep.REVIEW)
        self._move(WizardStep.UPLOAD)

    def _reset_batch(self) -> None:
        self.image = None
        self.selection = SelectionState()
        self.error = None
        self.advisory = None
        self.last_report = None

    def start_over(self) -> None:
        # Only resets local state; inserts already in flight keep running.
        self._reset_batch()
        self._move(WizardStep.CONFIG)

    def snapshot(self) -> dict[str, Any]:
        report = None
        if self.last_report is not None:
            report = {
                "ok": self.last_report.ok,
                "outcomes": [
                    {
                        "shift": o.shift.model_dump(by_alias=True),
                        "eventId": o.event_id,
                        "error": o.error,
                    }
                    for o in self.last_report.outcomes
                ],
            }
        return {
            "step": self.step.value,
            "userName": self.user_name,
            "signedIn": self.signed_in,
            "calendars": [c.model_dump() for c in self.calendars],
            "selectedCalendarId": self.selected_calendar_id,
            "configComplete": self.is_config_complete,
            "hasImage": self.image is not None,
            "shifts": [s.model_dump(by_alias=True) for s in self.selection.as_list()],
            "canAdd": self.selection.can_write,
            "error": self.error,
            "advisory": self.advisory,
            "lastReport": report,
        }
