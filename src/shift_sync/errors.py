"""Error taxonomy for the shift pipeline.

Every failure that can reach the API carries a user-facing message and the
HTTP status it maps to. Internal diagnostics go to the log, not the message.
"""

from __future__ import annotations


class ShiftSyncError(Exception):
    code = "shift_sync_error"
    status_code = 500
    default_message = "Something went wrong. Please try again."

    def __init__(self, user_message: str | None = None):
        self.user_message = user_message or self.default_message
        super().__init__(self.user_message)


class ConfigurationError(ShiftSyncError):
    code = "configuration_error"
    status_code = 500
    default_message = "Application is not configured correctly. The API key is missing."


class ImageReadError(ShiftSyncError):
    code = "image_read_error"
    status_code = 400
    default_message = "Could not read the image file. Please try a different file."


class AuthenticationError(ShiftSyncError):
    code = "authentication_error"
    status_code = 401
    default_message = "Invalid API key. Please check your Google AI API key configuration."


class QuotaExceededError(ShiftSyncError):
    code = "quota_exceeded"
    status_code = 429
    default_message = "API quota exceeded. Please try again later or check your API usage limits."


class ContentBlockedError(ShiftSyncError):
    code = "content_blocked"
    status_code = 422
    default_message = "Content was blocked by safety filters. Please try with a different image."


class MalformedOutputError(ShiftSyncError):
    code = "malformed_ai_output"
    status_code = 502
    default_message = "AI response was not in valid JSON format. Please try again."


class AnalysisFailedError(ShiftSyncError):
    code = "analysis_failed"
    status_code = 502
    default_message = (
        "Failed to analyze the schedule. The AI model could not process the image. "
        "Please ensure the image is clear and contains a readable schedule."
    )


class CalendarError(ShiftSyncError):
    code = "calendar_error"
    status_code = 502
    default_message = "Unknown error"


class CalendarNotReadyError(ShiftSyncError):
    code = "calendar_not_ready"
    status_code = 503
    default_message = "Calendar is not connected yet. Please sign in with Google and try again."


class NothingSelectedError(ShiftSyncError):
    code = "nothing_selected"
    status_code = 400
    default_message = "No shifts selected to add."


class InvalidTransitionError(ShiftSyncError):
    code = "invalid_transition"
    status_code = 409
    default_message = "That action is not available at this step."
