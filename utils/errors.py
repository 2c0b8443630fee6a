"""
Application exceptions. Each one knows its HTTP status and the
machine-readable ``error`` code returned next to ``message``.
"""


class ApiError(Exception):
    status_code = 422
    error_code = "error"
    default_message = "Request could not be processed."

    def __init__(self, message: str = None, status_code: int = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"message": self.message, "error": self.error_code}


class BookingError(ApiError):
    error_code = "booking_error"
    default_message = "Booking error occurred."


class CourtClosedError(ApiError):
    error_code = "court_closed"
    default_message = "Court is closed during this time."


class TimeSlotUnavailableError(ApiError):
    error_code = "time_slot_unavailable"
    default_message = "Time slot is already booked."


class CourtNotAvailableError(ApiError):
    error_code = "court_not_available"
    default_message = "Court is not available for this session."


class InvalidTeamAssignmentError(ApiError):
    error_code = "invalid_team_assignment"
    default_message = "Invalid team assignment."


class MatchNotActiveError(ApiError):
    error_code = "match_not_active"
    default_message = "Match is not active."


class ValidationError(ApiError):
    error_code = "validation_failed"
    default_message = "Validation failed"

    def __init__(self, errors: dict, message: str = None):
        super().__init__(message)
        self.errors = errors

    def to_dict(self) -> dict:
        out = super().to_dict()
        out["errors"] = self.errors
        return out


class NotFoundError(ApiError):
    status_code = 404
    error_code = "not_found"
    default_message = "Resource not found"


class ForbiddenError(ApiError):
    status_code = 403
    error_code = "forbidden"
    default_message = "Forbidden"
