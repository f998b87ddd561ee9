# Booking error taxonomy and the JSON error responses for it
from flask import jsonify, current_app
from sqlalchemy.exc import SQLAlchemyError

from salonbook.extensions import db


class BookingError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message=None, details=None):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.details = details

    def to_dict(self):
        body = {"status": "error", "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(BookingError):
    """Malformed input or an illegal status transition. Raised before any write."""

    status_code = 400
    message = "Invalid request"


class SlotUnavailableError(ValidationError):
    status_code = 409
    message = "This time slot is already booked"


class NotFoundError(BookingError):
    """Missing row, or a row the caller's role is not allowed to see."""

    status_code = 404
    message = "Not found"


class AuthError(BookingError):
    status_code = 401
    message = "Authentication required"


class ForbiddenError(BookingError):
    status_code = 403
    message = "Forbidden"


class StoreError(BookingError):
    """The database rejected or failed an operation."""

    status_code = 500
    message = "Database error"


def register_error_handlers(app):
    @app.errorhandler(BookingError)
    def handle_booking_error(error):
        if isinstance(error, StoreError):
            current_app.logger.error(f"Store error: {error.details}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_sqlalchemy_error(error):
        db.session.rollback()
        current_app.logger.error(f"Unhandled database error: {error}")
        return jsonify(StoreError(details=str(error)).to_dict()), 500
