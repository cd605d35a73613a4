"""Errors raised by the repositories and rendered as ``{"status": "error"}`` bodies."""

from sqlalchemy.exc import SQLAlchemyError


class ApiError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ApiError):
    """Bad or missing input."""


class MissingField(ValidationError):
    pass


class OutOfRange(ValidationError):
    pass


class DuplicateEmail(ApiError):
    pass


class InvalidCredentials(ApiError):
    pass


def store_error_message(exc: SQLAlchemyError) -> str:
    # DBAPI message only; str(exc) would include the rendered SQL
    orig = getattr(exc, "orig", None)
    return f"Database error: {orig if orig is not None else exc}"
