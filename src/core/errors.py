"""Error codes, error response model and domain exceptions."""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    code: str
    details: list[str] = []


class ErrorCodes:
    """Error code constants."""

    INVALID_REQUEST = "INVALID_REQUEST"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_STATE = "INVALID_STATE"
    DEPENDENCY_ERROR = "DEPENDENCY_ERROR"
    DATA_INTEGRITY_ERROR = "DATA_INTEGRITY_ERROR"
    NOT_FOUND = "NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class TimeledgerError(ValueError):
    """Base error carrying an error code and detail messages."""

    code = ErrorCodes.VALIDATION_ERROR

    def __init__(self, message: str, details: list[str] | None = None):
        super().__init__(message)
        self.details = details or []

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(error=str(self), code=self.code, details=self.details)


class InvoiceStateError(TimeledgerError):
    """Operation not allowed in the invoice's current lifecycle state."""

    code = ErrorCodes.INVALID_STATE


class InvoiceDependencyError(TimeledgerError):
    """Invoice is referenced by a rectification link and cannot be removed."""

    code = ErrorCodes.DEPENDENCY_ERROR


class DataIntegrityError(TimeledgerError):
    """Persisted records contradict each other."""

    code = ErrorCodes.DATA_INTEGRITY_ERROR


class NotFoundError(TimeledgerError):
    code = ErrorCodes.NOT_FOUND
