# util/errors.py
from fastapi import HTTPException, status
from util.enums import ErrorMessage


class AppError(HTTPException):
    # Flow: raise AppError to short-circuit with a typed status & message.
    def __init__(
        self, message: str, http_status: int = status.HTTP_400_BAD_REQUEST
    ) -> None:
        super().__init__(status_code=http_status, detail=message)

    @classmethod
    def of(cls, error: ErrorMessage, message: str | None = None) -> "AppError":
        return cls(message or error.value.message, error.value.http_status)


class PdfUnreadableError(Exception):
    """Bytes could not be opened or parsed as a PDF."""


class StudentNotFoundError(Exception):
    def __init__(self, student_id: int) -> None:
        super().__init__(f"student {student_id} not found")
        self.student_id = student_id


class DataAccessError(Exception):
    """Student-records query failed."""


class BlobStorageError(Exception):
    """Upload to or download from the file/blob store failed."""


class CompletionError(Exception):
    """Completion service returned a non-success status or was unreachable."""
