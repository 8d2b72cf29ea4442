# util/enums.py
from enum import Enum
from typing import NamedTuple
from fastapi import status


class Color(str, Enum):
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"
    BOLD = "\033[1m"

    def __str__(self):
        return self.value


class Environment(str, Enum):
    DEV = "dev"
    TEST = "test"
    PROD = "prod"


class Intent(str, Enum):
    PROFILE = "profile"
    PLANNING = "planning"
    GENERAL = "general"


class TurnState(str, Enum):
    IDLE = "idle"
    INTENT_DETECTED = "intent_detected"
    CONTEXT_ASSEMBLED = "context_assembled"
    COMPLETED = "completed"
    BYPASSED = "bypassed"
    FAILED = "failed"


class ErrorKind(str, Enum):
    INPUT_REJECTED = "input_rejected"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    NOT_FOUND = "not_found"
    PARSE_EMPTY = "parse_empty"


class ErrorInfo(NamedTuple):
    message: str
    http_status: int


class ErrorMessage(Enum):
    PDF_ONLY = ErrorInfo("Only PDF files are allowed.", status.HTTP_400_BAD_REQUEST)
    FILE_TOO_LARGE = ErrorInfo(
        "PDF is too large (max 50MB).", status.HTTP_413_CONTENT_TOO_LARGE
    )
    FILE_MISSING = ErrorInfo(
        "Please select a file to upload.", status.HTTP_400_BAD_REQUEST
    )
    FILE_TYPE_NOT_ALLOWED = ErrorInfo(
        "File type is not allowed.", status.HTTP_400_BAD_REQUEST
    )
    PDF_UNREADABLE = ErrorInfo(
        "Could not read the PDF. If it is scanned (image-only), OCR is required.",
        status.HTTP_422_UNPROCESSABLE_CONTENT,
    )
    BLANK_FIELD = ErrorInfo("A required field is blank.", status.HTTP_400_BAD_REQUEST)
    SESSION_NOT_FOUND = ErrorInfo(
        "Unknown or expired session", status.HTTP_404_NOT_FOUND
    )
    UPSTREAM_UNAVAILABLE = ErrorInfo(
        "A backing service is unavailable. Please try again later.",
        status.HTTP_503_SERVICE_UNAVAILABLE,
    )
