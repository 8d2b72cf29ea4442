# controller/controller_dependencies.py
from typing import Optional
from fastapi import Request, UploadFile
from fastapi_limiter.depends import RateLimiter
from config.settings import settings
from core.completion_client import CompletionClient
from repository.blob_repository import BlobRepository
from repository.chat_log_repository import ChatLogRepository
from repository.document_repository import DocumentRepository
from repository.session_repository import SessionRepository
from repository.student_repository import StudentRepository
from service.admin_service import AdminService
from service.advisory_service import AdvisoryService
from service.chat_service import ChatService
from service.student_context_service import StudentContextService
from service.supporting_docs_service import SupportingDocsService
from util.enums import ErrorMessage
from util.errors import AppError

# Shared so routers can depend on it and tests can override it.
rate_limit = RateLimiter(
    times=settings.RATE_LIMIT_TIMES, seconds=settings.RATE_LIMIT_SECONDS
)

# One log store per process: its per-conversation locks must be shared.
_chat_logs = ChatLogRepository()


def get_chat_service() -> ChatService:
    _students = StudentRepository()
    _documents = DocumentRepository()
    _blobs = BlobRepository()
    _service = ChatService(
        sessions=SessionRepository(),
        chat_logs=_chat_logs,
        student_context=StudentContextService(_students),
        documents=_documents,
        blobs=_blobs,
        supporting_docs=SupportingDocsService(_documents, _blobs),
        completion=CompletionClient(),
    )
    return _service


def get_admin_service() -> AdminService:
    return AdminService(DocumentRepository(), BlobRepository())


def get_advisory_service() -> AdvisoryService:
    return AdvisoryService(StudentRepository())


def _max_bytes() -> int:
    return settings.MAX_FILE_MB * 1024 * 1024


def _too_large() -> AppError:
    return AppError.of(
        ErrorMessage.FILE_TOO_LARGE, f"PDF is too large (max {settings.MAX_FILE_MB}MB)."
    )


async def read_limited_upload(
    request: Request, file: Optional[UploadFile]
) -> Optional[bytes]:
    """
    Upload bytes, rejecting anything over MAX_FILE_MB before it is parsed.
    None when no file (or an empty file field) was sent.
    """
    if file is None or not (file.filename or "").strip():
        return None

    # Fast pre-check via Content-Length if present
    cl = request.headers.get("content-length")
    if cl and cl.isdigit() and int(cl) > _max_bytes() + 1024 * 1024:
        raise _too_large()

    # Hard cap while reading (works even if no Content-Length)
    blob = await file.read(_max_bytes() + 1)
    if len(blob) > _max_bytes():
        raise _too_large()
    return blob
