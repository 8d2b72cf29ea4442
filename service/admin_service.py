# service/admin_service.py
import asyncio
import os
import re
from dataclasses import dataclass
from typing import Optional
from uuid import uuid4
from config.settings import settings
from core.catalog_parser import parse_degree_plan
from core.pdf_text import extract_pages
from repository.blob_repository import BlobRepository
from repository.document_repository import DocumentRepository, bulletin_year_label
from service.chat_service import validate_pdf_upload
from util.constants import UploadPrefixes
from util.enums import ErrorMessage
from util.errors import AppError, PdfUnreadableError
import logging

logger = logging.getLogger(__name__)

DOCUMENT_EXTENSIONS = (".pdf", ".docx", ".doc", ".txt")
_CONTENT_TYPES = {
    ".pdf": "application/pdf",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".doc": "application/msword",
    ".txt": "text/plain",
}
_KEY_SAFE_RX = re.compile(r"[^A-Za-z0-9_-]+")


@dataclass
class BulletinUploadResult:
    pages_extracted: int
    total_chars: int
    courses_found: int
    locator: str


@dataclass
class DocumentUploadResult:
    document_name: str
    locator: str


def _key_part(value: str) -> str:
    return _KEY_SAFE_RX.sub("_", value.strip()).strip("_") or "file"


class AdminService:
    """
    Admin uploads of bulletins and supporting documents.

    Flow:
    - validate (type, size, required fields) before touching the bytes
    - bulletins must extract to text; course count is reported back
    - store bytes in the blob store, then record metadata with bound params
    """

    def __init__(self, documents: DocumentRepository, blobs: BlobRepository) -> None:
        self._documents = documents
        self._blobs = blobs

    async def upload_bulletin(
        self,
        data: bytes,
        file_name: str,
        *,
        year: int,
        category: str,
        description: Optional[str] = None,
    ) -> BulletinUploadResult:
        if not (category or "").strip():
            raise AppError.of(ErrorMessage.BLANK_FIELD, "Bulletin category is required.")
        if not data:
            raise AppError.of(ErrorMessage.FILE_MISSING)
        validate_pdf_upload(file_name, len(data))

        try:
            extracted = await asyncio.to_thread(
                extract_pages,
                data,
                file_name,
                settings.BULLETIN_MAX_PAGES,
                settings.BULLETIN_MAX_CHARS,
            )
        except PdfUnreadableError:
            raise AppError.of(ErrorMessage.PDF_UNREADABLE)
        if not extracted.text_found:
            raise AppError.of(ErrorMessage.PDF_UNREADABLE)
        plan = parse_degree_plan(extracted.pages)

        container = (
            UploadPrefixes.MINORS
            if category.strip().lower() == "minor"
            else UploadPrefixes.BULLETINS
        )
        key = f"{container}/{year}/Bulletin_{year}_{uuid4().hex}.pdf"
        locator = await self._blobs.upload(data, key, "application/pdf")

        label = bulletin_year_label(year)
        await self._documents.insert_bulletin(
            academic_year=year,
            category=category.strip(),
            file_name=file_name,
            file_path=locator,
            file_size=len(data),
            description=(description or "").strip()
            or f"{category.strip()} Bulletin {label}",
        )
        logger.info(
            "admin.bulletin.ok year=%d category=%s pages=%d courses=%d",
            year,
            category,
            len(extracted.pages),
            plan.total_count,
        )
        return BulletinUploadResult(
            pages_extracted=len(extracted.pages),
            total_chars=extracted.total_chars,
            courses_found=plan.total_count,
            locator=locator,
        )

    async def upload_document(
        self,
        data: bytes,
        file_name: str,
        *,
        doc_type: str,
        course_code: Optional[str] = None,
        description: Optional[str] = None,
    ) -> DocumentUploadResult:
        if not (doc_type or "").strip():
            raise AppError.of(ErrorMessage.BLANK_FIELD, "Document type is required.")
        if not data:
            raise AppError.of(ErrorMessage.FILE_MISSING)
        ext = os.path.splitext(file_name or "")[1].lower()
        if ext not in DOCUMENT_EXTENSIONS:
            raise AppError.of(
                ErrorMessage.FILE_TYPE_NOT_ALLOWED,
                "Only PDF, Word, or text documents are allowed.",
            )
        if len(data) > settings.MAX_FILE_MB * 1024 * 1024:
            raise AppError.of(
                ErrorMessage.FILE_TOO_LARGE,
                f"File is too large (max {settings.MAX_FILE_MB}MB).",
            )

        prefix = _key_part(os.path.splitext(os.path.basename(file_name))[0])
        key = (
            f"{UploadPrefixes.DOCUMENTS}/{_key_part(doc_type)}/"
            f"{prefix}_{uuid4().hex}{ext}"
        )
        locator = await self._blobs.upload(
            data, key, _CONTENT_TYPES.get(ext, "application/octet-stream")
        )
        await self._documents.insert_document(
            document_name=file_name,
            document_type=doc_type.strip(),
            file_path=locator,
            file_size=len(data),
            course_code=(course_code or "").strip() or None,
            description=(description or "").strip() or f"{doc_type.strip()} document",
        )
        logger.info("admin.document.ok type=%s bytes=%d", doc_type, len(data))
        return DocumentUploadResult(document_name=file_name, locator=locator)
