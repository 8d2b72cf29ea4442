# service/supporting_docs_service.py
import os
from typing import List, Optional
from config.settings import settings
from core.entities import DocumentSearchResult
from core.pdf_text import extract_pages, extract_text_document
from core.snippet_retriever import find_top_relevant_snippets
from model.catalog import PdfExtractResult
from repository.blob_repository import BlobRepository
from repository.document_repository import DocumentRepository
from util.errors import BlobStorageError, DataAccessError, PdfUnreadableError
import logging

logger = logging.getLogger(__name__)


class SupportingDocsService:
    """
    Keyword retrieval over admin-uploaded supporting documents (syllabi,
    policies, advising sheets).

    Flow:
    - list active documents matching the optional course/year filters
    - download + extract each (PDF or .txt), rank pages against the query
    - keep documents with at least one hit, up to `max_documents`
    A failed listing yields []; a failed document is skipped.
    """

    def __init__(self, documents: DocumentRepository, blobs: BlobRepository) -> None:
        self._documents = documents
        self._blobs = blobs

    async def _extract(self, locator: str, name: str) -> PdfExtractResult:
        raw = await self._blobs.download(locator)
        ext = os.path.splitext(name or locator)[1].lower()
        if ext == ".txt":
            return extract_text_document(raw, name, settings.DOCUMENT_MAX_CHARS)
        return extract_pages(
            raw,
            name,
            max_pages=settings.DOCUMENT_MAX_PAGES,
            max_chars_total=settings.DOCUMENT_MAX_CHARS,
        )

    async def search(
        self,
        query: str,
        course_code: Optional[str] = None,
        document_year: Optional[str] = None,
        max_documents: int = settings.SUPPORTING_DOCS_MAX,
    ) -> List[DocumentSearchResult]:
        if not (query or "").strip() or max_documents <= 0:
            return []

        try:
            rows = await self._documents.find_supporting_documents(
                course_code=course_code,
                document_year=document_year,
                limit=max_documents * 2,
            )
        except DataAccessError:
            logger.warning("docs.search.list.error course=%s", course_code)
            return []

        results: List[DocumentSearchResult] = []
        for row in rows:
            if len(results) >= max_documents:
                break
            doc_id = int(row["DocumentID"])
            name = str(row.get("DocumentName") or "")
            try:
                extracted = await self._extract(str(row.get("FilePath") or ""), name)
            except (BlobStorageError, PdfUnreadableError):
                logger.warning("docs.search.doc.skip id=%d", doc_id)
                continue
            if not extracted.text_found:
                continue

            hits = find_top_relevant_snippets(
                extracted.pages,
                query,
                top_k=settings.DOCUMENT_RAG_TOP_K,
                snippet_max_chars=settings.DOCUMENT_SNIPPET_CHARS,
            )
            if not hits:
                continue
            results.append(
                DocumentSearchResult(
                    document_id=doc_id,
                    document_name=name,
                    document_type=str(row.get("DocumentType") or ""),
                    document_year=str(row.get("DocumentYear") or "N/A"),
                    course_code=str(row.get("CourseCode") or ""),
                    hits=hits,
                )
            )

        logger.info("docs.search.ok scanned=%d matched=%d", len(rows), len(results))
        return results
