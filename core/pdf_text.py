# core/pdf_text.py
from typing import List
import fitz
from model.catalog import PageText, PdfExtractResult
from util.constants import OCR_REQUIRED_NOTICE
from util.errors import PdfUnreadableError
from util.timing import timed
import logging

logger = logging.getLogger(__name__)


def extract_pages(
    file_bytes: bytes,
    file_name: str = "",
    max_pages: int = 25,
    max_chars_total: int = 200_000,
) -> PdfExtractResult:
    """
    Per-page text so answers can cite page numbers.

    - Reads pages 1..max_pages in order, stopping once the char budget is spent.
    - Blank pages are skipped; a page bigger than the remaining budget is cut.
    - No text at all -> one synthetic page carrying the OCR notice.
    Raises PdfUnreadableError when the bytes are not a readable PDF.
    """
    pages: List[PageText] = []
    budget = max_chars_total
    try:
        with timed(logger, "pdf.open"):
            doc = fitz.open(stream=file_bytes, filetype="pdf")
        with doc:
            to_read = min(doc.page_count, max(0, max_pages))
            with timed(logger, "pdf.extract", pages=to_read):
                for i in range(to_read):
                    if budget <= 0:
                        break
                    txt = (doc.load_page(i).get_text("text") or "").strip()
                    if not txt:
                        continue
                    if len(txt) > budget:
                        txt = txt[:budget]
                    pages.append(PageText(page=i + 1, text=txt))
                    budget -= len(txt)
    except Exception as e:
        # do not log payloads
        logger.error("pdf.extract.error name=%s", file_name, exc_info=True)
        raise PdfUnreadableError(file_name or "pdf") from e

    if not pages:
        logger.warning("pdf.extract.empty name=%s", file_name)
        return PdfExtractResult(
            file_name=file_name,
            pages=[PageText(page=1, text=OCR_REQUIRED_NOTICE)],
            text_found=False,
        )

    result = PdfExtractResult(file_name=file_name, pages=pages)
    logger.info("pdf.pages count=%d chars=%d", len(pages), result.total_chars)
    return result


def extract_text_document(
    raw: bytes, file_name: str = "", max_chars_total: int = 50_000
) -> PdfExtractResult:
    """Plain-text supporting documents are treated as a single page."""
    txt = raw.decode("utf-8", errors="replace").strip()[:max_chars_total]
    if not txt:
        return PdfExtractResult(file_name=file_name, pages=[], text_found=False)
    return PdfExtractResult(file_name=file_name, pages=[PageText(page=1, text=txt)])

