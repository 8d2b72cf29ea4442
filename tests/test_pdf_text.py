"""
Tests for PDF page-text extraction
"""
import pytest
from core.pdf_text import extract_pages, extract_text_document
from util.constants import OCR_REQUIRED_NOTICE
from util.errors import PdfUnreadableError


class TestExtractPages:
    """Page and character budgets, blank pages, unreadable input"""

    def test_pages_are_one_based_and_in_order(self, make_pdf):
        data = make_pdf(["first page text", "second page text", "third page text"])

        result = extract_pages(data, "bulletin.pdf")

        assert [p.page for p in result.pages] == [1, 2, 3]
        assert "second page text" in result.pages[1].text
        assert result.text_found is True
        assert result.file_name == "bulletin.pdf"

    def test_page_limit(self, make_pdf):
        data = make_pdf([f"page number {i}" for i in range(1, 11)])

        result = extract_pages(data, max_pages=4)

        assert len(result.pages) == 4
        assert result.pages[-1].page == 4

    def test_char_budget_truncates_and_stops(self, make_pdf):
        data = make_pdf(["a" * 60, "b" * 60, "c" * 60])

        result = extract_pages(data, max_chars_total=100)

        assert result.total_chars <= 100
        assert len(result.pages) == 2
        assert result.pages[1].text == "b" * 40

    def test_blank_pages_are_skipped(self, make_pdf):
        data = make_pdf(["intro", "", "appendix"])

        result = extract_pages(data)

        assert [p.page for p in result.pages] == [1, 3]

    def test_no_text_yields_ocr_notice(self, make_pdf):
        data = make_pdf(["", ""])

        result = extract_pages(data, "scan.pdf")

        assert result.text_found is False
        assert len(result.pages) == 1
        assert result.pages[0].page == 1
        assert result.pages[0].text == OCR_REQUIRED_NOTICE

    def test_unreadable_bytes_raise(self):
        with pytest.raises(PdfUnreadableError):
            extract_pages(b"definitely not a pdf", "broken.pdf")


class TestExtractTextDocument:
    def test_single_page(self):
        result = extract_text_document("Office hours: Monday".encode(), "notes.txt")

        assert len(result.pages) == 1
        assert result.pages[0].page == 1
        assert result.pages[0].text == "Office hours: Monday"

    def test_budget_and_empty(self):
        assert extract_text_document(b"x" * 50, max_chars_total=10).total_chars == 10
        assert extract_text_document(b"   ").text_found is False
