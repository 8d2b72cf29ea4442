"""
Tests for supporting-document and bulletin metadata queries
"""
import asyncio
from unittest.mock import AsyncMock, patch
from repository.document_repository import DocumentRepository, bulletin_year_label


class TestDocumentRepository:
    def setup_method(self):
        self.repo = DocumentRepository(engine=object())

    def test_blank_course_code_stored_as_null(self):
        with patch.object(self.repo, "_execute", AsyncMock(return_value=1)) as execute:
            asyncio.run(
                self.repo.insert_document(
                    document_name="policy.txt",
                    document_type="Policy",
                    file_path="/uploads/documents/p.txt",
                    file_size=10,
                    course_code="  ",
                    description="Policy document",
                )
            )

        assert execute.await_args.args[2]["course_code"] is None

    def test_course_filter_keeps_general_documents(self):
        with patch.object(self.repo, "_fetch_all", AsyncMock(return_value=[])) as fetch:
            asyncio.run(
                self.repo.find_supporting_documents(
                    course_code="CS 311", document_year=None, limit=10
                )
            )

        _, sql, params = fetch.await_args.args
        assert params == {"course_code": "CS 311", "document_year": None, "limit": 10}
        assert "CourseCode IS NULL" in sql
        assert "CourseCode = ''" in sql


def test_bulletin_year_label():
    assert bulletin_year_label(2024) == "2024-2025"
