# repository/document_repository.py
from typing import List, Optional
from repository.sql_repository import Row, SqlRepository

_LATEST_BULLETIN_SQL = """
SELECT BulletinID, AcademicYear, BulletinYear, BulletinCategory, FileName, FilePath
FROM Bulletins
WHERE IsActive = 1
  AND BulletinCategory = :category
ORDER BY AcademicYear DESC, UploadDate DESC
LIMIT 1
"""

_INSERT_BULLETIN_SQL = """
INSERT INTO Bulletins
    (AcademicYear, BulletinYear, BulletinType, BulletinCategory,
     FileName, FilePath, FileSize, UploadedBy, Description)
VALUES
    (:academic_year, :bulletin_year, 'Undergraduate', :category,
     :file_name, :file_path, :file_size, :uploaded_by, :description)
"""

_INSERT_DOCUMENT_SQL = """
INSERT INTO SupportingDocuments
    (DocumentName, DocumentType, FilePath, FileSize, CourseCode, UploadedBy, Description)
VALUES
    (:document_name, :document_type, :file_path, :file_size, :course_code,
     :uploaded_by, :description)
"""

# Filters match rows carrying the value or no value at all; a blank
# CourseCode counts as no value.
_FIND_DOCUMENTS_SQL = """
SELECT DocumentID, DocumentName, DocumentType, DocumentYear,
       CourseCode, FilePath, Description
FROM SupportingDocuments
WHERE IsActive = 1
  AND (:course_code IS NULL OR CourseCode = :course_code
       OR CourseCode IS NULL OR CourseCode = '')
  AND (:document_year IS NULL OR DocumentYear = :document_year OR DocumentYear IS NULL)
ORDER BY UploadDate DESC
LIMIT :limit
"""


class DocumentRepository(SqlRepository):
    """Bulletins and SupportingDocuments metadata; bytes live in the blob store."""

    async def get_latest_bulletin(self, category: str) -> Optional[Row]:
        return await self._fetch_one(
            "bulletin.latest", _LATEST_BULLETIN_SQL, {"category": category}
        )

    async def insert_bulletin(
        self,
        *,
        academic_year: int,
        category: str,
        file_name: str,
        file_path: str,
        file_size: int,
        description: str,
        uploaded_by: int = 1,
    ) -> int:
        return await self._execute(
            "bulletin.insert",
            _INSERT_BULLETIN_SQL,
            {
                "academic_year": academic_year,
                "bulletin_year": bulletin_year_label(academic_year),
                "category": category,
                "file_name": file_name,
                "file_path": file_path,
                "file_size": file_size,
                "uploaded_by": uploaded_by,
                "description": description,
            },
        )

    async def insert_document(
        self,
        *,
        document_name: str,
        document_type: str,
        file_path: str,
        file_size: int,
        course_code: Optional[str],
        description: str,
        uploaded_by: int = 1,
    ) -> int:
        return await self._execute(
            "document.insert",
            _INSERT_DOCUMENT_SQL,
            {
                "document_name": document_name,
                "document_type": document_type,
                "file_path": file_path,
                "file_size": file_size,
                "course_code": (course_code or "").strip() or None,
                "uploaded_by": uploaded_by,
                "description": description,
            },
        )

    async def find_supporting_documents(
        self,
        *,
        course_code: Optional[str],
        document_year: Optional[str],
        limit: int,
    ) -> List[Row]:
        return await self._fetch_all(
            "document.find",
            _FIND_DOCUMENTS_SQL,
            {
                "course_code": course_code or None,
                "document_year": document_year or None,
                "limit": max(1, int(limit)),
            },
        )


def bulletin_year_label(year: int) -> str:
    """2024 -> "2024-2025"."""
    return f"{year}-{year + 1}"
