# model/session.py
from typing import Optional
from uuid import uuid4
from pydantic import BaseModel, Field
from model.catalog import DegreePlanParseResult, PageText
from model.student import StudentSnapshot


class ConversationContext(BaseModel):
    """
    Per-browser-session state owned by the chat orchestrator.

    Flow:
    - conversation_id is minted lazily on the first turn and dropped on clear.
    - pages/catalog come from an uploaded or auto-loaded bulletin.
    - student is the cached snapshot from the records database.
    """

    session_id: str
    student_id: int
    conversation_id: Optional[str] = None
    pdf_file_name: Optional[str] = None
    academic_year: Optional[str] = None
    pages: list[PageText] = Field(default_factory=list)
    catalog: Optional[DegreePlanParseResult] = None
    student: Optional[StudentSnapshot] = None

    def ensure_conversation_id(self) -> str:
        if not self.conversation_id:
            self.conversation_id = uuid4().hex
        return self.conversation_id

    def has_catalog(self) -> bool:
        return self.catalog is not None and self.catalog.total_count > 0

    def invalidate_catalog(self) -> None:
        self.pdf_file_name = None
        self.academic_year = None
        self.pages = []
        self.catalog = None

    def invalidate_student_context(self) -> None:
        self.student = None

    def reset(self) -> None:
        self.invalidate_catalog()
        self.invalidate_student_context()
        self.conversation_id = None
