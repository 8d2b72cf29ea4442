# model/catalog.py
import re
from enum import Enum
from pydantic import BaseModel, Field

_NUMBER_RX = re.compile(r"\b\d{3}\b")


class CatalogSection(str, Enum):
    required = "Required"
    elective = "Elective"
    unknown = "Unknown"


class PageText(BaseModel):
    page: int = Field(ge=1)  # 1-based
    text: str


class PdfExtractResult(BaseModel):
    file_name: str = ""
    pages: list[PageText] = Field(default_factory=list)
    # False when no page yielded text and the OCR notice page was substituted
    text_found: bool = True

    @property
    def total_chars(self) -> int:
        return sum(len(p.text or "") for p in self.pages)


class CatalogCourse(BaseModel):
    code: str  # "CS 311"
    title: str
    credits_text: str = ""  # "3" or "1-3"
    section: CatalogSection = CatalogSection.unknown

    @property
    def number(self) -> int:
        m = _NUMBER_RX.search(self.code or "")
        return int(m.group(0)) if m else 0


class DegreePlanParseResult(BaseModel):
    required: list[CatalogCourse] = Field(default_factory=list)
    electives: list[CatalogCourse] = Field(default_factory=list)

    @property
    def total_count(self) -> int:
        return len(self.required) + len(self.electives)
