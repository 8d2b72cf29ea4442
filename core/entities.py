# core/entities.py
from dataclasses import dataclass, field
from typing import List, Optional
from model.chat import ChatMessage
from util.enums import ErrorKind, TurnState


@dataclass
class RagHit:
    page: int  # 1-based page index
    score: float
    snippet: str


@dataclass
class DocumentSearchResult:
    document_id: int
    document_name: str
    document_type: str
    document_year: str
    course_code: str
    hits: List[RagHit] = field(default_factory=list)


@dataclass
class Citation:
    source: str
    page: int
    academic_year: Optional[str] = None


@dataclass
class PreparedPrompt:
    """Prompt text plus the citations to append once the model answers."""

    prompt: str
    citations: List[Citation] = field(default_factory=list)


@dataclass
class TurnOutcome:
    """What one chat turn produced; `messages` is the full persisted log."""

    reply: Optional[str]
    state: TurnState
    messages: List[ChatMessage] = field(default_factory=list)
    citations: List[Citation] = field(default_factory=list)
    error: Optional[ErrorKind] = None
