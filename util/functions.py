# util/functions.py
import re
from typing import Optional

_WS_RX = re.compile(r"\s+")
_CODE_RX = re.compile(r"\b([A-Z]{2,4})\s*(\d{3})\b")


def clip_words(text: str, max_words: int = 100) -> str:
    """
    - Trim 'text' to at most `max_words` tokens separated by whitespace.
    - Adds an ellipsis when trimming occurs.
    """
    words = text.split()
    if len(words) <= max_words:
        return text
    return " ".join(words[:max_words]) + " …"


def normalize_code(code: Optional[str]) -> str:
    """Uppercase and collapse internal whitespace: ' cs   311 ' -> 'CS 311'."""
    return _WS_RX.sub(" ", (code or "").upper()).strip()


def find_course_code(text: Optional[str]) -> Optional[str]:
    """
    First course-code-looking token in free text, normalised to 'DEPT NNN'.
    The department must be upper case, as in the bulletin: 'CS311' and
    'CS 311' both yield 'CS 311'; 'need 120 credits' yields None.
    """
    m = _CODE_RX.search(text or "")
    if not m:
        return None
    return f"{m.group(1)} {m.group(2)}"


def normalize_term(term: Optional[str]) -> str:
    t = (term or "").strip().lower()
    if not t:
        return ""
    return t[0].upper() + t[1:]
