# core/catalog_parser.py
import re
from typing import Dict, Iterable, List
from model.catalog import CatalogCourse, CatalogSection, DegreePlanParseResult, PageText
import logging

logger = logging.getLogger(__name__)

# Matches lines like:
#   "CS 311 - Data Structures and Analysis of Algorithms Credits: 3"
#   "MATH 215 - Survey of Calculus Credits: 3 or"
#   "CS 499 - Projects in Computer Science Credits: 1-3"
COURSE_LINE_RX = re.compile(
    r"^(?P<dept>[A-Z]{2,4})\s*(?P<num>\d{3})\s*-\s*(?P<title>.+?)"
    r"\s*Credits:\s*(?P<cr>[\d\-]+)\s*(?:or)?\s*$"
)

# Sentinel phrase -> section it opens. Checked before the course pattern.
SECTION_SENTINELS: Dict[str, CatalogSection] = {
    "required courses": CatalogSection.required,
    "directed electives": CatalogSection.elective,
}


def _lines(pages: Iterable[PageText]) -> List[str]:
    out: List[str] = []
    for p in pages:
        for raw in (p.text or "").split("\n"):
            line = raw.strip()
            if line:
                out.append(line)
    return out


def _sentinel(line: str) -> CatalogSection | None:
    low = line.lower()
    for phrase, section in SECTION_SENTINELS.items():
        if phrase in low:
            return section
    return None


def parse_course_line(line: str, section: CatalogSection) -> CatalogCourse | None:
    m = COURSE_LINE_RX.match(line)
    if not m:
        return None
    return CatalogCourse(
        code=f"{m.group('dept').upper()} {m.group('num')}",
        title=m.group("title").strip(),
        credits_text=m.group("cr").strip(),
        section=section,
    )


def _dedupe(courses: List[CatalogCourse]) -> List[CatalogCourse]:
    seen: set[str] = set()
    out: List[CatalogCourse] = []
    for c in courses:
        key = c.code.lower()
        if key in seen:
            continue
        seen.add(key)
        out.append(c)
    return out


def parse_degree_plan(pages: Iterable[PageText]) -> DegreePlanParseResult:
    """
    Recover required/elective course listings from bulletin page text.

    Lines between a "Required Courses" heading and a "Directed Electives"
    heading are required; after it, elective. Courses seen before any heading
    are kept as electives. Lines that don't match are skipped.
    """
    required: List[CatalogCourse] = []
    electives: List[CatalogCourse] = []
    current = CatalogSection.unknown

    for line in _lines(pages):
        section = _sentinel(line)
        if section is not None:
            current = section
            continue

        course = parse_course_line(line, current)
        if course is None:
            continue

        if current == CatalogSection.required:
            required.append(course)
        else:
            electives.append(course)

    result = DegreePlanParseResult(
        required=_dedupe(required), electives=_dedupe(electives)
    )
    logger.info(
        "catalog.parse required=%d electives=%d",
        len(result.required),
        len(result.electives),
    )
    return result
