# core/prompt_builder.py
import re
from typing import Iterable, List, Optional, Sequence
from config.settings import settings
from core.entities import Citation, DocumentSearchResult, PreparedPrompt, RagHit
from model.catalog import CatalogCourse, DegreePlanParseResult
from util import functions
from util.enums import Intent

PROFILE_RX = re.compile(r"\b(who am i|show (my )?profile|my info)\b", re.IGNORECASE)
PLANNING_RX = re.compile(
    r"\b(next classes|what classes|what should i take|recommend|next semester|schedule)\b",
    re.IGNORECASE,
)

PROFILE_HEADER = "## Answer\nHere’s your profile from the database.\n\n"
NO_CATALOG_MESSAGE = (
    "I didn’t find any course listings parsed from the PDF yet. Please upload the "
    "bulletin PDF again (must be text-based, not scanned)."
)
NOTHING_TO_RECOMMEND_MESSAGE = (
    "I parsed the PDF, but I couldn’t find any remaining required/elective courses "
    "to recommend."
)
STUDENT_NOT_FOUND_MESSAGE = (
    "I couldn’t find your student record in the database, so I can’t show your "
    "profile. Please contact your academic advisor to have it set up."
)
APOLOGY_MESSAGE = "I’m having trouble processing that right now. Please try again."
DEFAULT_CATALOG_NAME = "Uploaded PDF"


def classify_intent(question: str) -> Intent:
    """Profile wins over planning; everything else is general."""
    if PROFILE_RX.search(question or ""):
        return Intent.PROFILE
    if PLANNING_RX.search(question or ""):
        return Intent.PLANNING
    return Intent.GENERAL


def build_profile_answer(context_text: str) -> str:
    return PROFILE_HEADER + context_text


def _credits(c: CatalogCourse, fmt: str) -> str:
    return fmt.format(c.credits_text) if (c.credits_text or "").strip() else ""


def sample_catalog(
    plan: DegreePlanParseResult,
    required_cap: int = 15,
    elective_cap: int = 10,
) -> List[CatalogCourse]:
    """Small, stable slice of the catalog so the prompt stays within budget."""
    req = sorted(plan.required, key=lambda c: c.number)[:required_cap]
    ele = sorted(plan.electives, key=lambda c: c.code)[:elective_cap]
    return req + ele


def build_planning_prompt(
    question: str,
    snapshot_text: str,
    catalog_name: str,
    recommended: Sequence[CatalogCourse],
) -> str:
    lines: List[str] = [
        settings.PLANNING_PROMPT_RULES.strip(),
        "",
        "Student Snapshot (short):",
        snapshot_text,
        "",
        f"Source PDF: {catalog_name}",
        "",
        "PROVIDED RECOMMENDED COURSES (use ONLY these):",
    ]
    for c in recommended[: settings.RECOMMEND_COUNT]:
        lines.append(f"- {c.code} — {c.title}{_credits(c, ' | Credits: {}')}")
    lines += ["", "Student Question:", question]
    return "\n".join(lines) + "\n"


def _bulletin_section(catalog_name: str, hits: Sequence[RagHit]) -> List[str]:
    if not hits:
        return []
    out = ["", f"BULLETIN EXCERPTS ({catalog_name}):"]
    for h in hits:
        out.append(f"[page {h.page}]\n{h.snippet}")
    return out


def _documents_section(docs: Sequence[DocumentSearchResult]) -> List[str]:
    if not docs:
        return []
    out = ["", "SUPPORTING DOCUMENT EXCERPTS:"]
    for d in docs:
        label = f"{d.document_name} ({d.document_type})"
        for h in d.hits:
            out.append(f"[{label}, page {h.page}]\n{functions.clip_words(h.snippet, 120)}")
    return out


def build_general_prompt(
    question: str,
    snapshot_text: str,
    catalog_name: str,
    plan: DegreePlanParseResult,
    bulletin_hits: Sequence[RagHit] = (),
    documents: Sequence[DocumentSearchResult] = (),
) -> str:
    sample = sample_catalog(
        plan, settings.PROMPT_REQUIRED_SAMPLE, settings.PROMPT_ELECTIVE_SAMPLE
    )
    lines: List[str] = [
        settings.GENERAL_PROMPT_RULES.strip(),
        "",
        "Student Snapshot (short):",
        snapshot_text,
        "",
        f"Catalog from PDF: {catalog_name} (subset)",
    ]
    for c in sample:
        lines.append(f"- {c.code} — {c.title}{_credits(c, ' ({} cr)')}")
    lines += _bulletin_section(catalog_name, bulletin_hits)
    lines += _documents_section(documents)
    lines += ["", "Question:", question]
    return "\n".join(lines) + "\n"


def collect_citations(
    catalog_name: str,
    academic_year: Optional[str],
    bulletin_hits: Iterable[RagHit],
    documents: Iterable[DocumentSearchResult],
) -> List[Citation]:
    """Bulletin pages first, then each document; pages ascending within a source."""
    out = [
        Citation(source=catalog_name, page=p, academic_year=academic_year)
        for p in sorted({h.page for h in bulletin_hits})
    ]
    for d in documents:
        out.extend(
            Citation(source=d.document_name, page=p)
            for p in sorted({h.page for h in d.hits})
        )
    return out


def format_citations(citations: Sequence[Citation]) -> str:
    if not citations:
        return ""
    lines = ["", "", "---", "**Sources**"]
    for c in citations:
        year = f" ({c.academic_year})" if c.academic_year else ""
        lines.append(f"- {c.source}{year}, page {c.page}")
    return "\n".join(lines)


def prepare_general(
    question: str,
    snapshot_text: str,
    catalog_name: Optional[str],
    academic_year: Optional[str],
    plan: DegreePlanParseResult,
    bulletin_hits: Sequence[RagHit],
    documents: Sequence[DocumentSearchResult],
) -> PreparedPrompt:
    name = catalog_name or DEFAULT_CATALOG_NAME
    return PreparedPrompt(
        prompt=build_general_prompt(
            question, snapshot_text, name, plan, bulletin_hits, documents
        ),
        citations=collect_citations(name, academic_year, bulletin_hits, documents),
    )
