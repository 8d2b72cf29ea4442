# core/student_context.py
import re
from typing import List, Optional
from model.student import CourseRecord, StudentSnapshot
from util.constants import NO_STUDENT_CONTEXT

CONTEXT_START = "=== STUDENT DB CONTEXT (authoritative) ==="
CONTEXT_END = "=== END STUDENT DB CONTEXT ==="
CORE_LABEL = "General Education (Core 39)"

# "- CS 215:" or "- CS215:"
COMPLETED_LINE_RX = re.compile(r"-\s+([A-Z]{2,4})\s*(\d{3})\s*:", re.IGNORECASE)

NOT_AVAILABLE = "(not available)"


def _gpa(value: Optional[float]) -> str:
    return f"{value:.2f}" if value is not None else "0"


def _course_line(c: CourseRecord) -> str:
    when = " ".join(str(x) for x in (c.term, c.year) if x)
    grade = f" Grade {c.grade}" if c.grade else ""
    suffix = f" - {when}" if when else ""
    return f"- {c.code}: {c.title} ({c.credit_hours} hrs){grade}{suffix}"


def render_student_context(snapshot: Optional[StudentSnapshot]) -> str:
    """
    Fixed-format text block for prompts and the profile answer.
    Field prefixes ("Name:", "Current GPA:", "- CODE:") are stable.
    """
    if snapshot is None:
        return NO_STUDENT_CONTEXT

    lines: List[str] = [
        CONTEXT_START,
        f"Name: {snapshot.name}",
        f"StudentID: {snapshot.student_id}",
        f"Major: {snapshot.major}",
        f"Enrollment Year: {snapshot.enrollment_year or NOT_AVAILABLE}",
        f"Enrollment Status: {snapshot.enrollment_status}",
        f"Current GPA: {_gpa(snapshot.gpa)}",
        f"Credits Earned: {snapshot.credits_earned} / {snapshot.credits_required}",
        f"Degree Code: {snapshot.degree_code}",
        "",
        "Completed Courses (from StudentCourseHistory):",
    ]
    completed = snapshot.completed
    lines.extend(_course_line(c) for c in completed)
    if not completed:
        lines.append("- (none found)")

    in_progress = snapshot.in_progress
    if in_progress:
        lines.append("In Progress Courses:")
        lines.extend(_course_line(c) for c in in_progress)

    lines.append("Requirement Progress:")
    for category, credits in snapshot.requirement_progress.items():
        lines.append(f"- {category}: {credits} credits")
    lines.append(f"- {CORE_LABEL}: {snapshot.core_credits} credits")
    lines.append(CONTEXT_END)
    return "\n".join(lines) + "\n"


def extract_completed_course_codes(context_text: Optional[str]) -> set[str]:
    """Course codes listed as "- DEPT NUM:" lines in a rendered context block."""
    found: set[str] = set()
    for line in (context_text or "").split("\n"):
        m = COMPLETED_LINE_RX.search(line)
        if m:
            found.add(f"{m.group(1).upper()} {m.group(2)}")
    return found


def short_snapshot(snapshot: Optional[StudentSnapshot]) -> str:
    """Name/major/GPA/credits only; keeps prompts small."""
    if snapshot is None:
        name = major = gpa = credits = NOT_AVAILABLE
    else:
        name = snapshot.name
        major = snapshot.major
        gpa = _gpa(snapshot.gpa)
        credits = f"{snapshot.credits_earned} / {snapshot.credits_required}"
    return f"- Name: {name}\n- Major: {major}\n- GPA: {gpa}\n- Credits: {credits}"
