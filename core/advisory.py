# core/advisory.py
from typing import Iterable, Optional, Sequence, Tuple
from model.advisory import (
    ConflictResult,
    CourseGrade,
    FutureCourse,
    GpaCalculation,
    PrerequisiteCheckResult,
    WhatIfResult,
)

GRADE_POINTS = {
    "A": 4.0,
    "A-": 3.7,
    "B+": 3.3,
    "B": 3.0,
    "B-": 2.7,
    "C+": 2.3,
    "C": 2.0,
    "C-": 1.7,
    "D+": 1.3,
    "D": 1.0,
    "D-": 0.7,
    "F": 0.0,
}
MAX_GPA = 4.0


def grade_points(grade: Optional[str]) -> Optional[float]:
    """4.0-scale points for a letter grade; None for W/I/P and anything unknown."""
    return GRADE_POINTS.get((grade or "").strip().upper())


def _fmt(value: float) -> str:
    # 3.5 -> "3.5", 3.0 -> "3", 3.456 -> "3.46"
    return f"{round(value, 2):g}"


def calculate_gpa(courses: Iterable[CourseGrade]) -> GpaCalculation:
    points = 0.0
    credits = 0
    counted: list[CourseGrade] = []
    for c in courses:
        gp = grade_points(c.grade)
        if gp is None:
            continue
        points += gp * c.credit_hours
        credits += c.credit_hours
        counted.append(c.model_copy(update={"grade_points": gp}))
    return GpaCalculation(
        current_gpa=round(points / credits, 2) if credits else 0.0,
        total_credits=credits,
        cumulative_points=points,
        courses=counted,
    )


def what_if(current: GpaCalculation, future: Sequence[FutureCourse]) -> WhatIfResult:
    points = current.cumulative_points
    credits = current.total_credits
    for f in future:
        gp = grade_points(f.grade)
        if gp is None:
            continue
        points += gp * f.credits
        credits += f.credits
    projected = round(points / credits, 2) if credits else 0.0
    return WhatIfResult(
        projected_gpa=projected,
        projected_credits=credits,
        message=(
            f"Current GPA: {_fmt(current.current_gpa)} ({current.total_credits} credits)"
            f" → Projected GPA: {_fmt(projected)} ({credits} credits)"
        ),
    )


def gpa_needed(current: GpaCalculation, target: float, remaining_credits: int) -> str:
    if remaining_credits <= 0:
        return "No remaining credits to calculate."

    total_credits = current.total_credits + remaining_credits
    needed = (target * total_credits - current.cumulative_points) / remaining_credits
    if needed > MAX_GPA:
        return (
            f"Target GPA of {_fmt(target)} is not achievable even with perfect 4.0 "
            f"in remaining {remaining_credits} credits."
        )
    if needed < 0:
        return (
            f"You've already exceeded the target GPA of {_fmt(target)}! "
            f"Current GPA: {_fmt(current.current_gpa)}"
        )
    return (
        f"To reach {_fmt(target)} GPA, you need an average of {_fmt(needed)} "
        f"in your next {remaining_credits} credits."
    )


def check_prerequisites(
    course_code: str,
    course_found: bool,
    prerequisites: Sequence[Tuple[str, str]],
    passed_codes: Iterable[str],
) -> PrerequisiteCheckResult:
    """
    `prerequisites` is (code, name) pairs; `passed_codes` are completed courses
    with a passing grade. Code comparison ignores case.
    """
    if not course_found:
        return PrerequisiteCheckResult(
            can_enroll=False, message=f"Course {course_code} not found."
        )
    if not prerequisites:
        return PrerequisiteCheckResult(
            message=f"No prerequisites required for {course_code}."
        )

    passed = {c.strip().upper() for c in passed_codes}
    missing = [
        f"{code} - {name}"
        for code, name in prerequisites
        if code.strip().upper() not in passed
    ]
    if missing:
        return PrerequisiteCheckResult(
            can_enroll=False,
            missing_prerequisites=missing,
            message=(
                f"Cannot enroll in {course_code}. Missing prerequisites: "
                + ", ".join(missing)
            ),
        )
    return PrerequisiteCheckResult(message=f"✓ All prerequisites met for {course_code}.")


def check_conflicts(
    course_code: str,
    term: str,
    year: int,
    completed: Optional[Tuple[Optional[str], Optional[str], Optional[int]]],
    planned: Optional[Tuple[Optional[str], Optional[int]]],
    typical_terms: Optional[str],
) -> ConflictResult:
    """
    completed: (grade, term, year) of a completed attempt, if any.
    planned: (term, year) of an existing plan entry, if any.
    typical_terms: free text like "Fall, Spring"; empty means no data.
    """
    conflicts: list[str] = []
    warnings: list[str] = []

    if completed is not None:
        grade, c_term, c_year = completed
        conflicts.append(
            f"Already completed {course_code} with grade {grade or ''} in "
            f"{c_term or ''} {c_year if c_year is not None else ''}"
        )

    if planned is not None:
        p_term, p_year = planned
        if (p_term or "").lower() == term.lower() and p_year == year:
            conflicts.append(f"Already planned for {term} {year}")
        else:
            conflicts.append(
                f"Already planned for {p_term or ''} {p_year if p_year is not None else ''}"
            )

    offered = (typical_terms or "").strip()
    if offered and term.lower() not in offered.lower():
        warnings.append(f"{course_code} is typically offered in {offered}, not {term}")

    if conflicts:
        message = f"Cannot add {course_code}:\n" + "\n".join(conflicts)
    elif warnings:
        message = f"Warning for {course_code}:\n" + "\n".join(warnings)
    else:
        message = f"{course_code} can be added to {term} {year}."

    return ConflictResult(
        course_code=course_code,
        has_conflicts=bool(conflicts),
        conflicts=conflicts,
        warnings=warnings,
        message=message,
    )
