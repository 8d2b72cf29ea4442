# service/advisory_service.py
from typing import List, Sequence
from core import advisory
from model.advisory import (
    ConflictResult,
    CourseGrade,
    FutureCourse,
    GpaCalculation,
    PrerequisiteCheckResult,
    WhatIfResult,
)
from repository.student_repository import StudentRepository
from util.functions import normalize_code, normalize_term
import logging

logger = logging.getLogger(__name__)


def _year(value) -> int | None:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


class AdvisoryService:
    """Prerequisite, plan-conflict and GPA checks over the records database."""

    def __init__(self, students: StudentRepository) -> None:
        self._students = students

    async def check_prerequisites(
        self, student_id: int, course_code: str
    ) -> PrerequisiteCheckResult:
        code = normalize_code(course_code)
        course_id = await self._students.find_course_id(code)
        if course_id is None:
            return advisory.check_prerequisites(code, False, [], [])

        prerequisites = await self._students.get_prerequisites(course_id)
        passed: List[str] = []
        if prerequisites:
            passed = await self._students.get_passed_course_codes(student_id)
        result = advisory.check_prerequisites(code, True, prerequisites, passed)
        logger.info(
            "advisory.prereq student=%s course=%s missing=%d",
            student_id,
            code,
            len(result.missing_prerequisites),
        )
        return result

    async def check_course_conflicts(
        self, student_id: int, course_code: str, term: str, year: int
    ) -> ConflictResult:
        code = normalize_code(course_code)
        term = normalize_term(term)

        completed_row = await self._students.find_completed_attempt(student_id, code)
        planned_row = await self._students.find_planned_entry(student_id, code)
        offered = await self._students.get_typical_terms(code)

        completed = (
            (
                completed_row.get("Grade"),
                completed_row.get("Term"),
                _year(completed_row.get("AcademicYear")),
            )
            if completed_row
            else None
        )
        planned = (
            (planned_row.get("PlannedTerm"), _year(planned_row.get("PlannedYear")))
            if planned_row
            else None
        )
        return advisory.check_conflicts(code, term, year, completed, planned, offered)

    async def get_all_plan_conflicts(self, student_id: int) -> List[ConflictResult]:
        out: List[ConflictResult] = []
        for row in await self._students.get_planned_courses(student_id):
            code = str(row.get("CourseCode") or "")
            year = _year(row.get("PlannedYear"))
            if not code or year is None:
                continue
            result = await self.check_course_conflicts(
                student_id, code, str(row.get("PlannedTerm") or ""), year
            )
            if result.has_conflicts or result.warnings:
                out.append(result)
        logger.info("advisory.plan.conflicts student=%s count=%d", student_id, len(out))
        return out

    async def calculate_current_gpa(self, student_id: int) -> GpaCalculation:
        rows = await self._students.get_graded_history(student_id)
        courses = [
            CourseGrade(
                course_code=str(r.get("CourseCode") or ""),
                course_name=str(r.get("CourseName") or ""),
                credit_hours=int(r.get("CreditHours") or 0),
                grade=str(r.get("Grade") or ""),
                term=r.get("Term"),
                year=_year(r.get("AcademicYear")),
            )
            for r in rows
        ]
        return advisory.calculate_gpa(courses)

    async def calculate_what_if_gpa(
        self, student_id: int, future: Sequence[FutureCourse]
    ) -> WhatIfResult:
        current = await self.calculate_current_gpa(student_id)
        return advisory.what_if(current, future)

    async def calculate_gpa_needed(
        self, student_id: int, target: float, remaining_credits: int
    ) -> str:
        current = await self.calculate_current_gpa(student_id)
        return advisory.gpa_needed(current, target, remaining_credits)
