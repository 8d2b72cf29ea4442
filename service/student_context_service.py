# service/student_context_service.py
from typing import Any, Optional
from model.student import CourseRecord, CourseStatus, StudentSnapshot
from repository.sql_repository import Row
from repository.student_repository import StudentRepository
from util.errors import StudentNotFoundError
from util.functions import normalize_code
from util.timing import timed
import logging

logger = logging.getLogger(__name__)


def _int(value: Any, default: int = 0) -> int:
    try:
        return int(value) if value is not None else default
    except (TypeError, ValueError):
        return default


def _float(value: Any) -> Optional[float]:
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def _str(value: Any) -> Optional[str]:
    s = str(value).strip() if value is not None else ""
    return s or None


def _course(row: Row) -> CourseRecord:
    status = (
        CourseStatus.in_progress
        if _str(row.get("Status")) == CourseStatus.in_progress.value
        else CourseStatus.completed
    )
    return CourseRecord(
        code=normalize_code(row.get("CourseCode")),
        title=_str(row.get("CourseName")) or "",
        credit_hours=_int(row.get("CreditHours")),
        grade=_str(row.get("Grade")),
        term=_str(row.get("Term")),
        year=_int(row.get("AcademicYear")) or None,
        status=status,
    )


class StudentContextService:
    """
    Builds the StudentSnapshot the chat pipeline reasons over.

    Flow:
    - summary row (missing -> StudentNotFoundError)
    - course history (Completed + In Progress)
    - requirement-category credits and general-education (core) credits
    DataAccessError from the repository propagates unchanged; no retries.
    """

    def __init__(self, students: StudentRepository) -> None:
        self._students = students

    async def build(self, student_id: int) -> StudentSnapshot:
        with timed(logger, "student.context", student=student_id):
            summary = await self._students.get_summary(student_id)
            if summary is None:
                logger.warning("student.context.missing student=%s", student_id)
                raise StudentNotFoundError(student_id)

            history = await self._students.get_course_history(student_id)
            progress = await self._students.get_requirement_progress(student_id)
            core = await self._students.get_core_credits(student_id)

        snapshot = StudentSnapshot(
            student_id=student_id,
            name=_str(summary.get("FullName")) or "Student",
            major=_str(summary.get("Major")) or "Undeclared",
            enrollment_year=_int(summary.get("EnrollmentYear")) or None,
            enrollment_status=_str(summary.get("EnrollmentStatus")) or "Active",
            gpa=_float(summary.get("CurrentGPA")),
            credits_earned=_int(summary.get("TotalCreditsEarned")),
            credits_required=_int(summary.get("TotalCreditsRequired"), 120),
            degree_code=_str(summary.get("DegreeCode")) or "",
            courses=[_course(r) for r in history if _str(r.get("CourseCode"))],
            requirement_progress={
                str(r["RequirementCategory"]): _int(r.get("EarnedCredits"))
                for r in progress
                if _str(r.get("RequirementCategory"))
            },
            core_credits=core,
        )
        logger.info(
            "student.context.ok student=%s courses=%d in_progress=%d",
            student_id,
            len(snapshot.completed),
            len(snapshot.in_progress),
        )
        return snapshot
