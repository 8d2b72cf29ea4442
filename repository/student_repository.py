# repository/student_repository.py
from typing import List, Optional, Tuple
from sqlalchemy import bindparam, text
from repository.sql_repository import Row, SqlRepository

CORE_DEPARTMENTS: Tuple[str, ...] = (
    "English",
    "Communication",
    "Mathematics",
    "Economics",
    "Philosophy",
    "Psychology",
)

_SUMMARY_SQL = """
SELECT
    CONCAT(s.FirstName, ' ', s.LastName) AS FullName,
    s.StudentID,
    s.Major,
    s.CurrentGPA,
    s.TotalCreditsEarned,
    s.EnrollmentStatus,
    s.EnrollmentYear,
    COALESCE(dp.TotalCreditsRequired, 120) AS TotalCreditsRequired,
    COALESCE(dp.DegreeCode, '') AS DegreeCode
FROM Students s
LEFT JOIN DegreePrograms dp ON s.Major = dp.DegreeName
WHERE s.StudentID = :student_id
LIMIT 1
"""

_HISTORY_SQL = """
SELECT
    c.CourseCode,
    c.CourseName,
    c.CreditHours,
    sch.Grade,
    sch.Term,
    sch.AcademicYear,
    sch.Status
FROM StudentCourseHistory sch
JOIN Courses c ON sch.CourseID = c.CourseID
WHERE sch.StudentID = :student_id
  AND sch.Status IN ('Completed', 'In Progress')
ORDER BY sch.AcademicYear DESC, sch.Term DESC
"""

_REQUIREMENT_PROGRESS_SQL = """
SELECT
    dr.RequirementCategory,
    SUM(c.CreditHours) AS EarnedCredits
FROM StudentCourseHistory sch
JOIN Students s ON sch.StudentID = s.StudentID
JOIN DegreePrograms dp ON s.Major = dp.DegreeName
JOIN Courses c ON sch.CourseID = c.CourseID
JOIN DegreeRequirements dr ON c.CourseID = dr.CourseID AND dr.DegreeID = dp.DegreeID
WHERE sch.StudentID = :student_id
  AND sch.Status = 'Completed'
GROUP BY dr.RequirementCategory
ORDER BY dr.RequirementCategory
"""

_CORE_CREDITS_SQL = text(
    """
SELECT COALESCE(SUM(c.CreditHours), 0) AS CoreCredits
FROM StudentCourseHistory sch
JOIN Courses c ON sch.CourseID = c.CourseID
WHERE sch.StudentID = :student_id
  AND c.Department IN :departments
  AND sch.Status = 'Completed'
"""
).bindparams(bindparam("departments", expanding=True))

_COURSE_ID_SQL = "SELECT CourseID FROM Courses WHERE CourseCode = :course_code LIMIT 1"

_PREREQUISITES_SQL = """
SELECT c.CourseCode, c.CourseName
FROM CoursePrerequisites cp
JOIN Courses c ON cp.PrerequisiteCourseID = c.CourseID
WHERE cp.CourseID = :course_id
ORDER BY cp.PrerequisiteGroup, c.CourseCode
"""

_PASSED_CODES_SQL = """
SELECT c.CourseCode
FROM StudentCourseHistory sch
JOIN Courses c ON sch.CourseID = c.CourseID
WHERE sch.StudentID = :student_id
  AND sch.Status = 'Completed'
  AND (sch.Grade IS NULL OR sch.Grade NOT IN ('F', 'W', 'I'))
"""

_COMPLETED_ATTEMPT_SQL = """
SELECT sch.Grade, sch.Term, sch.AcademicYear
FROM StudentCourseHistory sch
JOIN Courses c ON sch.CourseID = c.CourseID
WHERE sch.StudentID = :student_id
  AND c.CourseCode = :course_code
  AND sch.Status = 'Completed'
LIMIT 1
"""

_PLANNED_ENTRY_SQL = """
SELECT pc.PlannedTerm, pc.PlannedYear
FROM PlannedCourses pc
JOIN Courses c ON pc.CourseID = c.CourseID
JOIN StudentDegreePlans sdp ON pc.PlanID = sdp.PlanID
WHERE sdp.StudentID = :student_id
  AND c.CourseCode = :course_code
  AND (sdp.IsActive = 1 OR sdp.IsActive IS NULL)
LIMIT 1
"""

_TYPICAL_TERMS_SQL = """
SELECT TypicalTermsOffered
FROM Courses
WHERE CourseCode = :course_code
LIMIT 1
"""

_PLANNED_COURSES_SQL = """
SELECT c.CourseCode, pc.PlannedTerm, pc.PlannedYear
FROM PlannedCourses pc
JOIN Courses c ON pc.CourseID = c.CourseID
JOIN StudentDegreePlans sdp ON pc.PlanID = sdp.PlanID
WHERE sdp.StudentID = :student_id
  AND (sdp.IsActive = 1 OR sdp.IsActive IS NULL)
ORDER BY pc.PlannedYear, pc.PlannedTerm
"""

_GRADED_HISTORY_SQL = """
SELECT
    c.CourseCode,
    c.CourseName,
    c.CreditHours,
    sch.Grade,
    sch.Term,
    sch.AcademicYear
FROM StudentCourseHistory sch
JOIN Courses c ON sch.CourseID = c.CourseID
WHERE sch.StudentID = :student_id
  AND sch.Status = 'Completed'
  AND sch.Grade NOT IN ('W', 'I', 'P')
ORDER BY sch.AcademicYear DESC, sch.Term DESC
"""


class StudentRepository(SqlRepository):
    """Read-only access to student records, history, plans and course metadata."""

    # ---------------- Profile ----------------

    async def get_summary(self, student_id: int) -> Optional[Row]:
        return await self._fetch_one(
            "student.summary", _SUMMARY_SQL, {"student_id": student_id}
        )

    async def get_course_history(self, student_id: int) -> List[Row]:
        return await self._fetch_all(
            "student.history", _HISTORY_SQL, {"student_id": student_id}
        )

    async def get_requirement_progress(self, student_id: int) -> List[Row]:
        return await self._fetch_all(
            "student.requirements",
            _REQUIREMENT_PROGRESS_SQL,
            {"student_id": student_id},
        )

    async def get_core_credits(self, student_id: int) -> int:
        row = await self._fetch_one(
            "student.core",
            _CORE_CREDITS_SQL,
            {"student_id": student_id, "departments": list(CORE_DEPARTMENTS)},
        )
        return int((row or {}).get("CoreCredits") or 0)

    # ---------------- Prerequisites ----------------

    async def find_course_id(self, course_code: str) -> Optional[int]:
        row = await self._fetch_one(
            "course.id", _COURSE_ID_SQL, {"course_code": course_code}
        )
        return int(row["CourseID"]) if row else None

    async def get_prerequisites(self, course_id: int) -> List[Tuple[str, str]]:
        rows = await self._fetch_all(
            "course.prerequisites", _PREREQUISITES_SQL, {"course_id": course_id}
        )
        return [(str(r["CourseCode"] or ""), str(r["CourseName"] or "")) for r in rows]

    async def get_passed_course_codes(self, student_id: int) -> List[str]:
        rows = await self._fetch_all(
            "student.passed", _PASSED_CODES_SQL, {"student_id": student_id}
        )
        return [str(r["CourseCode"]) for r in rows if r["CourseCode"]]

    # ---------------- Plan conflicts ----------------

    async def find_completed_attempt(
        self, student_id: int, course_code: str
    ) -> Optional[Row]:
        return await self._fetch_one(
            "student.completed_attempt",
            _COMPLETED_ATTEMPT_SQL,
            {"student_id": student_id, "course_code": course_code},
        )

    async def find_planned_entry(
        self, student_id: int, course_code: str
    ) -> Optional[Row]:
        return await self._fetch_one(
            "student.planned_entry",
            _PLANNED_ENTRY_SQL,
            {"student_id": student_id, "course_code": course_code},
        )

    async def get_typical_terms(self, course_code: str) -> Optional[str]:
        row = await self._fetch_one(
            "course.terms", _TYPICAL_TERMS_SQL, {"course_code": course_code}
        )
        if not row or row["TypicalTermsOffered"] is None:
            return None
        return str(row["TypicalTermsOffered"])

    async def get_planned_courses(self, student_id: int) -> List[Row]:
        return await self._fetch_all(
            "student.planned", _PLANNED_COURSES_SQL, {"student_id": student_id}
        )

    # ---------------- GPA ----------------

    async def get_graded_history(self, student_id: int) -> List[Row]:
        return await self._fetch_all(
            "student.graded", _GRADED_HISTORY_SQL, {"student_id": student_id}
        )
