# model/student.py
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field
from util.functions import normalize_code


class CourseStatus(str, Enum):
    completed = "Completed"
    in_progress = "In Progress"


class CourseRecord(BaseModel):
    code: str
    title: str = ""
    credit_hours: int = 0
    grade: Optional[str] = None
    term: Optional[str] = None
    year: Optional[int] = None
    status: CourseStatus = CourseStatus.completed


class StudentSnapshot(BaseModel):
    """
    Authoritative student facts from the records database, built once per
    session. Consumed directly by the recommender and prompt builder; rendered
    to text only when a prompt or profile answer needs it.
    """

    student_id: int
    name: str = "Student"
    major: str = "Undeclared"
    enrollment_year: Optional[int] = None
    enrollment_status: str = "Active"
    gpa: Optional[float] = None
    credits_earned: int = 0
    credits_required: int = 120
    degree_code: str = ""
    courses: list[CourseRecord] = Field(default_factory=list)
    # RequirementCategory -> earned credits
    requirement_progress: dict[str, int] = Field(default_factory=dict)
    core_credits: int = 0

    @property
    def completed(self) -> list[CourseRecord]:
        return [c for c in self.courses if c.status == CourseStatus.completed]

    @property
    def in_progress(self) -> list[CourseRecord]:
        return [c for c in self.courses if c.status == CourseStatus.in_progress]

    def completed_codes(self) -> set[str]:
        """Codes the recommender must not surface again (completed or in progress)."""
        return {normalize_code(c.code) for c in self.courses if c.code}
