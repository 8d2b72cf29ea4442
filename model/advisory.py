# model/advisory.py
from typing import Optional
from pydantic import BaseModel, Field


class PrerequisiteCheckResult(BaseModel):
    can_enroll: bool = True
    missing_prerequisites: list[str] = Field(default_factory=list)
    message: str = ""


class ConflictResult(BaseModel):
    course_code: str = ""
    has_conflicts: bool = False
    conflicts: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    message: str = ""


class CourseGrade(BaseModel):
    course_code: str
    course_name: str = ""
    credit_hours: int
    grade: str
    grade_points: float = 0.0
    term: Optional[str] = None
    year: Optional[int] = None


class GpaCalculation(BaseModel):
    current_gpa: float = 0.0
    total_credits: int = 0
    cumulative_points: float = 0.0
    courses: list[CourseGrade] = Field(default_factory=list)


class FutureCourse(BaseModel):
    course_code: str = ""
    credits: int = Field(ge=0)
    grade: str


class WhatIfResult(BaseModel):
    projected_gpa: float
    projected_credits: int
    message: str
