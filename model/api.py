# model/api.py
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field
from model.chat import ChatRole
from util.enums import ErrorKind, TurnState


class CreateSessionRequest(BaseModel):
    studentId: int = Field(ge=1)


class CreateSessionResponse(BaseModel):
    sessionId: str


class MessageOut(BaseModel):
    role: ChatRole
    content: str
    timestamp: datetime


class CitationOut(BaseModel):
    source: str
    page: int
    academicYear: Optional[str] = None


class TurnError(BaseModel):
    kind: ErrorKind
    message: Optional[str] = None


class SendMessageResponse(BaseModel):
    reply: Optional[str] = None
    citations: list[CitationOut] = Field(default_factory=list)
    messages: list[MessageOut] = Field(default_factory=list)
    error: Optional[TurnError] = None
    state: TurnState


class HistoryResponse(BaseModel):
    messages: list[MessageOut]


class OkResponse(BaseModel):
    ok: bool = True


class BulletinUploadResponse(BaseModel):
    pagesExtracted: int
    totalChars: int
    coursesFound: int
    locator: str


class DocumentUploadResponse(BaseModel):
    documentName: str
    locator: str


class PrerequisiteResponse(BaseModel):
    canEnroll: bool
    missingPrerequisites: list[str]
    message: str


class ConflictCheckRequest(BaseModel):
    courseCode: str = Field(min_length=1)
    term: str = Field(min_length=1)
    year: int = Field(ge=1900, le=2200)


class ConflictResponse(BaseModel):
    courseCode: str
    hasConflicts: bool
    conflicts: list[str]
    warnings: list[str]
    message: str


class CourseGradeOut(BaseModel):
    courseCode: str
    courseName: str
    creditHours: int
    grade: str
    gradePoints: float
    term: Optional[str] = None
    year: Optional[int] = None


class GpaResponse(BaseModel):
    currentGpa: float
    totalCredits: int
    cumulativePoints: float
    courses: list[CourseGradeOut]


class FutureCourseIn(BaseModel):
    courseCode: str = ""
    credits: int = Field(ge=0, le=12)
    grade: str = Field(min_length=1)


class WhatIfRequest(BaseModel):
    courses: list[FutureCourseIn] = Field(default_factory=list)


class WhatIfResponse(BaseModel):
    projectedGpa: float
    projectedCredits: int
    message: str


class GpaNeededResponse(BaseModel):
    message: str
