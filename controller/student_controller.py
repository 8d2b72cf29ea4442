# controller/student_controller.py
from fastapi import APIRouter, Depends, Query
from model.advisory import ConflictResult, FutureCourse
from model.api import (
    ConflictCheckRequest,
    ConflictResponse,
    CourseGradeOut,
    GpaNeededResponse,
    GpaResponse,
    PrerequisiteResponse,
    WhatIfRequest,
    WhatIfResponse,
)
from service.advisory_service import AdvisoryService
from util.constants import InternalURIs
from controller.controller_dependencies import get_advisory_service, rate_limit

student_router = APIRouter(dependencies=[Depends(rate_limit)])


def _conflict(r: ConflictResult) -> ConflictResponse:
    return ConflictResponse(
        courseCode=r.course_code,
        hasConflicts=r.has_conflicts,
        conflicts=r.conflicts,
        warnings=r.warnings,
        message=r.message,
    )


@student_router.get(InternalURIs.STUDENT_PREREQUISITES, response_model=PrerequisiteResponse)
async def check_prerequisites(
    student_id: int,
    course_code: str,
    service: AdvisoryService = Depends(get_advisory_service),
) -> PrerequisiteResponse:
    r = await service.check_prerequisites(student_id, course_code)
    return PrerequisiteResponse(
        canEnroll=r.can_enroll,
        missingPrerequisites=r.missing_prerequisites,
        message=r.message,
    )


@student_router.get(InternalURIs.STUDENT_CONFLICTS, response_model=list[ConflictResponse])
async def plan_conflicts(
    student_id: int, service: AdvisoryService = Depends(get_advisory_service)
) -> list[ConflictResponse]:
    return [_conflict(r) for r in await service.get_all_plan_conflicts(student_id)]


@student_router.post(InternalURIs.STUDENT_CONFLICTS_CHECK, response_model=ConflictResponse)
async def check_conflicts(
    student_id: int,
    payload: ConflictCheckRequest,
    service: AdvisoryService = Depends(get_advisory_service),
) -> ConflictResponse:
    r = await service.check_course_conflicts(
        student_id, payload.courseCode, payload.term, payload.year
    )
    return _conflict(r)


@student_router.get(InternalURIs.STUDENT_GPA, response_model=GpaResponse)
async def current_gpa(
    student_id: int, service: AdvisoryService = Depends(get_advisory_service)
) -> GpaResponse:
    g = await service.calculate_current_gpa(student_id)
    return GpaResponse(
        currentGpa=g.current_gpa,
        totalCredits=g.total_credits,
        cumulativePoints=round(g.cumulative_points, 2),
        courses=[
            CourseGradeOut(
                courseCode=c.course_code,
                courseName=c.course_name,
                creditHours=c.credit_hours,
                grade=c.grade,
                gradePoints=c.grade_points,
                term=c.term,
                year=c.year,
            )
            for c in g.courses
        ],
    )


@student_router.post(InternalURIs.STUDENT_GPA_WHAT_IF, response_model=WhatIfResponse)
async def what_if_gpa(
    student_id: int,
    payload: WhatIfRequest,
    service: AdvisoryService = Depends(get_advisory_service),
) -> WhatIfResponse:
    future = [
        FutureCourse(course_code=c.courseCode, credits=c.credits, grade=c.grade)
        for c in payload.courses
    ]
    r = await service.calculate_what_if_gpa(student_id, future)
    return WhatIfResponse(
        projectedGpa=r.projected_gpa, projectedCredits=r.projected_credits, message=r.message
    )


@student_router.get(InternalURIs.STUDENT_GPA_NEEDED, response_model=GpaNeededResponse)
async def gpa_needed(
    student_id: int,
    target: float = Query(..., ge=0, le=4.0),
    remaining: int = Query(..., alias="remainingCredits"),
    service: AdvisoryService = Depends(get_advisory_service),
) -> GpaNeededResponse:
    message = await service.calculate_gpa_needed(student_id, target, remaining)
    return GpaNeededResponse(message=message)
