"""
Tests for prerequisite, plan-conflict and GPA checks
"""
import asyncio
from unittest.mock import AsyncMock, Mock
import pytest
from core import advisory
from model.advisory import CourseGrade, FutureCourse
from service.advisory_service import AdvisoryService


def _grade(code, credits, grade):
    return CourseGrade(course_code=code, credit_hours=credits, grade=grade)


class TestGradePoints:
    @pytest.mark.parametrize(
        "grade,points",
        [("A", 4.0), ("a-", 3.7), ("B+", 3.3), ("C", 2.0), ("D-", 0.7), ("F", 0.0)],
    )
    def test_scale(self, grade, points):
        assert advisory.grade_points(grade) == points

    @pytest.mark.parametrize("grade", ["W", "I", "P", "", None, "E"])
    def test_non_graded(self, grade):
        assert advisory.grade_points(grade) is None


class TestGpaMath:
    def setup_method(self):
        self.current = advisory.calculate_gpa(
            [_grade("CS 215", 3, "A"), _grade("CS 311", 3, "B"), _grade("ENG 101", 3, "W")]
        )

    def test_current(self):
        assert self.current.current_gpa == 3.5
        assert self.current.total_credits == 6
        assert self.current.cumulative_points == 21.0
        assert [c.grade_points for c in self.current.courses] == [4.0, 3.0]

    def test_no_courses(self):
        assert advisory.calculate_gpa([]).current_gpa == 0.0

    def test_what_if(self):
        result = advisory.what_if(
            self.current,
            [FutureCourse(course_code="CS 420", credits=3, grade="C"), FutureCourse(credits=3, grade="P")],
        )

        assert result.projected_gpa == 3.0
        assert result.projected_credits == 9
        assert result.message == "Current GPA: 3.5 (6 credits) → Projected GPA: 3 (9 credits)"

    def test_needed_reachable(self):
        assert advisory.gpa_needed(self.current, 3.6, 6) == (
            "To reach 3.6 GPA, you need an average of 3.7 in your next 6 credits."
        )

    def test_needed_unreachable(self):
        assert advisory.gpa_needed(self.current, 4.0, 3).startswith("Target GPA of 4 is not achievable")

    def test_needed_already_exceeded(self):
        assert advisory.gpa_needed(self.current, 1.0, 3) == (
            "You've already exceeded the target GPA of 1! Current GPA: 3.5"
        )

    def test_needed_no_credits(self):
        assert advisory.gpa_needed(self.current, 3.0, 0) == "No remaining credits to calculate."


class TestPrerequisites:
    def test_unknown_course(self):
        r = advisory.check_prerequisites("CS 999", False, [], [])
        assert not r.can_enroll
        assert r.message == "Course CS 999 not found."

    def test_none_required(self):
        r = advisory.check_prerequisites("CS 215", True, [], [])
        assert r.can_enroll
        assert r.message == "No prerequisites required for CS 215."

    def test_missing_listed(self):
        r = advisory.check_prerequisites(
            "CS 311", True, [("CS 215", "Intro Programming"), ("MATH 215", "Calculus")], ["cs 215"]
        )
        assert not r.can_enroll
        assert r.missing_prerequisites == ["MATH 215 - Calculus"]
        assert r.message == "Cannot enroll in CS 311. Missing prerequisites: MATH 215 - Calculus"

    def test_all_met(self):
        r = advisory.check_prerequisites("CS 311", True, [("CS 215", "Intro")], ["CS 215"])
        assert r.can_enroll
        assert r.message == "✓ All prerequisites met for CS 311."


class TestConflicts:
    def test_clear(self):
        r = advisory.check_conflicts("CS 311", "Fall", 2025, None, None, "Fall, Spring")
        assert not r.has_conflicts and r.warnings == []
        assert r.message == "CS 311 can be added to Fall 2025."

    def test_completed_and_planned(self):
        r = advisory.check_conflicts("CS 311", "Fall", 2025, ("A", "Fall", 2023), ("fall", 2025), None)
        assert r.has_conflicts
        assert r.conflicts == [
            "Already completed CS 311 with grade A in Fall 2023",
            "Already planned for Fall 2025",
        ]
        assert r.message.startswith("Cannot add CS 311:\n")

    def test_planned_other_term(self):
        r = advisory.check_conflicts("CS 311", "Fall", 2025, None, ("Spring", 2026), None)
        assert r.conflicts == ["Already planned for Spring 2026"]

    def test_term_warning(self):
        r = advisory.check_conflicts("CS 311", "Summer", 2025, None, None, "Fall, Spring")
        assert not r.has_conflicts
        assert r.warnings == ["CS 311 is typically offered in Fall, Spring, not Summer"]
        assert r.message == "Warning for CS 311:\nCS 311 is typically offered in Fall, Spring, not Summer"


class TestAdvisoryService:
    def setup_method(self):
        self.repo = Mock()
        self.repo.find_course_id = AsyncMock(return_value=11)
        self.repo.get_prerequisites = AsyncMock(return_value=[("CS 215", "Intro Programming")])
        self.repo.get_passed_course_codes = AsyncMock(return_value=[])
        self.repo.find_completed_attempt = AsyncMock(return_value=None)
        self.repo.find_planned_entry = AsyncMock(return_value=None)
        self.repo.get_typical_terms = AsyncMock(return_value="Fall")
        self.repo.get_planned_courses = AsyncMock(
            return_value=[
                {"CourseCode": "CS 311", "PlannedTerm": "Spring", "PlannedYear": 2025},
                {"CourseCode": "CS 420", "PlannedTerm": "Fall", "PlannedYear": 2025},
            ]
        )
        self.repo.get_graded_history = AsyncMock(
            return_value=[
                {"CourseCode": "CS 215", "CourseName": "Intro", "CreditHours": 3, "Grade": "A",
                 "Term": "Fall", "AcademicYear": 2023},
            ]
        )
        self.service = AdvisoryService(self.repo)

    def test_prerequisites_normalise_code(self):
        r = asyncio.run(self.service.check_prerequisites(7, "cs311"))

        self.repo.find_course_id.assert_awaited_once_with("CS311")
        assert r.missing_prerequisites == ["CS 215 - Intro Programming"]

    def test_plan_conflicts_keep_only_flagged(self):
        results = asyncio.run(self.service.get_all_plan_conflicts(7))

        assert [r.course_code for r in results] == ["CS 311"]
        assert results[0].warnings == ["CS 311 is typically offered in Fall, not Spring"]

    def test_conflict_term_is_normalised(self):
        r = asyncio.run(self.service.check_course_conflicts(7, "CS 420", "fall", 2025))

        assert r.message == "CS 420 can be added to Fall 2025."

    def test_gpa_endpoints(self):
        assert asyncio.run(self.service.calculate_current_gpa(7)).current_gpa == 4.0
        what_if = asyncio.run(
            self.service.calculate_what_if_gpa(7, [FutureCourse(credits=3, grade="B")])
        )
        assert what_if.projected_gpa == 3.5
        assert asyncio.run(self.service.calculate_gpa_needed(7, 1.0, 3)).startswith(
            "You've already exceeded"
        )
