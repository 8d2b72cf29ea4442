"""
Tests for small text helpers
"""
import pytest
from util.functions import clip_words, find_course_code, normalize_code, normalize_term


class TestFindCourseCode:
    @pytest.mark.parametrize(
        "text,code",
        [
            ("Is CS311 hard?", "CS 311"),
            ("What does MATH 215 cover?", "MATH 215"),
            ("Compare CS 420 and CS 430", "CS 420"),
        ],
    )
    def test_codes(self, text, code):
        assert find_course_code(text) == code

    @pytest.mark.parametrize(
        "text",
        [
            "Do I need 120 credits to graduate?",
            "Can I take over 18 credits in 2025?",
            "is cs311 hard?",
            "",
            None,
        ],
    )
    def test_ordinary_questions_have_no_code(self, text):
        assert find_course_code(text) is None


def test_normalize_code():
    assert normalize_code(" cs   311 ") == "CS 311"


def test_normalize_term():
    assert normalize_term("  sPRING ") == "Spring"
    assert normalize_term(None) == ""


def test_clip_words():
    assert clip_words("a b c", 5) == "a b c"
    assert clip_words("a b c d", 2) == "a b …"
