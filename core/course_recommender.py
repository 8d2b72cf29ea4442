# core/course_recommender.py
from typing import Iterable, List
from model.catalog import CatalogCourse, DegreePlanParseResult
from util.functions import normalize_code


def recommend_next(
    plan: DegreePlanParseResult,
    completed_codes: Iterable[str],
    count: int = 6,
) -> List[CatalogCourse]:
    """
    Next courses to take: remaining required by course number, then remaining
    electives by code. Electives only appear when fewer than `count`
    required courses are left. An empty list means nothing to recommend.
    """
    if count <= 0:
        return []
    done = {normalize_code(c) for c in completed_codes}

    # sorted() is stable, so equal numbers keep catalog order
    remaining_required = sorted(
        (c for c in plan.required if normalize_code(c.code) not in done),
        key=lambda c: c.number,
    )
    if len(remaining_required) >= count:
        return remaining_required[:count]

    remaining_electives = sorted(
        (c for c in plan.electives if normalize_code(c.code) not in done),
        key=lambda c: c.code,
    )
    return (remaining_required + remaining_electives)[:count]
