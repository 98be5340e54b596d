import logging
from typing import List, Optional

from backend.core.errors import ConfigurationError
from backend.core.models import (
    EquivalenceSet,
    EquivalentCourse,
    RequirementCourse,
    RequirementTree,
    keys_match,
)

logger = logging.getLogger("transcripts.equivalence")


def _course_answers_to(course: RequirementCourse, query: str) -> bool:
    if keys_match(course.name, query) or keys_match(course.code, query):
        return True
    for alt in course.alternatives:
        if keys_match(alt.name, query) or keys_match(alt.code, query):
            return True
    return False


def ensure_tree(tree: Optional[RequirementTree]) -> RequirementTree:
    if tree is None or not tree.subjects:
        raise ConfigurationError("Course equivalents are missing or malformed.")
    return tree


def resolve_equivalents(query: str, tree: Optional[RequirementTree]) -> EquivalenceSet:
    """
    Courses that can stand in for `query`:
    - the first subject (tree order) holding a course whose name/code, or one of
      its alternatives' name/code, equals the query gives the pivot level;
    - every course of that subject at level >= pivot is emitted, each followed by
      its alternatives, which take the parent course's level.
    When no subject knows the query the set is the query alone at level 0 and
    `resolved` is False.
    """
    if tree is None:
        raise ConfigurationError("Course equivalents are missing or malformed.")

    for subject in tree.subjects:
        pivot = next((c for c in subject.courses if _course_answers_to(c, query)), None)
        if pivot is None:
            continue

        courses: List[EquivalentCourse] = []
        for c in subject.courses:
            if c.level < pivot.level:
                continue
            courses.append(EquivalentCourse(c.name, c.code, c.level))
            for alt in c.alternatives:
                courses.append(EquivalentCourse(alt.name, alt.code, c.level))
        return EquivalenceSet(query=query, courses=courses, resolved=True)

    logger.debug("no subject lists %r; treating it as its own only equivalent", query)
    return EquivalenceSet(
        query=query,
        courses=[EquivalentCourse(query, query, 0)],
        resolved=False,
    )
