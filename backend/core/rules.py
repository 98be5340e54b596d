from typing import List, Optional, Protocol

from backend.core.equivalence import resolve_equivalents
from backend.core.grades import FAILING_GRADE, MISSING_GRADE, grade_value
from backend.core.models import (
    EquivalenceSet,
    EquivalentCourse,
    RequirementCourse,
    RequirementResult,
    RequirementTree,
    SubjectRecord,
    TranscriptDocument,
    keys_match,
)


class AdmissionRule(Protocol):
    def evaluate(self, document: TranscriptDocument) -> RequirementResult: ...


def explain(result: RequirementResult) -> str:
    if result.is_met:
        if result.met_by_alternative:
            return (f"{result.requirement_name} OK via alternative "
                    f"{result.alternative_course_name} (grade={result.alternative_course_grade})")
        return f"{result.requirement_name} OK (grade={result.student_grade}, required={result.required_grade})"
    if result.failed:
        return f"{result.requirement_name}: failed (grade={result.student_grade})"
    if result.student_grade == MISSING_GRADE:
        msg = f"{result.requirement_name}: missing"
    else:
        msg = (f"{result.requirement_name}: grade {result.student_grade} "
               f"< required {result.required_grade}")
    if result.met_by_higher_level:
        msg += (f" (higher level {result.higher_level_course_name} "
                f"grade={result.higher_level_course_grade} does not count)")
    return msg


class CourseRequirementRule:
    """
    One requirement course checked against a transcript.

    A subject whose name or code equals the requirement name is a direct match;
    anything else is looked up in the equivalence set (first entry wins).
    Same-level equivalents satisfy the requirement, higher-level ones are only
    reported. A zero grade on the direct course or on any equivalent forces
    "not met" and reports "F", even after a pass elsewhere.
    """

    def __init__(self, course: RequirementCourse, equivalents: EquivalenceSet):
        self.course = course
        self.equivalents = equivalents
        self.required_value = grade_value(course.required_grade)

    @classmethod
    def for_tree(cls, course: RequirementCourse, tree: RequirementTree) -> "CourseRequirementRule":
        return cls(course, resolve_equivalents(course.name, tree))

    def _equivalent_for(self, subject: SubjectRecord) -> Optional[EquivalentCourse]:
        for eq in self.equivalents:
            if keys_match(eq.name, subject.name) or keys_match(eq.code, subject.code):
                return eq
        return None

    def evaluate(self, document: TranscriptDocument) -> RequirementResult:
        name = self.course.name
        required = self.required_value

        is_met = False
        failed = False
        student_grade = MISSING_GRADE
        fulfilling = name
        alt_name: Optional[str] = None
        alt_grade: Optional[str] = None
        higher_name: Optional[str] = None
        higher_grade: Optional[str] = None
        other_grades: List[str] = []

        for subject in document.subjects:
            grade = (subject.grade or "").strip()
            value = grade_value(grade)

            if keys_match(subject.name, name) or keys_match(subject.code, name):
                if value >= required and value > 0:
                    is_met = True
                    student_grade = grade
                    fulfilling = name
                elif value == 0:
                    failed = True
                    student_grade = grade
                    fulfilling = name
                elif not is_met:
                    student_grade = grade
                continue

            eq = self._equivalent_for(subject)
            if eq is None:
                continue

            if value >= required and value > 0:
                if eq.level == self.course.level:
                    is_met = True
                    student_grade = grade
                    fulfilling = eq.name
                    alt_name, alt_grade = eq.name, grade
                elif eq.level > self.course.level:
                    higher_name, higher_grade = eq.name, grade
            elif value == 0:
                failed = True
                other_grades.append(f"{subject.name}: {subject.grade}")
            else:
                other_grades.append(f"{subject.name}: {subject.grade}")

        if failed:
            is_met = False
            student_grade = FAILING_GRADE

        return RequirementResult(
            requirement_name=name,
            course_name=fulfilling,
            required_grade=self.course.required_grade,
            is_met=is_met,
            student_grade=student_grade,
            failed=failed,
            met_by_alternative=alt_name is not None,
            alternative_course_name=alt_name,
            alternative_course_grade=alt_grade,
            met_by_higher_level=higher_name is not None,
            higher_level_course_name=higher_name,
            higher_level_course_grade=higher_grade,
            other_grades=other_grades,
            equivalence_resolved=self.equivalents.resolved,
        )


class AndRule:
    def __init__(self, *rules):
        self.rules = list(rules)

    def evaluate_all(self, document: TranscriptDocument) -> List[RequirementResult]:
        return [r.evaluate(document) for r in self.rules]
