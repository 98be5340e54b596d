from typing import List, Optional

from backend.core.equivalence import ensure_tree
from backend.core.models import RequirementTree
from backend.core.rules import AndRule, CourseRequirementRule


class RuleFactory:
    """
    Build requirement rules from a requirement tree.
    One CourseRequirementRule per course, in tree order; the engine runs them.
    """

    def __init__(self, tree: Optional[RequirementTree]) -> None:
        self.tree = ensure_tree(tree)

    def course_rules(self) -> List[CourseRequirementRule]:
        return [CourseRequirementRule.for_tree(course, self.tree) for course in self.tree.courses()]

    def build(self) -> AndRule:
        return AndRule(*self.course_rules())
