import logging
from typing import Dict, List, Optional

from backend.core.models import (
    RequirementReport,
    RequirementResult,
    RequirementTree,
    TranscriptDocument,
    normalize_key,
)
from backend.core.rule_factory import RuleFactory
from backend.core.rules import explain

logger = logging.getLogger("transcripts.engine")


def meets_all_requirements(results: Dict[str, RequirementResult]) -> bool:
    return all(r.is_met for r in results.values())


class EligibilityEngine:
    def __init__(self, tree: Optional[RequirementTree]):
        # raises ConfigurationError for a missing/empty tree
        self.factory = RuleFactory(tree)

    def evaluate(self, document: TranscriptDocument) -> Dict[str, RequirementResult]:
        results: Dict[str, RequirementResult] = {}
        for res in self.factory.build().evaluate_all(document):
            if not res.equivalence_resolved:
                logger.info("requirement %r not found in its own tree; checked on its own", res.requirement_name)
            # a later course with the same (case-insensitive) name replaces the earlier one
            results[normalize_key(res.requirement_name)] = res
        return results

    def evaluate_report(self, document: TranscriptDocument) -> RequirementReport:
        results = self.evaluate(document)
        explanations: List[str] = [explain(r) for r in results.values()]
        passed_all = meets_all_requirements(results)
        logger.debug("evaluated %d requirements for %r: passed=%s",
                     len(results), document.document_name, passed_all)
        return RequirementReport(results=results, meets_all=passed_all, explanations=explanations)


def evaluate_requirements(document: TranscriptDocument,
                          tree: Optional[RequirementTree]) -> Dict[str, RequirementResult]:
    return EligibilityEngine(tree).evaluate(document)
