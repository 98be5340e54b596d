import logging
from typing import Dict, List, Optional, Sequence, Tuple

from backend.core.equivalence import ensure_tree, resolve_equivalents
from backend.core.grades import MISSING_GRADE, grade_value
from backend.core.models import (
    CatalogCourse,
    MeritCourseConfig,
    MeritPointResult,
    RequirementTree,
    SubjectRecord,
    TranscriptDocument,
    keys_match,
    normalize_key,
)

logger = logging.getLogger("transcripts.merit")


def _matching_subject(document: TranscriptDocument, codes: Sequence[str]) -> Optional[SubjectRecord]:
    wanted = {normalize_key(c) for c in codes if normalize_key(c)}
    for s in document.subjects:
        if normalize_key(s.code) in wanted:
            return s
    return None


def index_catalog(catalog: Optional[Sequence[CatalogCourse]]) -> Dict[str, CatalogCourse]:
    index: Dict[str, CatalogCourse] = {}
    for c in catalog or []:
        key = normalize_key(c.code)
        if key:
            index[key] = c
    return index


class MeritCalculator:
    """
    Credit-weighted merit average over the configured course list.
    - Each entry is matched by course code: its own code or any alternative code
      (flat list, levels play no part here).
    - A matched transcript subject contributes grade value x its own points.
    - An entry nobody took but the catalog knows contributes 0 x catalog points.
    - An entry unknown to both is skipped: it adds nothing to numerator or denominator.
    Result rounded to 2 decimals; 0 when no points were counted.
    """

    def __init__(self, merit_courses: Optional[Sequence[MeritCourseConfig]],
                 catalog: Optional[Sequence[CatalogCourse]] = None):
        self.merit_courses = list(merit_courses or [])
        self.catalog = index_catalog(catalog)

    def _catalog_entry(self, codes: Sequence[str]) -> Optional[CatalogCourse]:
        for code in codes:
            found = self.catalog.get(normalize_key(code))
            if found is not None:
                return found
        return None

    def compute_average_with_breakdown(self, document: TranscriptDocument) -> Tuple[float, List[str]]:
        notes: List[str] = []
        total_w = 0
        total_ws = 0.0

        for entry in self.merit_courses:
            codes = entry.codes()
            subject = _matching_subject(document, codes)
            if subject is not None:
                value = grade_value(subject.grade)
                w = subject.credit_points
                notes.append(f"TAKEN {subject.name}: grade={subject.grade} value={value} points={w}")
            else:
                found = self._catalog_entry(codes)
                if found is None:
                    logger.debug("merit course %r not on transcript or in catalog; skipped", entry.code)
                    notes.append(f"SKIP {entry.name} ({entry.code}): unknown course")
                    continue
                value = 0.0
                w = found.points or 0
                notes.append(f"MISSING {entry.name}: value=0 points={w} (catalog)")
            total_ws += value * w
            total_w += w

        avg = 0.0 if total_w == 0 else round(total_ws / total_w, 2)
        notes.append(f"Average = {avg:.2f}, points={total_w}")
        return avg, notes

    def compute_average(self, document: TranscriptDocument) -> float:
        avg, _notes = self.compute_average_with_breakdown(document)
        return avg


def compute_merit(document: TranscriptDocument,
                  merit_courses: Optional[Sequence[MeritCourseConfig]],
                  catalog: Optional[Sequence[CatalogCourse]] = None) -> float:
    return MeritCalculator(merit_courses, catalog).compute_average(document)


def course_merit_points(document: TranscriptDocument,
                        merit_courses: Optional[Sequence[MeritCourseConfig]]) -> Dict[str, MeritPointResult]:
    """Per-course merit points, keyed by transcript subject name (or configured name when untaken)."""
    out: Dict[str, MeritPointResult] = {}
    for entry in merit_courses or []:
        alt_names = [a.name for a in entry.alternatives]
        first_alt = alt_names[0] if alt_names else None
        subject = _matching_subject(document, entry.codes())
        if subject is not None:
            out[subject.name] = MeritPointResult(
                course_name=subject.name,
                student_grade=subject.grade,
                merit_point=grade_value(subject.grade),
                original_course_name=entry.name,
                alternative_course_name=first_alt,
                alternative_names=alt_names,
            )
        else:
            out[entry.name] = MeritPointResult(
                course_name=entry.name,
                student_grade=MISSING_GRADE,
                merit_point=0.0,
                original_course_name=entry.name,
                alternative_course_name=first_alt,
                alternative_names=alt_names,
            )
    return out


def tree_average(document: TranscriptDocument, tree: Optional[RequirementTree]) -> float:
    """Weighted average over requirement courses flagged include_in_average."""
    tree = ensure_tree(tree)
    total_w = 0
    total_ws = 0.0

    for course in tree.courses():
        if not course.include_in_average:
            continue
        equivalents = resolve_equivalents(course.name, tree)
        for s in document.subjects:
            if any(keys_match(eq.name, s.name) or keys_match(eq.code, s.code) for eq in equivalents):
                w = s.credit_points
                total_ws += grade_value(s.grade) * w
                total_w += w
                logger.debug("%s: %s x %d", s.name, s.grade, w)
                break

    if total_w == 0:
        return 0.0
    return round(total_ws / total_w, 2)
