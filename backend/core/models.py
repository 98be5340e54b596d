import uuid
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Union, Any


def normalize_key(value: Optional[str]) -> str:
    """Trim + fold case once, so names and codes compare as plain strings."""
    return (value or "").strip().casefold()


def keys_match(a: Optional[str], b: Optional[str]) -> bool:
    # an empty name/code never identifies a course
    ka = normalize_key(a)
    return bool(ka) and ka == normalize_key(b)


def parse_points(value: Union[str, int, float, None]) -> int:
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    try:
        return int(str(value).strip())
    except ValueError:
        return 0


# ---------- transcript side ----------

@dataclass(frozen=True)
class SubjectRecord:
    name: str
    code: str
    grade: str
    points: Union[str, int, None] = 0
    # editing workflow only
    fuzzy_match_score: Optional[float] = None
    original_name: Optional[str] = None
    original_code: Optional[str] = None
    original_points: Union[str, int, None] = None

    @property
    def credit_points(self) -> int:
        return parse_points(self.points)


@dataclass
class TranscriptDocument:
    subjects: List[SubjectRecord] = field(default_factory=list)
    full_name: Optional[str] = None
    personal_id: Optional[str] = None
    has_valid_degree: Optional[str] = None
    document_name: Optional[str] = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def find(self, name_or_code: str) -> Optional[SubjectRecord]:
        for s in self.subjects:
            if keys_match(s.name, name_or_code) or keys_match(s.code, name_or_code):
                return s
        return None


# ---------- requirement configuration ----------

@dataclass
class AlternativeCourse:
    name: str
    code: str


@dataclass
class RequirementCourse:
    name: str
    code: str
    level: int = 0
    required_grade: str = ""
    include_in_average: bool = False
    alternatives: List[AlternativeCourse] = field(default_factory=list)


@dataclass
class RequirementSubject:
    name: str
    courses: List[RequirementCourse] = field(default_factory=list)


@dataclass
class RequirementTree:
    subjects: List[RequirementSubject] = field(default_factory=list)

    def courses(self) -> List[RequirementCourse]:
        return [c for s in self.subjects for c in s.courses]


@dataclass(frozen=True)
class EquivalentCourse:
    name: str
    code: str
    level: int


@dataclass(frozen=True)
class EquivalenceSet:
    query: str
    courses: List[EquivalentCourse]
    # False when nothing in the tree matched and `courses` is just the query itself
    resolved: bool = True

    def __iter__(self):
        return iter(self.courses)

    def __len__(self) -> int:
        return len(self.courses)


@dataclass(frozen=True)
class RequirementResult:
    requirement_name: str
    course_name: str
    required_grade: str
    is_met: bool
    student_grade: str
    failed: bool = False
    met_by_alternative: bool = False
    alternative_course_name: Optional[str] = None
    alternative_course_grade: Optional[str] = None
    met_by_higher_level: bool = False
    higher_level_course_name: Optional[str] = None
    higher_level_course_grade: Optional[str] = None
    other_grades: List[str] = field(default_factory=list)
    equivalence_resolved: bool = True


@dataclass
class RequirementReport:
    results: Dict[str, RequirementResult]
    meets_all: bool
    explanations: List[str]


# ---------- merit calculation ----------

@dataclass
class MeritCourseConfig:
    code: str
    name: str
    alternatives: List[AlternativeCourse] = field(default_factory=list)
    points: Optional[Any] = None

    def codes(self) -> List[str]:
        return [self.code] + [a.code for a in self.alternatives]


@dataclass
class CatalogCourse:
    code: str
    name: str
    points: Optional[int] = None


@dataclass(frozen=True)
class MeritPointResult:
    course_name: str
    student_grade: str
    merit_point: float
    original_course_name: str
    alternative_course_name: Optional[str]
    alternative_names: List[str] = field(default_factory=list)
