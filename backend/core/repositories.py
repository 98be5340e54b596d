import uuid
from typing import Any, Dict, List, Optional, Protocol

from backend.core.models import (
    AlternativeCourse,
    CatalogCourse,
    MeritCourseConfig,
    RequirementCourse,
    RequirementSubject,
    RequirementTree,
    SubjectRecord,
    TranscriptDocument,
    normalize_key,
    parse_points,
)


# ---------- JSON <-> model ----------

def parse_flag(value: Any) -> bool:
    if isinstance(value, str):
        return normalize_key(value) in ("true", "1", "yes")
    return bool(value)


def _alternatives(items: Optional[List[Dict[str, Any]]]) -> List[AlternativeCourse]:
    return [AlternativeCourse(name=a.get("name") or "", code=a.get("code") or "") for a in items or []]


def parse_requirement_tree(data: Optional[Dict[str, Any]]) -> Optional[RequirementTree]:
    if data is None or data.get("subjects") is None:
        return None
    subjects: List[RequirementSubject] = []
    for s in data["subjects"]:
        courses = [
            RequirementCourse(
                name=c.get("name") or "",
                code=c.get("code") or "",
                level=parse_points(c.get("level")),
                required_grade=c.get("requiredGrade") or "",
                include_in_average=parse_flag(c.get("includeInAverage")),
                alternatives=_alternatives(c.get("alternatives")),
            )
            for c in s.get("courses") or []
        ]
        subjects.append(RequirementSubject(name=s.get("name") or "", courses=courses))
    return RequirementTree(subjects=subjects)


def dump_requirement_tree(tree: RequirementTree) -> Dict[str, Any]:
    return {
        "subjects": [
            {
                "name": s.name,
                "courses": [
                    {
                        "name": c.name,
                        "code": c.code,
                        "level": c.level,
                        "alternatives": [{"name": a.name, "code": a.code} for a in c.alternatives],
                        "requiredGrade": c.required_grade,
                        "includeInAverage": c.include_in_average,
                    }
                    for c in s.courses
                ],
            }
            for s in tree.subjects
        ]
    }


def parse_merit_courses(data: Optional[List[Dict[str, Any]]]) -> Optional[List[MeritCourseConfig]]:
    if data is None:
        return None
    return [
        MeritCourseConfig(
            code=m.get("code") or "",
            name=m.get("name") or "",
            alternatives=_alternatives(m.get("alternativeCourses")),
            points=m.get("gymnasiumPoints"),
        )
        for m in data
    ]


def dump_merit_courses(courses: List[MeritCourseConfig]) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for m in courses:
        item: Dict[str, Any] = {
            "code": m.code,
            "name": m.name,
            "alternativeCourses": [{"code": a.code, "name": a.name} for a in m.alternatives],
        }
        if m.points is not None:
            item["gymnasiumPoints"] = m.points
        out.append(item)
    return out


def parse_catalog(data: Optional[List[Dict[str, Any]]]) -> List[CatalogCourse]:
    catalog: List[CatalogCourse] = []
    for c in data or []:
        points = c.get("points")
        catalog.append(CatalogCourse(
            code=c.get("code") or "",
            name=c.get("name") or "",
            points=None if points is None else parse_points(points),
        ))
    return catalog


def parse_document(data: Dict[str, Any]) -> TranscriptDocument:
    subjects = [
        SubjectRecord(
            name=s.get("subjectName") or "",
            code=s.get("courseCode") or "",
            grade=s.get("grade") or "",
            points=s.get("gymnasiumPoints"),
            fuzzy_match_score=s.get("fuzzyMatchScore"),
            original_name=s.get("originalSubjectName"),
            original_code=s.get("originalCourseCode"),
            original_points=s.get("originalGymnasiumPoints"),
        )
        for s in data.get("subjects") or []
    ]
    doc = TranscriptDocument(
        subjects=subjects,
        full_name=data.get("fullName"),
        personal_id=data.get("personalId"),
        has_valid_degree=data.get("hasValidDegree"),
        document_name=data.get("documentName"),
    )
    if data.get("id"):
        doc.id = uuid.UUID(str(data["id"]))
    return doc


def dump_document(doc: TranscriptDocument) -> Dict[str, Any]:
    return {
        "id": str(doc.id),
        "fullName": doc.full_name,
        "personalId": doc.personal_id,
        "hasValidDegree": doc.has_valid_degree,
        "documentName": doc.document_name,
        "subjects": [
            {
                "subjectName": s.name,
                "courseCode": s.code,
                "grade": s.grade,
                "gymnasiumPoints": s.points,
                "fuzzyMatchScore": s.fuzzy_match_score,
                "originalSubjectName": s.original_name,
                "originalCourseCode": s.original_code,
                "originalGymnasiumPoints": s.original_points,
            }
            for s in doc.subjects
        ],
    }


# ---------- configuration store ----------

class ConfigRepository(Protocol):
    """Opaque key-value store for JSON-shaped configuration objects."""

    def load(self, key: str) -> Optional[Any]:
        ...

    def save(self, key: str, data: Any) -> None:
        ...


class InMemoryConfigRepository:
    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(initial or {})

    def load(self, key: str) -> Optional[Any]:
        return self._data.get(key)

    def save(self, key: str, data: Any) -> None:
        self._data[key] = data


class ConfigService:
    """Typed access to the requirement tree, merit course list and catalog."""

    def __init__(self, repo: ConfigRepository, requirements_key: str,
                 merit_courses_key: str, catalog_key: str):
        self.repo = repo
        self.requirements_key = requirements_key
        self.merit_courses_key = merit_courses_key
        self.catalog_key = catalog_key

    def requirement_tree(self) -> Optional[RequirementTree]:
        return parse_requirement_tree(self.repo.load(self.requirements_key))

    def save_requirement_tree(self, tree: RequirementTree) -> None:
        self.repo.save(self.requirements_key, dump_requirement_tree(tree))

    def merit_courses(self) -> Optional[List[MeritCourseConfig]]:
        return parse_merit_courses(self.repo.load(self.merit_courses_key))

    def save_merit_courses(self, courses: List[MeritCourseConfig]) -> None:
        self.repo.save(self.merit_courses_key, dump_merit_courses(courses))

    def catalog(self) -> List[CatalogCourse]:
        return parse_catalog(self.repo.load(self.catalog_key))
