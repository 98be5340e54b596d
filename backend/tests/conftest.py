import pytest

from backend.core.models import (
    AlternativeCourse,
    RequirementCourse,
    RequirementSubject,
    RequirementTree,
    SubjectRecord,
    TranscriptDocument,
)

TREE_JSON = {
    "subjects": [
        {
            "name": "Matematik",
            "courses": [
                {"name": "Matematik 1a", "code": "MATMAT01a", "level": 1,
                 "alternatives": [{"name": "Matematik 1b", "code": "MATMAT01b"}],
                 "requiredGrade": "C", "includeInAverage": True},
                {"name": "Matematik 2a", "code": "MATMAT02a", "level": 2,
                 "alternatives": [], "requiredGrade": "E", "includeInAverage": False},
            ],
        }
    ]
}


@pytest.fixture
def math_tree() -> RequirementTree:
    return RequirementTree(subjects=[
        RequirementSubject(name="Matematik", courses=[
            RequirementCourse(
                name="Matematik 1a", code="MATMAT01a", level=1, required_grade="C",
                include_in_average=True,
                alternatives=[AlternativeCourse("Matematik 1b", "MATMAT01b")],
            ),
            RequirementCourse(
                name="Matematik 2a", code="MATMAT02a", level=2, required_grade="E",
                include_in_average=True,
                alternatives=[AlternativeCourse("Matematik 2b", "MATMAT02b")],
            ),
        ]),
        RequirementSubject(name="Svenska", courses=[
            RequirementCourse(name="Svenska 1", code="SVESVE01", level=1, required_grade="E",
                              alternatives=[AlternativeCourse("Svenska som andraspråk 1", "SVASVA01")]),
        ]),
    ])


def make_doc(*subjects, **header) -> TranscriptDocument:
    return TranscriptDocument(subjects=[SubjectRecord(*s) for s in subjects], **header)


@pytest.fixture
def doc_factory():
    return make_doc
