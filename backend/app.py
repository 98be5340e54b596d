import logging
import uuid
from dataclasses import asdict
from typing import List, Dict, Any, Optional, Union

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from backend.config import settings
from backend.config.loaders import load_config_service
from backend.core.engine import EligibilityEngine
from backend.core.errors import ConfigurationError, DocumentMismatchError
from backend.core.merge import confirm_document, ensure_same_student, has_valid_degree, merge_documents
from backend.core.merit import MeritCalculator, course_merit_points
from backend.core.models import TranscriptDocument
from backend.core.repositories import (
    ConfigService,
    dump_document,
    dump_merit_courses,
    dump_requirement_tree,
    parse_document,
    parse_merit_courses,
    parse_requirement_tree,
)

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger("transcripts.app")

app = FastAPI(title="Transcript Requirement Checker")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_config() -> ConfigService:
    return load_config_service()


# --------- Request models ----------
class SubjectInput(BaseModel):
    subjectName: str
    courseCode: str = ""
    grade: str = ""
    gymnasiumPoints: Union[int, str, None] = 0
    fuzzyMatchScore: Optional[float] = None
    originalSubjectName: Optional[str] = None
    originalCourseCode: Optional[str] = None
    originalGymnasiumPoints: Union[int, str, None] = None


# same shape that dump_document produces
class DocumentInput(BaseModel):
    id: Optional[uuid.UUID] = None
    fullName: Optional[str] = None
    personalId: Optional[str] = None
    hasValidDegree: Optional[str] = None
    documentName: Optional[str] = None
    subjects: List[SubjectInput] = Field(default_factory=list)


class DocumentsRequest(BaseModel):
    documents: List[DocumentInput]


class AlternativeInput(BaseModel):
    name: str = ""
    code: str = ""


class RequirementCourseInput(BaseModel):
    name: str
    code: str = ""
    level: int = 0
    alternatives: List[AlternativeInput] = Field(default_factory=list)
    requiredGrade: str = ""
    includeInAverage: bool = False


class RequirementSubjectInput(BaseModel):
    name: str
    courses: List[RequirementCourseInput] = Field(default_factory=list)


class RequirementTreeInput(BaseModel):
    subjects: List[RequirementSubjectInput]


class MeritCourseInput(BaseModel):
    code: str
    name: str = ""
    alternativeCourses: List[AlternativeInput] = Field(default_factory=list)
    gymnasiumPoints: Union[int, str, None] = None


def _to_document(d: DocumentInput) -> TranscriptDocument:
    return parse_document(d.model_dump())


def _documents(req: DocumentsRequest) -> List[TranscriptDocument]:
    if not req.documents:
        raise HTTPException(status_code=400, detail="No documents provided")
    return [_to_document(d) for d in req.documents]


def _merged(documents: List[TranscriptDocument]) -> TranscriptDocument:
    try:
        ensure_same_student(documents)
    except DocumentMismatchError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if len(documents) == 1:
        return documents[0]
    return merge_documents(documents)


def _failure(e: Exception, what: str) -> JSONResponse:
    logger.exception("%s failed", what)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": f"{what} failed", "details": str(e)}
    )


# --------- Endpoints ----------
@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/config/requirements")
def get_requirements(config: ConfigService = Depends(get_config)) -> Dict[str, Any]:
    tree = config.requirement_tree()
    if tree is None:
        return {"subjects": []}
    return dump_requirement_tree(tree)


@app.put("/config/requirements")
def save_requirements(body: RequirementTreeInput, config: ConfigService = Depends(get_config)):
    tree = parse_requirement_tree(body.model_dump())
    config.save_requirement_tree(tree)
    return {"success": True}


@app.get("/config/merit-courses")
def get_merit_courses(config: ConfigService = Depends(get_config)) -> List[Dict[str, Any]]:
    return dump_merit_courses(config.merit_courses() or [])


@app.put("/config/merit-courses")
def save_merit_courses(body: List[MeritCourseInput], config: ConfigService = Depends(get_config)):
    courses = parse_merit_courses([m.model_dump() for m in body])
    config.save_merit_courses(courses)
    return {"success": True}


@app.get("/catalog")
def catalog(config: ConfigService = Depends(get_config)) -> List[Dict[str, Any]]:
    return [asdict(c) for c in config.catalog()]


@app.post("/documents/merge")
def merge(req: DocumentsRequest):
    return dump_document(_merged(_documents(req)))


@app.post("/documents/confirm")
def confirm(body: DocumentInput):
    return dump_document(confirm_document(_to_document(body)))


@app.post("/requirements/check")
def check_requirements(req: DocumentsRequest, config: ConfigService = Depends(get_config)):
    documents = _documents(req)
    document = _merged(documents)
    try:
        engine = EligibilityEngine(config.requirement_tree())
    except ConfigurationError:
        raise HTTPException(status_code=400, detail="Course equivalents not configured.")

    try:
        report = engine.evaluate_report(document)
        average = MeritCalculator(config.merit_courses(), config.catalog()).compute_average(document)
        return {
            "document": dump_document(document),
            "meets_all": report.meets_all,
            "results": {k: asdict(v) for k, v in report.results.items()},
            "explanations": report.explanations,
            "average_merit_points": average,
            "has_valid_degree": has_valid_degree(documents),
        }
    except Exception as e:
        return _failure(e, "Requirement check")


@app.post("/merit")
def merit(req: DocumentsRequest, config: ConfigService = Depends(get_config)):
    document = _merged(_documents(req))
    try:
        merit_courses = config.merit_courses()
        average, notes = MeritCalculator(merit_courses, config.catalog()).compute_average_with_breakdown(document)
        per_course = course_merit_points(document, merit_courses)
        return {
            "average": average,
            "notes": notes,
            "courses": {k: asdict(v) for k, v in per_course.items()},
        }
    except Exception as e:
        return _failure(e, "Merit calculation")


if __name__ == "__main__":
    uvicorn.run("backend.app:app", host="0.0.0.0", port=8000, reload=True)
