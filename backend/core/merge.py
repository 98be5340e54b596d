import dataclasses
import logging
from functools import reduce
from typing import Dict, Iterable, List, Optional, Sequence

from backend.core.errors import DocumentMismatchError
from backend.core.grades import grade_value
from backend.core.models import SubjectRecord, TranscriptDocument, normalize_key

logger = logging.getLogger("transcripts.merge")

MERGED_DOCUMENT_NAME = "Merged Document"
CONFIRMED_MATCH_SCORE = 100.0


def _keep_best(best: Dict[str, SubjectRecord], subject: SubjectRecord) -> Dict[str, SubjectRecord]:
    # `best` is the accumulator created for this merge only
    key = normalize_key(subject.name)
    current = best.get(key)
    if current is None or grade_value(subject.grade) > grade_value(current.grade):
        best[key] = subject
    return best


def merge_documents(documents: Sequence[TranscriptDocument]) -> TranscriptDocument:
    """
    One view over all of a student's transcripts: per subject name
    (case-insensitive) the record with the highest grade value, first seen on ties.
    Header fields come from the first document as-is.
    """
    all_subjects: Iterable[SubjectRecord] = (s for doc in documents for s in doc.subjects)
    best: Dict[str, SubjectRecord] = reduce(_keep_best, all_subjects, dict())

    first: Optional[TranscriptDocument] = documents[0] if documents else None
    merged = TranscriptDocument(
        subjects=list(best.values()),
        full_name=first.full_name if first else None,
        personal_id=first.personal_id if first else None,
        has_valid_degree=first.has_valid_degree if first else None,
        document_name=MERGED_DOCUMENT_NAME,
    )
    logger.debug("merged %d documents into %d subjects", len(documents), len(merged.subjects))
    return merged


def ensure_same_student(documents: Sequence[TranscriptDocument]) -> None:
    seen: Optional[str] = None
    for doc in documents:
        pid = (doc.personal_id or "").strip()
        if not pid:
            continue
        if seen is None:
            seen = pid
        elif pid != seen:
            raise DocumentMismatchError(
                "One or more documents do not match the personal ID of the other documents."
            )


def has_valid_degree(documents: List[TranscriptDocument]) -> bool:
    return any("examen" in normalize_key(doc.has_valid_degree) for doc in documents)


def confirm_document(document: TranscriptDocument) -> TranscriptDocument:
    """
    Accept a reviewed transcript: every subject becomes a confirmed match
    (score 100) and the pre-correction values are dropped.
    """
    subjects = [
        dataclasses.replace(
            s,
            fuzzy_match_score=CONFIRMED_MATCH_SCORE,
            original_name=None,
            original_code=None,
            original_points=None,
        )
        for s in document.subjects
    ]
    return dataclasses.replace(document, subjects=subjects)
