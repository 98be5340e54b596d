from typing import Dict, Optional

from backend.core.models import normalize_key

# Three grading systems share one 0-20 range so grades compare across scales:
# letters A-F, the four-level word scale (MVG/VG/G/IG) and numerals 0-5.
GRADE_VALUES: Dict[str, float] = {
    "a": 20.0,
    "b": 17.5,
    "c": 15.0,
    "d": 12.5,
    "e": 10.0,
    "f": 0.0,

    "mvg": 20.0,
    "vg": 15.0,
    "g": 10.0,
    "ig": 0.0,

    "5": 20.0,
    "4": 17.5,
    "3": 15.0,
    "2": 12.5,
    "1": 10.0,
    "0": 0.0,
}

FAILING_GRADE = "F"
MISSING_GRADE = "N/A"


def grade_value(token: Optional[str]) -> float:
    """Numeric value of a grade token; unknown or empty tokens count as failing (0)."""
    return GRADE_VALUES.get(normalize_key(token), 0.0)


def is_known_grade(token: Optional[str]) -> bool:
    return normalize_key(token) in GRADE_VALUES
