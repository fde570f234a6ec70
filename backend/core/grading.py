"""
grading.py — Fixed grading constants for the 0–20 scale.

Holds the single source of truth for:
- Subject keys, their canonical order and display labels
- The passing threshold
- Distribution bucket boundaries and chart colours
- Severity colours for the "most failed subjects" ranking
"""

from types import MappingProxyType
from typing import Any, Dict, List, Optional


# Canonical key order is the insertion order of this table.
SUBJECT_LABELS = MappingProxyType({
    "portugues": "Português",
    "ingles": "Inglês",
    "matematica": "Matemática",
    "psicologia": "Psicologia",
    "quimica": "Química",
    "educacaoFisica": "Educação Física",
    "emrc": "EMRC",
})

SUBJECT_KEYS = tuple(SUBJECT_LABELS)

PASS_MARK = 10.0
MAX_GRADE = 20.0

# Distribution buckets (min_grade, range_label, colour), ordered low to high.
# A grade falls in the last bucket whose min_grade it reaches.
GRADE_BUCKETS = (
    (float("-inf"), "< 10", "#f43f5e"),
    (10.0, "10-13", "#f59e0b"),
    (14.0, "14-17", "#22d3ee"),
    (18.0, "18-20", "#d946ef"),
)

FAILING_BUCKET = GRADE_BUCKETS[0][1]

# Rank 1 is the most severe.
SEVERITY_COLORS = ("#D32F2F", "#EC407A", "#F48FB1")


def get_subject_label(key: str) -> str:
    """Return the display label for a subject key, or the key itself if unknown."""
    return SUBJECT_LABELS.get(key, key)


def is_failing(grade: float) -> bool:
    return grade < PASS_MARK


def get_bucket_label(grade: float) -> str:
    """Return the distribution bucket label a grade falls into."""
    label = GRADE_BUCKETS[0][1]
    for min_grade, bucket_label, _ in GRADE_BUCKETS:
        if grade >= min_grade:
            label = bucket_label
    return label


def get_bucket_color(label: str) -> Optional[str]:
    for _, bucket_label, color in GRADE_BUCKETS:
        if bucket_label == label:
            return color
    return None


def get_all_bucket_thresholds() -> List[Dict[str, Any]]:
    """Return the bucket scale for legends: lower bound, upper bound (exclusive), label, colour."""
    thresholds = []
    for idx, (min_grade, label, color) in enumerate(GRADE_BUCKETS):
        upper = GRADE_BUCKETS[idx + 1][0] if idx + 1 < len(GRADE_BUCKETS) else None
        thresholds.append(
            {
                "min": None if min_grade == float("-inf") else min_grade,
                "max": upper,
                "label": label,
                "color": color,
                "failing": label == FAILING_BUCKET,
            }
        )
    return thresholds
