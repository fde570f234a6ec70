"""
stats.py — All pandas/numpy statistical computations.

Computes:
- Per-subject stats (mean, population std, min/max, failing count and rate)
- Grade distributions in the four fixed buckets (for divergent bar charts)
- The class overview shown on the dashboard summary cards
"""

from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from core.formatting import round_half_up
from core.grading import FAILING_BUCKET, GRADE_BUCKETS, SUBJECT_KEYS, get_subject_label
from core.rankings import best_subject, top_student
from core.validator import StudentRecord, records_to_frame


# ── Helpers ─────────────────────────────────────────────────────────

def _round1(val) -> float:
    """Round to one decimal; NaN/inf collapse to 0."""
    try:
        v = float(val)
    except (TypeError, ValueError):
        return 0.0
    if np.isnan(v) or np.isinf(v):
        return 0.0
    return round_half_up(v)


def _sanitize(obj):
    """Recursively coerce numpy/pandas scalars to JSON-safe Python types."""
    if isinstance(obj, dict):
        return {k: _sanitize(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_sanitize(v) for v in obj]
    if isinstance(obj, (np.bool_,)):
        return bool(obj)
    if isinstance(obj, (np.integer,)):
        return int(obj)
    if isinstance(obj, (np.floating, float)):
        v = float(obj)
        return 0.0 if (np.isnan(v) or np.isinf(v)) else v
    return obj


_BUCKET_EDGES = [edge for edge, _, _ in GRADE_BUCKETS] + [np.inf]
_BUCKET_LABELS = [label for _, label, _ in GRADE_BUCKETS]


def bucket_counts(grades: pd.Series) -> Dict[str, int]:
    """Count grades per bucket; bins are closed on the left so they never overlap or leave gaps."""
    if grades.empty:
        return {label: 0 for label in _BUCKET_LABELS}
    binned = pd.cut(grades, bins=_BUCKET_EDGES, labels=_BUCKET_LABELS, right=False)
    counts = binned.value_counts().reindex(_BUCKET_LABELS, fill_value=0)
    return {label: int(counts[label]) for label in _BUCKET_LABELS}


def grade_distribution(grades: pd.Series) -> List[Dict[str, Any]]:
    """Bucket list for charts. The failing bucket is plotted below the axis."""
    counts = bucket_counts(grades)
    distribution = []
    for _, label, color in GRADE_BUCKETS:
        count = counts[label]
        distribution.append({
            "range": label,
            "count": count,
            "chartValue": -count if label == FAILING_BUCKET else count,
            "color": color,
        })
    return distribution


# ── Subject Statistics ──────────────────────────────────────────────

def _subject_stats(key: str, grades: pd.Series) -> Dict[str, Any]:
    count = len(grades)
    distribution = grade_distribution(grades)
    count_below_ten = distribution[0]["count"]

    if count == 0:
        return {
            "subject": get_subject_label(key),
            "key": key,
            "avg": 0.0,
            "stdDev": 0.0,
            "max": 0.0,
            "min": 0.0,
            "count": 0,
            "countBelowTen": 0,
            "percentageBelowTen": 0.0,
            "distribution": distribution,
            "allGrades": [],
        }

    # std is taken around the unrounded mean; only the outputs are rounded.
    return {
        "subject": get_subject_label(key),
        "key": key,
        "avg": _round1(grades.mean()),
        "stdDev": _round1(grades.std(ddof=0)),
        "max": float(grades.max()),
        "min": float(grades.min()),
        "count": count,
        "countBelowTen": count_below_ten,
        "percentageBelowTen": _round1(count_below_ten / count * 100),
        "distribution": distribution,
        "allGrades": grades.tolist(),
    }


def compute_subject_stats(records: List[StudentRecord]) -> List[Dict[str, Any]]:
    """One stats entry per subject, always seven, in canonical key order."""
    df = records_to_frame(records)
    subjects_data = []
    for key in SUBJECT_KEYS:
        grades = pd.to_numeric(df[key], errors="coerce").fillna(0.0).astype(float)
        subjects_data.append(_subject_stats(key, grades))
    return _sanitize(subjects_data)


# ── Class Overview ──────────────────────────────────────────────────

def compute_overview(
    records: List[StudentRecord],
    subject_stats: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """Summary cards: roster size, global average, best subject, top student."""
    if subject_stats is None:
        subject_stats = compute_subject_stats(records)

    if records and subject_stats:
        global_average = _round1(np.mean([s["avg"] for s in subject_stats]))
    else:
        global_average = 0.0

    best = best_subject(subject_stats)
    leader = top_student(records)

    return _sanitize({
        "totalStudents": len(records),
        "globalAverage": global_average,
        "bestSubject": {"subject": best["subject"], "key": best["key"], "avg": best["avg"]} if best else None,
        "topStudent": leader,
    })
