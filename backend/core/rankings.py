"""
rankings.py — Cross-subject and cross-student rankings.

Every function is a pure view over the subject stats (or the roster) and
relies on ``sorted`` being stable, so equal values keep canonical subject
order / roster order. Empty input yields ``None`` ("no data") or an empty list.
"""

from typing import Any, Dict, List, Optional

from core.grading import SEVERITY_COLORS, SUBJECT_KEYS


def _first_by(subject_stats: List[Dict[str, Any]], field: str, descending: bool) -> Optional[Dict[str, Any]]:
    if not subject_stats:
        return None
    return sorted(subject_stats, key=lambda s: s[field], reverse=descending)[0]


def best_subject(subject_stats: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Subject with the highest mean."""
    return _first_by(subject_stats, "avg", descending=True)


def worst_subject(subject_stats: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Subject with the lowest mean."""
    return _first_by(subject_stats, "avg", descending=False)


def most_dispersed_subject(subject_stats: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Subject with the highest standard deviation."""
    return _first_by(subject_stats, "stdDev", descending=True)


def top_failing_subjects(subject_stats: List[Dict[str, Any]], limit: int = 3) -> List[Dict[str, Any]]:
    """
    Subjects with the largest share of grades below the pass mark.

    Each entry is a copy of the subject stats with a ``color`` taken from
    SEVERITY_COLORS by rank position.
    """
    ranked = sorted(subject_stats, key=lambda s: s["percentageBelowTen"], reverse=True)
    top = []
    for idx, s in enumerate(ranked[:max(limit, 0)]):
        entry = dict(s)
        entry["color"] = SEVERITY_COLORS[min(idx, len(SEVERITY_COLORS) - 1)]
        top.append(entry)
    return top


def pass_fail_balance(subject_stats: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Passing vs failing head-count per subject, in canonical order."""
    return [
        {
            "subject": s["subject"],
            "key": s["key"],
            "positives": s["count"] - s["countBelowTen"],
            "negatives": s["countBelowTen"],
        }
        for s in subject_stats
    ]


def student_average(record: Dict[str, Any]) -> float:
    """Unweighted mean of the seven stored subject grades."""
    grades = [record[key] for key in SUBJECT_KEYS]
    return sum(grades) / len(grades)


def top_student(records: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not records:
        return None
    averages = [
        {"name": r["aluno"], "numero": r["numero"], "avg": student_average(r)}
        for r in records
    ]
    return sorted(averages, key=lambda a: a["avg"], reverse=True)[0]


def compute_rankings(records: List[Dict[str, Any]], subject_stats: List[Dict[str, Any]]) -> Dict[str, Any]:
    """All dashboard rankings in one payload."""
    return {
        "bestSubject": best_subject(subject_stats),
        "lowestAvgSubject": worst_subject(subject_stats),
        "highestStdDevSubject": most_dispersed_subject(subject_stats),
        "topNegativeSubjects": top_failing_subjects(subject_stats),
        "balance": pass_fail_balance(subject_stats),
        "bestStudent": top_student(records),
    }
