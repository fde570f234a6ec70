"""
Analyze routes — statistics and ranking API endpoints.

Every endpoint takes ``{"data": [...]}`` (raw or already-validated roster rows),
re-validates it and recomputes everything from scratch.
"""

from typing import List

from fastapi import APIRouter, HTTPException

from core.grading import PASS_MARK, SUBJECT_LABELS, get_all_bucket_thresholds
from core.rankings import compute_rankings
from core.stats import compute_overview, compute_subject_stats
from core.validator import StudentRecord, validate_records

router = APIRouter()


def records_from_payload(payload: dict) -> List[StudentRecord]:
    """Validate the roster carried in a request payload."""
    data = payload.get("data")
    if data is None or not isinstance(data, list):
        raise HTTPException(400, "No data provided.")
    return validate_records(data)


def build_dashboard(records: List[StudentRecord]) -> dict:
    """Stats, rankings and overview for one roster, computed in dependency order."""
    subject_stats = compute_subject_stats(records)
    return {
        "overview": compute_overview(records, subject_stats),
        "stats": subject_stats,
        "rankings": compute_rankings(records, subject_stats),
    }


@router.post("/validate")
async def validate(payload: dict):
    """Coerce untrusted rows into fixed-shape student records."""
    records = records_from_payload(payload)
    return {"data": records, "count": len(records)}


@router.post("/subjects")
async def subjects(payload: dict):
    """Per-subject statistics: mean, std, failing rate, distribution buckets."""
    records = records_from_payload(payload)
    return {"subjects": compute_subject_stats(records)}


@router.post("/rankings")
async def rankings(payload: dict):
    """Best/worst/most dispersed subject, top failing subjects, balance, best student."""
    records = records_from_payload(payload)
    return compute_rankings(records, compute_subject_stats(records))


@router.post("/dashboard")
async def dashboard(payload: dict):
    """Everything the dashboard views need in one call."""
    records = records_from_payload(payload)
    return build_dashboard(records)


@router.get("/grading")
async def grading():
    """Fixed grading metadata: subjects, pass mark and bucket legend."""
    return {
        "subjects": [{"key": key, "label": label} for key, label in SUBJECT_LABELS.items()],
        "pass_mark": PASS_MARK,
        "buckets": get_all_bucket_thresholds(),
    }
