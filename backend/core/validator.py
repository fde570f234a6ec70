"""
validator.py — The single conversion boundary between untrusted AI output
and validated roster records.

Handles:
- Roll number and grade coercion via the numeric normalizer
- Placeholder names for blank/missing students
- Non-object candidates (degraded to default records, never dropped)
"""

from collections.abc import Iterable, Mapping
from typing import Any, Dict, List, TypedDict, Union

import pandas as pd

from core.grading import SUBJECT_KEYS
from core.normalizer import safe_parse_number


# Whatever the extraction service decoded: ideally a mapping, possibly anything.
UntrustedCandidate = Any


class StudentRecord(TypedDict):
    numero: Union[int, float]
    aluno: str
    portugues: float
    ingles: float
    matematica: float
    psicologia: float
    quimica: float
    educacaoFisica: float
    emrc: float


RECORD_COLUMNS = ["numero", "aluno", *SUBJECT_KEYS]


def placeholder_name(index: int) -> str:
    """Synthetic name for the student at 0-based position ``index``."""
    return f"Aluno {index + 1}"


def _coerce_roll_number(value: Any) -> Union[int, float]:
    number = safe_parse_number(value)
    return int(number) if number.is_integer() else number


def _coerce_name(value: Any, index: int) -> str:
    if not value:
        return placeholder_name(index)
    name = str(value).strip()
    return name or placeholder_name(index)


def validate_record(candidate: UntrustedCandidate, index: int) -> StudentRecord:
    """Map one untrusted candidate to a StudentRecord. Never raises."""
    fields: Mapping[str, Any] = candidate if isinstance(candidate, Mapping) else {}

    record: Dict[str, Any] = {
        "numero": _coerce_roll_number(fields.get("numero")),
        "aluno": _coerce_name(fields.get("aluno"), index),
    }
    for key in SUBJECT_KEYS:
        record[key] = safe_parse_number(fields.get(key))
    return StudentRecord(**record)


def validate_records(candidates: UntrustedCandidate) -> List[StudentRecord]:
    """Validate a batch, keeping one record per candidate in source order."""
    if not isinstance(candidates, Iterable) or isinstance(candidates, (str, bytes, Mapping)):
        return []
    return [validate_record(candidate, index) for index, candidate in enumerate(candidates)]


def records_to_frame(records: List[StudentRecord]) -> pd.DataFrame:
    """Build a DataFrame with a fixed column set, even for an empty roster."""
    return pd.DataFrame(list(records), columns=RECORD_COLUMNS)
