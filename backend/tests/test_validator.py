"""
Tests for core/validator.py — untrusted candidates to student records.
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from core.grading import SUBJECT_KEYS
from core.validator import (
    RECORD_COLUMNS,
    placeholder_name,
    records_to_frame,
    validate_record,
    validate_records,
)


@pytest.fixture
def raw_candidates():
    """Rows as the AI extraction tends to return them."""
    return [
        {"numero": 1, "aluno": "Ana Silva", "portugues": "12,5", "ingles": 14, "matematica": "-",
         "psicologia": None, "quimica": "9", "educacaoFisica": 17, "emrc": "18"},
        {"numero": "2", "aluno": "", "portugues": 10},
        "garbage",
        {"numero": 3},
    ]


class TestValidateRecord:
    """Tests for validate_record."""

    def test_missing_name_uses_one_based_placeholder(self):
        record = validate_record({"numero": 3}, 2)
        assert "4" in record["aluno"]
        assert record["aluno"] == placeholder_name(2)

    def test_missing_grades_default_to_zero(self):
        record = validate_record({"numero": 3}, 2)
        assert record["numero"] == 3
        for key in SUBJECT_KEYS:
            assert record[key] == 0

    def test_grades_are_normalized(self, raw_candidates):
        record = validate_record(raw_candidates[0], 0)
        assert record["portugues"] == 12.5
        assert record["ingles"] == 14
        assert record["matematica"] == 0
        assert record["psicologia"] == 0
        assert record["quimica"] == 9
        assert record["emrc"] == 18

    @pytest.mark.parametrize("raw", [3, 3.0, "3", "3,0", " 3 "])
    def test_whole_roll_number_is_int(self, raw):
        numero = validate_record({"numero": raw}, 0)["numero"]
        assert numero == 3 and isinstance(numero, int)

    def test_fractional_roll_number_is_kept(self):
        assert validate_record({"numero": "4,5"}, 0)["numero"] == 4.5

    def test_blank_name_uses_placeholder(self):
        assert validate_record({"aluno": "   "}, 1)["aluno"] == "Aluno 2"

    def test_name_is_text(self):
        record = validate_record({"aluno": 42}, 0)
        assert record["aluno"] == "42"

    def test_name_is_trimmed(self):
        assert validate_record({"aluno": "  Rui  "}, 0)["aluno"] == "Rui"

    def test_record_has_fixed_shape(self):
        record = validate_record({"extra": "ignored"}, 0)
        assert list(record.keys()) == RECORD_COLUMNS

    def test_non_mapping_candidate_degrades(self):
        record = validate_record("not a row", 5)
        assert record["aluno"] == "Aluno 6"
        assert record["numero"] == 0
        assert all(record[key] == 0 for key in SUBJECT_KEYS)


class TestValidateRecords:
    """Tests for validate_records."""

    def test_keeps_positional_alignment(self, raw_candidates):
        records = validate_records(raw_candidates)
        assert len(records) == len(raw_candidates)
        assert records[0]["aluno"] == "Ana Silva"
        assert records[1]["aluno"] == "Aluno 2"
        assert records[2]["aluno"] == "Aluno 3"
        assert records[3]["aluno"] == "Aluno 4"

    def test_placeholder_names_are_unique(self):
        records = validate_records([{}, {}, {}])
        names = [r["aluno"] for r in records]
        assert len(set(names)) == 3

    def test_accepts_generators(self):
        records = validate_records({"numero": n} for n in range(3))
        assert [r["numero"] for r in records] == [0, 1, 2]

    @pytest.mark.parametrize("bad_input", [None, 5, "text", {"numero": 1}])
    def test_non_list_input_yields_empty_roster(self, bad_input):
        assert validate_records(bad_input) == []


class TestRecordsToFrame:
    """Tests for records_to_frame."""

    def test_empty_roster_keeps_columns(self):
        df = records_to_frame([])
        assert list(df.columns) == RECORD_COLUMNS
        assert df.empty

    def test_rows(self, raw_candidates):
        df = records_to_frame(validate_records(raw_candidates))
        assert len(df) == 4
        assert df.loc[0, "portugues"] == 12.5
