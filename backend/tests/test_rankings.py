"""
Tests for core/rankings.py — subject and student rankings, ties and empty input.
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from core.grading import SEVERITY_COLORS
from core.rankings import (
    best_subject,
    compute_rankings,
    most_dispersed_subject,
    pass_fail_balance,
    student_average,
    top_failing_subjects,
    top_student,
    worst_subject,
)
from core.stats import compute_subject_stats
from core.validator import validate_records


def _stat(key, avg=10.0, std=0.0, pct=0.0, count=10, below=0):
    return {
        "key": key,
        "subject": key.title(),
        "avg": avg,
        "stdDev": std,
        "percentageBelowTen": pct,
        "count": count,
        "countBelowTen": below,
    }


@pytest.fixture
def records():
    return validate_records([
        {"numero": 1, "aluno": "Ana", "portugues": 8, "ingles": 8, "matematica": 8,
         "psicologia": 8, "quimica": 8, "educacaoFisica": 8, "emrc": 8},
        {"numero": 2, "aluno": "Bruno", "portugues": 16, "ingles": 15, "matematica": 14,
         "psicologia": 13, "quimica": 12, "educacaoFisica": 18, "emrc": 19},
        {"numero": 3, "aluno": "Carla", "portugues": 16, "ingles": 15, "matematica": 14,
         "psicologia": 13, "quimica": 12, "educacaoFisica": 18, "emrc": 19},
    ])


class TestSubjectRankings:
    """Tests for best_subject / worst_subject / most_dispersed_subject."""

    def test_worst_picks_lowest_mean(self):
        stats = [_stat("a", avg=12.0), _stat("b", avg=8.0)]
        assert worst_subject(stats)["key"] == "b"
        assert best_subject(stats)["key"] == "a"

    def test_ties_keep_key_order(self):
        stats = [_stat("a", avg=10.0), _stat("b", avg=10.0)]
        assert worst_subject(stats)["key"] == "a"
        assert best_subject(stats)["key"] == "a"

    def test_most_dispersed(self):
        stats = [_stat("a", std=1.2), _stat("b", std=4.5), _stat("c", std=4.5)]
        assert most_dispersed_subject(stats)["key"] == "b"

    def test_empty_is_no_data(self):
        assert best_subject([]) is None
        assert worst_subject([]) is None
        assert most_dispersed_subject([]) is None

    def test_input_not_reordered(self):
        stats = [_stat("a", avg=5.0), _stat("b", avg=15.0)]
        best_subject(stats)
        assert [s["key"] for s in stats] == ["a", "b"]


class TestTopFailingSubjects:
    """Tests for top_failing_subjects."""

    def test_top_three_descending_with_colors(self):
        stats = [
            _stat("a", pct=10.0), _stat("b", pct=50.0), _stat("c", pct=30.0),
            _stat("d", pct=40.0), _stat("e", pct=0.0),
        ]
        top = top_failing_subjects(stats)
        assert [s["key"] for s in top] == ["b", "d", "c"]
        assert [s["color"] for s in top] == list(SEVERITY_COLORS)

    def test_ties_keep_key_order(self):
        stats = [_stat("a", pct=20.0), _stat("b", pct=20.0), _stat("c", pct=20.0), _stat("d", pct=20.0)]
        assert [s["key"] for s in top_failing_subjects(stats)] == ["a", "b", "c"]

    def test_fewer_subjects_than_limit(self):
        top = top_failing_subjects([_stat("a", pct=5.0)])
        assert len(top) == 1
        assert top[0]["color"] == SEVERITY_COLORS[0]

    def test_does_not_mutate_stats(self):
        stats = [_stat("a", pct=5.0)]
        top_failing_subjects(stats)
        assert "color" not in stats[0]

    def test_empty(self):
        assert top_failing_subjects([]) == []


class TestPassFailBalance:
    """Tests for pass_fail_balance."""

    def test_counts(self):
        balance = pass_fail_balance([_stat("a", count=10, below=3)])
        assert balance == [{"subject": "A", "key": "a", "positives": 7, "negatives": 3}]

    def test_preserves_order(self):
        balance = pass_fail_balance([_stat("b"), _stat("a")])
        assert [b["key"] for b in balance] == ["b", "a"]


class TestTopStudent:
    """Tests for student_average / top_student."""

    def test_student_average(self, records):
        assert student_average(records[0]) == 8
        assert student_average(records[1]) == pytest.approx(107 / 7)

    def test_ties_keep_first_occurrence(self, records):
        leader = top_student(records)
        assert leader["name"] == "Bruno"
        assert leader["numero"] == 2

    def test_empty_roster(self):
        assert top_student([]) is None


class TestComputeRankings:
    """Tests for compute_rankings."""

    def test_bundle(self, records):
        stats = compute_subject_stats(records)
        result = compute_rankings(records, stats)
        assert result["bestSubject"]["key"] == "emrc"
        assert result["lowestAvgSubject"]["key"] == "quimica"
        assert len(result["topNegativeSubjects"]) == 3
        assert len(result["balance"]) == 7
        assert result["bestStudent"]["name"] == "Bruno"

    def test_idempotent(self, records):
        stats = compute_subject_stats(records)
        assert compute_rankings(records, stats) == compute_rankings(records, stats)

    def test_empty_roster(self):
        stats = compute_subject_stats([])
        result = compute_rankings([], stats)
        assert result["bestStudent"] is None
        assert all(s["percentageBelowTen"] == 0 for s in result["topNegativeSubjects"])
        assert all(b["positives"] == 0 and b["negatives"] == 0 for b in result["balance"])
