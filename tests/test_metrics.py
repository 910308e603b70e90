"""
Unit tests for src/evaluation/metrics.py.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta

import pandas as pd
import pytest

from src.evaluation.metrics import (
    compare_runs,
    field_accuracy,
    pass_rate,
    print_run_summary,
    results_to_frame,
    success_rate_trend,
    summarize_run,
    wilson_confidence_interval,
)
from src.evaluation.models import EvalResult, EvalRun, RunStatus

T0 = datetime(2024, 5, 1, 12, 0, 0)


def _completed_run(passed, total, started=T0, seconds=30, name="alice"):
    run = EvalRun(eval_set_name=name)
    run.update(status=RunStatus.RUNNING, started_at=started)
    run.update(
        status=RunStatus.COMPLETED,
        completed_at=started + timedelta(seconds=seconds),
        total_count=total,
        passed_count=passed,
        failed_count=total - passed,
    )
    return run


def _result(actual, expected, passed, error=None):
    return EvalResult(
        run_id="r1",
        test_case_id="tc",
        actual_output=json.dumps(actual) if isinstance(actual, dict) else actual,
        expected_output=json.dumps(expected) if isinstance(expected, dict) else expected,
        passed=passed,
        error_message=error,
    )


class TestWilsonConfidenceInterval:

    def test_zero_n(self):
        assert wilson_confidence_interval(0.0, 0) == (0.0, 0.0)

    def test_bounds_contain_p(self):
        lo, hi = wilson_confidence_interval(0.7, 50)
        assert 0.0 <= lo < 0.7 < hi <= 1.0

    def test_known_value(self):
        # 8/10 at 95 %: Wilson interval ≈ (0.490, 0.943)
        lo, hi = wilson_confidence_interval(0.8, 10)
        assert lo == pytest.approx(0.4902, abs=1e-3)
        assert hi == pytest.approx(0.9433, abs=1e-3)

    def test_extremes_clamped(self):
        lo, hi = wilson_confidence_interval(1.0, 5)
        assert hi == pytest.approx(1.0)
        assert hi <= 1.0
        lo, hi = wilson_confidence_interval(0.0, 5)
        assert lo == pytest.approx(0.0)
        assert lo >= 0.0


class TestPassRate:

    def test_percent(self):
        assert pass_rate(_completed_run(2, 3)) == 66.67

    def test_empty_run(self):
        assert pass_rate(EvalRun()) == 0.0


class TestFieldAccuracy:

    def test_display_label_expected(self, ineligible_expected):
        expected = {
            "subject_matter": "Abstract",
            "inventive_concept": "No",
            "overall_eligibility": "Ineligible",
        }
        accuracy = field_accuracy([_result(ineligible_expected, expected, True)])
        assert accuracy == {
            "subject_matter": 1.0,
            "inventive_concept": 1.0,
            "overall_eligibility": 1.0,
        }

    def test_per_field(self, ineligible_expected):
        actual_wrong_sm = {**ineligible_expected, "subject_matter": "natural_phenomenon"}
        results = [
            _result(ineligible_expected, ineligible_expected, True),
            _result(actual_wrong_sm, ineligible_expected, False),
            _result("ERROR: boom", ineligible_expected, False, error="boom"),
            _result(ineligible_expected, "ineligible", True),
        ]
        accuracy = field_accuracy(results)
        assert accuracy == {
            "subject_matter": 0.5,
            "inventive_concept": 1.0,
            "overall_eligibility": 1.0,
        }

    def test_no_structured_results(self):
        accuracy = field_accuracy([_result("eligible", "eligible", True)])
        assert set(accuracy.values()) == {None}


class TestSummarizeRun:

    def test_summary_fields(self, ineligible_expected):
        run = _completed_run(3, 4)
        results = [_result("ERROR: x", ineligible_expected, False, error="x")]
        summary = summarize_run(run, results)

        assert summary["status"] == "completed"
        assert summary["pass_rate"] == 75.0
        assert summary["ci_lower_95"] < 75.0 < summary["ci_upper_95"]
        assert summary["error_count"] == 1
        assert summary["duration_seconds"] == 30.0

    def test_without_results(self):
        summary = summarize_run(_completed_run(0, 0))
        assert summary["pass_rate"] == 0.0
        assert summary["error_count"] == 0
        assert summary["ci_lower_95"] == 0.0


class TestCompareRuns:

    def test_difference(self):
        comparison = compare_runs(_completed_run(1, 4), _completed_run(3, 4))
        assert comparison["pass_rate_a"] == 25.0
        assert comparison["pass_rate_b"] == 75.0
        assert comparison["difference"] == 50.0

    @pytest.mark.parametrize("status", [RunStatus.PENDING, RunStatus.RUNNING])
    def test_incomplete_run_rejected(self, status):
        other = EvalRun()
        if status is RunStatus.RUNNING:
            other.update(status=status)
        with pytest.raises(ValueError, match="only completed runs"):
            compare_runs(_completed_run(1, 1), other)

    def test_failed_run_rejected(self):
        failed = EvalRun()
        failed.update(status=RunStatus.RUNNING)
        failed.update(status=RunStatus.FAILED)
        with pytest.raises(ValueError):
            compare_runs(failed, _completed_run(1, 1))


class TestSuccessRateTrend:

    def test_completed_only_sorted(self):
        later = _completed_run(4, 4, started=T0 + timedelta(days=1), seconds=10)
        earlier = _completed_run(2, 4, started=T0, seconds=20)
        pending = EvalRun()
        df = success_rate_trend([later, pending, earlier])

        assert list(df["run_id"]) == [earlier.id, later.id]
        assert list(df["pass_rate"]) == [50.0, 100.0]
        assert list(df["duration_seconds"]) == [20.0, 10.0]

    def test_empty(self):
        df = success_rate_trend([EvalRun()])
        assert isinstance(df, pd.DataFrame)
        assert df.empty
        assert "pass_rate" in df.columns


class TestResultsToFrame:

    def test_columns_and_rows(self, ineligible_expected):
        df = results_to_frame([_result(ineligible_expected, ineligible_expected, True)])
        assert list(df.columns)[:3] == ["result_id", "run_id", "test_case_id"]
        assert len(df) == 1
        assert bool(df.loc[0, "passed"]) is True


class TestPrintRunSummary:

    def test_banner(self, capsys, ineligible_expected):
        run = _completed_run(1, 2)
        print_run_summary(summarize_run(run, [_result(ineligible_expected, ineligible_expected, True)]))
        out = capsys.readouterr().out
        assert "EVALUATION RUN" in out
        assert "1/2" in out
        assert "Field accuracy" in out
        assert "Duration:   30.0s" in out
