"""
Unit tests for src/evaluation/models.py and src/evaluation/rate_limit.py.

Covers:
- EvalRun status state machine: allowed and rejected transitions.
- TestCase input decoding and expected-output shapes.
- EvalResult flat records.
- Rate limiter delays.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta

import pytest

from src.evaluation.models import (
    ALLOWED_TRANSITIONS,
    EvalResult,
    EvalRun,
    EvalSet,
    RunStatus,
    TestCase,
)
from src.evaluation.rate_limit import FixedDelayRateLimiter, NullRateLimiter


class TestEvalRunStateMachine:

    def test_happy_path(self):
        run = EvalRun(eval_set_name="x")
        assert run.status is RunStatus.PENDING
        run.update(status=RunStatus.RUNNING)
        run.update(status="completed")
        assert run.status is RunStatus.COMPLETED

    def test_running_to_failed(self):
        run = EvalRun()
        run.update(status=RunStatus.RUNNING)
        run.update(status=RunStatus.FAILED, error_message="boom")
        assert run.status is RunStatus.FAILED
        assert run.error_message == "boom"

    @pytest.mark.parametrize("start, target", [
        (RunStatus.PENDING, RunStatus.COMPLETED),
        (RunStatus.PENDING, RunStatus.FAILED),
        (RunStatus.COMPLETED, RunStatus.RUNNING),
        (RunStatus.FAILED, RunStatus.COMPLETED),
        (RunStatus.COMPLETED, RunStatus.FAILED),
    ])
    def test_illegal_transitions(self, start, target):
        run = EvalRun(status=start)
        with pytest.raises(ValueError, match="Illegal run transition"):
            run.update(status=target)
        assert run.status is start

    def test_terminal_states_have_no_exits(self):
        assert ALLOWED_TRANSITIONS[RunStatus.COMPLETED] == frozenset()
        assert ALLOWED_TRANSITIONS[RunStatus.FAILED] == frozenset()

    def test_same_status_update_allowed(self):
        run = EvalRun()
        run.update(status=RunStatus.RUNNING)
        run.update(status=RunStatus.RUNNING, passed_count=2)
        assert run.passed_count == 2

    def test_unknown_field_rejected(self):
        with pytest.raises(AttributeError):
            EvalRun().update(colour="red")

    def test_unknown_status_rejected(self):
        with pytest.raises(ValueError):
            EvalRun().update(status="paused")

    def test_to_dict_and_duration(self):
        run = EvalRun(eval_set_name="x")
        run.update(status=RunStatus.RUNNING, started_at=datetime(2024, 1, 1))
        assert run.duration_seconds is None
        run.update(status=RunStatus.COMPLETED, completed_at=datetime(2024, 1, 1) + timedelta(seconds=5))

        data = run.to_dict()
        assert data["status"] == "completed"
        assert data["started_at"] == "2024-01-01T00:00:00"
        assert run.duration_seconds == 5.0
        json.dumps(data)

    def test_progress_defaults_to_zero(self):
        assert EvalRun().progress == 0.0


class TestTestCase:

    def test_json_string_inputs(self):
        case = TestCase(id=1, input_variables='{"patent_id": "US1", "claim_number": 2}')
        assert case.parsed_inputs() == {"patent_id": "US1", "claim_number": 2}
        assert case.patent_id == "US1"

    def test_dict_inputs(self):
        case = TestCase(id=1, input_variables={"patent_id": "US1"})
        assert case.patent_id == "US1"

    def test_invalid_json(self):
        case = TestCase(id=1, input_variables="{nope")
        with pytest.raises(json.JSONDecodeError):
            case.parsed_inputs()
        assert case.patent_id is None

    def test_non_object_json(self):
        case = TestCase(id=1, input_variables="[1, 2]")
        with pytest.raises(ValueError, match="must be a JSON object"):
            case.parsed_inputs()

    def test_none_inputs(self):
        assert TestCase(id=1, input_variables=None).patent_id is None

    def test_expected_shapes(self):
        structured = TestCase(id=1, input_variables={}, expected_output='{"overall_eligibility": "eligible"}')
        legacy = TestCase(id=2, input_variables={}, expected_output="ineligible")
        assert structured.expected() == {"overall_eligibility": "eligible"}
        assert legacy.expected() == "ineligible"


class TestEvalSet:

    def test_pattern(self):
        assert EvalSet(name="x", grader_type="regex", grader_config={"pattern": "^a"}).pattern == "^a"
        assert EvalSet(name="x").pattern is None
        assert EvalSet(name="x").grader_type == "exact_match"


class TestEvalResult:

    def test_to_record(self):
        result = EvalResult(
            run_id="r1",
            test_case_id="tc-1",
            actual_output="{}",
            passed=False,
            expected_output={"overall_eligibility": "eligible"},
            differences=({"field": "overall_eligibility", "matched": False},),
        )
        record = result.to_record()
        assert record["expected_output"] == '{"overall_eligibility": "eligible"}'
        assert json.loads(record["differences"]) == [{"field": "overall_eligibility", "matched": False}]
        assert record["error_message"] is None
        assert record["result_id"] == result.result_id


class TestRateLimiters:

    def test_null_limiter(self):
        assert NullRateLimiter().wait() is None

    def test_fixed_delay(self):
        sleeps = []
        FixedDelayRateLimiter(2.5, sleep=sleeps.append).wait()
        assert sleeps == [2.5]

    def test_zero_delay_never_sleeps(self):
        sleeps = []
        FixedDelayRateLimiter(0, sleep=sleeps.append).wait()
        assert sleeps == []

    def test_negative_delay_rejected(self):
        with pytest.raises(ValueError):
            FixedDelayRateLimiter(-1)
