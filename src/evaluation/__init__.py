"""
src/evaluation — batch evaluation of the analysis service.

Module layout
-------------
    config.py      Paths, persisted columns, inter-case delay
    models.py      TestCase, EvalSet, EvalRun (state machine), EvalResult
    rate_limit.py  NullRateLimiter, FixedDelayRateLimiter
    store.py       In-memory and CSV persistence; test-case loader
    runner.py      EvaluationRunner, run_evaluation
    metrics.py     Pass rates, Wilson intervals, run comparison and trends
"""

from .metrics import (
    compare_runs,
    pass_rate,
    print_run_summary,
    results_to_frame,
    success_rate_trend,
    summarize_run,
    wilson_confidence_interval,
)
from .models import EvalResult, EvalRun, EvalSet, RunStatus, TestCase
from .rate_limit import FixedDelayRateLimiter, NullRateLimiter
from .runner import EvaluationRunner, progress_percentage, run_evaluation
from .store import CsvResultStore, InMemoryResultStore, load_results, load_test_cases

__all__ = [
    "EvaluationRunner",
    "run_evaluation",
    "progress_percentage",
    "TestCase",
    "EvalSet",
    "EvalRun",
    "EvalResult",
    "RunStatus",
    "NullRateLimiter",
    "FixedDelayRateLimiter",
    "InMemoryResultStore",
    "CsvResultStore",
    "load_results",
    "load_test_cases",
    "pass_rate",
    "wilson_confidence_interval",
    "summarize_run",
    "compare_runs",
    "success_rate_trend",
    "results_to_frame",
    "print_run_summary",
]
