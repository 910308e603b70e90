"""
Run analytics: pass rates with Wilson intervals, per-field accuracy,
run-to-run comparison and success-rate trends.

All functions are read-only over :class:`EvalRun` / :class:`EvalResult`.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
from scipy import stats

from src.grading.engine import GRADED_FIELDS, as_structured, compare_fields

from .config import CONFIDENCE_LEVEL, EVAL_RESULT_COLUMNS
from .models import EvalResult, EvalRun, RunStatus


# ---------------------------------------------------------------------------
# Wilson confidence interval
# ---------------------------------------------------------------------------

def wilson_confidence_interval(
    p: float,
    n: int,
    confidence: float = CONFIDENCE_LEVEL,
) -> tuple[float, float]:
    """
    Wilson score interval for a binomial proportion.

    Args:
        p: Observed pass rate as a proportion in [0, 1].
        n: Number of graded cases.
        confidence: Confidence level (default 0.95).

    Returns:
        Tuple of (lower_bound, upper_bound), both clamped to [0, 1].
    """
    if n == 0:
        return (0.0, 0.0)

    z = stats.norm.ppf((1 + confidence) / 2)
    denom = 1 + z**2 / n
    center = (p + z**2 / (2 * n)) / denom
    margin = z * np.sqrt(p * (1 - p) / n + z**2 / (4 * n**2)) / denom

    return (max(0.0, float(center - margin)), min(1.0, float(center + margin)))


def pass_rate(run: EvalRun) -> float:
    """Percent of cases passed; 0 for an empty run."""
    if not run.total_count:
        return 0.0
    return round(run.passed_count / run.total_count * 100, 2)


# ---------------------------------------------------------------------------
# Per-run summary
# ---------------------------------------------------------------------------

def field_accuracy(results: list[EvalResult]) -> dict[str, float | None]:
    """
    Fraction of matching values per graded field.

    Only results whose actual and expected outputs are both structured
    count; a field with no such results maps to ``None``.
    """
    matches = {name: 0 for name in GRADED_FIELDS}
    counted = 0
    for result in results:
        if result.error_message is not None:
            continue
        actual = as_structured(result.actual_output)
        expected = as_structured(result.expected_output)
        if actual is None or expected is None:
            continue
        counted += 1
        for comparison in compare_fields(actual, expected):
            if comparison.matched:
                matches[comparison.field] += 1

    if counted == 0:
        return {name: None for name in GRADED_FIELDS}
    return {name: round(hits / counted, 4) for name, hits in matches.items()}


def summarize_run(run: EvalRun, results: list[EvalResult] | None = None) -> dict:
    """
    Headline numbers for one run.

    Args:
        run: The run to summarize.
        results: Its results; per-field accuracy and the error count are
            derived from these when given.

    Returns:
        Dict with counts, ``pass_rate`` (percent), the Wilson interval
        (percent), ``field_accuracy``, ``error_count`` and
        ``duration_seconds``.
    """
    results = list(results or [])
    n = run.total_count
    p = run.passed_count / n if n else 0.0
    ci_lo, ci_hi = wilson_confidence_interval(p, n)

    return {
        "run_id": run.id,
        "eval_set_name": run.eval_set_name,
        "status": run.status.value,
        "total_count": n,
        "passed_count": run.passed_count,
        "failed_count": run.failed_count,
        "pass_rate": pass_rate(run),
        "ci_lower_95": round(ci_lo * 100, 2),
        "ci_upper_95": round(ci_hi * 100, 2),
        "field_accuracy": field_accuracy(results),
        "error_count": sum(1 for r in results if r.error_message is not None),
        "duration_seconds": run.duration_seconds,
        "error_message": run.error_message,
    }


# ---------------------------------------------------------------------------
# Cross-run views
# ---------------------------------------------------------------------------

def compare_runs(run_a: EvalRun, run_b: EvalRun) -> dict:
    """
    Compare two completed runs.

    Returns:
        Dict with both pass rates and ``difference`` (b minus a, in
        percentage points).

    Raises:
        ValueError: Either run has not completed.
    """
    for run in (run_a, run_b):
        if run.status is not RunStatus.COMPLETED:
            raise ValueError(
                f"Run {run.id} is {run.status.value}; only completed runs can be compared"
            )

    rate_a = pass_rate(run_a)
    rate_b = pass_rate(run_b)
    return {
        "run_a": run_a.id,
        "run_b": run_b.id,
        "pass_rate_a": rate_a,
        "pass_rate_b": rate_b,
        "difference": round(rate_b - rate_a, 2),
    }


def success_rate_trend(runs: list[EvalRun]) -> pd.DataFrame:
    """
    One row per completed run, oldest first.

    Columns: run_id, eval_set_name, completed_at, total_count,
    passed_count, pass_rate, duration_seconds.
    """
    columns = [
        "run_id", "eval_set_name", "completed_at", "total_count",
        "passed_count", "pass_rate", "duration_seconds",
    ]
    records = [
        {
            "run_id": run.id,
            "eval_set_name": run.eval_set_name,
            "completed_at": run.completed_at,
            "total_count": run.total_count,
            "passed_count": run.passed_count,
            "pass_rate": pass_rate(run),
            "duration_seconds": run.duration_seconds,
        }
        for run in runs
        if run.status is RunStatus.COMPLETED
    ]
    if not records:
        return pd.DataFrame(columns=columns)
    return (
        pd.DataFrame(records, columns=columns)
        .sort_values("completed_at")
        .reset_index(drop=True)
    )


def results_to_frame(results: list[EvalResult]) -> pd.DataFrame:
    """EvalResults as a DataFrame with the persisted column order."""
    return pd.DataFrame(
        [r.to_record() for r in results],
        columns=EVAL_RESULT_COLUMNS,
    )


# ---------------------------------------------------------------------------
# Console output
# ---------------------------------------------------------------------------

def print_run_summary(summary: dict) -> None:
    sep = "=" * 60
    print(f"\n{sep}")
    print(f"EVALUATION RUN  {summary['eval_set_name']}  ({summary['run_id']})")
    print(sep)
    print(f"  Status:     {summary['status']}")
    print(f"  Passed:     {summary['passed_count']}/{summary['total_count']}"
          f"  ({summary['pass_rate']:.1f}%)")
    print(f"  95% CI:     [{summary['ci_lower_95']:.1f}%, {summary['ci_upper_95']:.1f}%]")
    print(f"  Errors:     {summary['error_count']}")

    duration = summary.get("duration_seconds")
    if duration is not None:
        print(f"  Duration:   {duration:.1f}s")
    if summary.get("error_message"):
        print(f"  Failure:    {summary['error_message']}")

    accuracy = summary.get("field_accuracy") or {}
    if any(v is not None for v in accuracy.values()):
        print("  Field accuracy:")
        for name, value in accuracy.items():
            shown = "n/a" if value is None else f"{value * 100:.1f}%"
            print(f"    {name:<22} {shown}")
    print(sep)
