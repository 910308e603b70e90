"""
Persistence for eval runs and eval results, and the test-case source.

Stores expose two calls: ``save_run(run)`` after every run update and
``save_result(result)`` once per processed case.  Both must raise on
failure; the runner lets persistence errors end the run.

``CsvResultStore`` appends one CSV row per result as soon as it is produced,
so an interrupted run loses at most the in-flight case, and rewrites a JSON
snapshot of the run on every update so progress can be polled from disk.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path

import pandas as pd

from .config import (
    EVAL_RESULT_COLUMNS,
    EVAL_RESULTS_PATH,
    RUNS_DIR,
    TEST_CASE_COLUMNS,
)
from .models import EvalResult, EvalRun, TestCase


class InMemoryResultStore:
    """Keeps run snapshots and results in memory."""

    def __init__(self):
        self.runs: dict[str, dict] = {}
        self.run_history: list[dict] = []
        self.results: list[EvalResult] = []

    def save_run(self, run: EvalRun) -> None:
        snapshot = run.to_dict()
        self.runs[run.id] = snapshot
        self.run_history.append(snapshot)

    def save_result(self, result: EvalResult) -> None:
        self.results.append(result)

    def results_for(self, run_id: str) -> list[EvalResult]:
        return [r for r in self.results if r.run_id == run_id]


class CsvResultStore:
    """
    Results appended to a CSV file; run snapshots written as JSON.

    Args:
        results_path: CSV file for eval results (created with a header).
        runs_dir: Directory holding ``run_<id>.json`` snapshots.
    """

    def __init__(self, results_path: Path = EVAL_RESULTS_PATH, runs_dir: Path = RUNS_DIR):
        self.results_path = Path(results_path)
        self.runs_dir = Path(runs_dir)

    def run_path(self, run_id: str) -> Path:
        return self.runs_dir / f"run_{run_id}.json"

    def save_run(self, run: EvalRun) -> None:
        self.runs_dir.mkdir(parents=True, exist_ok=True)
        path = self.run_path(run.id)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(run.to_dict(), indent=2), encoding="utf-8")
        tmp_path.replace(path)

    def save_result(self, result: EvalResult) -> None:
        self.results_path.parent.mkdir(parents=True, exist_ok=True)
        file_exists = self.results_path.exists() and self.results_path.stat().st_size > 0

        with self.results_path.open("a", newline="", encoding="utf-8") as fh:
            writer = csv.DictWriter(
                fh,
                fieldnames=EVAL_RESULT_COLUMNS,
                extrasaction="ignore",
            )
            if not file_exists:
                writer.writeheader()
            writer.writerow(result.to_record())

    def load_run(self, run_id: str) -> dict:
        """
        Read the latest snapshot of a run.

        Raises:
            FileNotFoundError: No snapshot exists for ``run_id``.
        """
        return json.loads(self.run_path(run_id).read_text(encoding="utf-8"))


def load_results(path: Path = EVAL_RESULTS_PATH, run_id: str | None = None) -> pd.DataFrame:
    """
    Load persisted eval results, optionally for one run.

    Raises:
        FileNotFoundError: The results file does not exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Eval results not found: {path}")

    df = pd.read_csv(path, dtype={"run_id": str, "test_case_id": str, "patent_id": str})
    if run_id is not None:
        df = df[df["run_id"] == run_id].reset_index(drop=True)
    return df


def load_test_cases(path: Path) -> list[TestCase]:
    """
    Read a test-case export into ordered :class:`TestCase` objects.

    The file needs the columns ``id, input_variables, expected_output,
    description``; values are taken verbatim (JSON strings stay strings and
    are decoded lazily by the runner).

    Raises:
        FileNotFoundError: ``path`` does not exist.
        ValueError: Required columns are missing.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Test case file not found: {path}")

    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    missing = [c for c in TEST_CASE_COLUMNS if c not in df.columns and c != "description"]
    if missing:
        raise ValueError(
            f"Test case file {path} is missing columns: {', '.join(missing)}"
        )

    cases: list[TestCase] = []
    for row in df.to_dict(orient="records"):
        cases.append(TestCase(
            id=row["id"],
            input_variables=row["input_variables"],
            expected_output=row["expected_output"],
            description=row.get("description", ""),
        ))
    return cases
