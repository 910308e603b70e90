"""
Evaluation-layer configuration: output paths, persisted column order, and
run parameters.
"""

from pathlib import Path

# ---------------------------------------------------------------------------
# Project paths
# ---------------------------------------------------------------------------

# Resolve from this file: src/evaluation/config.py → src/evaluation → src → root
PROJECT_ROOT = Path(__file__).resolve().parents[2]

DATA_DIR = PROJECT_ROOT / "data"
RESULTS_DIR = DATA_DIR / "results"
RUNS_DIR = DATA_DIR / "runs"

EVAL_RESULTS_PATH = RESULTS_DIR / "eval_results.csv"
TEST_CASES_PATH = DATA_DIR / "test_cases.csv"

# ---------------------------------------------------------------------------
# Persisted eval result schema
# ---------------------------------------------------------------------------

EVAL_RESULT_COLUMNS: list[str] = [
    "result_id",
    "run_id",
    "test_case_id",
    "patent_id",
    "actual_output",
    "expected_output",
    "passed",
    "error_message",
    "differences",
    "created_at",
]

# Test case export columns read by store.load_test_cases
TEST_CASE_COLUMNS: list[str] = ["id", "input_variables", "expected_output", "description"]

# ---------------------------------------------------------------------------
# Run parameters
# ---------------------------------------------------------------------------

# Pause between consecutive model calls, to stay under provider rate limits.
INTER_CASE_DELAY_SECONDS: float = 1.0

DEFAULT_EVAL_SET_NAME = "alice-101"

# Stored in place of the actual output when a case did not produce one.
ERROR_OUTPUT_PREFIX = "ERROR: "

# Wilson interval confidence level for run summaries
CONFIDENCE_LEVEL: float = 0.95
