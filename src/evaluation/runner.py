"""
Evaluation run orchestration.

Processing order:
  - Test cases run sequentially in their given order, optionally filtered
    to an allow-list of patent ids.  ``total_count`` is fixed from the
    filtered set before the first case starts.
  - Each case is analyzed, graded, and persisted as exactly one EvalResult;
    the run's counters and progress are updated and saved after every case.
  - A failure inside one case (bad input JSON, service error, grading
    error) fails that case only.  Persistence errors and anything else
    outside the per-case boundary fail the whole run, which is saved in
    ``failed`` state before the exception is re-raised.
  - The rate limiter pauses between cases, never after the last one.
"""

from __future__ import annotations

import logging
from datetime import datetime

from src.grading.engine import as_structured, field_differences, grade

from .config import DEFAULT_EVAL_SET_NAME, ERROR_OUTPUT_PREFIX, TEST_CASES_PATH
from .models import EvalResult, EvalRun, EvalSet, RunStatus, TestCase
from .rate_limit import FixedDelayRateLimiter, NullRateLimiter
from .store import CsvResultStore, InMemoryResultStore, load_test_cases

logger = logging.getLogger(__name__)


def progress_percentage(processed: int, total: int) -> float:
    """
    Percent of cases processed, rounded to 2 decimals.

    Stays below 100 until the last case so that 100 always means done.
    """
    if total <= 0:
        return 100.0
    pct = round(processed / total * 100, 2)
    if processed < total:
        pct = min(pct, 99.99)
    return pct


def select_test_cases(test_cases, selected_patent_ids=None) -> list[TestCase]:
    """
    Keep insertion order; if ``selected_patent_ids`` is given, keep only
    cases whose ``patent_id`` is in it (cases with unparseable inputs drop).
    """
    cases = list(test_cases)
    if selected_patent_ids is None:
        return cases
    allowed = {str(pid) for pid in selected_patent_ids}
    return [
        case for case in cases
        if case.patent_id is not None and str(case.patent_id) in allowed
    ]


class EvaluationRunner:
    """
    Run one eval set through the analysis service and grade every case.

    Args:
        eval_set: Grader configuration.
        test_cases: Ordered iterable of :class:`TestCase`.
        service: Object with ``analyze(patent_number, claim_number,
            claim_text, abstract) -> AnalysisResult``.
        store: Persistence with ``save_run`` / ``save_result``.
        run: Pending :class:`EvalRun` to drive; created if omitted.
        rate_limiter: Object with ``wait()``; no pause if omitted.
        selected_patent_ids: Optional allow-list of patent ids.
    """

    def __init__(
        self,
        eval_set: EvalSet,
        test_cases,
        service,
        store,
        run: EvalRun | None = None,
        rate_limiter=None,
        selected_patent_ids=None,
    ):
        self.eval_set = eval_set
        self.test_cases = test_cases
        self.service = service
        self.store = store
        self.run = run if run is not None else EvalRun(eval_set_name=eval_set.name)
        self.rate_limiter = rate_limiter if rate_limiter is not None else NullRateLimiter()
        self.selected_patent_ids = (
            list(selected_patent_ids) if selected_patent_ids is not None else None
        )

    # ------------------------------------------------------------------
    # Per-case processing
    # ------------------------------------------------------------------

    def _error_result(self, case: TestCase, patent_id, message: str) -> EvalResult:
        return EvalResult(
            run_id=self.run.id,
            test_case_id=case.id,
            patent_id=patent_id,
            actual_output=f"{ERROR_OUTPUT_PREFIX}{message}",
            expected_output=case.expected_output,
            passed=False,
            error_message=message,
        )

    def process_case(self, case: TestCase, index: int, total: int) -> EvalResult:
        """
        Analyze and grade one case; never raises.

        Returns:
            The :class:`EvalResult` to persist.
        """
        patent_id = None
        try:
            inputs = case.parsed_inputs()
            patent_id = inputs.get("patent_id")
            logger.info(
                "Processing test case %d/%d: %s",
                index, total, case.description or patent_id,
            )

            analysis = self.service.analyze(
                patent_number=patent_id,
                claim_number=inputs.get("claim_number"),
                claim_text=inputs.get("claim_text"),
                abstract=inputs.get("abstract"),
            )
            if not analysis.succeeded:
                logger.error(
                    "Service error for test case %d: %s", index, analysis.status_message,
                )
                return self._error_result(case, patent_id, analysis.status_message)

            expected = case.expected()
            actual = analysis.grading_view()
            passed = grade(
                actual,
                expected,
                self.eval_set.grader_type,
                pattern=self.eval_set.pattern,
            )
            differences = (
                tuple(field_differences(actual, expected))
                if as_structured(expected) is not None
                else ()
            )

            if passed:
                logger.info("Test case %d PASSED", index)
            else:
                logger.info(
                    "Test case %d FAILED - Expected: %s, Got: %s", index, expected, actual,
                )

            return EvalResult(
                run_id=self.run.id,
                test_case_id=case.id,
                patent_id=patent_id,
                actual_output=analysis.to_json(),
                expected_output=case.expected_output,
                passed=passed,
                differences=differences,
            )
        except Exception as exc:
            logger.error("Error processing test case %d: %s", index, exc)
            return self._error_result(case, patent_id, str(exc) or type(exc).__name__)

    # ------------------------------------------------------------------
    # Run lifecycle
    # ------------------------------------------------------------------

    def _progress_metadata(self, processed: int, total: int, progress: float | None = None) -> dict:
        if progress is None:
            progress = progress_percentage(processed, total)
        metadata = dict(self.run.metadata)
        metadata.update({
            "progress": progress,
            "processed": processed,
            "total": total,
        })
        if self.selected_patent_ids is not None:
            metadata["selected_patent_ids"] = self.selected_patent_ids
        return metadata

    def execute(self) -> EvalRun:
        """
        Drive the run from ``pending`` to ``completed`` (or ``failed``).

        Returns:
            The finalized :class:`EvalRun`.

        Raises:
            ValueError: The run is not pending.
            Exception: Whatever escaped the per-case boundary, after the
                run has been saved as ``failed``.
        """
        run = self.run
        if run.status is not RunStatus.PENDING:
            raise ValueError(f"Run {run.id} is {run.status.value}, expected pending")

        try:
            cases = select_test_cases(self.test_cases, self.selected_patent_ids)
            total = len(cases)
            run.update(
                status=RunStatus.RUNNING,
                started_at=datetime.now(),
                total_count=total,
                passed_count=0,
                failed_count=0,
                metadata=self._progress_metadata(0, total, progress=0.0),
            )
            self.store.save_run(run)
            logger.info(
                "Starting evaluation for %s with %d test cases", self.eval_set.name, total,
            )

            passed_count = 0
            failed_count = 0
            for index, case in enumerate(cases, start=1):
                result = self.process_case(case, index, total)
                self.store.save_result(result)

                if result.passed:
                    passed_count += 1
                else:
                    failed_count += 1

                run.update(
                    passed_count=passed_count,
                    failed_count=failed_count,
                    metadata=self._progress_metadata(index, total),
                )
                self.store.save_run(run)

                if index < total:
                    self.rate_limiter.wait()

            run.update(
                status=RunStatus.COMPLETED,
                completed_at=datetime.now(),
                total_count=total,
                passed_count=passed_count,
                failed_count=failed_count,
                metadata=self._progress_metadata(total, total, progress=100.0),
            )
            self.store.save_run(run)

            rate = passed_count / total * 100 if total else 0.0
            logger.info(
                "Evaluation completed: %d/%d passed (%.1f%%)", passed_count, total, rate,
            )
        except Exception as exc:
            logger.exception("Evaluation failed: %s", exc)
            run.update(
                status=RunStatus.FAILED,
                error_message=str(exc) or type(exc).__name__,
                completed_at=datetime.now(),
            )
            self.store.save_run(run)
            raise

        return run


def run_evaluation(
    eval_set: EvalSet,
    test_cases,
    service,
    store=None,
    selected_patent_ids=None,
    inter_case_delay: float | None = None,
    verbose: bool = True,
) -> EvalRun:
    """
    Convenience wrapper: build a runner, execute it, print a summary.

    Args:
        eval_set: Grader configuration.
        test_cases: Ordered iterable of :class:`TestCase`.
        service: Analysis service.
        store: Defaults to :class:`InMemoryResultStore`.
        selected_patent_ids: Optional allow-list of patent ids.
        inter_case_delay: Seconds between cases; ``None`` uses the
            configured default, ``0`` disables pausing.
        verbose: Print the run summary banner.

    Returns:
        The finalized :class:`EvalRun`.
    """
    from .metrics import print_run_summary, summarize_run

    store = store if store is not None else InMemoryResultStore()
    rate_limiter = (
        FixedDelayRateLimiter()
        if inter_case_delay is None
        else FixedDelayRateLimiter(inter_case_delay)
    )
    runner = EvaluationRunner(
        eval_set=eval_set,
        test_cases=test_cases,
        service=service,
        store=store,
        rate_limiter=rate_limiter,
        selected_patent_ids=selected_patent_ids,
    )
    run = runner.execute()

    if verbose:
        results = store.results_for(run.id) if hasattr(store, "results_for") else []
        print_run_summary(summarize_run(run, results))
    return run


def main(
    test_cases_path=None,
    eval_set_name: str = DEFAULT_EVAL_SET_NAME,
) -> EvalRun:
    """
    Evaluate the exported test cases against the live model and persist
    results under ``data/``.
    """
    from src.alice.service import ValidityAnalysisService
    from src.llm_client.invoker import OpenAIChatInvoker

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    test_cases = load_test_cases(test_cases_path or TEST_CASES_PATH)
    service = ValidityAnalysisService(OpenAIChatInvoker())
    return run_evaluation(
        EvalSet(name=eval_set_name),
        test_cases,
        service,
        store=CsvResultStore(),
    )


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    main()
