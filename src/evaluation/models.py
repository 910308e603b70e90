"""
Evaluation records: test cases, eval sets, eval runs and eval results.

``TestCase`` and ``EvalSet`` are read-only inputs.  ``EvalRun`` is mutated
only by the runner that owns it, through :meth:`EvalRun.update`.
``EvalResult`` is created once per processed case and never changed.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum

from src.grading.engine import EXACT_MATCH, as_structured


class RunStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATUSES = frozenset({RunStatus.COMPLETED, RunStatus.FAILED})

# Allowed lifecycle moves; terminal states have none.
ALLOWED_TRANSITIONS: dict[RunStatus, frozenset[RunStatus]] = {
    RunStatus.PENDING: frozenset({RunStatus.RUNNING}),
    RunStatus.RUNNING: frozenset({RunStatus.COMPLETED, RunStatus.FAILED}),
    RunStatus.COMPLETED: frozenset(),
    RunStatus.FAILED: frozenset(),
}


@dataclass(frozen=True)
class TestCase:
    """
    One labeled claim.

    ``input_variables`` may be a dict or its JSON string; ``expected_output``
    may be a dict, a JSON-object string, or a legacy plain string such as
    ``'ineligible'``.
    """

    __test__ = False  # not a pytest test class

    id: object
    input_variables: object
    expected_output: object = None
    description: str = ""

    def parsed_inputs(self) -> dict:
        """
        Decode ``input_variables``.

        Raises:
            json.JSONDecodeError: The string is not valid JSON.
            ValueError: It decodes to something other than an object.
        """
        if isinstance(self.input_variables, dict):
            return self.input_variables
        parsed = json.loads(self.input_variables)
        if not isinstance(parsed, dict):
            raise ValueError(
                f"input_variables for test case {self.id} must be a JSON object"
            )
        return parsed

    @property
    def patent_id(self):
        """Patent id from the inputs, or ``None`` if they do not parse."""
        try:
            return self.parsed_inputs().get("patent_id")
        except (TypeError, ValueError):
            return None

    def expected(self):
        """Structured expected output when available, else the raw value."""
        structured = as_structured(self.expected_output)
        return dict(structured) if structured is not None else self.expected_output


@dataclass(frozen=True)
class EvalSet:
    name: str
    grader_type: str = EXACT_MATCH
    grader_config: dict = field(default_factory=dict)

    @property
    def pattern(self) -> str | None:
        return (self.grader_config or {}).get("pattern")


@dataclass
class EvalRun:
    """
    Lifecycle and counters of one evaluation batch.

    ``metadata`` carries progress for pollers:
    ``{'progress': float, 'processed': int, 'total': int, ...}``.
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    eval_set_name: str = ""
    status: RunStatus = RunStatus.PENDING
    total_count: int = 0
    passed_count: int = 0
    failed_count: int = 0
    started_at: datetime | None = None
    completed_at: datetime | None = None
    error_message: str | None = None
    metadata: dict = field(default_factory=dict)

    @property
    def progress(self) -> float:
        return self.metadata.get("progress", 0.0)

    @property
    def duration_seconds(self) -> float | None:
        if self.started_at is None or self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()

    def update(self, **fields) -> "EvalRun":
        """
        Apply field changes, enforcing the status state machine.

        Raises:
            AttributeError: Unknown field name.
            ValueError: Illegal status transition.
        """
        new_status = fields.get("status")
        if new_status is not None:
            new_status = RunStatus(new_status)
            if new_status is not self.status and new_status not in ALLOWED_TRANSITIONS[self.status]:
                raise ValueError(
                    f"Illegal run transition {self.status.value} → {new_status.value}"
                )
            fields["status"] = new_status

        for name, value in fields.items():
            if not hasattr(self, name):
                raise AttributeError(f"EvalRun has no field '{name}'")
            setattr(self, name, value)
        return self

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status.value
        for key in ("started_at", "completed_at"):
            data[key] = data[key].isoformat() if data[key] else None
        return data


@dataclass(frozen=True)
class EvalResult:
    run_id: str
    test_case_id: object
    actual_output: str
    passed: bool
    expected_output: object = None
    error_message: str | None = None
    patent_id: object = None
    differences: tuple = ()
    result_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=datetime.now)

    def to_record(self) -> dict:
        """Flat dict matching ``EVAL_RESULT_COLUMNS``."""
        expected = self.expected_output
        if isinstance(expected, dict):
            expected = json.dumps(expected)
        return {
            "result_id": self.result_id,
            "run_id": self.run_id,
            "test_case_id": self.test_case_id,
            "patent_id": self.patent_id,
            "actual_output": self.actual_output,
            "expected_output": expected,
            "passed": self.passed,
            "error_message": self.error_message,
            "differences": json.dumps(list(self.differences)),
            "created_at": self.created_at.isoformat(),
        }
