"""
Shared pytest fixtures for the eligibility engine and evaluation harness.

The model invoker is always faked; no test touches the network.  Raw replies
use the display labels the prompt asks the model for ("Abstract", "No", "-").
"""

from __future__ import annotations

import json

import pytest

from src.alice.service import ValidityAnalysisService
from src.evaluation.models import EvalSet, TestCase
from src.evaluation.store import InMemoryResultStore
from src.llm_client.prompts import RenderedPrompt


# ---------------------------------------------------------------------------
# Raw model replies
# ---------------------------------------------------------------------------

# Abstract idea, no inventive concept → ineligible
INELIGIBLE_REPLY = {
    "patent_number": "US8000000",
    "claim_number": 1,
    "subject_matter": "Abstract",
    "inventive_concept": "No",
    "validity_score": 2,
}

# Neither abstract nor natural phenomenon → eligible, Step Two skipped
ELIGIBLE_REPLY = {
    "patent_number": "US9000000",
    "claim_number": 3,
    "subject_matter": "Not Abstract/Not Natural Phenomenon",
    "inventive_concept": "-",
    "validity_score": 4,
}


def make_reply(**overrides) -> dict:
    """INELIGIBLE_REPLY with fields replaced."""
    return {**INELIGIBLE_REPLY, **overrides}


class FakeInvoker:
    """
    Returns queued replies in order; an Exception instance in the queue is
    raised instead.  Every call's keyword arguments are recorded.
    """

    def __init__(self, replies):
        self.replies = list(replies)
        self.calls: list[dict] = []

    def ask(self, **kwargs):
        self.calls.append(kwargs)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeRenderer:
    def __init__(self):
        self.calls: list[tuple] = []

    def render(self, template_id, variables):
        self.calls.append((template_id, dict(variables)))
        return RenderedPrompt(
            system_message="system",
            content=f"analyze {variables['patent_id']} claim {variables['claim_number']}",
            model="test-model",
            temperature=0.0,
            max_tokens=100,
        )


def make_case(case_id, patent_id, expected, claim_number=1, description=""):
    """TestCase with JSON-string inputs, as exported."""
    inputs = {
        "patent_id": patent_id,
        "claim_number": claim_number,
        "claim_text": f"A method for {patent_id}.",
        "abstract": "An abstract.",
    }
    if isinstance(expected, dict):
        expected = json.dumps(expected)
    return TestCase(
        id=case_id,
        input_variables=json.dumps(inputs),
        expected_output=expected,
        description=description,
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def fake_invoker_factory():
    return FakeInvoker


@pytest.fixture
def fake_renderer():
    return FakeRenderer()


@pytest.fixture
def service_factory(fake_renderer):
    """Build a service over a FakeInvoker seeded with ``replies``."""

    def _build(replies):
        invoker = FakeInvoker(replies)
        return ValidityAnalysisService(invoker, renderer=fake_renderer), invoker

    return _build


@pytest.fixture
def reply_factory():
    return make_reply


@pytest.fixture
def case_factory():
    return make_case


@pytest.fixture
def ineligible_expected():
    return {
        "subject_matter": "abstract",
        "inventive_concept": "uninventive",
        "overall_eligibility": "ineligible",
    }


@pytest.fixture
def eligible_expected():
    return {
        "subject_matter": "patentable",
        "inventive_concept": "skipped",
        "overall_eligibility": "eligible",
    }


@pytest.fixture
def exact_eval_set():
    return EvalSet(name="alice-regression")


@pytest.fixture
def memory_store():
    return InMemoryResultStore()
