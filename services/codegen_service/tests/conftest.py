import os

# Settings are read at import time; pin them before the app module loads
os.environ.setdefault("GEMINI_API_KEY", "test-key")
os.environ.setdefault("TRACE_EXPORTER", "none")
os.environ["DEFAULT_MODELS"] = '["model-a", "model-b", "model-c"]'

import pytest

from services.codegen_service.src.exceptions import ProviderError


class ScriptedProvider:
    """Replays a fixed list of outcomes: a string is returned, an exception is raised."""

    name = "scripted"

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def generate(self, model, prompt):
        self.calls.append((model, prompt))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def _overloaded(status=429):
    return ProviderError(f"[{status}] Resource has been exhausted (e.g. check quota).", status=status)


@pytest.fixture
def scripted():
    return ScriptedProvider


@pytest.fixture
def overloaded():
    return _overloaded
