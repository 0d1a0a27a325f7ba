"""Shared fixtures."""

import pytest

from agents.llm_client import BackendError

WELL_FORMED_REPLY = """Summary: Adds retry logic
Purpose: Improve resilience
Key Changes:
- Add retry helper
- Wrap HTTP calls
Impact: Fewer transient failures
Documentation: Calls are retried up to three times.
Suggestions:
1. Make retries configurable
2. Add jitter
"""


class FakeBackend:
    """Records calls; raises BackendError for content belonging to fail_paths."""

    def __init__(self, reply: str = WELL_FORMED_REPLY, fail_paths=()):
        self.reply = reply
        self.fail_paths = set(fail_paths)
        self.calls = []

    def respond(self, instruction: str, content: str) -> str:
        self.calls.append((instruction, content))
        for path in self.fail_paths:
            if content.startswith(f"File: {path}\n"):
                raise BackendError("OpenAI", "quota exceeded", status_code=429)
        return self.reply


@pytest.fixture
def fake_backend():
    return FakeBackend


@pytest.fixture
def well_formed_reply():
    return WELL_FORMED_REPLY


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("AI_PROVIDER", "AI_MODEL", "AI_API_URL", "OPENAI_API_KEY", "ANTHROPIC_API_KEY", "PROJECT_ROOT"):
        monkeypatch.delenv(var, raising=False)
