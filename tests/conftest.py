import json
import threading

import pytest

from meetinglens.models.schemas import TranscriptContent, TranscriptCue


class FakeModelClient:
    """
    Scripted stand-in for a model client.

    responses: list of strings returned in call order, or a callable
    (messages) -> str. Every call's messages are recorded.
    """

    def __init__(self, responses):
        self._responses = responses
        self._lock = threading.Lock()
        self.calls = []

    def complete(self, messages, options=None):
        with self._lock:
            self.calls.append({"messages": messages, "options": options})
            if callable(self._responses):
                return self._responses(messages)
            if not self._responses:
                raise AssertionError("FakeModelClient ran out of scripted responses")
            return self._responses.pop(0)


class FailingModelClient:
    def complete(self, messages, options=None):
        raise RuntimeError("Claude API failed: connection reset")


def summary_json(summary="Team agreed on the plan.", **fields):
    payload = {
        "summary": summary,
        "keyPoints": [],
        "actionItems": [],
        "decisions": [],
        "topics": [],
    }
    payload.update(fields)
    return json.dumps(payload)


def answer_json(answer, citations=()):
    return json.dumps({"answer": answer, "citations": list(citations)})


@pytest.fixture
def fake_client_factory():
    return FakeModelClient


@pytest.fixture
def cue_content():
    return TranscriptContent(
        cues=[
            TranscriptCue(start="00:00:01", end="00:00:10", speaker="A", text="Budget is approved"),
            TranscriptCue(start="00:00:11", end="00:00:20", speaker="B", text="Timeline moved"),
        ]
    )
