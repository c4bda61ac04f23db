import os
import sys
import tempfile
from pathlib import Path

import httpx
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config.settings import settings
from storage.migrate import migrate


@pytest.fixture(autouse=True)
def tmp_db(monkeypatch):
    td = tempfile.TemporaryDirectory()
    db_path = os.path.join(td.name, "test.db")
    monkeypatch.setattr(settings, "DB_PATH", db_path, raising=False)
    migrate(db_path)
    try:
        yield db_path
    finally:
        td.cleanup()


@pytest.fixture
def assessment_payload():
    return {
        "output": {
            "assessment": {
                "vocabulary": {"score": 82, "comment": "Varied word choice."},
                "clarity": {"score": 64.5, "comment": "Mostly clear."},
                "fluency": {"score": 35, "comment": "Frequent pauses."},
                "grammar_accuracy": {"score": 120, "comment": "Out of range on purpose."},
            },
            "feedback": {
                "great_parts": ["Confident opening"],
                "improvement_suggestions": ["Link ideas with connectors"],
            },
        },
        "weightedAverage": {"score": 71.2},
        "duration": 75,
        "word_count": 140,
        "transcript": "I would love to visit Japan in spring.",
        "population_mean": 120,
        "population_standard_deviation": 20,
        "sample_size": 350,
    }


class RequestLog:
    """Collects requests seen by a mock transport."""

    def __init__(self, handler):
        self.requests = []
        self._handler = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        return self._handler(request)

    def urls(self):
        return [str(request.url) for request in self.requests]


@pytest.fixture
def mock_http():
    def _factory(handler):
        recorder = RequestLog(handler)
        return httpx.Client(transport=httpx.MockTransport(recorder)), recorder

    return _factory
