import json

import pytest

from checker_client import cli
from checker_client.audio_input import PreparedAudio
from assessment.models import AssessmentResult


class StubClient:
    calls = []

    def __init__(self, proxy_url=None, webhook_url=None):
        self.proxy_url = proxy_url
        self.webhook_url = webhook_url

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return None

    def submit(self, form, audio):
        StubClient.calls.append((form, audio))
        return StubClient.result


@pytest.fixture
def stub_client(monkeypatch, assessment_payload):
    StubClient.calls = []
    StubClient.result = AssessmentResult.model_validate(assessment_payload)
    monkeypatch.setattr(cli, "SubmissionClient", StubClient)
    monkeypatch.setattr(
        cli,
        "prepare_file",
        lambda path, **kwargs: PreparedAudio(data=b"ID3", filename="a.mp3", content_type="audio/mpeg", duration=40),
    )
    return StubClient


def test_presets_listing(capsys):
    assert cli.main(["presets"]) == 0
    out = capsys.readouterr().out
    assert "1. Talk about your dream vacation." in out
    assert "Duration: 20-90 seconds" in out


def test_submit_prints_report(stub_client, capsys, tmp_path):
    pdf_path = tmp_path / "report.pdf"
    code = cli.main(
        ["submit", "--preset", "2", "--audio", "a.mp3", "--level", "4 Units", "--weight", "Grammar=3", "--pdf", str(pdf_path)]
    )
    assert code == 0
    form, audio = stub_client.calls[0]
    assert form.question == "Tell me about yourself."
    assert form.study_level.value == "4 Units"
    assert {c.name: c.weight for c in form.criteria}["Grammar"] == 3
    out = capsys.readouterr().out
    assert "Overall Assessment: 71/100" in out
    assert pdf_path.read_bytes().startswith(b"%PDF")


def test_submit_json_output(stub_client, capsys):
    assert cli.main(["submit", "--question", "Describe your school.", "--audio", "a.mp3", "--json"]) == 0
    printed = json.loads(capsys.readouterr().out)
    assert printed["weightedAverage"]["score"] == 71.2


def test_missing_question_is_an_error(stub_client, capsys):
    assert cli.main(["submit", "--audio", "a.mp3"]) == 1
    assert "Please enter a question or select a preset question" in capsys.readouterr().err
    assert stub_client.calls == []


def test_unknown_criterion(stub_client, capsys):
    assert cli.main(["submit", "--question", "Q", "--audio", "a.mp3", "--weight", "Humour=2"]) == 1
    assert "Unknown criterion 'Humour'" in capsys.readouterr().err


def test_bad_payload_is_reported_without_traceback(monkeypatch, capsys):
    from checker_client.session import SubmissionError

    class FailingClient(StubClient):
        def submit(self, form, audio):
            raise SubmissionError("Invalid response format from server")

    monkeypatch.setattr(cli, "SubmissionClient", FailingClient)
    monkeypatch.setattr(
        cli,
        "prepare_file",
        lambda path, **kwargs: PreparedAudio(data=b"ID3", filename="a.mp3", content_type="audio/mpeg", duration=40),
    )
    assert cli.main(["submit", "--question", "Q", "--audio", "a.mp3"]) == 1
    assert "Invalid response format from server" in capsys.readouterr().err
