from __future__ import annotations

import httpx
import pytest

from checker_client.audio_input import PreparedAudio
from checker_client.form import CheckForm
from checker_client.session import ProcessingTimeout, SubmissionClient, SubmissionError

PROXY = "http://proxy.test"
WEBHOOK = "https://hooks.example.test/webhook/english-test"


class FakeClock:
    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds

    def __call__(self):
        return self.now


def _form():
    return CheckForm(question="Talk about your dream vacation.")


def _audio():
    return PreparedAudio(data=b"ID3-audio", filename="answer.mp3", content_type="audio/mpeg", duration=42)


def _client(http_client, clock=None, **kwargs):
    clock = clock or FakeClock()
    return SubmissionClient(
        PROXY,
        WEBHOOK,
        http_client=http_client,
        poll_interval=3,
        poll_timeout=30,
        sleep=clock.sleep,
        clock=clock,
        **kwargs,
    )


def test_direct_success(mock_http, assessment_payload):
    http, log = mock_http(lambda request: httpx.Response(200, json=[assessment_payload]))
    result = _client(http).submit(_form(), _audio())
    assert result.weighted_average.score == 71.2
    assert list(result.output.assessment) == ["vocabulary", "clarity", "fluency", "grammar_accuracy"]
    assert log.urls() == [f"{PROXY}/api/check-english"]
    body = log.requests[0].content
    assert b"Talk about your dream vacation." in body
    assert b'name="criteria"' in body


def test_gateway_timeout_calls_webhook_exactly_once(mock_http, assessment_payload):
    def handler(request):
        if str(request.url).startswith(PROXY):
            return httpx.Response(504, json={"detail": {"error": "Webhook request timed out"}})
        return httpx.Response(200, json=assessment_payload)

    http, log = mock_http(handler)
    result = _client(http).submit(_form(), _audio())
    assert result.transcript.startswith("I would love")
    assert log.urls() == [f"{PROXY}/api/check-english", WEBHOOK]
    assert b'filename="answer.mp3"' in log.requests[1].content


def test_webhook_fallback_failure_is_reported(mock_http):
    def handler(request):
        if str(request.url).startswith(PROXY):
            return httpx.Response(504, json={})
        return httpx.Response(500, text="boom")

    http, log = mock_http(handler)
    with pytest.raises(SubmissionError, match="Failed to process your audio"):
        _client(http).submit(_form(), _audio())
    assert len(log.requests) == 2


@pytest.mark.parametrize(
    "response,message",
    [
        (httpx.Response(400, json={"detail": "Only audio files are allowed"}), "Only audio files are allowed"),
        (
            httpx.Response(500, json={"detail": {"error": "Failed to forward request to webhook", "details": "x"}}),
            "Failed to forward request to webhook",
        ),
        (httpx.Response(502, json={}), "Server error: 502 Bad Gateway"),
    ],
)
def test_error_messages(mock_http, response, message):
    http, log = mock_http(lambda request: response)
    with pytest.raises(SubmissionError) as excinfo:
        _client(http).submit(_form(), _audio())
    assert str(excinfo.value) == message
    assert len(log.requests) == 1


def test_invalid_response_format(mock_http):
    http, _ = mock_http(lambda request: httpx.Response(200, json={"hello": "world"}))
    with pytest.raises(SubmissionError, match="Invalid response format from server"):
        _client(http).submit(_form(), _audio())


def test_polls_until_result(mock_http, assessment_payload):
    status_calls = []

    def handler(request):
        if request.url.path == "/api/check-english":
            return httpx.Response(202, json={"status": "processing", "requestId": "abc123"})
        status_calls.append(request.url.params["requestId"])
        if len(status_calls) < 3:
            return httpx.Response(200, json={"status": "processing", "requestId": "abc123"})
        return httpx.Response(200, json=assessment_payload)

    clock = FakeClock()
    http, _ = mock_http(handler)
    result = _client(http, clock).submit(_form(), _audio())
    assert result.word_count == 140
    assert status_calls == ["abc123"] * 3
    assert clock.sleeps == [3, 3, 3]


def test_poll_gives_up_after_deadline(mock_http):
    def handler(request):
        if request.url.path == "/api/check-english":
            return httpx.Response(202, json={"status": "processing", "requestId": "slow"})
        return httpx.Response(200, json={"status": "processing", "requestId": "slow"})

    clock = FakeClock()
    http, log = mock_http(handler)
    with pytest.raises(ProcessingTimeout, match="Processing is taking longer than expected"):
        _client(http, clock).submit(_form(), _audio())
    assert len(log.requests) == 1 + 10
    assert clock.now > 30


def test_failed_job_stops_polling(mock_http):
    def handler(request):
        if request.url.path == "/api/check-english":
            return httpx.Response(202, json={"status": "processing", "requestId": "bad"})
        return httpx.Response(504, json={"detail": {"error": "Webhook did not respond within 120s", "details": None}})

    http, log = mock_http(handler)
    with pytest.raises(SubmissionError) as excinfo:
        _client(http).submit(_form(), _audio())
    assert excinfo.value.status_code == 504
    assert len(log.requests) == 2


def test_transient_status_errors_are_retried(mock_http, assessment_payload):
    calls = {"status": 0}

    def handler(request):
        if request.url.path == "/api/check-english":
            return httpx.Response(202, json={"status": "processing", "requestId": "r1"})
        calls["status"] += 1
        if calls["status"] == 1:
            return httpx.Response(503, text="Service Unavailable")
        return httpx.Response(200, json=assessment_payload)

    http, _ = mock_http(handler)
    result = _client(http).submit(_form(), _audio())
    assert result.duration == 75
    assert calls["status"] == 2


def test_owned_client_is_closed():
    with SubmissionClient(PROXY, WEBHOOK) as client:
        http = client._http
    assert http.is_closed


def test_gateway_timeout_page_without_json_still_falls_back(mock_http, assessment_payload):
    def handler(request):
        if str(request.url).startswith(PROXY):
            return httpx.Response(504, text="<html><body>Gateway Timeout</body></html>")
        return httpx.Response(200, json=assessment_payload)

    http, log = mock_http(handler)
    result = _client(http).submit(_form(), _audio())
    assert result.word_count == 140
    assert log.urls() == [f"{PROXY}/api/check-english", WEBHOOK]


def test_non_json_error_body_reports_status(mock_http):
    http, _ = mock_http(lambda request: httpx.Response(500, text="Internal Server Error"))
    with pytest.raises(SubmissionError) as excinfo:
        _client(http).submit(_form(), _audio())
    assert str(excinfo.value) == "Server error: 500 Internal Server Error"
    assert excinfo.value.status_code == 500


def test_null_comments_are_accepted(mock_http):
    payload = {"output": {"assessment": {"grammar": {"score": 80, "comment": None}, "fluency": {"score": None}}}}
    http, _ = mock_http(lambda request: httpx.Response(200, json=payload))
    result = _client(http).submit(_form(), _audio())
    assert result.output.assessment["grammar"].comment == ""
    assert result.output.assessment["fluency"].score == 0


def test_unparseable_assessment_is_a_submission_error(mock_http):
    payload = {"output": {"assessment": {"grammar": "excellent"}}}
    http, _ = mock_http(lambda request: httpx.Response(200, json=payload))
    with pytest.raises(SubmissionError, match="Invalid response format from server"):
        _client(http).submit(_form(), _audio())
