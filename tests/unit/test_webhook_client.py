from __future__ import annotations

import httpx
import pytest

from assessment.models import Submission
from webhook import WebhookError, WebhookRoute, WebhookTimeout, forward, multipart_parts

WEBHOOK = "https://hooks.example.test/webhook/english-test"


def _submission(**overrides):
    values = dict(
        audio=b"ID3-audio-bytes",
        filename="answer.mp3",
        content_type="audio/mpeg",
        question="Tell me about yourself.",
        study_level="4 Units",
        criteria='[{"name":"Grammar","description":"","weight":2}]',
    )
    values.update(overrides)
    return Submission(**values)


def _route(**overrides):
    return WebhookRoute(url=WEBHOOK, timeout_s=5, **overrides)


def test_payload_is_returned_verbatim(mock_http, assessment_payload):
    client, log = mock_http(lambda request: httpx.Response(200, json=[assessment_payload]))
    events = []
    payload = forward(_submission(), route=_route(), client=client, events=events)
    assert payload == [assessment_payload]
    assert log.urls() == [WEBHOOK]
    assert events[0]["span"] == "webhook.forward"
    assert "ms" in events[0]


def test_multipart_carries_fields_and_fixed_filename(mock_http):
    client, log = mock_http(lambda request: httpx.Response(200, json={"ok": True}))
    forward(_submission(), route=_route(), client=client)
    request = log.requests[0]
    assert request.method == "POST"
    assert request.headers["content-type"].startswith("multipart/form-data")
    body = request.content
    assert b'name="question"' in body
    assert b"Tell me about yourself." in body
    assert b'name="studyLevel"' in body
    assert b"4 Units" in body
    assert b'name="criteria"' in body
    assert b'filename="recording.wav"' in body
    assert b"ID3-audio-bytes" in body


def test_original_filename_when_route_does_not_rename():
    data, files = multipart_parts(_submission(), None)
    assert files["audio"][0] == "answer.mp3"
    assert files["audio"][2] == "audio/mpeg"
    assert data == {
        "question": "Tell me about yourself.",
        "studyLevel": "4 Units",
        "criteria": '[{"name":"Grammar","description":"","weight":2}]',
    }


def test_empty_fields_are_omitted():
    data, _ = multipart_parts(_submission(question="", study_level="", criteria=None))
    assert data == {}


def test_error_status_raises(mock_http):
    client, log = mock_http(lambda request: httpx.Response(500, json={"message": "workflow failed"}))
    with pytest.raises(WebhookError) as excinfo:
        forward(_submission(), route=_route(), client=client)
    assert excinfo.value.status_code == 500
    assert not isinstance(excinfo.value, WebhookTimeout)
    assert len(log.requests) == 1


def test_timeout_is_distinguished(mock_http):
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    client, log = mock_http(handler)
    with pytest.raises(WebhookTimeout):
        forward(_submission(), route=_route(), client=client)
    assert len(log.requests) == 1


def test_connection_failure(mock_http):
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    client, _ = mock_http(handler)
    with pytest.raises(WebhookError) as excinfo:
        forward(_submission(), route=_route(), client=client)
    assert not isinstance(excinfo.value, WebhookTimeout)


def test_non_json_body(mock_http):
    client, _ = mock_http(lambda request: httpx.Response(200, text="<html>ok</html>"))
    with pytest.raises(WebhookError, match="not JSON"):
        forward(_submission(), route=_route(), client=client)
