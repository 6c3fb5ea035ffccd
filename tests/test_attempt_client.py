import io
import json
import logging
import threading
from urllib import error

import pytest

from data import attempt_client as attempt_client_module
from data.attempt_client import AttemptClient
from workshop.app import save_status_text
from workshop.runtime.identity import resolve_user_id
from workshop.runtime.models import AttemptRecord, RowAnswer
from workshop.scoring import compute_score


class FakeResponse(io.BytesIO):
    status = 200

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


def make_record():
    return AttemptRecord(
        user_id="u1",
        task_type="countdown_months",
        predicted_key="predictedMonths",
        actual_key="actualMonths",
        score=compute_score(5, 6),
        answers=[RowAnswer(month="April", letter_count=5)],
        extra={"elapsedSeconds": 60.0},
    )


@pytest.fixture
def calls(monkeypatch):
    seen = []

    def fake_urlopen(req, timeout):
        seen.append((req.full_url, json.loads(req.data.decode("utf-8")) if req.data else None))
        if req.full_url.endswith("/v1/sessions"):
            return FakeResponse(b'{"ok": true, "user_id": "abc123"}')
        return FakeResponse(b'{"ok": true, "id": 1, "timestamp": "2026-10-18T10:00:00.000Z"}')

    monkeypatch.setattr(attempt_client_module.request, "urlopen", fake_urlopen)
    return seen


@pytest.fixture
def offline(monkeypatch):
    def fake_urlopen(req, timeout):
        raise error.URLError("connection refused")

    monkeypatch.setattr(attempt_client_module.request, "urlopen", fake_urlopen)


def test_submit_posts_attempt_in_background(calls):
    client = AttemptClient("http://localhost:8000/", api_key="k")

    thread = client.submit(make_record())
    thread.join(timeout=2)

    assert len(calls) == 1
    url, body = calls[0]
    assert url == "http://localhost:8000/v1/attempts"
    assert body["api_key"] == "k"
    assert body["attempt"] == {
        "userId": "u1",
        "taskType": "countdown_months",
        "predictedMonths": 5,
        "actualMonths": 6,
        "answers": [{"month": "April", "letterCount": 5}],
        "errorRatio": "1.20",
        "elapsedSeconds": 60.0,
    }
    assert client.last_error == ""


def test_submit_failure_is_logged_not_raised(offline, caplog):
    client = AttemptClient("http://localhost:8000")

    with caplog.at_level(logging.ERROR, logger="data.attempt_client"):
        thread = client.submit(make_record())
        thread.join(timeout=2)

    assert client.last_error == "connection_error"
    assert "Attempt write failed" in caplog.text


def test_invalid_server_response(monkeypatch):
    monkeypatch.setattr(
        attempt_client_module.request,
        "urlopen",
        lambda req, timeout: FakeResponse(b'{"ok": false}'),
    )
    client = AttemptClient("http://localhost:8000")

    client.submit(make_record()).join(timeout=2)

    assert client.last_error == "invalid_server_response"


def test_disabled_without_endpoint():
    client = AttemptClient("not a url")

    assert not client.enabled
    assert client.submit(make_record()) is None
    assert client.request_session_id() is None


def test_identity_from_backend(calls):
    client = AttemptClient("http://localhost:8000")

    assert resolve_user_id(client) == "abc123"


def test_identity_falls_back_to_anonymous(offline):
    client = AttemptClient("http://localhost:8000")

    assert resolve_user_id(client) == "anonymous"


def test_undecodable_response_is_logged(monkeypatch, caplog):
    monkeypatch.setattr(
        attempt_client_module.request,
        "urlopen",
        lambda req, timeout: FakeResponse(b"\xff\xfe\xfa"),
    )
    client = AttemptClient("http://localhost:8000")

    with caplog.at_level(logging.WARNING, logger="data.attempt_client"):
        client.submit(make_record()).join(timeout=2)

    assert client.last_error == "invalid_server_response"
    assert "Unreadable response" in caplog.text
    assert "Attempt write failed" in caplog.text


def test_save_status_follows_submit_thread(calls):
    client = AttemptClient("http://localhost:8000")
    thread = client.submit(make_record())
    thread.join(timeout=2)

    assert save_status_text(thread, client.last_error) == "Result saved"
    assert save_status_text(None, "") == "Result not saved: backend is not configured"


def test_save_status_reports_failure(offline):
    client = AttemptClient("http://localhost:8000")
    thread = client.submit(make_record())
    thread.join(timeout=2)

    assert save_status_text(thread, client.last_error) == "Could not save your result"


def test_save_status_while_running():
    release = threading.Event()
    thread = threading.Thread(target=release.wait, daemon=True)
    thread.start()
    try:
        assert save_status_text(thread, "") == "Saving your result..."
    finally:
        release.set()
        thread.join(timeout=2)
