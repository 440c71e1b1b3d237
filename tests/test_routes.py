import httpx
from fastapi.testclient import TestClient

from api.main import app

from helpers import QUOTA_BODY, chat_completion

AUDIO = b"RIFF\x24\x00\x00\x00WAVEfmt fake-audio-bytes"


def _upload(client, data=AUDIO, filename="audio.wav"):
    return client.post(
        "/api/transcribe",
        files={"file": (filename, data, "audio/wav")},
    )


def test_health_check(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


# ---------------------------------------------------------------------------
# Transcription proxy
# ---------------------------------------------------------------------------


def test_transcribe_success(client, vendor):
    vendor.reply(payload={"text": "hello"})

    response = _upload(client)

    assert response.status_code == 200
    assert response.json() == {"text": "hello"}

    request = vendor.requests[-1]
    assert request.url.path == "/v1/audio/transcriptions"
    assert request.headers["authorization"] == "Bearer sk-test"
    assert b"whisper-1" in request.content
    assert AUDIO in request.content


def test_transcribe_uses_configured_model(client, vendor, monkeypatch):
    monkeypatch.setenv("OPENAI_TRANSCRIPTION_MODEL", "gpt-4o-mini-transcribe")
    vendor.reply(payload={"text": "hello"})

    _upload(client)

    assert b"gpt-4o-mini-transcribe" in vendor.requests[-1].content


def test_transcribe_rejects_get(client, vendor):
    response = client.get("/api/transcribe")

    assert response.status_code == 405
    assert response.json() == {"error": "Method not allowed"}
    assert vendor.requests == []


def test_transcribe_without_file(client, vendor):
    response = client.post("/api/transcribe")

    assert response.status_code == 400
    assert response.json() == {"error": "No file uploaded"}
    assert vendor.requests == []


def test_transcribe_with_empty_file(client, vendor):
    response = _upload(client, data=b"")

    assert response.status_code == 400
    assert response.json() == {"error": "Uploaded file is empty"}
    assert vendor.requests == []


def test_transcribe_without_api_key_fails_before_vendor_call(client, vendor, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY")

    response = _upload(client)

    assert response.status_code == 500
    assert response.json() == {"error": "OpenAI API key is not configured"}
    assert vendor.requests == []


def test_transcribe_missing_text_is_invalid_response(client, vendor):
    vendor.reply(payload={"language": "en"})

    response = _upload(client)

    assert response.status_code == 500
    assert response.json() == {"error": "Invalid response from OpenAI"}


def test_transcribe_non_json_vendor_body_is_invalid_response(client, vendor):
    vendor.reply(text="<html>bad gateway</html>")

    response = _upload(client)

    assert response.status_code == 500
    assert response.json() == {"error": "Invalid response from OpenAI"}


def test_transcribe_quota_error_is_distinguishable(client, vendor):
    vendor.reply(status_code=429, payload=QUOTA_BODY)

    response = _upload(client)

    assert response.status_code == 429
    body = response.json()
    assert body["code"] == "insufficient_quota"
    assert body["error"].startswith("You exceeded your current quota")


def test_transcribe_passes_vendor_error_through(client, vendor):
    vendor.reply(
        status_code=400,
        payload={"error": {"message": "Invalid file format.", "type": "invalid_request_error", "code": None}},
    )

    response = _upload(client)

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid file format."}


def test_transcribe_vendor_error_without_message_uses_generic_text(client, vendor):
    vendor.reply(status_code=503, payload={"error": {}})

    response = _upload(client)

    assert response.status_code == 503
    assert response.json() == {"error": "Error communicating with OpenAI"}


def test_transcribe_vendor_timeout(client, vendor):
    vendor.fail(httpx.ReadTimeout("timed out"))

    response = _upload(client)

    assert response.status_code == 504
    assert response.json() == {"error": "Request to OpenAI timed out"}


def test_transcribe_transport_failure_hides_details_in_production(client, vendor):
    vendor.fail(httpx.ConnectError("connection refused"))

    response = _upload(client)

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_transcribe_transport_failure_shows_details_in_development(client, vendor, monkeypatch):
    monkeypatch.setenv("APP_ENV", "development")
    vendor.fail(httpx.ConnectError("connection refused"))

    response = _upload(client)

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Internal server error"
    assert body["details"]


# ---------------------------------------------------------------------------
# Chat completion proxy
# ---------------------------------------------------------------------------


HISTORY = [
    {"role": "user", "content": "hello"},
    {"role": "assistant", "content": "hi there"},
    {"role": "user", "content": "what's the weather like?"},
]


def test_chat_success_returns_assistant_message(client, vendor):
    vendor.reply(payload=chat_completion("It is sunny."))

    response = client.post(
        "/api/chat",
        json={"model": "gpt-3.5-turbo", "messages": HISTORY},
    )

    assert response.status_code == 200
    assert response.json() == {"role": "assistant", "content": "It is sunny."}

    request = vendor.requests[-1]
    assert request.url.path == "/v1/chat/completions"
    assert request.headers["authorization"] == "Bearer sk-test"
    sent = vendor.last_json()
    assert sent["model"] == "gpt-4"
    assert sent["messages"] == HISTORY


def test_chat_relabels_vendor_role_as_assistant(client, vendor):
    vendor.reply(payload=chat_completion("ok", role="system"))

    response = client.post("/api/chat", json={"messages": HISTORY[:1]})

    assert response.json() == {"role": "assistant", "content": "ok"}


def test_chat_uses_configured_model(client, vendor, monkeypatch):
    monkeypatch.setenv("OPENAI_CHAT_MODEL", "gpt-4o-mini")
    vendor.reply(payload=chat_completion("ok"))

    client.post("/api/chat", json={"messages": HISTORY[:1]})

    assert vendor.last_json()["model"] == "gpt-4o-mini"


def test_chat_rejects_get(client):
    response = client.get("/api/chat")

    assert response.status_code == 405
    assert response.json() == {"error": "Method not allowed"}


def test_chat_missing_messages(client, vendor):
    response = client.post("/api/chat", json={"model": "gpt-4"})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request body"}
    assert vendor.requests == []


def test_chat_messages_not_a_list(client, vendor):
    response = client.post("/api/chat", json={"messages": "hello"})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request body"}
    assert vendor.requests == []


def test_chat_rejects_unknown_role(client, vendor):
    response = client.post(
        "/api/chat",
        json={"messages": [{"role": "tool", "content": "x"}]},
    )

    assert response.status_code == 400
    assert vendor.requests == []


def test_chat_without_api_key(client, vendor, monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "  ")

    response = client.post("/api/chat", json={"messages": HISTORY})

    assert response.status_code == 500
    assert response.json() == {"error": "OpenAI API key is not configured"}
    assert vendor.requests == []


def test_chat_missing_content_is_invalid_response(client, vendor):
    vendor.reply(payload={"id": "chatcmpl-test", "choices": []})

    response = client.post("/api/chat", json={"messages": HISTORY})

    assert response.status_code == 500
    assert response.json() == {"error": "Invalid response from OpenAI"}


def test_chat_quota_error(client, vendor):
    vendor.reply(status_code=429, payload=QUOTA_BODY)

    response = client.post("/api/chat", json={"messages": HISTORY})

    assert response.status_code == 429
    assert response.json()["code"] == "insufficient_quota"


def test_chat_vendor_auth_error_passes_status_and_message(client, vendor):
    vendor.reply(
        status_code=401,
        payload={"error": {"message": "Incorrect API key provided.", "type": "invalid_request_error", "code": "invalid_api_key"}},
    )

    response = client.post("/api/chat", json={"messages": HISTORY})

    assert response.status_code == 401
    assert response.json() == {"error": "Incorrect API key provided.", "code": "invalid_api_key"}


def test_lifespan_closes_vendor_connection_pool(vendor_http_client, monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

    with TestClient(app) as test_client:
        assert test_client.get("/health").status_code == 200
        assert not vendor_http_client[0].is_closed

    assert len(vendor_http_client) == 1
    assert vendor_http_client[0].is_closed
