from __future__ import annotations

import base64
import json

import pytest
from fastapi.testclient import TestClient

from conftest import AUTH, StubTranslationClient
from core import TransportError, UpstreamError
from translation.output_validator import HANGUL_RE

SOURCE = "안녕하세요, 이것은 프로젝트 계획입니다."
CLEAN = "Assalomu alaykum, bu loyiha rejasi."


def _decode(body: dict) -> str:
    return base64.b64decode(body["result_b64"]).decode("utf-8")


def test_get_translate_is_liveness_probe(make_client):
    response = make_client(StubTranslationClient(CLEAN)).get("/translate")
    assert response.status_code == 200
    assert response.text == "ok"


def test_options_translate_acknowledges_preflight(make_client):
    response = make_client(StubTranslationClient(CLEAN)).options("/translate")
    assert response.status_code == 200


def test_cors_preflight_headers(make_client):
    response = make_client(StubTranslationClient(CLEAN)).options(
        "/translate",
        headers={
            "Origin": "https://client.example",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Authorization, Content-Type",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


def test_other_methods_are_rejected(make_client):
    response = make_client(StubTranslationClient(CLEAN)).put("/translate", json={})
    assert response.status_code == 405
    assert response.json()["ok"] is False


def test_wrong_token_is_unauthorized_without_upstream_call(make_client):
    stub = StubTranslationClient(CLEAN)
    response = make_client(stub).post(
        "/translate",
        json={"text": SOURCE, "targetLang": "uz-latn"},
        headers={"Authorization": "Bearer wrong"},
    )
    assert response.status_code == 401
    assert response.json()["error"] == "Unauthorized: Invalid client token."
    assert stub.calls == []


def test_missing_token_is_unauthorized(make_client):
    stub = StubTranslationClient(CLEAN)
    response = make_client(stub).post("/translate", json={"text": SOURCE, "targetLang": "uz"})
    assert response.status_code == 401
    assert stub.calls == []


def test_no_configured_token_disables_auth(make_client):
    stub = StubTranslationClient(CLEAN)
    response = make_client(stub, client_token=None).post(
        "/translate", json={"text": SOURCE, "targetLang": "uz"}
    )
    assert response.status_code == 200


def test_missing_api_key_is_server_error(make_client):
    stub = StubTranslationClient(CLEAN)
    response = make_client(stub, api_key=None).post(
        "/translate", json={"text": SOURCE, "targetLang": "uz"}, headers=AUTH
    )
    assert response.status_code == 500
    assert response.json()["error"] == "Missing OPENAI_API_KEY"
    assert stub.calls == []


@pytest.mark.parametrize(
    "payload",
    [
        {"targetLang": "uz-latn"},
        {"text": SOURCE},
        {"text": 42, "targetLang": "uz-latn"},
        {"text": SOURCE, "targetLang": ["uz"]},
        {"text": "", "targetLang": "uz-latn"},
    ],
)
def test_malformed_body_is_bad_request(make_client, payload):
    stub = StubTranslationClient(CLEAN)
    response = make_client(stub).post("/translate", json=payload, headers=AUTH)
    assert response.status_code == 400
    assert response.json()["error"] == "Bad Request: need { text, targetLang }"
    assert stub.calls == []


def test_invalid_json_is_bad_request(make_client):
    response = make_client(StubTranslationClient(CLEAN)).post(
        "/translate",
        content=b"{not json",
        headers={**AUTH, "Content-Type": "application/json"},
    )
    assert response.status_code == 400


def test_string_encoded_body_is_accepted(make_client):
    body = json.dumps(json.dumps({"text": SOURCE, "targetLang": "uz-latn"}))
    response = make_client(StubTranslationClient(CLEAN)).post(
        "/translate",
        content=body.encode("utf-8"),
        headers={**AUTH, "Content-Type": "text/plain"},
    )
    assert response.status_code == 200
    assert _decode(response.json()) == CLEAN


def test_retry_then_success(make_client):
    stub = StubTranslationClient("안녕하세요", CLEAN)
    response = make_client(stub).post(
        "/translate", json={"text": SOURCE, "targetLang": "uz-latn"}, headers=AUTH
    )

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["mode"] == "translate"
    assert "result" not in body
    assert not HANGUL_RE.search(_decode(body))
    assert len(stub.calls) == 2
    assert response.headers["X-Translation-Attempts"] == "2"
    assert response.headers["X-Translation-Fallback"] == "false"


def test_always_hangul_falls_back_with_success(make_client):
    stub = StubTranslationClient("안녕하세요")
    response = make_client(stub).post(
        "/translate", json={"text": SOURCE, "targetLang": "uz-latn"}, headers=AUTH
    )

    assert response.status_code == 200
    assert response.json()["result_b64"]
    assert _decode(response.json()) == "annyeonghaseyo, igeoteun peurojekteu gyehoekipnida."
    assert len(stub.calls) == 2
    assert response.headers["X-Translation-Fallback"] == "true"


def test_request_model_and_default_model(make_client):
    stub = StubTranslationClient(CLEAN)
    client = make_client(stub)
    client.post("/translate", json={"text": SOURCE, "targetLang": "uz", "model": "gpt-4o"}, headers=AUTH)
    client.post("/translate", json={"text": SOURCE, "targetLang": "uz", "model": ""}, headers=AUTH)
    assert [call["model"] for call in stub.calls] == ["gpt-4o", "gpt-4o-mini"]


def test_upstream_error_passes_status_through(make_client):
    stub = StubTranslationClient(UpstreamError(429, '{"error": {"message": "Rate limit reached"}}'))
    response = make_client(stub).post(
        "/translate", json={"text": SOURCE, "targetLang": "uz"}, headers=AUTH
    )

    assert response.status_code == 429
    body = response.json()
    assert body["ok"] is False
    assert body["error"] == "Upstream error 429"
    assert body["detail"] == {"message": "Rate limit reached"}
    assert len(stub.calls) == 1


def test_transport_error_is_bad_gateway(make_client):
    stub = StubTranslationClient(TransportError("Translate LLM service unavailable. Please try again later."))
    response = make_client(stub).post(
        "/translate", json={"text": SOURCE, "targetLang": "uz"}, headers=AUTH
    )
    assert response.status_code == 502


def test_unexpected_error_is_reported(make_client):
    stub = StubTranslationClient(RuntimeError("boom"))
    response = make_client(stub).post(
        "/translate", json={"text": SOURCE, "targetLang": "uz"}, headers=AUTH
    )
    assert response.status_code == 500
    assert response.json() == {"ok": False, "error": "Translation failed: boom"}


def test_ascii_output_mode_adds_plain_result(make_client):
    stub = StubTranslationClient("Oʻzbek tili")
    response = make_client(stub, output_encoding="ascii").post(
        "/translate", json={"text": SOURCE, "targetLang": "uz"}, headers=AUTH
    )
    body = response.json()
    assert body["result"] == "O'zbek tili"
    assert _decode(body) == "O'zbek tili"


def test_text_over_character_limit_is_rejected(make_client, monkeypatch):
    monkeypatch.setattr("translation.service.TRANSLATION_MAX_CHARS", 5)
    stub = StubTranslationClient(CLEAN)
    response = make_client(stub).post(
        "/translate", json={"text": SOURCE, "targetLang": "uz"}, headers=AUTH
    )
    assert response.status_code == 400
    assert stub.calls == []


def test_health(make_client):
    response = make_client(StubTranslationClient(CLEAN)).get("/health")
    assert response.status_code == 200
    assert response.json()["ok"] is True
    assert "time" in response.json()


class _SpecialTokenAwareEncoder:
    """Rejects special-token markers unless they are explicitly allowed, like tiktoken."""

    def encode(self, text, disallowed_special="all"):
        if disallowed_special == "all" and "<|endoftext|>" in text:
            raise ValueError("Encountered text corresponding to disallowed special token")
        return text.split()


def test_special_token_marker_in_text_is_translated(make_client, monkeypatch):
    monkeypatch.setattr("config.TIKTOKEN_AVAILABLE", True)
    monkeypatch.setattr("config._encoder", _SpecialTokenAwareEncoder())
    text = "회의록 끝 <|endoftext|> 안녕하세요"
    stub = StubTranslationClient(CLEAN)
    response = make_client(stub).post(
        "/translate", json={"text": text, "targetLang": "uz"}, headers=AUTH
    )
    assert response.status_code == 200
    assert stub.calls[0]["source_text"] == text
    assert _decode(response.json()) == CLEAN


def test_unhandled_error_is_json_server_error(make_client):
    app = make_client(StubTranslationClient(CLEAN)).app

    @app.get("/explode")
    async def explode():
        raise RuntimeError("kaboom")

    response = TestClient(app, raise_server_exceptions=False).get("/explode")
    assert response.status_code == 500
    assert response.json() == {"ok": False, "error": "kaboom"}
