from __future__ import annotations

import json
from typing import Callable

import httpx
import pytest

from brutalytics.coach import ReplySource, ResponseInterpreter, offline_response
from brutalytics.config import PLACEHOLDER_API_KEY, CoachSettings
from brutalytics.llm import ConfigurationError, GeminiClient, MalformedResponseError, RemoteUnavailableError
from brutalytics.models import ConnectionStatus, ConversationMessage


def _gemini_body(text: str) -> dict[str, object]:
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}


def _interpreter(
    responder: Callable[[httpx.Request], httpx.Response],
    *,
    api_key: str = "test-key",
) -> tuple[ResponseInterpreter, list[httpx.Request]]:
    requests: list[httpx.Request] = []

    def _record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return responder(request)

    client = httpx.Client(transport=httpx.MockTransport(_record))
    gemini = GeminiClient(CoachSettings(api_key=api_key), client=client, backoff_seconds=0.0)
    return ResponseInterpreter(gemini), requests


HISTORY = (ConversationMessage.from_user("Quiero ganar más dinero"),)


@pytest.mark.parametrize("api_key", ["", "   ", PLACEHOLDER_API_KEY])
def test_test_connection_without_key_makes_no_request(api_key: str) -> None:
    interpreter, requests = _interpreter(lambda _: httpx.Response(200, json={}), api_key=api_key)

    assert interpreter.test_connection() is ConnectionStatus.NO_KEY
    assert requests == []


def test_test_connection_reports_connected_and_error() -> None:
    ok, _ = _interpreter(lambda _: httpx.Response(200, json=_gemini_body("OK")))
    failing, _ = _interpreter(lambda _: httpx.Response(403, json={"error": "denied"}))

    assert ok.test_connection() is ConnectionStatus.CONNECTED
    assert failing.test_connection() is ConnectionStatus.ERROR


def test_request_carries_key_header_and_system_prompt() -> None:
    body = json.dumps({"truth": "", "plan": [], "challenge": "¿Cuánto facturas?"})
    interpreter, requests = _interpreter(lambda _: httpx.Response(200, json=_gemini_body(body)))

    reply = interpreter.respond(HISTORY)

    assert reply.source is ReplySource.STRICT
    assert reply.response.challenge == "¿Cuánto facturas?"
    assert len(requests) == 1
    request = requests[0]
    assert request.headers["x-goog-api-key"] == "test-key"
    assert request.url.path.endswith("/models/gemini-1.5-flash:generateContent")
    payload = json.loads(request.content)
    assert payload["contents"][0]["role"] == "user"
    assert "Brutalytics" in payload["contents"][0]["parts"][0]["text"]
    assert "Matriz de Eisenhower" in payload["contents"][0]["parts"][0]["text"]
    assert payload["contents"][1]["parts"][0]["text"] == "Quiero ganar más dinero"
    assert payload["generationConfig"]["maxOutputTokens"] == 2048
    assert len(payload["safetySettings"]) == 4


def test_plan_without_truth_yields_offline_response() -> None:
    body = json.dumps({"truth": "", "plan": ["Acción"], "challenge": "¿Listo?"})
    interpreter, _ = _interpreter(lambda _: httpx.Response(200, json=_gemini_body(body)))

    reply = interpreter.respond(HISTORY)

    assert reply.is_offline
    assert reply.error_kind == "malformed"
    assert reply.response == offline_response()
    assert reply.response.truth
    assert len(reply.response.plan) == 3

    with pytest.raises(MalformedResponseError):
        interpreter.get_coach_response(HISTORY)


def test_heuristic_reply_is_tagged() -> None:
    interpreter, _ = _interpreter(lambda _: httpx.Response(200, json=_gemini_body("¿Qué has intentado ya?")))

    reply = interpreter.respond(HISTORY)

    assert reply.source is ReplySource.HEURISTIC
    assert reply.response.challenge == "¿Qué has intentado ya?"


def test_missing_key_raises_configuration_error_without_request() -> None:
    interpreter, requests = _interpreter(lambda _: httpx.Response(200, json={}), api_key="")

    with pytest.raises(ConfigurationError):
        interpreter.get_coach_response(HISTORY)

    reply = interpreter.respond(HISTORY)
    assert reply.is_offline
    assert reply.error_kind == "no-key"
    assert requests == []


def test_server_errors_are_retried_then_reported(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("brutalytics.llm.time.sleep", lambda _: None)
    interpreter, requests = _interpreter(lambda _: httpx.Response(503, text="unavailable"))

    with pytest.raises(RemoteUnavailableError):
        interpreter.get_coach_response(HISTORY)
    assert len(requests) == 2

    reply = interpreter.respond(HISTORY)
    assert reply.error_kind == "connection"


def test_client_errors_are_not_retried() -> None:
    interpreter, requests = _interpreter(lambda _: httpx.Response(400, text="bad request"))

    reply = interpreter.respond(HISTORY)

    assert reply.is_offline
    assert len(requests) == 1


def test_transport_errors_become_offline_reply(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("brutalytics.llm.time.sleep", lambda _: None)

    def _fail(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    interpreter, _ = _interpreter(_fail)

    reply = interpreter.respond(HISTORY)

    assert reply.error_kind == "connection"
    assert reply.response == offline_response()


@pytest.mark.parametrize(
    "body",
    [
        [],
        ["unexpected"],
        {"candidates": {"0": {"content": {"parts": [{"text": "hola"}]}}}},
        {"candidates": ["texto suelto"]},
    ],
)
def test_unexpected_response_shapes_become_offline_reply(body: object) -> None:
    interpreter, _ = _interpreter(lambda _: httpx.Response(200, json=body))

    with pytest.raises(MalformedResponseError):
        interpreter.get_coach_response(HISTORY)

    reply = interpreter.respond(HISTORY)
    assert reply.is_offline
    assert reply.error_kind == "malformed"


def test_client_closes_only_its_own_http_client() -> None:
    shared = httpx.Client(transport=httpx.MockTransport(lambda _: httpx.Response(200, json={})))
    with GeminiClient(CoachSettings(api_key="key"), client=shared):
        pass
    assert not shared.is_closed

    owned = GeminiClient(CoachSettings(api_key="key"))
    owned.close()
    assert owned._client.is_closed
