from __future__ import annotations

import io
import urllib.error
import urllib.request
from typing import Any

import pytest

from oneline.core.config import ApiConfig, ConfigurationError
from oneline.llm.client import DEFAULT_TEMPERATURE, LLMClient, TransportError

ENDPOINT = "https://api.example.com/v1/chat/completions"


def _client() -> LLMClient:
    return LLMClient(endpoint=ENDPOINT, model="test-model", api_key="sk-test", timeout_seconds=5)


def test_from_config_requires_endpoint_and_key() -> None:
    with pytest.raises(ConfigurationError):
        LLMClient.from_config(ApiConfig(endpoint="", model="m", api_key="k"))

    client = LLMClient.from_config(
        ApiConfig(endpoint=ENDPOINT, model="m", api_key="k"), timeout_seconds=12
    )
    assert client.endpoint == ENDPOINT
    assert client.timeout_seconds == 12


def test_generate_posts_chat_payload_and_returns_content(monkeypatch: Any) -> None:
    """`generate()` sends model/messages/temperature to the endpoint verbatim."""
    captured: dict[str, Any] = {}

    def fake_post(
        self: LLMClient,
        *,
        url: str,
        headers: dict[str, str],
        payload: dict[str, Any],
    ) -> dict[str, Any]:
        captured["url"] = url
        captured["headers"] = headers
        captured["payload"] = payload
        return {"choices": [{"message": {"content": "===总结===\n好"}}]}

    # Patch the internal network call at the class level (slots-safe).
    monkeypatch.setattr(LLMClient, "_post", fake_post)

    messages = [{"role": "system", "content": "sys"}, {"role": "user", "content": "问"}]
    text = _client().generate(messages)

    assert text == "===总结===\n好"
    assert captured["url"] == ENDPOINT
    assert captured["headers"]["Authorization"] == "Bearer sk-test"
    assert captured["payload"] == {
        "model": "test-model",
        "messages": messages,
        "temperature": DEFAULT_TEMPERATURE,
    }


def test_generate_honours_temperature_override(monkeypatch: Any) -> None:
    seen: list[float] = []

    def fake_post(self: LLMClient, *, url: str, headers: Any, payload: Any) -> dict[str, Any]:
        seen.append(payload["temperature"])
        return {"choices": [{"message": {"content": "x"}}]}

    monkeypatch.setattr(LLMClient, "_post", fake_post)
    _client().generate([{"role": "user", "content": "q"}], temperature=0.2)
    assert seen == [0.2]


@pytest.mark.parametrize(
    "response",
    [
        {},
        {"choices": []},
        {"choices": ["oops"]},
        {"choices": [{"message": {"content": 42}}]},
    ],
)
def test_malformed_responses_raise_transport_error(monkeypatch: Any, response: Any) -> None:
    monkeypatch.setattr(LLMClient, "_post", lambda self, **_: response)
    with pytest.raises(TransportError):
        _client().generate([{"role": "user", "content": "q"}])


def test_null_content_is_empty_string(monkeypatch: Any) -> None:
    monkeypatch.setattr(
        LLMClient, "_post", lambda self, **_: {"choices": [{"message": {"content": None}}]}
    )
    assert _client().generate([{"role": "user", "content": "q"}]) == ""


def test_http_error_carries_status_code(monkeypatch: Any) -> None:
    def fake_urlopen(request: Any, timeout: float) -> Any:
        raise urllib.error.HTTPError(
            ENDPOINT, 401, "Unauthorized", {}, io.BytesIO(b'{"error":"bad key"}')  # type: ignore[arg-type]
        )

    monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)
    with pytest.raises(TransportError) as excinfo:
        _client().generate([{"role": "user", "content": "q"}])
    assert excinfo.value.status_code == 401


def test_network_error_has_no_status(monkeypatch: Any) -> None:
    def fake_urlopen(request: Any, timeout: float) -> Any:
        raise urllib.error.URLError("connection refused")

    monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)
    with pytest.raises(TransportError) as excinfo:
        _client().generate([{"role": "user", "content": "q"}])
    assert excinfo.value.status_code is None


def test_non_json_body_raises(monkeypatch: Any) -> None:
    class FakeResponse(io.BytesIO):
        def __enter__(self) -> FakeResponse:
            return self

        def __exit__(self, *exc: object) -> None:
            self.close()

    monkeypatch.setattr(
        urllib.request, "urlopen", lambda request, timeout: FakeResponse(b"<html>502</html>")
    )
    with pytest.raises(TransportError):
        _client().generate([{"role": "user", "content": "q"}])
