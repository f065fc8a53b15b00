# -----------------------------------------------------------------------------
# This module provides the transport adapter between OneLine and an
# OpenAI-compatible chat-completions endpoint:
#   - takes an explicit, already-resolved ApiConfig (endpoint, model, key)
#   - POSTs {model, messages, temperature} with a Bearer token
#   - returns choices[0].message.content as raw text
#
# The implementation uses only `urllib.request`. Unit tests are expected to
# *mock* the internal `_post()` method so that no real HTTP calls
# are made during CI.
#
# Failure policy
# --------------
# Every network/HTTP/decoding failure is raised as `TransportError` and is
# never retried here; the caller shows the message to the user as-is.
# -----------------------------------------------------------------------------
from __future__ import annotations

import json
import urllib.error
import urllib.request
from collections.abc import Mapping, MutableMapping, Sequence
from dataclasses import dataclass
from typing import Any

from oneline.core.config import ApiConfig
from oneline.core.settings import get_logger

logger = get_logger(__name__)

#: Sampling temperature used for both timeline and detail requests.
DEFAULT_TEMPERATURE = 0.7


class TransportError(RuntimeError):
    """The chat endpoint could not be reached or answered unusably.

    ``status_code`` carries the HTTP status for non-2xx answers and is
    ``None`` for network or decoding failures.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(slots=True)
class LLMClient:
    """Minimal synchronous chat-completions client with a `generate()` API.

    Parameters
    ----------
    endpoint:
        Full URL of the chat-completions endpoint, used verbatim, e.g.
        ``"https://api.openai.com/v1/chat/completions"``.
    model:
        Model name placed in every request body.
    api_key:
        Bearer token sent in the ``Authorization`` header.
    timeout_seconds:
        Network timeout for the underlying HTTP requests in seconds.
    """

    endpoint: str
    model: str
    api_key: str
    timeout_seconds: float = 60.0

    # --------------------------------------------------------------------- #
    # Constructors
    # --------------------------------------------------------------------- #
    @classmethod
    def from_config(cls, config: ApiConfig, *, timeout_seconds: float = 60.0) -> LLMClient:
        """Build a client from a resolved :class:`ApiConfig`.

        Raises
        ------
        ConfigurationError
            If the endpoint or API key is missing.
        """
        config.require()
        return cls(
            endpoint=config.endpoint,
            model=config.model,
            api_key=config.api_key,
            timeout_seconds=timeout_seconds,
        )

    # --------------------------------------------------------------------- #
    # Public API
    # --------------------------------------------------------------------- #
    def generate(
        self,
        messages: Sequence[Mapping[str, str]],
        *,
        temperature: float | None = None,
    ) -> str:
        """Send ``messages`` and return the first choice's content string.

        Parameters
        ----------
        messages:
            Chat-style messages, each with ``{"role": ..., "content": ...}``.
        temperature:
            Optional override of :data:`DEFAULT_TEMPERATURE`.

        Returns
        -------
        str
            ``choices[0].message.content``; may be empty if the model said nothing.

        Raises
        ------
        TransportError
            On network failure, non-2xx status, or a malformed response body.
        """
        payload: MutableMapping[str, Any] = {
            "model": self.model,
            "messages": [{"role": m["role"], "content": m["content"]} for m in messages],
            "temperature": DEFAULT_TEMPERATURE if temperature is None else float(temperature),
        }
        headers: dict[str, str] = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

        logger.info("POST %s (model=%s, %d message(s))", self.endpoint, self.model, len(messages))
        response = self._post(url=self.endpoint, headers=headers, payload=payload)
        return self._extract_content(response)

    # --------------------------------------------------------------------- #
    # Internal helpers (test seams)
    # --------------------------------------------------------------------- #
    def _post(
        self,
        *,
        url: str,
        headers: Mapping[str, str],
        payload: Mapping[str, Any],
    ) -> dict[str, Any]:
        """Perform an HTTP POST request and decode the JSON response.

        This method is the main seam for unit tests: tests patch
        :meth:`_post` at the class level to return a stubbed response
        without performing any real network I/O.

        Raises
        ------
        TransportError
            If the HTTP request fails for any reason, or if the response body
            cannot be decoded as a JSON object.
        """
        body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        request = urllib.request.Request(
            url=url,
            data=body,
            headers=dict(headers),
            method="POST",
        )

        try:
            with urllib.request.urlopen(request, timeout=self.timeout_seconds) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as exc:
            # Best-effort extraction of provider error message for easier debugging.
            detail = exc.read().decode("utf-8", errors="ignore")
            logger.error("Chat endpoint returned HTTP %s: %s", exc.code, detail[:500])
            raise TransportError(
                f"LLM HTTP error {exc.code}: {exc.reason}; body={detail!r}",
                status_code=exc.code,
            ) from exc
        except urllib.error.URLError as exc:
            logger.error("Chat endpoint unreachable: %s", exc)
            raise TransportError(f"LLM network error: {exc}") from exc
        except TimeoutError as exc:
            logger.error("Chat endpoint timed out after %.0fs", self.timeout_seconds)
            raise TransportError(f"LLM request timed out after {self.timeout_seconds:.0f}s") from exc
        except OSError as exc:
            logger.error("Connection to chat endpoint failed: %s", exc)
            raise TransportError(f"LLM connection error: {exc}") from exc

        try:
            decoded = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise TransportError("Failed to decode LLM response as JSON") from exc

        if not isinstance(decoded, dict):
            raise TransportError("LLM response is not a JSON object")
        return decoded

    @staticmethod
    def _extract_content(response: Mapping[str, Any]) -> str:
        """Extract ``choices[0].message.content`` from a Chat Completions payload.

        Raises
        ------
        TransportError
            If the expected fields are missing or malformed.
        """
        choices = response.get("choices")
        if not isinstance(choices, list) or not choices:
            raise TransportError("LLM response has no choices; cannot extract content.")

        first = choices[0]
        message = first.get("message") if isinstance(first, Mapping) else None
        if not isinstance(message, Mapping):
            raise TransportError("LLM response choice[0].message is missing or invalid.")

        content = message.get("content")
        if content is None:
            return ""
        if not isinstance(content, str):
            raise TransportError("LLM response choice[0].message.content is not text.")

        return content


__all__ = ["DEFAULT_TEMPERATURE", "LLMClient", "TransportError"]
