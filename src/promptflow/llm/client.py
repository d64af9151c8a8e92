from __future__ import annotations

import json
import threading
import time
from typing import Any, Dict, List, Optional, Tuple

import requests

from promptflow import config as app_config
from promptflow import logger as logger_mod

from ._retry import RetryConfig, execute_with_retry, parse_retry_after
from .base import LLMClient
from .cancel import CancelToken, abort_scope
from .errors import (
    ConfigError,
    ErrorCode,
    LLMError,
    code_for_status,
    is_retryable_llm_error,
)
from .providers import ProviderAdapter, get_adapter
from .types import ChatRequest, ChatResult, LLMMessage, ProviderConfig
from .urls import resolve_chat_url

log = logger_mod.get_logger()

# Permanent request mistakes; retrying cannot fix them
_INVALID_REQUEST_ERRORS = (
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
    requests.exceptions.InvalidURL,
    requests.exceptions.InvalidHeader,
    requests.exceptions.URLRequired,
)

_CHUNK_SIZE = 1024


def _read_error_message(status: int, text: str) -> str:
    if not text:
        return f"HTTP {status}"

    try:
        data = json.loads(text)
    except ValueError:
        return text

    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        if isinstance(err, str) and err:
            return err
        if data.get("message"):
            return str(data["message"])
    return text


def _redacted(cfg: ProviderConfig) -> Dict[str, Any]:
    return {
        "provider": cfg.provider,
        "model": cfg.model,
        "apiKey": logger_mod.redact_key(cfg.api_key),
        "baseUrl": "SET" if cfg.base_url else "DEFAULT",
    }


def _check_header_values(headers: Dict[str, str]) -> None:
    """HTTP/1.1 header values must be latin-1; a pasted curly quote in an API
    key would otherwise blow up inside http.client."""

    for name, value in headers.items():
        try:
            value.encode("latin-1")
        except UnicodeEncodeError as e:
            raise ConfigError(
                f"Header {name!r} contains characters that cannot be sent over HTTP; "
                "check the API key for stray quotes or spaces"
            ) from e


def _transport_error(error: Exception) -> LLMError:
    if isinstance(error, requests.exceptions.Timeout):
        return LLMError("Request timed out", code=ErrorCode.TIMEOUT)
    if isinstance(error, _INVALID_REQUEST_ERRORS):
        return ConfigError(f"Invalid request: {error}")
    if isinstance(error, requests.exceptions.RequestException):
        return LLMError(str(error) or "Network error", code=ErrorCode.NETWORK_ERROR)
    return LLMError(
        f"Request could not be sent: {error}", code=ErrorCode.CLIENT_ERROR
    )


def _decode(response: Any, body: bytes) -> str:
    try:
        return body.decode(response.encoding or "utf-8", errors="replace")
    except LookupError:
        return body.decode("utf-8", errors="replace")


class _InFlight:
    """One POST running on a worker thread.

    The caller blocks in ``wait()`` and can be released early by ``abort()``
    at any stage (connect, headers or body). An abandoned worker closes its
    response as soon as it notices and its result is discarded.
    """

    def __init__(
        self,
        session: Any,
        url: str,
        headers: Dict[str, str],
        body: Dict[str, Any],
        timeout_s: Optional[float],
    ) -> None:
        self._session = session
        self._url = url
        self._headers = headers
        self._body = body
        self._timeout_s = timeout_s

        self._wake = threading.Event()
        self._aborted = threading.Event()
        self.response: Any = None
        self.content = b""
        self.error: Optional[Exception] = None

    def start(self) -> None:
        threading.Thread(target=self._run, name="promptflow-http", daemon=True).start()

    def _run(self) -> None:
        try:
            if self._aborted.is_set():
                return
            self.response = self._session.post(
                self._url,
                headers=self._headers,
                json=self._body,
                timeout=self._timeout_s,
                stream=True,
            )
            chunks: List[bytes] = []
            for chunk in self.response.iter_content(chunk_size=_CHUNK_SIZE):
                if self._aborted.is_set():
                    return
                chunks.append(chunk)
            self.content = b"".join(chunks)
        except Exception as e:  # handed to the waiting caller
            self.error = e
        finally:
            if self.response is not None:
                self.response.close()
            self._wake.set()

    def abort(self) -> None:
        self._aborted.set()
        self._wake.set()

    def wait(self) -> None:
        self._wake.wait()


class ChatClient(LLMClient):
    """HTTP chat client speaking both Anthropic and OpenAI-compatible dialects.

    One call to ``chat`` makes at most ``retry.retries + 1`` sequential POSTs.
    ``timeout_s`` bounds the whole call (attempts and backoff waits) and
    composes with the request's cancel token; either one ends the call.
    Verbose request/response logging is controlled by ``debug`` (defaults to
    PROMPTFLOW_LLM_DEBUG) and never includes the API key.
    """

    def __init__(
        self,
        *,
        session: Optional[requests.Session] = None,
        retry: Optional[RetryConfig] = None,
        debug: Optional[bool] = None,
    ) -> None:
        self._owns_session = session is None
        self._session = session if session is not None else requests.Session()
        self._retry = retry or RetryConfig.from_config()
        self._debug = app_config.LLM_DEBUG if debug is None else bool(debug)

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "ChatClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def chat(self, request: ChatRequest) -> ChatResult:
        cfg = request.config

        if not cfg.has_api_key:
            raise LLMError("Missing API Key", code=ErrorCode.MISSING_API_KEY)

        url = request.url_override or resolve_chat_url(cfg)
        adapter = get_adapter(cfg.provider)

        model = request.model or cfg.model
        max_tokens = (
            request.max_tokens
            if request.max_tokens is not None
            else (cfg.max_tokens or app_config.DEFAULT_MAX_TOKENS)
        )
        temperature = (
            request.temperature
            if request.temperature is not None
            else (
                cfg.temperature
                if cfg.temperature is not None
                else app_config.DEFAULT_TEMPERATURE
            )
        )

        headers = adapter.build_headers(cfg)
        _check_header_values(headers)
        body = adapter.build_body(
            model=model,
            messages=request.messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        retry = request.retry or self._retry

        if self._debug:
            log.info(
                f"LLM request {_redacted(cfg)} adapter={adapter.name} "
                f"messages={len(body.get('messages', []))} retries={retry.retries}"
            )

        started = time.monotonic()

        with abort_scope(request.cancel, request.timeout_s) as signal:

            def _attempt(attempt: int) -> ChatResult:
                return self._post_once(
                    url=url,
                    headers=headers,
                    body=body,
                    adapter=adapter,
                    timeout_s=request.timeout_s,
                    signal=signal,
                    attempt=attempt,
                    started=started,
                    cfg=cfg,
                )

            return execute_with_retry(
                _attempt,
                context=f"calling {cfg.provider} chat",
                retry=retry,
                is_retryable=is_retryable_llm_error,
                delay_for=lambda err, _n: getattr(err, "retry_after_s", None),
                cancel=signal,
            )

    def _post_once(
        self,
        *,
        url: str,
        headers: Dict[str, str],
        body: Dict[str, Any],
        adapter: ProviderAdapter,
        timeout_s: Optional[float],
        signal: Optional[CancelToken],
        attempt: int,
        started: float,
        cfg: ProviderConfig,
    ) -> ChatResult:
        flight = _InFlight(self._session, url, headers, body, timeout_s)
        unregister = signal.register(flight.abort) if signal is not None else None
        flight.start()
        try:
            flight.wait()
        finally:
            if unregister is not None:
                unregister()

        if signal is not None:
            signal.raise_if_cancelled()
        if flight.error is not None:
            raise _transport_error(flight.error) from flight.error

        response = flight.response
        text = _decode(response, flight.content)
        duration_ms = int((time.monotonic() - started) * 1000)
        status = response.status_code

        if not 200 <= status < 300:
            code = code_for_status(status)
            if self._debug:
                log.info(
                    f"LLM error {_redacted(cfg)} status={status} code={code} "
                    f"durationMs={duration_ms} attempt={attempt}"
                )
            raise LLMError(
                _read_error_message(status, text),
                code=code,
                status=status,
                retry_after_s=parse_retry_after(response.headers.get("Retry-After")),
            )

        try:
            data = json.loads(text)
        except ValueError:
            data = {}

        content = adapter.parse_content(data)

        if self._debug:
            log.info(
                f"LLM response {_redacted(cfg)} status={status} "
                f"durationMs={duration_ms} contentLength={len(content)} attempt={attempt}"
            )

        return ChatResult(content=content, raw=data)

    def test_connection(self, config: ProviderConfig) -> Tuple[bool, str]:
        """Send a tiny prompt; never raises."""

        try:
            self.chat(
                ChatRequest(
                    config=config,
                    messages=[LLMMessage("user", "Hi")],
                    max_tokens=10,
                    temperature=0,
                    timeout_s=15.0,
                )
            )
        except LLMError as e:
            return False, e.message
        return True, "Connection successful"
