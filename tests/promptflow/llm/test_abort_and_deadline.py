"""Cancellation and timeouts against a real local HTTP server."""

import json
import threading
import time

import pytest


def _config(base_url):
    from promptflow.llm import ProviderConfig

    return ProviderConfig(provider="openai", api_key="sk-local", model="m", base_url=base_url + "/v1")


def _request(cfg, **kw):
    from promptflow.llm import ChatRequest, LLMMessage

    return ChatRequest(config=cfg, messages=[LLMMessage("user", "Hello")], **kw)


def _send_headers(handler, status=200, length=None):
    handler.send_response(status)
    handler.send_header("Content-Type", "application/json")
    if length is not None:
        handler.send_header("Content-Length", str(length))
    handler.end_headers()


def _answer_after(delay_s, content="late"):
    def behaviour(handler, release):
        if release.wait(delay_s):
            return
        body = json.dumps({"choices": [{"message": {"role": "assistant", "content": content}}]}).encode("utf-8")
        _send_headers(handler, length=len(body))
        handler.wfile.write(body)

    return behaviour


def _trickle(total_bytes=50, every_s=0.1):
    def behaviour(handler, release):
        _send_headers(handler, length=total_bytes)
        for _ in range(total_bytes):
            if release.wait(every_s):
                return
            handler.wfile.write(b"x")
            handler.wfile.flush()

    return behaviour


def test_local_server_round_trip(local_server):
    from promptflow.llm import ChatClient

    url = local_server(_answer_after(0.0, "hello there"))
    with ChatClient() as client:
        assert client.chat(_request(_config(url), timeout_s=5.0)).content == "hello there"


def test_cancel_aborts_request_waiting_for_headers(local_server):
    from promptflow.llm import CancelToken, ChatClient, ErrorCode, LLMError, RetryConfig

    url = local_server(_answer_after(3.0))
    token = CancelToken()
    timer = threading.Timer(0.3, token.cancel)
    timer.start()

    started = time.monotonic()
    with ChatClient(retry=RetryConfig(retries=0)) as client:
        with pytest.raises(LLMError) as exc:
            client.chat(_request(_config(url), cancel=token))
    elapsed = time.monotonic() - started
    timer.cancel()

    assert exc.value.code == ErrorCode.ABORTED
    assert elapsed < 1.5


def test_cancel_aborts_request_with_caller_session(local_server):
    import requests

    from promptflow.llm import CancelToken, ChatClient, ErrorCode, LLMError, RetryConfig

    url = local_server(_answer_after(3.0))
    token = CancelToken()
    timer = threading.Timer(0.3, token.cancel)
    timer.start()

    started = time.monotonic()
    with requests.Session() as session:
        client = ChatClient(session=session, retry=RetryConfig(retries=2))
        with pytest.raises(LLMError) as exc:
            client.chat(_request(_config(url), cancel=token))
    timer.cancel()

    assert exc.value.code == ErrorCode.ABORTED
    assert time.monotonic() - started < 1.5


def test_timeout_bounds_trickling_body(local_server):
    from promptflow.llm import ChatClient, ErrorCode, LLMError, RetryConfig

    url = local_server(_trickle(total_bytes=50, every_s=0.1))

    started = time.monotonic()
    with ChatClient(retry=RetryConfig(retries=0)) as client:
        with pytest.raises(LLMError) as exc:
            client.chat(_request(_config(url), timeout_s=1.0))
    elapsed = time.monotonic() - started

    assert exc.value.code == ErrorCode.TIMEOUT
    assert elapsed < 2.0


def test_timeout_covers_retries_and_backoff(local_server):
    from promptflow.llm import ChatClient, ErrorCode, LLMError, RetryConfig

    url = local_server(_answer_after(3.0))

    started = time.monotonic()
    with ChatClient(retry=RetryConfig(retries=3, min_delay_s=0.5, max_delay_s=0.5)) as client:
        with pytest.raises(LLMError) as exc:
            client.chat(_request(_config(url), timeout_s=0.5))
    elapsed = time.monotonic() - started

    assert exc.value.code == ErrorCode.TIMEOUT
    assert elapsed < 1.5


def test_polish_with_curly_quote_key_returns_error(local_server, preset):
    from promptflow.llm import ProviderConfig
    from promptflow.polish import polish

    hits = []

    def behaviour(handler, release):
        hits.append(True)
        _answer_after(0.0)(handler, release)

    url = local_server(behaviour)
    cfg = ProviderConfig(provider="openai", api_key="sk-abc’def", model="m", base_url=url + "/v1")

    result = polish("hi", preset, cfg)

    assert result.output == ""
    assert "API key" in result.error
    assert hits == []
