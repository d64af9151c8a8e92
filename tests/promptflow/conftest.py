import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Callable, List, Optional

import pytest
from requests.structures import CaseInsensitiveDict


class FakeResponse:
    """Minimal stand-in for a streamed requests.Response."""

    def __init__(
        self,
        status_code: int = 200,
        payload: Any = None,
        *,
        text: Optional[str] = None,
        headers: Optional[dict] = None,
    ):
        self.status_code = status_code
        if text is None:
            text = json.dumps(payload) if payload is not None else ""
        self.text = text
        self.headers = CaseInsensitiveDict(headers or {})
        self.encoding = "utf-8"
        self.closed = False

    def iter_content(self, chunk_size=1):
        data = self.text.encode("utf-8")
        for i in range(0, len(data), chunk_size):
            yield data[i : i + chunk_size]

    def close(self):
        self.closed = True


class FakeSession:
    """Replays scripted responses/exceptions and records every POST."""

    def __init__(self, script: List[Any]):
        self._script = list(script)
        self.calls: List[dict] = []
        self.closed = False

    def post(self, url, headers=None, json=None, timeout=None, stream=False):
        self.calls.append(
            {
                "url": url,
                "headers": headers,
                "json": json,
                "timeout": timeout,
                "stream": stream,
            }
        )
        if not self._script:
            raise AssertionError("FakeSession ran out of scripted responses")
        item = self._script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def close(self):
        self.closed = True


class ScriptedClient:
    """LLMClient double: returns scripted contents (or raises scripted errors)."""

    def __init__(self, script: List[Any]):
        self._script = list(script)
        self.requests: List[Any] = []
        self.closed = False

    def chat(self, request):
        from promptflow.llm import ChatResult

        self.requests.append(request)
        if not self._script:
            raise AssertionError("ScriptedClient ran out of scripted responses")
        item = self._script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return ChatResult(content=item, raw={"scripted": True})

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class _LocalHandler(BaseHTTPRequestHandler):
    protocol_version = "HTTP/1.1"

    def log_message(self, format, *args):
        pass

    def do_POST(self):
        length = int(self.headers.get("Content-Length", 0))
        self.rfile.read(length)
        self.close_connection = True
        try:
            self.server.behaviour(self, self.server.release)
        except OSError:
            # client went away mid-response
            pass


class _LocalServer(ThreadingHTTPServer):
    daemon_threads = True
    block_on_close = False


def openai_payload(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def anthropic_payload(text: str) -> dict:
    return {"content": [{"type": "text", "text": text}]}


@pytest.fixture
def local_server():
    """Start a real HTTP server on 127.0.0.1 whose POST handler is
    ``behaviour(handler, release)``; returns the base URL.

    ``release`` is set on teardown so sleeping handlers exit promptly.
    """

    servers = []

    def start(behaviour: Callable[[BaseHTTPRequestHandler, threading.Event], None]) -> str:
        server = _LocalServer(("127.0.0.1", 0), _LocalHandler)
        server.behaviour = behaviour
        server.release = threading.Event()
        threading.Thread(target=server.serve_forever, daemon=True).start()
        servers.append(server)
        host, port = server.server_address[:2]
        return f"http://{host}:{port}"

    yield start

    for server in servers:
        server.release.set()
        server.shutdown()
        server.server_close()
@pytest.fixture
def provider_config():
    from promptflow.llm import ProviderConfig

    return ProviderConfig(
        provider="openai", api_key="sk-test-123456", model="gpt-5-mini"
    )


@pytest.fixture
def no_key_config():
    from promptflow.llm import ProviderConfig

    return ProviderConfig(provider="openai", api_key="", model="gpt-5-mini")


@pytest.fixture
def sleeps(monkeypatch):
    """Make retry sleeps instant and deterministic; returns the recorded waits."""

    recorded: List[float] = []
    monkeypatch.setattr("promptflow.llm._retry.time.sleep", recorded.append)
    monkeypatch.setattr("promptflow.llm._retry.random.random", lambda: 0.0)
    return recorded


@pytest.fixture
def fake_session_factory():
    return FakeSession


@pytest.fixture
def scripted_client_factory():
    return ScriptedClient


@pytest.fixture
def preset():
    from promptflow.polish import PolishPreset

    return PolishPreset(
        id="custom-1",
        name="Tester",
        description="Polish for tests",
        system_prompt="You polish prompts.",
        temperature=0.3,
    )


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def openai_body():
    return openai_payload


@pytest.fixture
def anthropic_body():
    return anthropic_payload
