"""Server Startup — verifies startup-failure reporting and the exit status.

Invariants:
    - Startup failures are reported with kind=error and STARTUP sentinels
    - Tenant comes from BOARD_ID, else from the endpoint URL pattern
    - The process exits with status 1 after reporting
    - No endpoint configured → nothing sent, still exits 1
"""

import json
import socket

import httpx
import pytest

import app.server as server
from app.config import ReportingConfig, Settings
from app.core.errors import DatabaseError
from app.infrastructure.report_dispatcher import ReportDispatcher

ENDPOINT = "https://telemetry.example.com/runtime-errors"
HEX_ID = "0123456789abcdef01234567"


@pytest.fixture
def telemetry(monkeypatch):
    """Route every dispatcher built by app.server through a recording transport."""
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(json.loads(request.content))
        return httpx.Response(200)

    mock_transport = httpx.MockTransport(handler)

    class RecordingDispatcher(ReportDispatcher):
        def __init__(self, endpoint_url, timeout_seconds=5.0, transport=None):
            super().__init__(endpoint_url, timeout_seconds, transport=mock_transport)

    monkeypatch.setattr(server, "ReportDispatcher", RecordingDispatcher)
    return calls


def _listen():
    raise OSError(98, "Address already in use")


def _bind_failure() -> OSError:
    try:
        _listen()
    except OSError as exc:
        return exc


def test_startup_failure_report_uses_sentinels(telemetry):
    config = ReportingConfig(endpoint_url=ENDPOINT, tenant_id="configured-board")

    assert server.report_startup_failure(_bind_failure(), config) is True

    (report,) = telemetry
    assert report["exceptionType"] == "error"
    assert report["requestPath"] == "STARTUP"
    assert report["requestMethod"] == "STARTUP"
    assert report["userAgent"] == "STARTUP_ERROR"
    assert report["tenantId"] == "configured-board"
    assert report["file"] == "test_server.py"
    assert report["line"] == _listen.__code__.co_firstlineno + 1
    assert "Address already in use" in report["message"]
    assert "Thread " not in report["stackTrace"]


def test_startup_tenant_falls_back_to_endpoint_url(telemetry):
    config = ReportingConfig(
        endpoint_url=f"https://webapi{HEX_ID}.up.example.com/errors",
    )

    server.report_startup_failure(_bind_failure(), config)

    assert telemetry[0]["tenantId"] == HEX_ID


def test_startup_without_endpoint_sends_nothing(telemetry):
    assert server.report_startup_failure(_bind_failure(), ReportingConfig()) is False
    assert telemetry == []


def _settings(**overrides) -> Settings:
    values = dict(
        database_url="sqlite+aiosqlite:///:memory:",
        runtime_error_endpoint_url=ENDPOINT,
        host="127.0.0.1",
        port=0,
        log_format="text",
    )
    values.update(overrides)
    return Settings(**values)


def test_main_exits_1_when_port_is_taken(telemetry, monkeypatch):
    monkeypatch.setattr(server, "get_settings", lambda: _settings())

    def taken(host, port):
        raise OSError(98, "Address already in use")

    monkeypatch.setattr(server, "bind_socket", taken)

    with pytest.raises(SystemExit) as info:
        server.main()

    assert info.value.code == 1
    assert len(telemetry) == 1
    assert telemetry[0]["exceptionType"] == "error"
    assert "Address already in use" in telemetry[0]["message"]


def test_main_exits_1_when_database_unreachable(telemetry, monkeypatch):
    monkeypatch.setattr(server, "get_settings", lambda: _settings())

    async def unreachable(database_url, search_path=None):
        raise DatabaseError("connection refused", "ping")

    monkeypatch.setattr(server, "verify_database", unreachable)

    with pytest.raises(SystemExit) as info:
        server.main()

    assert info.value.code == 1
    assert telemetry[0]["message"] == "Database ping failed: connection refused"


def test_main_exits_1_without_endpoint(telemetry, monkeypatch):
    monkeypatch.setattr(
        server, "get_settings",
        lambda: _settings(runtime_error_endpoint_url=""),
    )

    def taken(host, port):
        raise OSError("bind failed")

    monkeypatch.setattr(server, "bind_socket", taken)

    with pytest.raises(SystemExit) as info:
        server.main()

    assert info.value.code == 1
    assert telemetry == []


def test_bind_socket_raises_when_port_in_use():
    first = server.bind_socket("127.0.0.1", 0)
    try:
        port = first.getsockname()[1]
        with pytest.raises(OSError):
            server.bind_socket("127.0.0.1", port)
    finally:
        first.close()


def test_bound_socket_is_listening():
    sock = server.bind_socket("127.0.0.1", 0)
    try:
        assert sock.type == socket.SOCK_STREAM
        assert sock.getsockname()[1] > 0
    finally:
        sock.close()
