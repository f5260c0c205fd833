from __future__ import annotations

import json
import sys

import pytest
import requests

from domain.response import Response
from infrastructure.config.env_settings import EnvSettingsLoader
from scripts import fetch

START = "http://example.com/redirect/301?http://example.com/get"
TARGET = "http://example.com/get"


class ScriptedClient:
    def __init__(self, routes):
        self.routes = routes
        self.calls = []
        self.timeout_sec = None
        self.closed = False

    def request(self, method, url, headers=None, body=None):
        self.calls.append((method, url, body))
        return self.routes[url]

    def close(self):
        self.closed = True


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    monkeypatch.setattr(
        fetch,
        "EnvSettingsLoader",
        lambda: EnvSettingsLoader(env_path=tmp_path / "missing.env", environ={}),
    )
    monkeypatch.setattr(fetch, "setup_console_logging", lambda level: None)


def install_client(monkeypatch, routes):
    client = ScriptedClient(routes)

    def build(timeout_sec):
        client.timeout_sec = timeout_sec
        return client

    monkeypatch.setattr(fetch, "RequestsSessionHttpClient", build)
    return client


def run(monkeypatch, *argv) -> int:
    monkeypatch.setattr(sys, "argv", ["fetch.py", *argv])
    with pytest.raises(SystemExit) as excinfo:
        fetch.main()
    return excinfo.value.code


def test_fetch_get_prints_effective_uri_after_permanent_redirect(monkeypatch, capsys) -> None:
    # Arrange
    install_client(monkeypatch, {
        START: Response(code=301, header={"Location": [TARGET]}),
        TARGET: Response(code=200, body=b"done"),
    })

    # Act
    code = run(monkeypatch, "get", START, "--show-redirects")

    # Assert
    out = capsys.readouterr().out
    assert code == 0
    assert "Status: 200" in out
    assert f"Effective URI: {TARGET}" in out
    assert f"Moved permanently from: {START}" in out
    assert "Redirects: 1" in out
    assert f"301 permanent: {START} -> {TARGET}" in out


def test_fetch_get_keeps_uri_after_temporary_redirect(monkeypatch, capsys) -> None:
    install_client(monkeypatch, {
        START: Response(code=302, header={"Location": [TARGET]}),
        TARGET: Response(code=200),
    })

    code = run(monkeypatch, "get", START)

    out = capsys.readouterr().out
    assert code == 0
    assert f"Effective URI: {START}" in out
    assert "Moved permanently" not in out


def test_fetch_post_sends_data(monkeypatch, capsys) -> None:
    client = install_client(monkeypatch, {TARGET: Response(code=201)})

    code = run(monkeypatch, "post", TARGET, "--data", "hello")

    assert code == 0
    assert client.calls == [("post", TARGET, b"hello")]


def test_fetch_exits_non_zero_for_error_status(monkeypatch, capsys) -> None:
    install_client(monkeypatch, {TARGET: Response(code=404)})

    assert run(monkeypatch, "get", TARGET) == 1


def test_fetch_reports_redirect_limit(monkeypatch, capsys) -> None:
    install_client(monkeypatch, {START: Response(code=302, header={"Location": [START]})})

    code = run(monkeypatch, "get", START, "--max-redirects", "2")

    assert code == 1
    assert "ERROR: Exceeded 2 redirects" in capsys.readouterr().out


def test_fetch_reports_transport_errors(monkeypatch, capsys) -> None:
    class Unreachable(ScriptedClient):
        def request(self, method, url, headers=None, body=None):
            raise requests.ConnectionError("refused")

    monkeypatch.setattr(fetch, "RequestsSessionHttpClient", lambda timeout_sec: Unreachable({}))

    code = run(monkeypatch, "get", TARGET)

    assert code == 1
    assert "ERROR: Request failed: refused" in capsys.readouterr().out


def test_fetch_without_command_prints_help(monkeypatch, capsys) -> None:
    assert run(monkeypatch) == 1


def test_fetch_put_reads_data_file(monkeypatch, tmp_path) -> None:
    payload = tmp_path / "body.json"
    payload.write_bytes(b'{"a": 1}')
    client = install_client(monkeypatch, {TARGET: Response(code=200)})

    code = run(monkeypatch, "put", TARGET, "--data-file", str(payload))

    assert code == 0
    assert client.calls == [("put", TARGET, b'{"a": 1}')]


def test_fetch_reports_unreadable_data_file(monkeypatch, capsys, tmp_path) -> None:
    client = install_client(monkeypatch, {TARGET: Response(code=200)})

    code = run(monkeypatch, "post", TARGET, "--data-file", str(tmp_path / "missing.json"))

    assert code == 1
    assert "ERROR: Unable to read data file" in capsys.readouterr().out
    assert client.calls == []


def test_fetch_resolves_relative_url_against_base_url(monkeypatch, capsys) -> None:
    client = install_client(monkeypatch, {"http://api.example.com/v1/items": Response(code=200)})

    code = run(monkeypatch, "get", "items", "--base-url", "http://api.example.com/v1")

    assert code == 0
    assert client.calls[0][1] == "http://api.example.com/v1/items"
    assert "Effective URI: http://api.example.com/v1/items" in capsys.readouterr().out


def test_fetch_post_stops_at_302_without_unsafe_flag(monkeypatch) -> None:
    client = install_client(monkeypatch, {
        START: Response(code=302, header={"Location": [TARGET]}),
        TARGET: Response(code=200),
    })

    code = run(monkeypatch, "post", START, "--data", "x")

    assert code == 0
    assert [url for _, url, _ in client.calls] == [START]


def test_fetch_post_follows_302_with_unsafe_flag(monkeypatch) -> None:
    client = install_client(monkeypatch, {
        START: Response(code=302, header={"Location": [TARGET]}),
        TARGET: Response(code=200),
    })

    code = run(monkeypatch, "post", START, "--data", "x", "--follow-unsafe-redirects")

    assert code == 0
    assert client.calls == [("post", START, b"x"), ("post", TARGET, b"x")]


def test_fetch_show_body_prints_final_body(monkeypatch, capsys) -> None:
    install_client(monkeypatch, {TARGET: Response(code=200, body=b"hello body")})

    run(monkeypatch, "get", TARGET, "--show-body")

    assert "hello body" in capsys.readouterr().out


def test_fetch_passes_timeout_to_http_client(monkeypatch) -> None:
    client = install_client(monkeypatch, {TARGET: Response(code=200)})

    run(monkeypatch, "get", TARGET, "--timeout-sec", "3.5")

    assert client.timeout_sec == 3.5


def test_fetch_hop_line_shows_resolved_relative_location(monkeypatch, capsys) -> None:
    install_client(monkeypatch, {
        "http://example.com/a/b": Response(code=301, header={"Location": ["/c"]}),
        "http://example.com/c": Response(code=200),
    })

    run(monkeypatch, "get", "http://example.com/a/b", "--show-redirects")

    out = capsys.readouterr().out
    assert "301 permanent: http://example.com/a/b -> http://example.com/c" in out
    assert "Effective URI: http://example.com/c" in out


def test_fetch_json_log_format_emits_event_lines(monkeypatch, capsys) -> None:
    install_client(monkeypatch, {
        START: Response(code=302, header={"Location": [TARGET]}),
        TARGET: Response(code=200),
    })

    run(monkeypatch, "get", START, "--log-format", "json")

    lines = capsys.readouterr().out.splitlines()
    redirect_line = next(line for line in lines if line.startswith("resource.redirect "))
    payload = json.loads(redirect_line.split(" ", 1)[1])
    assert payload["command"] == "get"
    assert payload["to_uri"] == TARGET
    assert payload["permanent"] is False


def test_fetch_closes_http_client(monkeypatch) -> None:
    client = install_client(monkeypatch, {TARGET: Response(code=200)})

    run(monkeypatch, "get", TARGET)

    assert client.closed is True


def test_fetch_closes_http_client_on_error(monkeypatch) -> None:
    client = install_client(monkeypatch, {START: Response(code=302, header={"Location": [START]})})

    assert run(monkeypatch, "get", START, "--max-redirects", "1") == 1
    assert client.closed is True
