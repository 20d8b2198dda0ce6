"""Tests for argument parsing and process start-up."""

from __future__ import annotations

import pytest

from pingmeter import cli
from pingmeter.util import is_ip_literal, parse_listen


class TestParseListen:
    def test_port_only(self):
        assert parse_listen(":9010") == ("", 9010)

    def test_host_and_port(self):
        assert parse_listen("127.0.0.1:8080") == ("127.0.0.1", 8080)

    def test_bracketed_ipv6(self):
        assert parse_listen("[::1]:9010") == ("::1", 9010)

    @pytest.mark.parametrize("bad", ["9010", "host:", "host:abc", ":70000"])
    def test_invalid(self, bad):
        with pytest.raises(ValueError):
            parse_listen(bad)


def test_is_ip_literal():
    assert is_ip_literal("10.0.0.1")
    assert is_ip_literal("::1")
    assert not is_ip_literal("example.com")
    assert not is_ip_literal("")


def test_defaults():
    s = cli.parse_args(["targets.txt"])
    assert s.target_file == "targets.txt"
    assert s.interval == 10.0
    assert s.timeout == 5.0
    assert s.listen == ":9010"
    assert s.privileged is False
    assert s.table is False
    assert s.screen is True


def test_options():
    s = cli.parse_args(
        ["-i", "30", "-t", "2.5", "-l", "127.0.0.1:9100", "--privileged", "--table", "--no-screen", "hosts"]
    )
    assert (s.interval, s.timeout, s.listen) == (30.0, 2.5, "127.0.0.1:9100")
    assert s.privileged and s.table and not s.screen


@pytest.mark.parametrize(
    "argv",
    [
        ["--interval", "0", "t"],
        ["--timeout", "-1", "t"],
        ["--timeout", "soon", "t"],
        ["--listen", "nope", "t"],
        [],
    ],
)
def test_usage_errors(argv):
    with pytest.raises(SystemExit) as exc:
        cli.parse_args(argv)
    assert exc.value.code == 2


def test_main_bind_failure_returns_1(monkeypatch, capsys):
    def refuse(port, addr="0.0.0.0", registry=None):
        raise OSError("address already in use")

    monkeypatch.setattr(cli, "start_http_server", refuse)
    assert cli.main(["targets.txt"]) == 1
    assert "address already in use" in capsys.readouterr().err


def test_main_starts_listener_and_loop(monkeypatch):
    calls = {}

    def fake_server(port, addr="0.0.0.0", registry=None):
        calls["server"] = (port, addr, registry)

    def fake_run(coro):
        coro.close()
        raise KeyboardInterrupt

    monkeypatch.setattr(cli, "start_http_server", fake_server)
    monkeypatch.setattr(cli.asyncio, "run", fake_run)
    assert cli.main(["--listen", ":9123", "targets.txt"]) == 130
    port, addr, registry = calls["server"]
    assert (port, addr) == (9123, "0.0.0.0")
    assert registry is not None
