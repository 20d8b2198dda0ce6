"""pytest configuration and a scripted transport for pingmeter tests."""

from __future__ import annotations

import asyncio

import pytest

from pingmeter.pinger import ResolutionError, Transport


class FakeTransport(Transport):
    """
    replies: address -> delay in seconds before its echo reply arrives.
    Addresses missing from `replies` never answer.
    unresolvable: hosts whose resolution fails.
    aliases: host -> address for names.
    strays: (address, rtt_ms) replies delivered before any real one.
    error: raised from run() instead of probing.
    hang: keep run() blocked after the replies are sent.
    """

    def __init__(self, replies=None, unresolvable=(), aliases=None, strays=(), error=None, hang=False):
        self.replies = dict(replies or {})
        self.unresolvable = set(unresolvable)
        self.aliases = dict(aliases or {})
        self.strays = list(strays)
        self.error = error
        self.hang = hang
        self.queued = []
        self.sent = []
        self.runs = 0

    async def resolve(self, host: str) -> str:
        if host in self.unresolvable:
            raise ResolutionError(f"cannot resolve {host!r}")
        return self.aliases.get(host, host)

    def add(self, address: str) -> None:
        self.queued.append(address)

    async def run(self, timeout, on_reply) -> None:
        self.runs += 1
        addresses, self.queued = self.queued, []
        self.sent.extend(addresses)
        if self.error is not None:
            raise self.error
        for address, rtt_ms in self.strays:
            on_reply(address, rtt_ms)

        async def reply(address, delay):
            await asyncio.sleep(delay)
            on_reply(address, delay * 1000.0)

        await asyncio.gather(*(reply(a, self.replies[a]) for a in addresses if a in self.replies))
        if self.hang:
            await asyncio.sleep(3600)


@pytest.fixture
def fake_transport():
    return FakeTransport


@pytest.fixture
def target_file(tmp_path):
    path = tmp_path / "targets.txt"
    path.write_text("")
    return path
