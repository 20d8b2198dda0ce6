from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable, List

from icmplib import NameLookupError, async_ping, async_resolve, is_ipv4_address

from .util import is_ip_literal

logger = logging.getLogger(__name__)

# on_reply(address, rtt_ms)
ReplyCallback = Callable[[str, float], None]


class ResolutionError(ValueError):
    """A target could not be turned into a network address."""


class Transport(ABC):
    """
    What the batch runner needs from an ICMP implementation:
    resolve a host, queue an echo per address, and run the queued
    echoes while reporting every reply through a callback.
    """

    @abstractmethod
    async def resolve(self, host: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def add(self, address: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def run(self, timeout: float, on_reply: ReplyCallback) -> None:
        raise NotImplementedError


class IcmpTransport(Transport):
    """Echo requests via icmplib, one request per queued address."""

    def __init__(self, privileged: bool = False) -> None:
        self.privileged = privileged
        self._queued: List[str] = []

    async def resolve(self, host: str) -> str:
        if is_ip_literal(host):
            return host
        try:
            addresses = await async_resolve(host)
        except (NameLookupError, UnicodeError, ValueError) as e:
            # malformed names ("foo..bar", labels over 63 chars) fail IDNA encoding
            raise ResolutionError(f"cannot resolve {host!r}") from e
        if not addresses:
            raise ResolutionError(f"no address for {host!r}")
        # prefer IPv4
        for address in addresses:
            if is_ipv4_address(address):
                return address
        return addresses[0]

    def add(self, address: str) -> None:
        if address not in self._queued:
            self._queued.append(address)

    async def _echo(self, address: str, timeout: float, on_reply: ReplyCallback) -> None:
        host = await async_ping(
            address,
            count=1,
            timeout=timeout,
            privileged=self.privileged,
        )
        if host.is_alive and host.rtts:
            on_reply(address, host.rtts[0])

    async def run(self, timeout: float, on_reply: ReplyCallback) -> None:
        """
        Send one echo to every queued address and wait for all of them.
        Socket errors (permissions, bad source address) propagate.
        """
        addresses, self._queued = self._queued, []
        if not addresses:
            return
        logger.debug("sending %d echo requests", len(addresses))
        await asyncio.gather(*(self._echo(a, timeout, on_reply) for a in addresses))
