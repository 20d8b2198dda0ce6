from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from .pinger import ResolutionError, Transport

logger = logging.getLogger(__name__)

# share of the batch timeout a single host may spend resolving
RESOLVE_SHARE = 0.5


@dataclass
class PendingResult:
    host: str
    ok: bool = False
    rtt_ms: Optional[float] = None


@dataclass(frozen=True)
class Outcome:
    host: str
    ok: bool
    rtt_ms: float  # 0.0 unless ok


class Correlator:
    """
    Per-batch table of outstanding echoes, keyed by resolved address.

    Hosts that failed to resolve live in a separate table keyed by the
    host string itself and can never be marked successful.
    """

    def __init__(self) -> None:
        self.pending: Dict[str, PendingResult] = {}
        self.unresolved: Dict[str, PendingResult] = {}
        self._outstanding = 0

    def insert(self, address: str, host: str) -> bool:
        """Register an address; False if it was already registered."""
        if address in self.pending:
            return False
        self.pending[address] = PendingResult(host=host)
        self._outstanding += 1
        return True

    def insert_unresolved(self, host: str) -> None:
        self.unresolved.setdefault(host, PendingResult(host=host))

    def mark_success(self, address: str, rtt_ms: float) -> None:
        result = self.pending.get(address)
        if result is None:
            logger.debug("ignoring reply from %s outside this batch", address)
            return
        if result.ok:
            return
        result.ok = True
        result.rtt_ms = rtt_ms
        self._outstanding -= 1

    def outstanding(self) -> int:
        return self._outstanding

    def outcome(self, host: str, address: Optional[str]) -> Outcome:
        result = self.pending.get(address) if address is not None else None
        if result is None or not result.ok:
            return Outcome(host=host, ok=False, rtt_ms=0.0)
        return Outcome(host=host, ok=True, rtt_ms=float(result.rtt_ms or 0.0))


async def _resolve(transport: Transport, host: str, timeout: float) -> Optional[str]:
    try:
        return await asyncio.wait_for(transport.resolve(host), timeout=timeout)
    except (ResolutionError, asyncio.TimeoutError) as e:
        logger.debug("resolution failed for %s: %s", host, str(e) or "timed out")
        return None


async def run_batch(
    hosts: Sequence[str],
    timeout: float,
    transport: Transport,
) -> List[Outcome]:
    """
    Probe every host once and return one Outcome per input host, in order.

    Replies travel from the transport to this coroutine over a queue;
    only this coroutine touches the Correlator. Resolution and the reply
    wait share one deadline, so the batch returns within `timeout`;
    anything still outstanding then counts as a failure. Resolution is
    capped at RESOLVE_SHARE of it so one slow name cannot starve the
    replies. A transport failure propagates.
    """
    if not hosts:
        return []

    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    correlator = Correlator()
    addresses = await asyncio.gather(
        *(_resolve(transport, h, timeout * RESOLVE_SHARE) for h in hosts)
    )

    for host, address in zip(hosts, addresses):
        if address is None:
            correlator.insert_unresolved(host)
        else:
            correlator.insert(address, host)

    replies: asyncio.Queue[Tuple[str, float]] = asyncio.Queue()
    remaining = deadline - loop.time()

    if correlator.pending and remaining > 0:
        for address in correlator.pending:
            transport.add(address)
        runner = asyncio.ensure_future(
            transport.run(remaining, lambda addr, rtt: replies.put_nowait((addr, rtt)))
        )
        try:
            await _collect(correlator, replies, runner, deadline)
        finally:
            if not runner.done():
                runner.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await runner
        if runner.done() and not runner.cancelled() and runner.exception() is not None:
            raise runner.exception()

    outcomes = [correlator.outcome(h, a) for h, a in zip(hosts, addresses)]
    logger.debug(
        "batch done: %d hosts, %d ok, %d unresolved",
        len(outcomes),
        sum(1 for o in outcomes if o.ok),
        len(correlator.unresolved),
    )
    return outcomes


async def _collect(
    correlator: Correlator,
    replies: asyncio.Queue,
    runner: asyncio.Future,
    deadline: float,
) -> None:
    loop = asyncio.get_running_loop()
    while correlator.outstanding():
        remaining = deadline - loop.time()
        if remaining <= 0:
            break
        getter = asyncio.ensure_future(replies.get())
        done, _ = await asyncio.wait(
            {getter, runner}, timeout=remaining, return_when=asyncio.FIRST_COMPLETED
        )
        if getter in done:
            correlator.mark_success(*getter.result())
        else:
            getter.cancel()
        if runner in done:
            # transport finished; whatever it reported is already queued
            while not replies.empty():
                correlator.mark_success(*replies.get_nowait())
            return
