from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from icmplib import ICMPLibError

from .batch import run_batch
from .pinger import Transport
from .stats import MetricsSink
from .targets import TargetList

logger = logging.getLogger(__name__)


class ProbeScheduler:
    """
    Drives probe cycles: probe once at start, then once per interval tick.
    Each cycle re-reads the target list, runs one batch and feeds every
    outcome to the sink.
    """

    def __init__(
        self,
        targets: TargetList,
        sink: MetricsSink,
        transport: Transport,
        *,
        interval: float = 10.0,
        timeout: float = 5.0,
        on_cycle: Optional[Callable[[MetricsSink], None]] = None,
    ) -> None:
        self.targets = targets
        self.sink = sink
        self.transport = transport
        self.interval = interval
        self.timeout = timeout
        self.on_cycle = on_cycle
        self.probing = False

    async def run_cycle(self) -> Optional[int]:
        """
        Run one cycle. Returns the number of outcomes recorded, or None
        when the transport failed and the cycle was skipped.
        """
        hosts = self.targets.current()
        if not hosts:
            logger.debug("no targets; nothing to probe")
            return 0

        self.probing = True
        try:
            outcomes = await run_batch(hosts, self.timeout, self.transport)
        except (ICMPLibError, OSError) as e:
            logger.error("probe cycle skipped: %s", e)
            return None
        finally:
            self.probing = False

        for o in outcomes:
            self.sink.update(o.host, o.ok, o.rtt_ms)
        if self.on_cycle is not None:
            self.on_cycle(self.sink)
        return len(outcomes)

    async def run(self, max_cycles: Optional[int] = None) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        cycles = 0
        while True:
            await self.run_cycle()
            cycles += 1
            if max_cycles is not None and cycles >= max_cycles:
                return

            next_tick += self.interval
            now = loop.time()
            if next_tick < now:
                # batch overran; drop the ticks we missed
                missed = int((now - next_tick) // self.interval) + 1
                logger.warning("probe cycle overran interval; skipping %d tick(s)", missed)
                next_tick += missed * self.interval
            await asyncio.sleep(next_tick - now)
