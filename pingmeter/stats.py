from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Tuple

from prometheus_client import CollectorRegistry, Counter, Gauge, generate_latest

TOTAL = "pingmeter_count_total"
OK = "pingmeter_count_ok_total"
NG = "pingmeter_count_ng_total"
RTT = "pingmeter_rtt_ms"


class MetricsSink:
    """
    Per-host probe counters and last RTT, held in a private registry.

    prometheus_client guards every value with a lock, so snapshot() may be
    called from the HTTP thread while the probe loop keeps updating.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None) -> None:
        self.registry = registry if registry is not None else CollectorRegistry()
        self.total = Counter("pingmeter_count", "Number of checks", ["host"], registry=self.registry)
        self.ok = Counter("pingmeter_count_ok", "Number of successes", ["host"], registry=self.registry)
        self.ng = Counter("pingmeter_count_ng", "Number of failures", ["host"], registry=self.registry)
        self.rtt = Gauge("pingmeter_rtt_ms", "RTT to each host", ["host"], registry=self.registry)
        # first-seen order, for the console view
        self._hosts: Dict[str, None] = {}

    def update(self, host: str, ok: bool, rtt_ms: float) -> None:
        self._hosts.setdefault(host, None)
        self.total.labels(host=host).inc()
        if ok:
            self.ok.labels(host=host).inc()
            self.rtt.labels(host=host).set(rtt_ms)
        else:
            self.ng.labels(host=host).inc()
            self.rtt.labels(host=host).set(0)

    def snapshot(self) -> str:
        """Current state in the Prometheus text exposition format."""
        return generate_latest(self.registry).decode("utf-8")

    def value(self, name: str, host: str) -> float:
        v = self.registry.get_sample_value(name, {"host": host})
        return 0.0 if v is None else v

    def hosts(self) -> List[str]:
        return list(self._hosts)

    def rows(self) -> Iterator[Tuple[str, int, int, int, float]]:
        """Yield (host, total, ok, ng, rtt_ms) in first-seen order."""
        for host in self.hosts():
            yield (
                host,
                int(self.value(TOTAL, host)),
                int(self.value(OK, host)),
                int(self.value(NG, host)),
                self.value(RTT, host),
            )
