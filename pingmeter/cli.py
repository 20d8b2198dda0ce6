from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from time import perf_counter
from typing import List, Optional

from prometheus_client import start_http_server

from .config import Settings
from .pinger import IcmpTransport
from .render import build_table, render_table
from .scheduler import ProbeScheduler
from .stats import MetricsSink
from .targets import TargetList
from .util import now_local_str, parse_listen, setup_logging

logger = logging.getLogger(__name__)


# ---------- argument types ----------

def _positive_float(value: str) -> float:
    try:
        f = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}") from None
    if f <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value!r}")
    return f


def _listen_address(value: str) -> str:
    try:
        parse_listen(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None
    return value


def parse_args(argv: Optional[List[str]] = None) -> Settings:
    ap = argparse.ArgumentParser(
        prog="pingmeter",
        description="Ping a list of hosts periodically and export the results as Prometheus metrics.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    ap.add_argument("target_file", help="File with one host per line (re-read when it changes)")
    ap.add_argument("--interval", "-i", type=_positive_float, default=10.0, help="Seconds between probe cycles")
    ap.add_argument("--timeout", "-t", type=_positive_float, default=5.0, help="Seconds to wait for replies")
    ap.add_argument("--listen", "-l", type=_listen_address, default=":9010", help="Metrics listen address")
    ap.add_argument("--privileged", action="store_true", help="Use raw ICMP sockets (needs root/CAP_NET_RAW)")
    ap.add_argument("--table", action="store_true", help="Print a per-host table after every cycle")
    ap.add_argument("--ascii", action="store_true", help="Use ASCII borders")
    ap.add_argument("--no-screen", action="store_true", help="Disable cleared screen effect")
    ap.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging verbosity",
    )

    args = ap.parse_args(argv)
    return Settings(
        target_file=args.target_file,
        interval=args.interval,
        timeout=args.timeout,
        listen=args.listen,
        privileged=bool(args.privileged),
        table=bool(args.table),
        ascii=bool(args.ascii),
        screen=not bool(args.no_screen),
        log_level=args.log_level,
    )


# ---------- main async loop ----------

async def ping_loop(settings: Settings, sink: MetricsSink) -> None:
    started = perf_counter()

    def print_table(s: MetricsSink) -> None:
        table = build_table(s, f"pingmeter — {now_local_str()}", started, ascii_mode=settings.ascii)
        sys.stdout.write("\x1b[2J\x1b[H" if settings.screen else "")
        sys.stdout.write(render_table(table))
        sys.stdout.flush()

    scheduler = ProbeScheduler(
        TargetList(settings.target_file),
        sink,
        IcmpTransport(privileged=settings.privileged),
        interval=settings.interval,
        timeout=settings.timeout,
        on_cycle=print_table if settings.table else None,
    )
    await scheduler.run()


# ---------- CLI ----------

def main(argv: Optional[List[str]] = None) -> int:
    settings = parse_args(argv)
    setup_logging(settings.log_level)

    if settings.timeout > settings.interval:
        logger.warning(
            "timeout (%.1fs) exceeds interval (%.1fs); cycles will overrun",
            settings.timeout,
            settings.interval,
        )

    sink = MetricsSink()
    host, port = parse_listen(settings.listen)
    try:
        start_http_server(port, addr=host or "0.0.0.0", registry=sink.registry)
        logger.info("serving metrics on %s/metrics", settings.listen)
        asyncio.run(ping_loop(settings, sink))
    except KeyboardInterrupt:
        # graceful stop on Ctrl+C
        return 130
    except Exception as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
