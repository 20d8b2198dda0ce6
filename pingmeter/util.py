from __future__ import annotations

import contextlib
import logging
import socket
import sys
from datetime import datetime
from typing import Tuple

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


# ---------------- Logging ----------------

def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


# ---------------- Time helpers ----------------

def now_local_str(time_only: bool = False) -> str:
    """
    Return current local time as:
      - time_only=True: '1:02:11PM'
      - else: '09-24-2025 1:02:11PM'
    """
    now = datetime.now()
    if time_only:
        s = now.strftime("%I:%M:%S%p")
        return s.lstrip("0")
    return f"{now.strftime('%m-%d-%Y')} {now.strftime('%I:%M:%S%p').lstrip('0')}"


# ---------------- Network helpers ----------------

def is_ip_literal(s: str) -> bool:
    try:
        socket.inet_pton(socket.AF_INET, s)
        return True
    except OSError:
        pass
    with contextlib.suppress(OSError, ValueError):
        socket.inet_pton(socket.AF_INET6, s)
        return True
    return False


def parse_listen(listen: str) -> Tuple[str, int]:
    """
    Split a "[host]:port" listen address.
    ":9010" -> ("", 9010), "127.0.0.1:9010" -> ("127.0.0.1", 9010),
    "[::1]:9010" -> ("::1", 9010).
    """
    host, sep, port_s = listen.rpartition(":")
    if not sep:
        raise ValueError(f"listen address needs a port: {listen!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    try:
        port = int(port_s)
    except ValueError:
        raise ValueError(f"invalid port in listen address: {listen!r}") from None
    if not 0 <= port <= 65535:
        raise ValueError(f"port out of range in listen address: {listen!r}")
    return host, port
