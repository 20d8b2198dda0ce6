from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Tuple

logger = logging.getLogger(__name__)


def parse_targets(text: str) -> Tuple[str, ...]:
    """One host per line; blank lines are dropped, nothing else is checked."""
    items = []
    for line in text.split("\n"):
        item = line.strip()
        if item:
            items.append(item)
    return tuple(items)


class TargetList:
    """
    Hot-reloading list of probe targets backed by a text file.

    The file is re-read only when its modification time moves forward.
    Any stat/read failure keeps the last good list.
    """

    def __init__(self, path: os.PathLike | str) -> None:
        self.path = Path(path)
        self.items: Tuple[str, ...] = ()
        self.mtime_ns: Optional[int] = None

    def current(self) -> Tuple[str, ...]:
        try:
            mtime_ns = self.path.stat().st_mtime_ns
        except OSError as e:
            logger.warning("cannot stat target list %s: %s", self.path, e)
            return self.items

        if self.mtime_ns is not None and mtime_ns <= self.mtime_ns:
            return self.items

        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            # mtime not recorded, so the next call retries
            logger.warning("cannot read target list %s: %s", self.path, e)
            return self.items

        self.items = parse_targets(text)
        self.mtime_ns = mtime_ns
        logger.info("target list updated: %d hosts from %s", len(self.items), self.path)
        return self.items
