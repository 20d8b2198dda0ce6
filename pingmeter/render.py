from __future__ import annotations

from time import perf_counter

from rich import box
from rich.console import Console
from rich.table import Table

from .stats import MetricsSink

# One console for string rendering; keep colors simple for SSH / VMs
_console = Console(color_system="standard", force_terminal=True)

HEADERS = ["Host", "Snt", "OK", "NG", "Loss%", "RTT"]


def _fmt_ms(v: float) -> str:
    return f"{v:.1f}" if v else "-"


def build_table(
    sink: MetricsSink,
    title: str,
    started_at: float,
    *,
    ascii_mode: bool = False,
) -> Table:
    """Create a Rich Table for the current per-host counters."""
    t = Table(
        box=box.SIMPLE if ascii_mode else box.ROUNDED,
        show_edge=True,
        show_lines=False,
        title=title,
        caption=f"{int(perf_counter() - started_at)}s — Ctrl+C to quit",
        pad_edge=False,
    )
    for h in HEADERS:
        if h == "Host":
            t.add_column(h, justify="left")
        else:
            t.add_column(h, justify="right", no_wrap=True)

    for host, total, ok, ng, rtt_ms in sink.rows():
        loss = 0.0 if total == 0 else 100.0 * ng / total
        t.add_row(host, str(total), str(ok), str(ng), f"{loss:.0f}", _fmt_ms(rtt_ms))

    return t


def render_table(table: Table) -> str:
    """Render a Rich Table to a string (for printing without flicker)."""
    with _console.capture() as cap:
        _console.print(table)
    return cap.get()
