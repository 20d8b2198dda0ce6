from time import perf_counter

from pingmeter.render import build_table, render_table
from pingmeter.stats import MetricsSink


def test_table_lists_hosts():
    sink = MetricsSink()
    sink.update("10.0.0.1", True, 2.0)
    sink.update("10.0.0.1", False, 0.0)
    sink.update("gw.lan", True, 0.4)

    table = build_table(sink, "pingmeter", perf_counter(), ascii_mode=True)
    assert table.row_count == 2
    text = render_table(table)
    assert "10.0.0.1" in text
    assert "gw.lan" in text
    assert "50" in text  # loss% for 10.0.0.1
    assert "0.4" in text


def test_empty_table():
    table = build_table(MetricsSink(), "pingmeter", perf_counter())
    assert table.row_count == 0
    assert "Host" in render_table(table)
