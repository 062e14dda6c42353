"""Tests for telemetry.py"""

from termmux.telemetry import Metrics, format_stream_log, truncate_command


class TestMetrics:
    """Tests for Metrics class."""

    def test_counter(self):
        m = Metrics()
        m.inc("stream.lines")
        m.inc("stream.lines", value=4)
        assert m.get_counter("stream.lines") == 5
        assert m.get_counter("stream.chunks") == 0

    def test_labels_are_separate_counters(self):
        m = Metrics()
        m.inc("exit_log.error", {"op": "open"})
        m.inc("exit_log.error", {"op": "append"})
        m.inc("exit_log.error", {"op": "append"})
        assert m.get_counter("exit_log.error", {"op": "open"}) == 1
        assert m.get_counter("exit_log.error") == 0
        assert m.total("exit_log.error") == 3

    def test_gauge_keeps_latest_value(self):
        m = Metrics()
        m.gauge("streams.active", 3)
        m.gauge("streams.active", 1)
        assert m.get_gauge("streams.active") == 1

    def test_summary(self):
        m = Metrics()
        m.inc("stream.lines", value=12)
        m.inc("stream.chunks", value=20)
        m.inc("stream.retired", value=2)
        assert m.summary() == (
            "lines=12 chunks=20 timeouts=0 retired=2 read_errors=0 canonicalize=0"
        )

    def test_summary_reports_log_errors(self):
        m = Metrics()
        m.inc("exit_log.error", {"op": "open"})
        assert m.summary().endswith(" exit_log_errors=1")

    def test_reset(self):
        m = Metrics()
        m.inc("stream.lines")
        m.gauge("streams.active", 2)
        m.reset()
        assert m.get_counter("stream.lines") == 0
        assert m.get_gauge("streams.active") == 0.0


class TestFormatting:
    """Tests for log formatting helpers."""

    def test_format_stream_log(self):
        assert format_stream_log("Scheduler", 2, "retired") == "[Scheduler:stream#2] retired"

    def test_truncate_command(self):
        assert truncate_command("short") == "short"
        assert truncate_command("x" * 20, max_len=10) == "xxxxxxx..."
