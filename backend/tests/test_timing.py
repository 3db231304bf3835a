"""Tests for the timing helpers."""
import logging

from app.utils import timing


def fake_clock(monkeypatch, *readings):
    values = iter(readings)
    monkeypatch.setattr(timing, "now_ms", lambda: next(values))


def test_time_operation_logs_elapsed_at_debug(monkeypatch, caplog):
    """Test that a normal run logs its label and duration at DEBUG."""
    fake_clock(monkeypatch, 100.0, 112.5)
    caplog.set_level(logging.DEBUG, logger="app.utils.timing")

    with timing.time_operation("strategy=popular limit=10", slow_ms=500.0):
        pass

    assert [(r.levelno, r.getMessage()) for r in caplog.records] == [
        (logging.DEBUG, "strategy=popular limit=10: 12.50ms"),
    ]


def test_time_operation_warns_when_slow(monkeypatch, caplog):
    """Test that a run over the threshold is logged as a SLOW_STRATEGY warning."""
    fake_clock(monkeypatch, 0.0, 750.0)
    caplog.set_level(logging.DEBUG, logger="app.utils.timing")

    with timing.time_operation("strategy=nearby limit=5", slow_ms=500.0):
        pass

    assert len(caplog.records) == 1
    assert caplog.records[0].levelno == logging.WARNING
    assert "SLOW_STRATEGY" in caplog.records[0].getMessage()


def test_time_operation_logs_even_when_block_raises(monkeypatch, caplog):
    fake_clock(monkeypatch, 0.0, 3.0)
    caplog.set_level(logging.DEBUG, logger="app.utils.timing")

    try:
        with timing.time_operation("strategy=similar limit=10"):
            raise ValueError("boom")
    except ValueError:
        pass

    assert caplog.records[0].getMessage() == "strategy=similar limit=10: 3.00ms"


def test_log_elapsed_returns_elapsed(monkeypatch):
    fake_clock(monkeypatch, 40.0)
    messages = []
    assert timing.log_elapsed(10.0, "recommendations_request", messages.append) == 30.0
    assert messages == ["recommendations_request: 30.00ms"]
