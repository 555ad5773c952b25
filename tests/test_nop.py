import logging

from pelikit.nop import NopLogBuilder, NopLogDrain, NopLogger
from pelikit.single import LevelFilter


def make_record(level=logging.ERROR):
    return logging.LogRecord("app", level, __file__, 1, "message", None, None)


def test_build_gives_off_filter():
    ring = NopLogBuilder().build()
    assert ring.level_filter is LevelFilter.OFF
    assert isinstance(ring.logger, NopLogger)
    assert isinstance(ring.drain, NopLogDrain)


def test_logger_is_never_enabled():
    logger = NopLogger()
    for level in (logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR, logging.CRITICAL):
        assert logger.enabled(make_record(level)) is False


def test_drain_flush_returns_nothing():
    assert NopLogDrain().flush() is None


def test_log_returns_nothing():
    assert NopLogger().log(make_record()) is None


def test_start_disables_standard_logger():
    target = logging.getLogger("pelikit.test.nop")
    target.propagate = False
    ring = NopLogBuilder().build()
    drain = ring.start(target)
    try:
        assert drain is ring.drain
        assert target.isEnabledFor(logging.CRITICAL) is False
    finally:
        for handler in list(target.handlers):
            target.removeHandler(handler)
        target.setLevel(logging.NOTSET)