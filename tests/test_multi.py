import logging

import pytest

from pelikit.multi import MultiLogBuilder, MultiLogger
from pelikit.nop import NopLogBuilder
from pelikit.outputs import Output
from pelikit.single import LevelFilter, LogBuilder


class MemoryOutput(Output):
    def __init__(self):
        self.data = bytearray()

    def write(self, data):
        self.data += data
        return len(data)

    def flush(self):
        pass

    def lines(self):
        return self.data.decode().splitlines()


class BrokenOutput(Output):
    def write(self, data):
        raise OSError("disk full")

    def flush(self):
        pass


def plain(now, record):
    return record.getMessage() + "\n"


def make_record(msg, name="app", level=logging.ERROR, target=None):
    record = logging.LogRecord(name, level, __file__, 1, msg, None, None)
    if target is not None:
        record.target = target
    return record


def single(out, level_filter=LevelFilter.TRACE):
    return LogBuilder().output(out).format(plain).level_filter(level_filter).build()


def test_routes_by_logger_name_and_default():
    default_out, command_out = MemoryOutput(), MemoryOutput()
    ring = (
        MultiLogBuilder()
        .default(single(default_out))
        .add_target("command", single(command_out))
        .build()
    )
    ring.logger.log(make_record("general"))
    ring.logger.log(make_record("get 0", name="command"))
    ring.drain.flush()
    assert default_out.lines() == ["general"]
    assert command_out.lines() == ["get 0"]


def test_explicit_target_attribute_wins_over_name():
    default_out, command_out = MemoryOutput(), MemoryOutput()
    ring = (
        MultiLogBuilder()
        .default(single(default_out))
        .add_target("command", single(command_out))
        .build()
    )
    ring.logger.log(make_record("routed", name="app", target="command"))
    ring.drain.flush()
    assert command_out.lines() == ["routed"]
    assert default_out.lines() == []


def test_without_default_unknown_targets_are_dropped():
    command_out = MemoryOutput()
    ring = MultiLogBuilder().add_target("command", single(command_out)).build()
    record = make_record("lost", name="other")
    assert ring.logger.enabled(record) is False
    ring.logger.log(record)
    ring.drain.flush()
    assert command_out.lines() == []


def test_nop_target_swallows_records():
    default_out = MemoryOutput()
    ring = (
        MultiLogBuilder()
        .default(single(default_out))
        .add_target("noplog", NopLogBuilder().build())
        .build()
    )
    record = make_record("hidden", name="noplog")
    assert ring.logger.enabled(record) is False
    ring.logger.log(record)
    ring.drain.flush()
    assert default_out.lines() == []


def test_multi_level_filter_applies_before_routing():
    out = MemoryOutput()
    ring = MultiLogBuilder().default(single(out)).level_filter(LevelFilter.WARN).build()
    assert ring.level_filter is LevelFilter.WARN
    ring.logger.log(make_record("quiet", level=logging.INFO))
    ring.logger.log(make_record("loud", level=logging.WARNING))
    ring.drain.flush()
    assert out.lines() == ["loud"]


def test_target_level_filter_is_respected():
    out = MemoryOutput()
    ring = MultiLogBuilder().default(single(out, LevelFilter.ERROR)).build()
    assert ring.logger.enabled(make_record("w", level=logging.WARNING)) is False
    assert ring.logger.enabled(make_record("e", level=logging.ERROR)) is True


def test_add_target_replaces_earlier_log():
    first, second = MemoryOutput(), MemoryOutput()
    ring = (
        MultiLogBuilder()
        .add_target("command", single(first))
        .add_target("command", single(second))
        .build()
    )
    ring.logger.log(make_record("x", name="command"))
    ring.drain.flush()
    assert first.lines() == []
    assert second.lines() == ["x"]


def test_flush_error_propagates():
    ring = MultiLogBuilder().add_target("bad", single(BrokenOutput())).build()
    ring.logger.log(make_record("boom", name="bad"))
    with pytest.raises(OSError):
        ring.drain.flush()


def test_empty_multi_logger_disables_everything():
    logger = MultiLogger(None, {}, LevelFilter.TRACE)
    assert logger.enabled(make_record("any")) is False


def test_started_multi_log_routes_standard_logging():
    default_out, command_out = MemoryOutput(), MemoryOutput()
    ring = (
        MultiLogBuilder()
        .default(single(default_out))
        .add_target("command", single(command_out))
        .build()
    )
    target = logging.getLogger("pelikit.test.multi")
    target.propagate = False
    drain = ring.start(target)
    try:
        target.error("plain")
        target.error("cmd", extra={"target": "command"})
        drain.flush()
    finally:
        for handler in list(target.handlers):
            target.removeHandler(handler)
    assert default_out.lines() == ["plain"]
    assert command_out.lines() == ["cmd"]