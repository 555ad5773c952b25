import logging

import pytest

from pelikit import logmetrics
from pelikit.outputs import Output
from pelikit.sampling import SamplingLogBuilder, SamplingLogger
from pelikit.single import LevelFilter, NoOutputConfigured


class MemoryOutput(Output):
    def __init__(self):
        self.data = bytearray()
        self.flushes = 0

    def write(self, data):
        self.data += data
        return len(data)

    def flush(self):
        self.flushes += 1

    def lines(self):
        return self.data.decode().splitlines()


def plain(now, record):
    return record.getMessage() + "\n"


def make_record(msg, level=logging.ERROR, name="app"):
    return logging.LogRecord(name, level, __file__, 1, msg, None, None)


def build(sample=None):
    out = MemoryOutput()
    builder = SamplingLogBuilder().output(out).format(plain)
    if sample is not None:
        builder.sample(sample)
    return builder.build(), out


def test_keeps_every_nth_record():
    ring, out = build(sample=3)
    for i in range(7):
        ring.logger.log(make_record(f"m{i}"))
    ring.drain.flush()
    assert out.lines() == ["m2", "m5"]


def test_sample_one_keeps_everything():
    ring, out = build(sample=1)
    messages = [f"line {i}" for i in range(5)]
    for message in messages:
        ring.logger.log(make_record(message))
    ring.drain.flush()
    assert out.lines() == messages


def test_default_sample_is_one_hundred():
    ring, out = build()
    assert ring.logger.sample == 100
    for i in range(150):
        ring.logger.log(make_record(f"r{i}"))
    ring.drain.flush()
    assert out.lines() == ["r99"]


def test_skipped_records_are_counted():
    ring, _ = build(sample=4)
    before = logmetrics.LOG_SKIP.value()
    for i in range(8):
        ring.logger.log(make_record(f"x{i}"))
    assert logmetrics.LOG_SKIP.value() - before == 6


def test_zero_sample_is_rejected():
    with pytest.raises(ValueError):
        SamplingLogBuilder().sample(0)


def test_build_without_output_fails():
    with pytest.raises(NoOutputConfigured):
        SamplingLogBuilder().sample(2).build()


def test_level_filter_comes_from_wrapped_logger():
    ring, _ = build(sample=2)
    assert ring.level_filter is LevelFilter.TRACE
    assert isinstance(ring.logger, SamplingLogger)
    assert ring.logger.enabled(make_record("e", level=logging.DEBUG)) is True