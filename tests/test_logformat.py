import logging
from datetime import datetime, timezone

import pytest

from pelikit.logformat import default_format, klog_format

NOW = datetime(2021, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
STAMP = "2021-01-02T03:04:05.678+00:00"


def make_record(level=logging.INFO, msg="hello %s", args=("world",), pathname="/srv/app/worker.py"):
    return logging.LogRecord(
        name="app",
        level=level,
        pathname=pathname,
        lineno=1,
        msg=msg,
        args=args,
        exc_info=None,
    )


def test_default_format_layout():
    line = default_format(NOW, make_record())
    assert line == f"{STAMP} INFO [worker] hello world\n"


@pytest.mark.parametrize(
    "level, name",
    [
        (logging.CRITICAL, "ERROR"),
        (logging.ERROR, "ERROR"),
        (logging.WARNING, "WARN"),
        (logging.INFO, "INFO"),
        (logging.DEBUG, "DEBUG"),
        (5, "TRACE"),
    ],
)
def test_default_format_level_names(level, name):
    line = default_format(NOW, make_record(level=level))
    assert line.split(" ")[1] == name


def test_default_format_unnamed_module():
    line = default_format(NOW, make_record(pathname=""))
    assert "[<unnamed>]" in line


def test_klog_format_layout():
    line = klog_format(NOW, make_record(msg='"get 0" 0 0', args=()))
    assert line == f'{STAMP} "get 0" 0 0\n'


def test_formats_end_with_single_newline():
    for fmt in (default_format, klog_format):
        line = fmt(NOW, make_record())
        assert line.endswith("\n")
        assert line.count("\n") == 1