# pelikit

This package provides small building blocks for services that must behave well under load:

- **`pelikit.ratelimit`**: a thread-safe token-bucket rate limiter.
- **`pelikit.switchboard`**: bounded queues that carry items both ways between two
  groups of threads. A send can go to one chosen receiver, to a random receiver or
  to every receiver. Each item is tagged with the index of its sender.
- **`pelikit.single`, `pelikit.sampling`, `pelikit.nop`, `pelikit.multi`**: an
  asynchronous backend for the standard `logging` module. Each record is formatted
  into a bounded queue. A drain, which you flush away from the hot path, writes the
  queued messages to an output.
- **`pelikit.outputs`**: log outputs: `Stdout`, `Stderr` and a rotating `File`.
- **`pelikit.logformat`**: the format functions `default_format` and `klog_format`.
- **`pelikit.logmetrics`**: counters and gauges for the logging backend.

The package has no runtime dependencies.

## Installation

```
pip install pelikit
```

To include the test dependencies:

```
pip install "pelikit[test]"
```

## Rate limiting

`Ratelimiter.builder(amount, interval)` sets up a limiter that adds `amount` tokens
after each `interval`. The interval is either a `timedelta` or a number of seconds.
By default the bucket starts empty and holds at most one token.

```python
import time
from datetime import timedelta

from pelikit.ratelimit import Ratelimiter, RateLimited

# 100 tokens per second, no burst
limiter = Ratelimiter.builder(1, timedelta(milliseconds=10)).build()

for _ in range(10):
    while True:
        try:
            limiter.try_wait()
            break
        except RateLimited as exc:
            time.sleep(exc.retry_after)  # seconds until the next refill
    # do the rate-limited work here
```

The next limiter is for admission control. It starts with a full budget of 1000
tokens and adds 1000 tokens back every hour:

```python
limiter = (
    Ratelimiter.builder(1000, timedelta(hours=1))
    .max_tokens(1000)
    .initial_available(1000)
    .build()
)
```

A limiter has these accessors:

- `rate()` gives tokens per second.
- `refill_interval()` gives the interval in seconds.
- `refill_amount()`, `max_tokens()` and `available()` give token counts.
- `dropped()` gives the number of tokens lost because the bucket was full.
- `next_refill()` gives a `time.monotonic_ns()` timestamp.

Configuration can be changed at runtime with `set_refill_interval`,
`set_refill_amount`, `set_max_tokens` and `set_available`.

Configuration errors derive from `RatelimitError`:

- `MaxTokensTooLow`
- `RefillAmountTooHigh`
- `AvailableTokensTooHigh`
- `RefillIntervalTooLong`

## Switchboard queues

```python
from pelikit.switchboard import Queues, QueueFull

class Waker:
    def wake(self):
        ...  # wake the event loop that owns the receiving queue

side_a, side_b = Queues.create([Waker()], [Waker()], 1024)
a, b = side_a[0], side_b[0]

a.try_send_to(0, 1)     # to receiver 0 on side b
a.try_send_any(2)       # to a random receiver on side b
a.try_send_all(3)       # to every receiver on side b
a.wake()                # wake the receivers that were sent items since the last wake

item = b.try_recv()     # a TrackedItem, or None if nothing is pending
print(item.sender, item.inner)
b.try_send_to(item.sender, "reply")
```

`Queues.create` returns one endpoint for each waker, in the order the wakers were
given. `capacity` limits how many items may wait at each receiver.

A send to a full queue raises `QueueFull`, and the item is kept in its `item`
attribute. `try_send_all` tries every receiver before it raises.

`try_recv_all()` returns a list of the items that were pending when it was called.

`wake()` tries every receiver. If any waker raised `OSError`, `wake()` re-raises
the last such error afterwards.

## Logging

```python
import logging
import threading
import time

from pelikit.outputs import Stdout, File
from pelikit.logformat import klog_format
from pelikit.single import LogBuilder
from pelikit.nop import NopLogBuilder
from pelikit.multi import MultiLogBuilder

default = LogBuilder().output(Stdout()).build()
command = (
    LogBuilder()
    .output(File("command.log", "command.old", 100))
    .format(klog_format)
    .build()
)

drain = (
    MultiLogBuilder()
    .default(default)
    .add_target("command", command)
    .add_target("noplog", NopLogBuilder().build())
    .build()
    .start()
)

def flush_forever():
    while True:
        drain.flush()
        time.sleep(0.1)

threading.Thread(target=flush_forever, daemon=True).start()

logging.error("error")
logging.getLogger("app").error('"get 0" 0 0', extra={"target": "command"})
```

### Starting a log

`RingLog.start(logger=None)` attaches a handler to the given `logging.Logger`, or
to the root logger if none is given. It sets that logger's level from the log's
`LevelFilter` and returns the drain.

It raises `RuntimeError` if a ring log is already attached to that logger.

Nothing is written until the drain's `flush()` is called. The package does not run
a flushing thread of its own.

### Builders

- **`LogBuilder`** sends every record to one output. Its options are
  `log_queue_depth` (default 4096), `single_message_size`, `output`, `format` and
  `level_filter` (default `LevelFilter.TRACE`). `build()` without an output raises
  `NoOutputConfigured`. When the queue is full, new messages are dropped and
  counted.
- **`SamplingLogBuilder`** keeps one enabled record in every `sample` (default 100).
- **`NopLogBuilder`** builds a log that drops everything.
- **`MultiLogBuilder`** routes each record by its target. The target is the
  record's `target` attribute if it has one, and otherwise the name of the logger.
  A record whose target has no log of its own goes to the default log. If no
  default was set, the record is dropped.

### Format functions

`default_format` writes `<time> <LEVEL> [<module>] <message>`. `klog_format` writes
`<time> <message>`. Both end the line with a newline and take the time as an ISO
timestamp with milliseconds.

A custom format function takes `(now, record)` and returns a string.

### Outputs

`File(active, backup, max_size)` creates or truncates the live file. After each
flush, if the live file has reached `max_size` bytes, it is moved to `backup` and
a new live file is started. `File` can be used as a context manager.

### Metrics

`pelikit.logmetrics.snapshot()` returns the current value of every logging metric
as a dict keyed by name, such as `log_write`, `log_drop` and `log_flush`.

## What the package does not do

`pelikit` is a library only. It installs no commands and starts no background
threads or services. Flushing drains and waking switchboard receivers is left to
the calling program.

## Running the tests

```
pytest
```