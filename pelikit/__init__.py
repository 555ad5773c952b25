"""Token-bucket rate limiting, routed inter-thread queues and a queued logging backend."""

__version__ = "0.1.0"