"""Runnable demonstrations of operating-system concepts: processes, threads,
synchronisation primitives, bounded buffers, dining philosophers, lottery
scheduling and UDP messaging."""

__version__ = "0.1.0"