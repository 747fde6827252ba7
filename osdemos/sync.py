"""Synchronisation primitives built from locks, condition variables and semaphores."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator


class Zemaphore:
    """A counting semaphore built from a mutex and a condition variable."""

    def __init__(self, value: int) -> None:
        self._value = value
        self._cond = threading.Condition(threading.Lock())

    @property
    def value(self) -> int:
        with self._cond:
            return self._value

    def wait(self) -> None:
        """Block until the count is positive, then decrement it."""
        with self._cond:
            while self._value <= 0:
                self._cond.wait()
            self._value -= 1

    def post(self) -> None:
        """Increment the count and wake one waiter."""
        with self._cond:
            self._value += 1
            self._cond.notify()

    def __enter__(self) -> Zemaphore:
        self.wait()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.post()


class Synchronizer:
    """A one-shot signal that resets itself each time a waiter consumes it."""

    def __init__(self) -> None:
        self._done = False
        self._cond = threading.Condition(threading.Lock())

    @property
    def done(self) -> bool:
        with self._cond:
            return self._done

    def signal(self) -> None:
        """Mark the event as done and wake one waiter."""
        with self._cond:
            self._done = True
            self._cond.notify()

    def wait(self) -> None:
        """Block until signalled, then reset for the next use."""
        with self._cond:
            while not self._done:
                self._cond.wait()
            self._done = False


class RWLock:
    """A readers-writer lock: many readers or one writer at a time.

    The first reader in takes the write lock and the last reader out
    releases it, so writers may starve while readers keep arriving.
    """

    def __init__(self) -> None:
        self._readers = 0
        self._lock = threading.Semaphore(1)
        self._writelock = threading.Semaphore(1)

    @property
    def readers(self) -> int:
        with self._lock:
            return self._readers

    def acquire_readlock(self) -> None:
        with self._lock:
            self._readers += 1
            if self._readers == 1:
                self._writelock.acquire()

    def release_readlock(self) -> None:
        with self._lock:
            if self._readers <= 0:
                raise RuntimeError("read lock released without being held")
            self._readers -= 1
            if self._readers == 0:
                self._writelock.release()

    def acquire_writelock(self) -> None:
        self._writelock.acquire()

    def release_writelock(self) -> None:
        self._writelock.release()

    @contextmanager
    def read_locked(self) -> Iterator[RWLock]:
        """Hold the lock for reading for the duration of the block."""
        self.acquire_readlock()
        try:
            yield self
        finally:
            self.release_readlock()

    @contextmanager
    def write_locked(self) -> Iterator[RWLock]:
        """Hold the lock for writing for the duration of the block."""
        self.acquire_writelock()
        try:
            yield self
        finally:
            self.release_writelock()


class AtomicCell:
    """A value that supports an atomic compare-and-swap."""

    def __init__(self, value: object) -> None:
        self._value = value
        self._lock = threading.Lock()

    @property
    def value(self) -> object:
        with self._lock:
            return self._value

    def compare_and_swap(self, old: object, new: object) -> bool:
        """Store ``new`` if the current value equals ``old``; report whether it did."""
        with self._lock:
            if self._value == old:
                self._value = new
                return True
            return False