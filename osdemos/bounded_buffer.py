"""Bounded producer/consumer buffers guarded by condition variables or semaphores."""

from __future__ import annotations

import re
import sys
import threading
from typing import Protocol, Sequence

END_OF_PRODUCTION = -1
MAX_CONSUMERS = 10


class RingBuffer:
    """A fixed-size FIFO of integers stored in a circular array.

    Not thread-safe on its own; the other buffers wrap it with locking.
    """

    def __init__(self, size: int) -> None:
        if size < 1:
            raise ValueError("buffer size must be at least 1")
        self._slots = [0] * size
        self._fill = 0
        self._use = 0
        self._count = 0

    @property
    def size(self) -> int:
        return len(self._slots)

    @property
    def full(self) -> bool:
        return self._count == len(self._slots)

    @property
    def empty(self) -> bool:
        return self._count == 0

    def __len__(self) -> int:
        return self._count

    def put(self, value: int) -> None:
        if self.full:
            raise IndexError("put into a full buffer")
        self._slots[self._fill] = value
        self._fill = (self._fill + 1) % len(self._slots)
        self._count += 1

    def get(self) -> int:
        if self.empty:
            raise IndexError("get from an empty buffer")
        value = self._slots[self._use]
        self._use = (self._use + 1) % len(self._slots)
        self._count -= 1
        return value


class SharedBuffer(Protocol):
    def put(self, value: int) -> None: ...

    def get(self) -> int: ...


class CondVarBuffer:
    """A blocking bounded buffer built on a mutex and condition variables.

    With ``single_cv`` producers and consumers share one condition variable,
    which can leave every thread asleep once there is more than one consumer.
    """

    def __init__(self, size: int, single_cv: bool = False) -> None:
        self._ring = RingBuffer(size)
        lock = threading.Lock()
        self._fill_cv = threading.Condition(lock)
        self._empty_cv = self._fill_cv if single_cv else threading.Condition(lock)

    def put(self, value: int) -> None:
        with self._empty_cv:
            while self._ring.full:
                self._empty_cv.wait()
            self._ring.put(value)
            self._fill_cv.notify()

    def get(self) -> int:
        with self._fill_cv:
            while self._ring.empty:
                self._fill_cv.wait()
            value = self._ring.get()
            self._empty_cv.notify()
            return value


class SemaphoreBuffer:
    """A blocking bounded buffer built on counting semaphores and a mutex."""

    def __init__(self, size: int) -> None:
        self._ring = RingBuffer(size)
        self._empty = threading.Semaphore(size)
        self._full = threading.Semaphore(0)
        self._mutex = threading.Lock()

    def put(self, value: int) -> None:
        self._empty.acquire()
        with self._mutex:
            self._ring.put(value)
        self._full.release()

    def get(self) -> int:
        self._full.acquire()
        with self._mutex:
            value = self._ring.get()
        self._empty.release()
        return value


def run_producer_consumer(buffer: SharedBuffer, loops: int, consumers: int) -> list[list[int]]:
    """Run one producer and ``consumers`` consumers over ``buffer``.

    The producer puts ``0 .. loops-1`` and then one end marker per consumer.
    Returns, for each consumer, the values it received, without the marker.
    """
    received: list[list[int]] = [[] for _ in range(consumers)]

    def producer() -> None:
        for value in range(loops):
            buffer.put(value)
        for _ in range(consumers):
            buffer.put(END_OF_PRODUCTION)

    def consumer(out: list[int]) -> None:
        while (value := buffer.get()) != END_OF_PRODUCTION:
            out.append(value)

    threads = [threading.Thread(target=producer)]
    threads.extend(threading.Thread(target=consumer, args=(out,)) for out in received)
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return received


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


_KINDS = ("--cv", "--single-cv", "--sem")


def main(argv: Sequence[str] | None = None) -> int:
    """Run the producer/consumer demo: [--cv|--single-cv|--sem] <buffersize> <loops> <consumers>."""
    args = list(sys.argv[1:] if argv is None else argv)
    kind = "--sem"
    if args and args[0] in _KINDS:
        kind = args.pop(0)
    if len(args) != 3:
        print("usage: producer_consumer <buffersize> <loops> <consumers>", file=sys.stderr)
        return 1
    size, loops, consumers = (_atoi(arg) for arg in args)
    try:
        if kind == "--sem":
            if consumers > MAX_CONSUMERS:
                raise ValueError(f"at most {MAX_CONSUMERS} consumers")
            buffer: SharedBuffer = SemaphoreBuffer(size)
        else:
            buffer = CondVarBuffer(size, single_cv=kind == "--single-cv")
    except ValueError as exc:
        print(f"producer_consumer: {exc}", file=sys.stderr)
        return 1
    received = run_producer_consumer(buffer, loops, consumers)
    if kind == "--sem":
        for index, values in enumerate(received):
            for value in [*values, END_OF_PRODUCTION]:
                print(f"{index} {value}")
    return 0