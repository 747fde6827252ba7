"""The dining philosophers, with and without the fork-ordering fix for deadlock."""

from __future__ import annotations

import re
import sys
import threading
from typing import Callable, Sequence

PHILOSOPHERS = 5

Trace = Callable[[str], None]


def left(p: int) -> int:
    """The fork on philosopher ``p``'s left."""
    return p % PHILOSOPHERS


def right(p: int) -> int:
    """The fork on philosopher ``p``'s right."""
    return (p + 1) % PHILOSOPHERS


class Table:
    """Five forks shared by five philosophers.

    With ``avoid_deadlock`` the last philosopher picks up the right fork
    first, breaking the cycle of waits. ``trace``, when given, receives one
    line per step, indented by the philosopher's seat.
    """

    def __init__(self, avoid_deadlock: bool = False, trace: Trace | None = None) -> None:
        self.avoid_deadlock = avoid_deadlock
        self.forks = tuple(threading.Semaphore(1) for _ in range(PHILOSOPHERS))
        self._trace = trace
        self._print_lock = threading.Lock()

    def _say(self, p: int, message: str) -> None:
        if self._trace is not None:
            with self._print_lock:
                self._trace(" " * (p * 10) + message)

    @staticmethod
    def _check_seat(p: int) -> None:
        if not 0 <= p < PHILOSOPHERS:
            raise ValueError(f"no philosopher in seat {p}")

    def get_forks(self, p: int) -> None:
        self._check_seat(p)
        if self.avoid_deadlock:
            if p == PHILOSOPHERS - 1:
                order = (right(p), left(p))
                label = f"{p} try"
            else:
                order = (left(p), right(p))
                label = "try"
        else:
            order = (left(p), right(p))
            label = f"{p}: try"
        for fork in order:
            self._say(p, f"{label} {fork}")
            self.forks[fork].acquire()

    def put_forks(self, p: int) -> None:
        self._check_seat(p)
        self.forks[left(p)].release()
        self.forks[right(p)].release()

    def philosopher(self, p: int, num_loops: int) -> int:
        """Think and eat ``num_loops`` times; return the number of meals."""
        self._check_seat(p)
        self._say(p, f"{p}: start")
        meals = 0
        for _ in range(num_loops):
            self._say(p, f"{p}: think")
            self.get_forks(p)
            self._say(p, f"{p}: eat")
            meals += 1
            self.put_forks(p)
            self._say(p, f"{p}: done")
        return meals


def dine(num_loops: int, avoid_deadlock: bool = False, trace: Trace | None = None) -> list[int]:
    """Seat five philosophers for ``num_loops`` meals each; return each one's meal count.

    Without ``avoid_deadlock`` this may never return.
    """
    table = Table(avoid_deadlock, trace)
    meals = [0] * PHILOSOPHERS

    def seat(p: int) -> None:
        meals[p] = table.philosopher(p, num_loops)

    threads = [threading.Thread(target=seat, args=(p,)) for p in range(PHILOSOPHERS)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return meals


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def _print_line(line: str) -> None:
    print(line, flush=True)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the table: [--avoid-deadlock] [--trace] <num_loops>."""
    args = list(sys.argv[1:] if argv is None else argv)
    avoid_deadlock = "--avoid-deadlock" in args
    trace = "--trace" in args
    args = [arg for arg in args if arg not in ("--avoid-deadlock", "--trace")]
    if len(args) != 1:
        print("usage: dining_philosophers <num_loops>", file=sys.stderr)
        return 1
    print("dining: started", flush=True)
    dine(_atoi(args[0]), avoid_deadlock, _print_line if trace else None)
    print("dining: finished", flush=True)
    return 0