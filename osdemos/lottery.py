"""Lottery scheduling: pick a job with probability proportional to its tickets."""

from __future__ import annotations

import re
import sys
from collections import deque
from itertools import accumulate
from typing import Iterator, NamedTuple, Protocol, Sequence

_MASK32 = 0xFFFFFFFF
_STATE_WORDS = 34
_DISCARDED = 310


def _c_div(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


class GlibcRandom:
    """The additive feedback generator behind ``srandom``/``random`` in glibc."""

    def __init__(self, seed: int) -> None:
        seed &= _MASK32
        if seed == 0:
            seed = 1
        word = seed - (1 << 32) if seed >= 1 << 31 else seed
        initial = [word]
        for _ in range(30):
            hi = _c_div(word, 127773)
            lo = word - hi * 127773
            word = 16807 * lo - 2836 * hi
            if word < 0:
                word += 2147483647
            initial.append(word)
        initial.extend(initial[:3])
        self._state = deque((value & _MASK32 for value in initial), maxlen=_STATE_WORDS)
        for _ in range(_DISCARDED):
            self._advance()

    def _advance(self) -> int:
        value = (self._state[-31] + self._state[-3]) & _MASK32
        self._state.append(value)
        return value

    def random(self) -> int:
        """Return the next value in ``[0, 2**31)``."""
        return self._advance() >> 1


class RandomSource(Protocol):
    def random(self) -> int: ...


class Draw(NamedTuple):
    winner: int
    tickets: int


class Lottery:
    """A list of jobs, each holding tickets; new jobs go to the front."""

    def __init__(self, rng: RandomSource) -> None:
        self._rng = rng
        self._jobs: deque[int] = deque()

    @property
    def jobs(self) -> tuple[int, ...]:
        return tuple(self._jobs)

    @property
    def total_tickets(self) -> int:
        return sum(self._jobs)

    def insert(self, tickets: int) -> None:
        self._jobs.appendleft(tickets)

    def draw(self) -> Draw:
        """Pick a winning ticket and return it with the ticket count of its job."""
        total = self.total_tickets
        if total <= 0:
            raise ValueError("no tickets to draw from")
        winner = self._rng.random() % total
        for tickets, counter in zip(self._jobs, accumulate(self._jobs)):
            if counter > winner:
                return Draw(winner, tickets)
        raise RuntimeError("no job holds the winning ticket")

    def format_list(self) -> str:
        return "List: " + "".join(f"[{tickets}] " for tickets in self._jobs)


def run(seed: int, loops: int) -> Iterator[str]:
    """Yield the output lines of a lottery run with three jobs."""
    lottery = Lottery(GlibcRandom(seed))
    for tickets in (50, 100, 25):
        lottery.insert(tickets)
    yield lottery.format_list()
    for _ in range(loops):
        draw = lottery.draw()
        yield lottery.format_list()
        yield f"winner: {draw.winner} {draw.tickets}"
        yield ""


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def main(argv: Sequence[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 2:
        print("usage: lottery <seed> <loops>", file=sys.stderr)
        return 1
    for line in run(_atoi(args[0]), _atoi(args[1])):
        print(line)
    return 0