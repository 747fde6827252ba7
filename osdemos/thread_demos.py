"""Thread demos: creation, arguments, races, ordering bugs, deadlock, joins and throttling."""

from __future__ import annotations

import contextlib
import re
import sys
import threading
import time
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Any, Callable, ContextManager, Iterable, NamedTuple, Sequence

from .sync import Synchronizer, Zemaphore

PR_STATE_INIT = 0

_print_lock = threading.Lock()


def _say(text: str) -> None:
    with _print_lock:
        print(text, flush=True)


class _Thread(threading.Thread):
    """A thread that keeps its target's return value or exception."""

    def __init__(self, target: Callable[..., Any], *args: Any, daemon: bool | None = None) -> None:
        super().__init__(daemon=daemon)
        self._work = partial(target, *args)
        self._result: Any = None
        self._error: BaseException | None = None

    def run(self) -> None:
        try:
            self._result = self._work()
        except BaseException as exc:
            self._error = exc

    def outcome(self) -> Any:
        """Wait for the thread, then return its result or raise its exception."""
        self.join()
        if self._error is not None:
            raise self._error
        return self._result


def _spawn(target: Callable[..., Any], *args: Any, daemon: bool | None = None) -> _Thread:
    thread = _Thread(target, *args, daemon=daemon)
    thread.start()
    return thread


class _Counter:
    def __init__(self) -> None:
        self.value = 0


def count_in_threads(loops: int, threads: int = 2, locked: bool = False) -> int:
    """Have ``threads`` threads each add one to a shared counter ``loops`` times.

    Without ``locked`` the increments race and updates may be lost; with it,
    each increment is guarded by a binary semaphore. Returns the final count.
    """
    counter = _Counter()
    guard: ContextManager[Any] = threading.Semaphore(1) if locked else contextlib.nullcontext()

    def worker() -> None:
        for _ in range(loops):
            with guard:
                counter.value = counter.value + 1

    workers = [_spawn(worker) for _ in range(threads)]
    for thread in workers:
        thread.outcome()
    return counter.value


@dataclass(frozen=True)
class MyArgs:
    a: int
    b: int


@dataclass(frozen=True)
class MyRet:
    x: int
    y: int


def run_with_args(a: int, b: int) -> tuple[int, int]:
    """Pass a structure to a thread that prints it; return what the thread saw."""

    def mythread(args: MyArgs) -> tuple[int, int]:
        _say(f"{args.a} {args.b}")
        return args.a, args.b

    seen = _spawn(mythread, MyArgs(a, b)).outcome()
    _say("done")
    return seen


def increment_in_thread(value: int) -> int:
    """Hand a plain value to a thread and get back that value plus one."""

    def mythread(arg: int) -> int:
        _say(str(arg))
        return arg + 1

    rvalue = _spawn(mythread, value).outcome()
    _say(f"returned {rvalue}")
    return rvalue


def return_pair(a: int, b: int) -> MyRet:
    """Pass a structure to a thread and receive a freshly built one back."""

    def mythread(args: MyArgs) -> MyRet:
        _say(f"args {args.a} {args.b}")
        return MyRet(1, 2)

    rvals = _spawn(mythread, MyArgs(a, b)).outcome()
    _say(f"returned {rvals.x} {rvals.y}")
    return rvals


@dataclass
class _Proc:
    pid: int


@dataclass
class _ThreadInfo:
    proc_info: _Proc | None


def atomicity_demo(fixed: bool = False, delay: float = 1.0) -> int | None:
    """Check-then-use on shared state while another thread clears it.

    The checking thread waits ``2 * delay`` between its check and its use;
    the clearing thread acts after ``delay``. Unfixed, the use finds the
    state gone and raises AttributeError; fixed, a lock makes check and use
    atomic. Returns the pid read, or None if the check found nothing.
    """
    info = _ThreadInfo(_Proc(100))
    lock: ContextManager[Any] = threading.Lock() if fixed else contextlib.nullcontext()

    def thread1() -> int | None:
        _say("t1: before check")
        with lock:
            if info.proc_info:
                _say("t1: after check")
                time.sleep(2 * delay)
                _say("t1: use!")
                pid = info.proc_info.pid
                _say(str(pid))
                return pid
        return None

    def thread2() -> None:
        _say("                 t2: begin")
        time.sleep(delay)
        with lock:
            _say("                 t2: set to NULL")
            info.proc_info = None

    _say("main: begin")
    first = _spawn(thread1)
    second = _spawn(thread2)
    first.join()
    second.join()
    pid = first.outcome()
    second.outcome()
    _say("main: end")
    return pid


@dataclass
class _PRThread:
    thread: _Thread
    state: int = PR_STATE_INIT


def _pr_create_thread(target: Callable[[], Any]) -> _PRThread:
    thread = _Thread(target)
    created = _PRThread(thread)
    thread.start()
    time.sleep(1)
    return created


def ordering_demo(fixed: bool = False) -> int:
    """A thread that reads the handle of itself before its creator has stored it.

    Unfixed, the thread finds no handle and raises AttributeError; fixed,
    it waits on a condition variable until the handle is set. Returns the
    state the thread read.
    """
    m_thread: Any = None
    initialised = False
    cond = threading.Condition(threading.Lock())

    def m_main() -> int:
        _say("mMain: begin")
        if fixed:
            with cond:
                while not initialised:
                    cond.wait()
        state = m_thread.state
        _say(f"mMain: state is {state}")
        return state

    _say("ordering: begin")
    m_thread = _pr_create_thread(m_main)
    if fixed:
        with cond:
            initialised = True
            cond.notify()
    state = m_thread.thread.outcome()
    _say("ordering: end")
    return state


class DeadlockOutcome(NamedTuple):
    """Which threads got both locks and which gave up waiting for the second."""

    completed: tuple[str, ...]
    gave_up: tuple[str, ...]

    @property
    def deadlocked(self) -> bool:
        return bool(self.gave_up)


def deadlock_demo(timeout: float = 1.0) -> DeadlockOutcome:
    """Two threads take two locks in opposite orders.

    A thread that waits longer than ``timeout`` for its second lock reports
    the deadlock, lets go of its first lock and gives up.
    """
    if timeout <= 0:
        raise ValueError("timeout must be positive")
    locks = {"L1": threading.Lock(), "L2": threading.Lock()}

    def worker(name: str, indent: str, first: str, second: str) -> bool:
        _say(f"{indent}{name}: begin")
        _say(f"{indent}{name}: try to acquire {first}...")
        locks[first].acquire()
        _say(f"{indent}{name}: {first} acquired")
        _say(f"{indent}{name}: try to acquire {second}...")
        if not locks[second].acquire(timeout=timeout):
            _say(f"{indent}{name}: deadlock waiting for {second}, giving up")
            locks[first].release()
            return False
        _say(f"{indent}{name}: {second} acquired")
        locks["L1"].release()
        locks["L2"].release()
        return True

    _say("main: begin")
    workers = {
        "t1": _spawn(worker, "t1", "", "L1", "L2"),
        "t2": _spawn(worker, "t2", " " * 27, "L2", "L1"),
    }
    results = {name: thread.outcome() for name, thread in workers.items()}
    _say("main: end")
    return DeadlockOutcome(
        tuple(name for name, ok in results.items() if ok),
        tuple(name for name, ok in results.items() if not ok),
    )


class JoinKind(Enum):
    """Ways for a parent to wait for a child thread."""

    CV = "cv"
    MODULAR = "modular"
    NO_LOCK = "no_lock"
    NO_STATE_VAR = "no_state_var"
    SPIN = "spin"
    SEMAPHORE = "semaphore"
    ZEMAPHORE = "zemaphore"


class _Log:
    def __init__(self) -> None:
        self.lines: list[str] = []
        self._lock = threading.Lock()

    def __call__(self, text: str) -> None:
        with self._lock:
            self.lines.append(text)
        _say(text)


def _signal_unlocked(cond: threading.Condition) -> None:
    """Signal without holding the mutex: wakes a waiter if one is asleep, else is lost."""
    if cond.acquire(blocking=False):
        try:
            cond.notify()
        finally:
            cond.release()


def join_demo(kind: JoinKind | str = JoinKind.CV) -> list[str]:
    """Have a parent wait for a child in the way ``kind`` names; return the lines printed.

    ``no_lock`` and ``no_state_var`` lose the child's wake-up and never return.
    """
    kind = JoinKind(kind)
    log = _Log()
    cond = threading.Condition(threading.Lock())
    done = False

    def child_cv() -> None:
        nonlocal done
        log("child")
        time.sleep(1)
        with cond:
            done = True
            cond.notify()

    def child_no_lock() -> None:
        nonlocal done
        log("child: begin")
        time.sleep(1)
        done = True
        log("child: signal")
        _signal_unlocked(cond)

    def child_no_state_var() -> None:
        log("child: begin")
        with cond:
            log("child: signal")
            cond.notify()

    def child_spin() -> None:
        nonlocal done
        log("child")
        time.sleep(5)
        done = True

    log("parent: begin")
    if kind is JoinKind.CV:
        _spawn(child_cv, daemon=True)
        with cond:
            while not done:
                cond.wait()
    elif kind is JoinKind.MODULAR:
        sync = Synchronizer()

        def child_modular() -> None:
            log("child")
            time.sleep(1)
            sync.signal()

        _spawn(child_modular, daemon=True)
        sync.wait()
    elif kind is JoinKind.NO_LOCK:
        _spawn(child_no_lock, daemon=True)
        with cond:
            log("parent: check condition")
            while not done:
                time.sleep(2)
                log("parent: wait to be signalled...")
                cond.wait()
    elif kind is JoinKind.NO_STATE_VAR:
        _spawn(child_no_state_var, daemon=True)
        time.sleep(2)
        log("parent: wait to be signalled...")
        with cond:
            cond.wait()
    elif kind is JoinKind.SPIN:
        _spawn(child_spin, daemon=True)
        while not done:
            pass
    elif kind is JoinKind.SEMAPHORE:
        sem = threading.Semaphore(0)

        def child_sem() -> None:
            time.sleep(2)
            log("child")
            sem.release()

        _spawn(child_sem, daemon=True)
        sem.acquire()
    else:
        zem = Zemaphore(0)

        def child_zem() -> None:
            time.sleep(4)
            log("child")
            zem.post()

        _spawn(child_zem, daemon=True)
        zem.wait()
    log("parent: end")
    return log.lines


class ThrottleResult(NamedTuple):
    """The order in which children ran and the most that ran at once."""

    order: tuple[int, ...]
    peak: int


def throttle(num_threads: int, sem_value: int, pause: float = 1.0) -> ThrottleResult:
    """Start ``num_threads`` children but let at most ``sem_value`` work at once."""
    sem = threading.Semaphore(sem_value)
    lock = threading.Lock()
    order: list[int] = []
    active = 0
    peak = 0

    def child(index: int) -> None:
        nonlocal active, peak
        with sem:
            with lock:
                active += 1
                peak = max(peak, active)
                order.append(index)
            _say(f"child {index}")
            time.sleep(pause)
            with lock:
                active -= 1

    _say("parent: begin")
    children = [_spawn(child, index) for index in range(num_threads)]
    for thread in children:
        thread.outcome()
    _say("parent: end")
    return ThrottleResult(tuple(order), peak)


def print_letters(letters: Iterable[str] = ("A", "B")) -> list[str]:
    """Start one thread per letter, each printing its letter; return the print order."""
    order: list[str] = []
    lock = threading.Lock()

    def mythread(letter: str) -> None:
        with lock:
            order.append(letter)
            _say(letter)

    _say("main: begin")
    workers = [_spawn(mythread, letter) for letter in letters]
    for thread in workers:
        thread.outcome()
    _say("main: end")
    return order


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def _usage(text: str) -> int:
    print(f"usage: {text}", file=sys.stderr)
    return 1


_DEMOS = (
    "threads <loops>",
    "t0",
    "t1 <loopcount>",
    "binary",
    "create",
    "simple-args",
    "return-args",
    "atomicity [--fixed]",
    "ordering [--fixed]",
    "deadlock [timeout]",
    "join <kind>",
    "throttle <num_threads> <sem_value>",
)


def main(argv: Sequence[str] | None = None) -> int:
    """Run one thread demo chosen by name."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        return _usage("thread_demos <demo> [args]; demos: " + ", ".join(_DEMOS))
    demo, rest = args[0], args[1:]
    try:
        if demo == "threads":
            if len(rest) != 1:
                return _usage("threads <loops>")
            print("Initial value : 0")
            print(f"Final value   : {count_in_threads(_atoi(rest[0]))}")
        elif demo == "t0":
            if rest:
                return _usage("main")
            print_letters(("A", "B"))
        elif demo == "t1":
            if len(rest) != 1:
                return _usage("main-first <loopcount>")
            loops = _atoi(rest[0])
            counter = _Counter()
            print(f"main: begin [counter = {counter.value}] [{id(counter):x}]")
            total = count_in_threads(loops)
            print(f"main: done\n [counter: {total}]\n [should: {loops * 2}]")
        elif demo == "binary":
            result = count_in_threads(10_000_000, 2, locked=True)
            print(f"result: {result} (should be 20000000)")
        elif demo == "create":
            run_with_args(10, 20)
        elif demo == "simple-args":
            increment_in_thread(100)
        elif demo == "return-args":
            return_pair(10, 20)
        elif demo == "atomicity":
            atomicity_demo(fixed="--fixed" in rest)
        elif demo == "ordering":
            ordering_demo(fixed="--fixed" in rest)
        elif demo == "deadlock":
            deadlock_demo(float(rest[0]) if rest else 1.0)
        elif demo == "join":
            if len(rest) != 1:
                return _usage("join <" + "|".join(kind.value for kind in JoinKind) + ">")
            join_demo(rest[0])
        elif demo == "zemaphore":
            join_demo(JoinKind.ZEMAPHORE)
        elif demo == "throttle":
            if len(rest) != 2:
                return _usage("throttle <num_threads> <sem_value>")
            throttle(_atoi(rest[0]), _atoi(rest[1]))
        else:
            return _usage("thread_demos <demo> [args]; demos: " + ", ".join(_DEMOS))
    except (AttributeError, ValueError) as exc:
        print(f"{demo}: {exc}", file=sys.stderr)
        return 1
    return 0