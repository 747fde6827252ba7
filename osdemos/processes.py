"""Process demos: fork, wait, exec, output redirection, file I/O and address spaces."""

from __future__ import annotations

import contextlib
import errno
import inspect
import itertools
import os
import stat
import sys
import time
import traceback
from typing import Callable, Iterable, NamedTuple, NoReturn

from .timing import spin


class ForkResult(NamedTuple):
    """A child that was started, the pid that ``wait`` returned and its exit code."""

    child: int
    waited: int
    status: int


class TwoChildren(NamedTuple):
    children: tuple[int, int]
    waited: tuple[int, int, int]


class Layout(NamedTuple):
    """Addresses of a code object, a heap allocation and the running frame."""

    code: int
    heap: int
    stack: int


def _say(text: str) -> None:
    print(text, flush=True)


def _fork() -> int:
    sys.stdout.flush()
    sys.stderr.flush()
    return os.fork()


def _exit_child(action: Callable[[], int | None]) -> NoReturn:
    """Run ``action`` in a forked child and leave the process with its exit code."""
    code = 1
    try:
        code = action() or 0
    except BaseException:
        traceback.print_exc()
    finally:
        for stream in (sys.stdout, sys.stderr):
            with contextlib.suppress(Exception):
                stream.flush()
        os._exit(code)


def _wait_any() -> tuple[int, int]:
    """Wait for any child; give pid -1 when there is none left."""
    try:
        pid, status = os.wait()
    except ChildProcessError:
        return -1, 0
    return pid, os.waitstatus_to_exitcode(status)


def _iterations(times: int | None) -> Iterable[int]:
    return itertools.count() if times is None else range(times)


def _greet_and_sleep() -> None:
    _say(f"hello, I am child (pid:{os.getpid()})")
    time.sleep(1)


def fork_hello() -> int:
    """Fork a child that greets; return its pid to the parent without waiting."""
    _say(f"hello world (pid:{os.getpid()})")
    rc = _fork()
    if rc == 0:
        _exit_child(lambda: _say(f"hello, I am child (pid:{os.getpid()})"))
    _say(f"hello, I am parent of {rc} (pid:{os.getpid()})")
    return rc


def fork_wait() -> ForkResult:
    """Fork a child that greets and sleeps, and wait for it."""
    _say(f"hello world (pid:{os.getpid()})")
    rc = _fork()
    if rc == 0:
        _exit_child(_greet_and_sleep)
    wc, status = _wait_any()
    _say(f"hello, I am parent of {rc} (wc:{wc}) (pid:{os.getpid()})")
    return ForkResult(rc, wc, status)


def fork_twice() -> TwoChildren:
    """Fork two children and wait three times; the last wait finds no child (-1)."""
    _say(f"hello world (pid:{os.getpid()})")
    rc = _fork()
    if rc == 0:
        _exit_child(_greet_and_sleep)
    rc2 = _fork()
    if rc2 == 0:
        _exit_child(_greet_and_sleep)
    waited = []
    for _ in range(3):
        wc, _status = _wait_any()
        _say(f"hello, I am parent of {rc} (wc:{wc}) (pid:{os.getpid()})")
        waited.append(wc)
    return TwoChildren((rc, rc2), (waited[0], waited[1], waited[2]))


def fork_exec(path: str | os.PathLike[str]) -> ForkResult:
    """Fork a child that runs ``wc`` on ``path``, and wait for it."""
    _say(f"hello world (pid:{os.getpid()})")
    rc = _fork()
    if rc == 0:

        def run() -> int:
            _say(f"hello, I am child (pid:{os.getpid()})")
            try:
                os.execvp("wc", ["wc", os.fspath(path)])
            except OSError:
                print("this shouldn't print out", end="", flush=True)
            return 127

        _exit_child(run)
    wc, status = _wait_any()
    _say(f"hello, I am parent of {rc} (wc:{wc}) (pid:{os.getpid()})")
    return ForkResult(rc, wc, status)


def fork_redirect(path: str | os.PathLike[str], output: str | os.PathLike[str]) -> ForkResult:
    """Fork a child that runs ``wc`` on ``path`` with its output sent to ``output``."""
    rc = _fork()
    if rc == 0:

        def run() -> None:
            fd = os.open(output, os.O_CREAT | os.O_WRONLY | os.O_TRUNC, stat.S_IRWXU)
            if fd != sys.__stdout__.fileno() and fd != 1:
                os.dup2(fd, 1)
                os.close(fd)
            os.execvp("wc", ["wc", os.fspath(path)])

        _exit_child(run)
    wc, status = _wait_any()
    if wc < 0:
        raise ChildProcessError("no child to wait for")
    return ForkResult(rc, wc, status)


def write_hello(path: str | os.PathLike[str] = "/tmp/file") -> int:
    """Write a greeting to ``path``, force it to disk, and return the bytes written."""
    data = b"hello world\n"
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, stat.S_IRUSR | stat.S_IWUSR)
    try:
        written = os.write(fd, data)
        if written != len(data):
            raise OSError(errno.EIO, "short write", os.fspath(path))
        os.fsync(fd)
    finally:
        os.close(fd)
    return written


def echo_forever(text: str, times: int | None = None) -> int:
    """Print ``text`` once a second, ``times`` times or forever; return the count."""
    printed = 0
    for _ in _iterations(times):
        print(text, flush=True)
        spin(1)
        printed += 1
    return printed


def count_forever(times: int | None = None) -> int:
    """Count up once a second in a heap cell, reporting each value; return the last."""
    cell = [0]
    pid = os.getpid()
    _say(f"({pid}) addr pointed to by p: {id(cell):#x}")
    for _ in _iterations(times):
        spin(1)
        cell[0] += 1
        _say(f"({pid}) value of p: {cell[0]}")
    return cell[0]


def memory_layout() -> Layout:
    """Report where code, a large heap allocation and the current frame live."""
    block = bytes(100_000_000)
    frame = inspect.currentframe()
    layout = Layout(id(memory_layout.__code__), id(block), id(frame))
    del frame
    print(f"location of code : {layout.code:#x}")
    print(f"location of heap : {layout.heap:#x}")
    print(f"location of stack: {layout.stack:#x}")
    return layout