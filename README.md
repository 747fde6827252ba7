# osdemos

Small, runnable demonstrations of classic operating-system ideas:
process creation, threads and their bugs, locks, condition variables,
semaphores, bounded buffers, dining philosophers, lottery scheduling
and a tiny UDP request/reply exchange.

Several demos are deliberately broken variants that show what goes
wrong: lost updates, check-then-use races, ordering bugs, deadlock and
lost wake-ups.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

The process demos use `fork` and therefore need a POSIX system.

## Commands

### Lottery scheduling

```
osdemos-lottery <seed> <loops>
```

Three jobs holding 50, 100 and 25 tickets; on each loop a winning
ticket is drawn from a generator seeded with `<seed>`, and the job list
and `winner: <ticket> <tickets of winning job>` are printed.

### Producer/consumer

```
osdemos-pc [--cv|--single-cv|--sem] <buffersize> <loops> <consumers>
```

One producer puts `0 .. loops-1` into a bounded buffer, followed by one
end marker (`-1`) per consumer. `--cv` uses two condition variables,
`--single-cv` uses one shared condition variable (which can leave every
thread asleep with more than one consumer), and `--sem` (the default)
uses semaphores, allows at most 10 consumers and prints
`<consumer> <value>` for every value received, end marker included.

### Dining philosophers

```
osdemos-dining [--avoid-deadlock] [--trace] <num_loops>
```

Five philosophers each eat `<num_loops>` times. Without
`--avoid-deadlock` every philosopher takes the left fork first and the
run can hang; with it the last philosopher takes the right fork first.
`--trace` prints each step, indented by seat.

### Thread demonstrations

```
osdemos-threads <demo> [args]
```

Demos:

- `threads <loops>` - two threads increment a shared counter without a
  lock; prints initial and final values.
- `t0` - two threads print `A` and `B`.
- `t1 <loopcount>` - the unlocked counter race, with the expected total.
- `binary` - two threads each add 10,000,000 under a binary semaphore.
- `create`, `simple-args`, `return-args` - passing arguments to threads
  and getting values back.
- `atomicity [--fixed]` - check-then-use while another thread clears
  the shared state; unfixed, it fails with an error.
- `ordering [--fixed]` - a thread reads its own handle before it is
  stored; unfixed, it fails with an error.
- `deadlock [timeout]` - two threads take two locks in opposite order;
  a thread that waits longer than `timeout` seconds (default 1) for its
  second lock gives up.
- `join <kind>` - a parent waits for a child; kinds are `cv`,
  `modular`, `no_lock`, `no_state_var`, `spin`, `semaphore` and
  `zemaphore`. `no_lock` and `no_state_var` lose the wake-up and never
  return.
- `zemaphore` - the same as `join zemaphore`.
- `throttle <num_threads> <sem_value>` - at most `<sem_value>` children
  work at once.

### UDP client and server

```
osdemos-udp-server
osdemos-udp-client
```

The server binds UDP port 10000 and answers every non-empty datagram
with "goodbye world". The client binds port 20000, sends "hello world"
to `localhost:10000` and prints the reply. Every message is padded with
NUL bytes to 1000 bytes. Neither command takes options.

## Library use

The synchronisation primitives live in `osdemos.sync`:

```python
from osdemos.sync import AtomicCell, RWLock, Synchronizer, Zemaphore

cell = AtomicCell(0)
cell.compare_and_swap(0, 100)   # True, cell.value is now 100
cell.compare_and_swap(0, 200)   # False, cell.value is still 100

sem = Zemaphore(1)              # counting semaphore from a mutex and a condition
with sem:
    ...

lock = RWLock()
with lock.read_locked():
    ...
with lock.write_locked():
    ...

sync = Synchronizer()           # one-shot signal that resets after each wait
```

Lottery scheduling can be driven directly:

```python
from osdemos.lottery import GlibcRandom, Lottery

lottery = Lottery(GlibcRandom(1))
lottery.insert(50)
lottery.insert(100)
lottery.insert(25)
print(lottery.format_list())    # List: [25] [100] [50]
print(lottery.draw())           # Draw(winner=..., tickets=...)
```

`GlibcRandom` reproduces the sequence of the C library's
`srandom`/`random` additive feedback generator.

Other modules:

- `osdemos.timing` - `get_time()` and the busy-waiting `spin(howlong)`.
- `osdemos.bounded_buffer` - `RingBuffer`, `CondVarBuffer`,
  `SemaphoreBuffer` and `run_producer_consumer`, which returns the
  values each consumer received.
- `osdemos.philosophers` - `Table`, `left`, `right` and `dine`, which
  returns each philosopher's meal count.
- `osdemos.processes` - `fork_hello`, `fork_wait`, `fork_twice`,
  `fork_exec`, `fork_redirect`, `write_hello`, `echo_forever`,
  `count_forever` and `memory_layout`.
- `osdemos.udp` - `open_socket`, `resolve`, `send`, `receive`,
  `close`, `run_client` and `serve`.
- `osdemos.thread_demos` - the functions behind `osdemos-threads`, such
  as `count_in_threads`, `deadlock_demo`, `join_demo` and `throttle`.

## What it does not do

The process demos in `osdemos.processes` have no command of their own;
call them from Python. `fork_exec` and `fork_redirect` run the system's
`wc` program, which must be on the `PATH`. `write_hello` writes to
`/tmp/file` unless given another path. The UDP commands use fixed ports
and a fixed server host, and the server runs until it is stopped.