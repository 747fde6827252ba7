import threading

import pytest

from osdemos.bounded_buffer import (
    END_OF_PRODUCTION,
    CondVarBuffer,
    RingBuffer,
    SemaphoreBuffer,
    main,
    run_producer_consumer,
)


def _check_run(received, loops):
    merged = sorted(value for values in received for value in values)
    assert merged == list(range(loops))
    for values in received:
        assert values == sorted(values)


def test_ring_buffer_is_fifo_with_wraparound():
    ring = RingBuffer(3)
    for value in (1, 2, 3):
        ring.put(value)
    assert ring.get() == 1
    ring.put(4)
    assert [ring.get() for _ in range(3)] == [2, 3, 4]
    assert len(ring) == 0


def test_ring_buffer_full_and_empty_raise():
    ring = RingBuffer(1)
    with pytest.raises(IndexError):
        ring.get()
    ring.put(7)
    assert ring.full
    with pytest.raises(IndexError):
        ring.put(8)


def test_ring_buffer_rejects_zero_size():
    with pytest.raises(ValueError):
        RingBuffer(0)


def test_end_marker_passes_through_buffer():
    buffer = CondVarBuffer(1)
    buffer.put(END_OF_PRODUCTION)
    assert buffer.get() == -1


@pytest.mark.parametrize("size,loops,consumers", [(1, 50, 1), (3, 200, 3), (10, 100, 4)])
def test_condvar_buffer_delivers_every_value(size, loops, consumers):
    received = run_producer_consumer(CondVarBuffer(size), loops, consumers)
    assert len(received) == consumers
    _check_run(received, loops)


def test_single_cv_buffer_with_one_consumer():
    received = run_producer_consumer(CondVarBuffer(2, single_cv=True), 100, 1)
    assert received == [list(range(100))]


@pytest.mark.parametrize("size,loops,consumers", [(1, 50, 1), (4, 300, 5)])
def test_semaphore_buffer_delivers_every_value(size, loops, consumers):
    received = run_producer_consumer(SemaphoreBuffer(size), loops, consumers)
    _check_run(received, loops)


@pytest.mark.parametrize("factory", [lambda: CondVarBuffer(1), lambda: SemaphoreBuffer(1)])
def test_get_blocks_until_put(factory):
    buffer = factory()
    got = []
    reader = threading.Thread(target=lambda: got.append(buffer.get()))
    reader.start()
    reader.join(timeout=0.1)
    assert reader.is_alive()
    buffer.put(42)
    reader.join(timeout=5)
    assert got == [42]


def test_main_usage_error(capsys):
    assert main(["1", "2"]) == 1
    assert "usage" in capsys.readouterr().err


def test_main_rejects_too_many_semaphore_consumers(capsys):
    assert main(["--sem", "2", "5", "11"]) == 1
    assert capsys.readouterr().err


def test_main_semaphore_prints_each_value(capsys):
    assert main(["2", "10", "2"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 12
    values = sorted(int(line.split()[1]) for line in lines)
    assert values == [-1, -1, *range(10)]


def test_main_condvar_is_quiet(capsys):
    assert main(["--cv", "3", "20", "2"]) == 0
    assert capsys.readouterr().out == ""