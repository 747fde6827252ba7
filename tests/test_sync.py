import threading
import time

import pytest

from osdemos.sync import AtomicCell, RWLock, Synchronizer, Zemaphore


def test_zemaphore_wait_decrements():
    sem = Zemaphore(2)
    sem.wait()
    assert sem.value == 1


def test_zemaphore_post_increments():
    sem = Zemaphore(0)
    sem.post()
    sem.post()
    assert sem.value == 2


def test_zemaphore_join_pattern():
    sem = Zemaphore(0)
    order = []

    def child():
        time.sleep(0.05)
        order.append("child")
        sem.post()

    thread = threading.Thread(target=child)
    thread.start()
    sem.wait()
    order.append("parent")
    thread.join()
    assert order == ["child", "parent"]
    assert sem.value == 0


def test_zemaphore_blocks_at_zero():
    sem = Zemaphore(0)
    acquired = threading.Event()

    def waiter():
        sem.wait()
        acquired.set()

    thread = threading.Thread(target=waiter)
    thread.start()
    assert not acquired.wait(0.1)
    assert sem.value == 0
    sem.post()
    assert acquired.wait(2)
    thread.join()
    assert sem.value == 0


def test_zemaphore_as_mutex_keeps_count_exact():
    sem = Zemaphore(1)
    counter = [0]

    def work():
        for _ in range(2000):
            with sem:
                counter[0] += 1

    threads = [threading.Thread(target=work) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert counter[0] == 8000
    assert sem.value == 1


def test_synchronizer_wait_resets():
    sync = Synchronizer()

    def child():
        time.sleep(0.05)
        sync.signal()

    thread = threading.Thread(target=child)
    thread.start()
    sync.wait()
    thread.join()
    assert sync.done is False


def test_synchronizer_signal_before_wait():
    sync = Synchronizer()
    sync.signal()
    assert sync.done is True
    sync.wait()
    assert sync.done is False


def test_rwlock_allows_many_readers():
    lock = RWLock()
    lock.acquire_readlock()
    lock.acquire_readlock()
    assert lock.readers == 2
    lock.release_readlock()
    lock.release_readlock()
    assert lock.readers == 0


def test_rwlock_writer_waits_for_readers():
    lock = RWLock()
    written = threading.Event()

    def writer():
        with lock.write_locked():
            written.set()

    with lock.read_locked():
        assert lock.readers == 1
        thread = threading.Thread(target=writer)
        thread.start()
        assert not written.wait(0.1)
    assert written.wait(2)
    thread.join()
    assert lock.readers == 0


def test_rwlock_reader_waits_for_writer():
    lock = RWLock()
    read = threading.Event()

    def reader():
        with lock.read_locked():
            read.set()

    lock.acquire_writelock()
    thread = threading.Thread(target=reader)
    thread.start()
    assert not read.wait(0.1)
    lock.release_writelock()
    assert read.wait(2)
    thread.join()
    assert lock.readers == 0


def test_rwlock_release_without_hold_raises():
    lock = RWLock()
    with pytest.raises(RuntimeError):
        lock.release_readlock()


def test_rwlock_counter_with_readers_and_writer():
    lock = RWLock()
    counter = [0]
    seen = []
    readers_inside = []

    def writer():
        for _ in range(500):
            with lock.write_locked():
                counter[0] += 1

    def reader():
        for _ in range(500):
            with lock.read_locked():
                readers_inside.append(lock.readers)
                seen.append(counter[0])

    threads = [threading.Thread(target=writer), threading.Thread(target=reader)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert counter[0] == 500
    assert seen == sorted(seen)
    assert all(0 <= v <= 500 for v in seen)
    assert readers_inside == [1] * 500
    assert lock.readers == 0


def test_compare_and_swap_success_then_failure():
    cell = AtomicCell(0)
    assert cell.compare_and_swap(0, 100) is True
    assert cell.value == 100
    assert cell.compare_and_swap(0, 200) is False
    assert cell.value == 100


def test_compare_and_swap_concurrent_increments():
    cell = AtomicCell(0)

    def work():
        for _ in range(1000):
            while True:
                current = cell.value
                if cell.compare_and_swap(current, current + 1):
                    break

    threads = [threading.Thread(target=work) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert cell.value == 4000