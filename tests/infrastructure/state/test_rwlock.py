from __future__ import annotations

import threading
import time

import pytest

from accesstokens.infrastructure.state.rwlock import ReadWriteLock

_WAIT = 2.0
_SHORT = 0.1


def test_readers_share_the_lock() -> None:
    lock = ReadWriteLock()
    barrier = threading.Barrier(3, timeout=_WAIT)
    errors: list[BaseException] = []

    def reader() -> None:
        try:
            with lock.read():
                barrier.wait()
        except BaseException as exc:  # pragma: no cover - surfaced below
            errors.append(exc)

    threads = [threading.Thread(target=reader) for _ in range(3)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(_WAIT)

    assert errors == []


def test_writer_waits_for_active_reader() -> None:
    lock = ReadWriteLock()
    reader_holding = threading.Event()
    release_reader = threading.Event()
    writer_done = threading.Event()

    def reader() -> None:
        with lock.read():
            reader_holding.set()
            release_reader.wait(_WAIT)

    def writer() -> None:
        with lock.write():
            writer_done.set()

    reader_thread = threading.Thread(target=reader)
    reader_thread.start()
    assert reader_holding.wait(_WAIT)

    writer_thread = threading.Thread(target=writer)
    writer_thread.start()
    assert not writer_done.wait(_SHORT)

    release_reader.set()
    assert writer_done.wait(_WAIT)
    reader_thread.join(_WAIT)
    writer_thread.join(_WAIT)


def test_waiting_writer_blocks_new_readers() -> None:
    lock = ReadWriteLock()
    first_reader_holding = threading.Event()
    release_first_reader = threading.Event()
    order: list[str] = []

    def first_reader() -> None:
        with lock.read():
            first_reader_holding.set()
            release_first_reader.wait(_WAIT)

    def writer() -> None:
        with lock.write():
            order.append("writer")

    def late_reader() -> None:
        with lock.read():
            order.append("late_reader")

    threads = [threading.Thread(target=first_reader)]
    threads[0].start()
    assert first_reader_holding.wait(_WAIT)

    threads.append(threading.Thread(target=writer))
    threads[1].start()
    # let the writer register as waiting before the late reader arrives
    deadline = time.monotonic() + _WAIT
    while not lock._writers_waiting and time.monotonic() < deadline:
        time.sleep(0.01)
    assert lock._writers_waiting == 1

    threads.append(threading.Thread(target=late_reader))
    threads[2].start()
    time.sleep(_SHORT)
    assert order == []

    release_first_reader.set()
    for thread in threads:
        thread.join(_WAIT)

    assert order == ["writer", "late_reader"]


def test_write_lock_is_released_after_exception() -> None:
    lock = ReadWriteLock()

    try:
        with lock.write():
            raise RuntimeError("boom")
    except RuntimeError:
        pass

    acquired = threading.Event()

    def reader() -> None:
        with lock.read():
            acquired.set()

    thread = threading.Thread(target=reader)
    thread.start()
    assert acquired.wait(_WAIT)
    thread.join(_WAIT)


class _Interrupted(Exception):
    pass


class _InterruptingCondition:
    """Condition wrapper whose first ``wait`` raises, as a signal would."""

    def __init__(self, inner: threading.Condition) -> None:
        self._inner = inner
        self.notified = 0

    def __enter__(self) -> bool:
        return self._inner.__enter__()

    def __exit__(self, *exc_info: object) -> None:
        self._inner.__exit__(*exc_info)

    def wait(self, timeout: float | None = None) -> bool:
        raise _Interrupted

    def notify_all(self) -> None:
        self.notified += 1
        self._inner.notify_all()


def test_interrupted_writer_wakes_queued_readers() -> None:
    lock = ReadWriteLock()
    cond = _InterruptingCondition(lock._cond)
    lock._cond = cond  # type: ignore[assignment]
    lock._readers = 1

    with pytest.raises(_Interrupted), lock.write():
        pass

    assert lock._writers_waiting == 0
    assert not lock._writer_active
    assert cond.notified == 1
