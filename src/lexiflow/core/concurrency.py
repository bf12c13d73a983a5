"""
Reader-writer lock used to guard shared pipeline state.

Many threads may hold the lock for reading at the same time; a writer gets
exclusive access. Waiting writers block new readers so a steady stream of
readers cannot starve a writer. The lock is not reentrant: a thread holding
it for reading must not try to acquire it again while a writer may be
waiting.

Example:
    >>> lock = ReaderWriterLock()
    >>> with lock.read():
    ...     snapshot = list(items)
    >>> with lock.write():
    ...     items.append(item)
"""

import threading
from contextlib import contextmanager
from typing import Iterator


class ReaderWriterLock:
    """Writer-preferring multiple-reader/single-writer lock."""

    def __init__(self) -> None:
        self._condition = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer_active = False
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        with self._condition:
            while self._writer_active or self._writers_waiting:
                self._condition.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._condition:
            if self._readers <= 0:
                raise RuntimeError("release_read() called without a read lock held")
            self._readers -= 1
            if self._readers == 0:
                self._condition.notify_all()

    def acquire_write(self) -> None:
        with self._condition:
            self._writers_waiting += 1
            try:
                while self._writer_active or self._readers:
                    self._condition.wait()
            finally:
                self._writers_waiting -= 1
            self._writer_active = True

    def release_write(self) -> None:
        with self._condition:
            if not self._writer_active:
                raise RuntimeError("release_write() called without the write lock held")
            self._writer_active = False
            self._condition.notify_all()

    @contextmanager
    def read(self) -> Iterator[None]:
        """Hold the lock in shared mode for the duration of the block."""
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write(self) -> Iterator[None]:
        """Hold the lock in exclusive mode for the duration of the block."""
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()

    @property
    def readers(self) -> int:
        """Number of threads currently holding the lock for reading."""
        with self._condition:
            return self._readers

    @property
    def write_locked(self) -> bool:
        with self._condition:
            return self._writer_active
