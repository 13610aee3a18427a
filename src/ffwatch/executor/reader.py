"""Delimited record reading with an inactivity watchdog.

LineTimeoutReader delivers records from a byte stream to a callback and
fails with OutputStalledError when the stream goes quiet for too long. Two
activities run for the duration of LineTimeoutReader.each():

- the read loop, in the caller's thread, which blocks only on the stream;
- a watchdog thread, which wakes every poll interval and compares the
  ActivityClock against the timeout.

The watchdog never raises into the read loop. On expiry it sets an event
and calls the ``on_timeout`` hook, which must make the stream reach end of
input (the supervisor kills the producing process). The read loop then
sees the event and raises in its own thread.

Timing rules:
- the clock is touched as soon as a record has been read, before the
  callback runs;
- time spent inside the callback never counts as inactivity;
- a timeout fires when ``idle > timeout``, detected at most one poll
  interval late.
"""

from __future__ import annotations

import contextvars
import logging
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import IO

from ffwatch.config.models import DEFAULT_POLL_INTERVAL
from ffwatch.executor.exceptions import OutputStalledError

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 4096


class ActivityClock:
    """Last-record timestamp shared by the read loop and the watchdog.

    Uses a monotonic time source, so the timestamp never moves backwards.
    """

    def __init__(self, time_source: Callable[[], float] = time.monotonic) -> None:
        self._now = time_source
        self._lock = threading.Lock()
        self._last = time_source()
        self._holds = 0

    @property
    def last_activity(self) -> float:
        with self._lock:
            return self._last

    def touch(self) -> None:
        """Record activity now."""
        now = self._now()
        with self._lock:
            if now > self._last:
                self._last = now

    def idle_for(self) -> float:
        """Seconds since the last activity, or 0.0 while held."""
        now = self._now()
        with self._lock:
            if self._holds:
                return 0.0
            return now - self._last

    @contextmanager
    def hold(self) -> Iterator[None]:
        """Suspend inactivity accounting for the duration of the block.

        Activity is recorded again when the block exits.
        """
        with self._lock:
            self._holds += 1
        try:
            yield
        finally:
            now = self._now()
            with self._lock:
                self._holds -= 1
                if now > self._last:
                    self._last = now


def iter_records(
    stream: IO[bytes],
    delimiter: bytes,
    chunk_size: int = READ_CHUNK_SIZE,
) -> Iterator[bytes]:
    """Split a byte stream into records ending with delimiter.

    Each yielded record keeps its trailing delimiter. Bytes left over at end
    of input are yielded as a final, undelimited record.

    Reads use read1() where available so records are delivered as soon as
    the producer writes them rather than when a full chunk has arrived.
    """
    if not delimiter:
        raise ValueError("delimiter must not be empty")

    read = getattr(stream, "read1", None) or stream.read
    pending = b""
    while True:
        chunk = read(chunk_size)
        if not chunk:
            break
        pending += chunk
        start = 0
        while (index := pending.find(delimiter, start)) >= 0:
            end = index + len(delimiter)
            yield pending[start:end]
            start = end
        pending = pending[start:]

    if pending:
        yield pending


class LineTimeoutReader:
    """Deliver delimited records, failing when the stream stalls.

    Args:
        stream: Readable byte stream.
        delimiter: Record separator.
        timeout: Maximum seconds between records. None or 0 disables the
            watchdog, making each() a plain blocking iteration.
        on_timeout: Called once from the watchdog thread on expiry. It must
            make the stream reach end of input, otherwise the read loop
            stays blocked until the producer writes again.
        poll_interval: Seconds between watchdog checks.
        clock: Activity clock, injectable for tests.
    """

    def __init__(
        self,
        stream: IO[bytes],
        delimiter: bytes = b"\n",
        timeout: float | None = None,
        *,
        on_timeout: Callable[[], None] | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        clock: ActivityClock | None = None,
    ) -> None:
        if poll_interval <= 0:
            raise ValueError(f"poll_interval must be > 0, got {poll_interval}")
        self._stream = stream
        self._delimiter = delimiter
        self.timeout = timeout
        self._on_timeout = on_timeout
        self.poll_interval = poll_interval
        self.clock = clock or ActivityClock()
        self._idle_at_expiry = 0.0

    def each(self, callback: Callable[[bytes], None]) -> None:
        """Invoke callback once per record until end of input.

        Raises:
            OutputStalledError: If no record arrived within the timeout.
            Exception: Anything raised by the stream or the callback.
        """
        records = iter_records(self._stream, self._delimiter)

        if not self.timeout:
            for record in records:
                self.clock.touch()
                callback(record)
            return

        stop = threading.Event()
        expired = threading.Event()
        self.clock.touch()
        watchdog = threading.Thread(
            # Run in a copy of the caller context so log records keep the run tag
            target=contextvars.copy_context().run,
            args=(self._watch, self.timeout, stop, expired),
            name="ffwatch-watchdog",
            daemon=True,
        )
        watchdog.start()
        try:
            for record in records:
                if expired.is_set():
                    break
                self.clock.touch()
                with self.clock.hold():
                    callback(record)
        except Exception as e:
            if expired.is_set():
                raise self._stalled() from e
            raise
        finally:
            stop.set()
            watchdog.join()

        if expired.is_set():
            raise self._stalled()

    def _stalled(self) -> OutputStalledError:
        return OutputStalledError(self._idle_at_expiry, self.timeout or 0.0)

    def _watch(
        self, timeout: float, stop: threading.Event, expired: threading.Event
    ) -> None:
        while not stop.wait(self.poll_interval):
            idle = self.clock.idle_for()
            if idle <= timeout:
                continue

            self._idle_at_expiry = idle
            expired.set()
            logger.debug(
                "No output for %.2fs (limit %ss), cancelling read", idle, timeout
            )
            if self._on_timeout is not None:
                try:
                    self._on_timeout()
                except Exception:
                    logger.exception("Timeout hook failed")
            return
