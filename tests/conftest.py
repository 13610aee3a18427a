"""Shared test fixtures for ffwatch."""

import io
import threading
from collections.abc import Callable, Iterable
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from ffwatch.config import clear_config_cache


class StallingStream:
    """Byte stream that serves some chunks, then blocks until released.

    Models a child process that writes a few records and then hangs: reads
    after the last chunk block until release() is called (as a kill would
    close the pipe) and then report end of input.
    """

    def __init__(self, chunks: Iterable[bytes] = (), block_seconds: float = 5.0):
        self._chunks = list(chunks)
        self._released = threading.Event()
        self._block_seconds = block_seconds
        self.closed = False

    def read1(self, size: int = -1) -> bytes:
        if self._chunks:
            return self._chunks.pop(0)
        self._released.wait(self._block_seconds)
        return b""

    def release(self) -> None:
        self._released.set()

    def close(self) -> None:
        self.closed = True
        self.release()


class FakeHandle:
    """Stand-in for ProcessHandle driven by an in-memory stderr stream."""

    pid = 4242

    def __init__(self, stderr, exit_code: int = 0):
        self.stderr = io.BytesIO(stderr) if isinstance(stderr, bytes) else stderr
        self.exit_code = exit_code
        self.terminate_calls = 0
        self.closed = False

    def terminate(self) -> None:
        self.terminate_calls += 1
        release = getattr(self.stderr, "release", None)
        if release is not None:
            release()

    def wait(self, timeout: float | None = None) -> int:
        return self.exit_code

    def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def _isolate_config_cache():
    """Keep the config file cache from leaking between tests."""
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def stalling_stream() -> Callable[..., StallingStream]:
    """Factory for streams that hang after their last chunk."""
    created: list[StallingStream] = []

    def _make(chunks: Iterable[bytes] = (), block_seconds: float = 5.0):
        stream = StallingStream(chunks, block_seconds)
        created.append(stream)
        return stream

    yield _make
    for stream in created:
        stream.release()


@pytest.fixture
def fake_handle() -> Callable[..., FakeHandle]:
    """Factory for fake process handles."""
    return FakeHandle


@pytest.fixture
def valid_media_validator() -> MagicMock:
    """Validator that accepts every artifact."""
    validator = MagicMock()
    validator.is_valid.return_value = True
    return validator


@pytest.fixture
def output_file(tmp_path: Path) -> Path:
    """An existing output artifact."""
    path = tmp_path / "out.mp4"
    path.write_bytes(b"\x00" * 128)
    return path
