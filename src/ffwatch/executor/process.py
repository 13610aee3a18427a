"""Spawned process handles and platform-specific termination.

A transcode is launched through the shell in its own process group/session,
so a kill reaches the transcoder even when the shell forked it as a child.
How a process is force-killed differs by host; the matching Terminator is
chosen once at import time and every ProcessHandle delegates to it.
"""

from __future__ import annotations

import logging
import os
import signal
import subprocess  # nosec B404 - subprocess is required for FFmpeg invocation
import threading
from typing import IO, Protocol

from ffwatch.executor.command import Command

logger = logging.getLogger(__name__)


class Terminator(Protocol):
    """Force-terminates a process by pid."""

    def terminate(self, pid: int) -> None:
        """Kill the process. Must not raise if it has already exited."""
        ...


class PosixTerminator:
    """Sends SIGKILL, to the whole process group by default.

    SIGKILL cannot be caught, so a hung transcoder cannot delay its own
    shutdown.
    """

    def __init__(self, kill_group: bool = True) -> None:
        self.kill_group = kill_group
        self.signal_number = signal.SIGKILL

    def terminate(self, pid: int) -> None:
        try:
            if self.kill_group:
                os.killpg(pid, self.signal_number)
            else:
                os.kill(pid, self.signal_number)
        except ProcessLookupError:
            logger.debug("Process %d already exited before kill", pid)


class WindowsTerminator:
    """Sends signal value 1, which Windows maps to TerminateProcess.

    os.kill on Windows treats any value other than the console control
    events as a forced termination with that value as the exit code.
    """

    FORCE_SIGNAL: int = 1

    def terminate(self, pid: int) -> None:
        try:
            os.kill(pid, self.FORCE_SIGNAL)
        except OSError as e:
            # Access denied / invalid handle once the process is gone
            logger.debug("Process %d could not be terminated: %s", pid, e)


def select_terminator(os_name: str | None = None) -> Terminator:
    """Pick the Terminator for a host.

    Args:
        os_name: Value of os.name to select for. Defaults to this host.
    """
    if (os_name or os.name) == "nt":
        return WindowsTerminator()
    return PosixTerminator()


DEFAULT_TERMINATOR: Terminator = select_terminator()


class ProcessHandle:
    """One spawned external process, owned by a single supervised run."""

    def __init__(
        self,
        process: subprocess.Popen,
        terminator: Terminator | None = None,
    ) -> None:
        self._process = process
        self._terminator = terminator or DEFAULT_TERMINATOR
        self._terminated = False
        self._lock = threading.Lock()

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def stderr(self) -> IO[bytes]:
        """Diagnostic byte stream of the process."""
        assert self._process.stderr is not None
        return self._process.stderr

    @property
    def returncode(self) -> int | None:
        return self._process.poll()

    def terminate(self) -> None:
        """Force-kill the process. Idempotent.

        Safe to call from the watchdog thread; only the first call on a
        live process sends a signal.
        """
        with self._lock:
            if self._terminated:
                return
            if self._process.poll() is not None:
                logger.debug("Process %d already exited, not killing", self.pid)
                return
            self._terminated = True

        logger.warning("Killing process %d", self.pid)
        self._terminator.terminate(self.pid)

    def wait(self, timeout: float | None = None) -> int:
        """Wait for the process to exit and return its exit status."""
        return self._process.wait(timeout=timeout)

    def close(self) -> None:
        """Release stream handles and reap the process."""
        for stream in (self._process.stdin, self._process.stdout, self._process.stderr):
            if stream is not None:
                stream.close()
        self._process.wait()


def spawn(command: Command, terminator: Terminator | None = None) -> ProcessHandle:
    """Start a command through the shell with its stderr captured.

    stdout and stdin are not used by the supervisor and are connected to
    the null device so the child can never block on them.

    Args:
        command: Command to run.
        terminator: Kill strategy. Defaults to the host's.

    Returns:
        Handle owning the running process.

    Raises:
        OSError: If the shell cannot be started.
    """
    kwargs: dict = {}
    if os.name == "nt":
        kwargs["creationflags"] = subprocess.CREATE_NEW_PROCESS_GROUP
    else:
        kwargs["start_new_session"] = True

    process = subprocess.Popen(  # nosec B602 - command is built and escaped by caller
        command.render(),
        shell=True,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.PIPE,
        bufsize=0,
        **kwargs,
    )
    logger.debug("Spawned process %d", process.pid)
    return ProcessHandle(process, terminator)
