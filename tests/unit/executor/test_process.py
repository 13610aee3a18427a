"""Tests for executor/process.py."""

import os
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from ffwatch.executor.command import Command
from ffwatch.executor.process import (
    DEFAULT_TERMINATOR,
    PosixTerminator,
    ProcessHandle,
    WindowsTerminator,
    select_terminator,
    spawn,
)

posix_only = pytest.mark.skipif(os.name != "posix", reason="POSIX signals")


def _mock_process(returncode=None) -> MagicMock:
    process = MagicMock()
    process.pid = 1234
    process.poll.return_value = returncode
    process.wait.return_value = returncode if returncode is not None else -9
    return process


class TestSelectTerminator:
    """Tests for select_terminator."""

    def test_windows_host(self) -> None:
        assert isinstance(select_terminator("nt"), WindowsTerminator)

    @posix_only
    def test_posix_host(self) -> None:
        assert isinstance(select_terminator("posix"), PosixTerminator)

    def test_default_matches_this_host(self) -> None:
        expected = WindowsTerminator if os.name == "nt" else PosixTerminator
        assert isinstance(DEFAULT_TERMINATOR, expected)


class TestWindowsTerminator:
    """Tests for WindowsTerminator."""

    def test_sends_signal_one(self) -> None:
        with patch("ffwatch.executor.process.os.kill") as mock_kill:
            WindowsTerminator().terminate(1234)

        mock_kill.assert_called_once_with(1234, 1)

    def test_already_exited_is_ignored(self) -> None:
        with patch(
            "ffwatch.executor.process.os.kill", side_effect=OSError("Access denied")
        ):
            WindowsTerminator().terminate(1234)


@posix_only
class TestPosixTerminator:
    """Tests for PosixTerminator."""

    def test_sends_sigkill_to_process_group(self) -> None:
        import signal

        with patch("ffwatch.executor.process.os.killpg") as mock_killpg:
            PosixTerminator().terminate(1234)

        mock_killpg.assert_called_once_with(1234, signal.SIGKILL)

    def test_single_process_mode_uses_kill(self) -> None:
        import signal

        with patch("ffwatch.executor.process.os.kill") as mock_kill:
            PosixTerminator(kill_group=False).terminate(1234)

        mock_kill.assert_called_once_with(1234, signal.SIGKILL)

    def test_already_exited_is_ignored(self) -> None:
        with patch(
            "ffwatch.executor.process.os.killpg", side_effect=ProcessLookupError
        ):
            PosixTerminator().terminate(1234)


class TestProcessHandle:
    """Tests for ProcessHandle."""

    def test_terminate_delegates_to_terminator(self) -> None:
        terminator = MagicMock()
        handle = ProcessHandle(_mock_process(), terminator)

        handle.terminate()

        terminator.terminate.assert_called_once_with(1234)

    def test_terminate_is_idempotent(self) -> None:
        terminator = MagicMock()
        handle = ProcessHandle(_mock_process(), terminator)

        handle.terminate()
        handle.terminate()

        terminator.terminate.assert_called_once()

    def test_terminate_skips_exited_process(self) -> None:
        terminator = MagicMock()
        handle = ProcessHandle(_mock_process(returncode=0), terminator)

        handle.terminate()

        terminator.terminate.assert_not_called()

    def test_terminate_logs_warning(self, caplog) -> None:
        handle = ProcessHandle(_mock_process(), MagicMock())

        handle.terminate()

        assert "Killing process 1234" in caplog.text

    def test_close_closes_streams_and_reaps(self) -> None:
        process = _mock_process(returncode=0)
        handle = ProcessHandle(process, MagicMock())

        handle.close()

        process.stdin.close.assert_called_once()
        process.stderr.close.assert_called_once()
        process.wait.assert_called_once()

    def test_properties(self) -> None:
        process = _mock_process(returncode=3)
        handle = ProcessHandle(process, MagicMock())

        assert handle.pid == 1234
        assert handle.returncode == 3
        assert handle.stderr is process.stderr
        assert handle.wait() == 3


class TestSpawn:
    """Tests for spawn."""

    def test_runs_rendered_command_through_shell(self) -> None:
        with patch("ffwatch.executor.process.subprocess.Popen") as mock_popen:
            mock_popen.return_value = _mock_process()
            handle = spawn(Command("ffmpeg -i in.mkv out.mp4"))

        args, kwargs = mock_popen.call_args
        assert args == ("ffmpeg -i in.mkv out.mp4",)
        assert kwargs["shell"] is True
        assert kwargs["stderr"] == subprocess.PIPE
        assert kwargs["stdout"] == subprocess.DEVNULL
        assert kwargs["stdin"] == subprocess.DEVNULL
        assert handle.pid == 1234

    @posix_only
    def test_starts_new_session_on_posix(self) -> None:
        with patch("ffwatch.executor.process.subprocess.Popen") as mock_popen:
            mock_popen.return_value = _mock_process()
            spawn(Command("ffmpeg"))

        assert mock_popen.call_args.kwargs["start_new_session"] is True

    @posix_only
    def test_applies_priority(self) -> None:
        with patch("ffwatch.executor.process.subprocess.Popen") as mock_popen:
            mock_popen.return_value = _mock_process()
            spawn(Command("ffmpeg -i a b", priority=10))

        assert mock_popen.call_args.args == ("nice -n 10 ffmpeg -i a b",)

    def test_uses_given_terminator(self) -> None:
        terminator = MagicMock()
        with patch("ffwatch.executor.process.subprocess.Popen") as mock_popen:
            mock_popen.return_value = _mock_process()
            handle = spawn(Command("ffmpeg"), terminator)

        handle.terminate()

        terminator.terminate.assert_called_once_with(1234)

    def test_spawn_error_propagates(self) -> None:
        with patch(
            "ffwatch.executor.process.subprocess.Popen",
            side_effect=OSError("no shell"),
        ):
            with pytest.raises(OSError, match="no shell"):
                spawn(Command("ffmpeg"))
