"""Running a job's command in the background and streaming its output."""

from __future__ import annotations

import contextlib
import copy
import logging
import queue
import subprocess
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, TextIO, Union

from .command_builder import CommandBuilder
from .lines import CommandOutputLine, CommandStream, TLine
from .period import Period, Task

logger = logging.getLogger(__name__)

_STATUS_WAIT_SECONDS = 5.0


@dataclass(frozen=True)
class ExecLine:
    """A line of output of the running command."""

    line: CommandOutputLine


@dataclass(frozen=True)
class ExecEnd:
    """The command finished; the status is None when it couldn't be read."""

    status: int | None


@dataclass(frozen=True)
class ExecError:
    """The command couldn't be run."""

    message: str


@dataclass(frozen=True)
class ExecInterruption:
    """The command was interrupted on purpose."""


ExecInfo = Union[ExecLine, ExecEnd, ExecError, ExecInterruption]


class _Stop(Enum):
    SEND_STATUS = "send_status"  # the process ended, just report its status
    KILL = "kill"  # kill the process, its status doesn't matter


class TaskExecutor:
    """Handle on one execution of a job's command."""

    def __init__(
        self,
        thread: threading.Thread,
        stop_queue: "queue.Queue[_Stop]",
        grace_period: Period,
    ) -> None:
        self._thread = thread
        self._stop_queue = stop_queue
        self._grace_period = grace_period
        self._grace_period_start: float | None = (
            None if grace_period.is_zero() else time.monotonic()
        )

    def _send_kill(self) -> bool:
        try:
            self._stop_queue.put_nowait(_Stop.KILL)
        except queue.Full:
            logger.debug("failed to send 'die' signal: a stop message is pending")
            return False
        return True

    def interrupt(self) -> None:
        """Ask for the process to be killed, without waiting."""
        self._send_kill()

    def die(self) -> None:
        """Kill the process and wait until it's finished."""
        self._send_kill()
        self._thread.join()

    def is_in_grace_period(self) -> bool:
        """Whether the task was started less than a grace period ago."""
        if self._grace_period_start is not None:
            elapsed = time.monotonic() - self._grace_period_start
            if elapsed < self._grace_period.seconds:
                return True
            self._grace_period_start = None
        return False


class MissionExecutor:
    """Starts the job's command on demand and sends its output to ``line_receiver``."""

    def __init__(
        self,
        command_builder: CommandBuilder,
        kill_command: Iterable[str] | None = None,
    ) -> None:
        self._command_builder = command_builder
        self._kill_command = list(kill_command) if kill_command is not None else None
        self.line_receiver: "queue.Queue[ExecInfo]" = queue.Queue()

    def start(self, task: Task) -> TaskExecutor:
        """Start the job's command once, with the given task settings."""
        logger.info("start task %r", task)
        builder = copy.deepcopy(self._command_builder)
        builder.env("RUST_BACKTRACE", task.backtrace or "0")
        stop_queue: "queue.Queue[_Stop]" = queue.Queue(maxsize=1)
        thread = threading.Thread(
            target=_run_task,
            args=(
                builder,
                self._kill_command,
                task.grace_period,
                self.line_receiver,
                stop_queue,
            ),
            daemon=True,
        )
        executor = TaskExecutor(thread, stop_queue, task.grace_period)
        thread.start()
        return executor


def _pipe_lines(
    stream: TextIO,
    origin: CommandStream,
    sender: "queue.Queue[ExecInfo]",
    on_eof: Callable[[], None] | None = None,
) -> None:
    try:
        for text in stream:
            sender.put(ExecLine(CommandOutputLine(TLine.from_tty(text), origin)))
    except (OSError, ValueError) as e:
        logger.warning("error : %s", e)
    finally:
        with contextlib.suppress(OSError):
            stream.close()
    if on_eof is not None:
        on_eof()


def _run_task(
    builder: CommandBuilder,
    kill_command: list[str] | None,
    grace_period: Period,
    sender: "queue.Queue[ExecInfo]",
    stop_queue: "queue.Queue[_Stop]",
) -> None:
    # let a burst of file events settle before starting the command
    if not grace_period.is_zero():
        time.sleep(grace_period.seconds)
    try:
        child = builder.spawn()
    except (OSError, ValueError) as e:
        sender.put(ExecError(str(e)))
        return

    stdout_thread = None
    if builder.is_with_stdout():
        stdout_thread = threading.Thread(
            target=_pipe_lines,
            args=(child.stdout, CommandStream.STDOUT, sender),
            daemon=True,
        )
        stdout_thread.start()

    def stderr_closed() -> None:
        try:
            stop_queue.put_nowait(_Stop.SEND_STATUS)
        except queue.Full:
            logger.warning("sending stop message failed")

    threading.Thread(
        target=_pipe_lines,
        args=(child.stderr, CommandStream.STDERR, sender, stderr_closed),
        daemon=True,
    ).start()

    stop = stop_queue.get()
    if stop is _Stop.SEND_STATUS:
        if stdout_thread is not None:
            stdout_thread.join(_STATUS_WAIT_SECONDS)
        status = child.poll()
        if status is None:
            with contextlib.suppress(subprocess.TimeoutExpired):
                status = child.wait(timeout=_STATUS_WAIT_SECONDS)
        sender.put(ExecEnd(status))
    else:
        logger.debug("explicit interrupt received")
        _kill(kill_command, child)
    try:
        child.wait()
    except OSError as e:
        logger.warning("waiting for child failed: %s", e)


def _kill(kill_command: list[str] | None, child: subprocess.Popen) -> None:
    """Kill the child with the specific command, or the platform's way if it fails."""
    if kill_command is not None:
        logger.info("launch specific kill command %r", kill_command)
        try:
            _run_kill_command(kill_command, child)
            return
        except (OSError, ValueError, subprocess.CalledProcessError) as e:
            logger.warning("specific kill command failed: %s", e)
    with contextlib.suppress(ProcessLookupError):
        child.kill()


def _run_kill_command(kill_command: list[str], child: subprocess.Popen) -> None:
    if not kill_command:
        raise ValueError("empty kill command")
    subprocess.run([*kill_command, str(child.pid)], check=True)
    child.wait()