"""
Command-line tokenizing and subprocess helpers.

Command lines are split with shell quoting rules (``shlex``); no shell is
ever involved in running them.
"""

from __future__ import annotations

import contextlib
import shlex
import subprocess
import threading
from collections.abc import Callable
from typing import Any

from shellpipe.errors import CommandLineError, ExitError
from shellpipe.stream import CHUNK_SIZE, Reader, Writer
from shellpipe.telemetry import get_logger

logger = get_logger("shellpipe.process")


def split_command(cmd_line: str) -> list[str]:
    """Split a command line into an argument list.

    Raises:
        CommandLineError: If quoting is unbalanced or the line is empty
    """
    try:
        argv = shlex.split(cmd_line)
    except ValueError as e:
        raise CommandLineError.unbalanced(cmd_line) from e
    if not argv:
        raise CommandLineError("empty command line", command=cmd_line)
    return argv


class Command:
    """A started subprocess whose output is copied to a writer.

    stdout and stderr are combined unless a separate stderr writer is given.

    Example:
        >>> cmd = Command.start(["sort"], stdin=subprocess.PIPE)
        >>> cmd.feed(reader)
        >>> cmd.copy_output(writer)
        >>> cmd.wait()
    """

    def __init__(self, argv: list[str], process: subprocess.Popen[bytes]) -> None:
        self.argv = argv
        self.process = process
        self._threads: list[threading.Thread] = []
        self._feed_error: BaseException | None = None

    @classmethod
    def start(
        cls,
        argv: list[str],
        *,
        stdin: int | None = subprocess.PIPE,
        stderr: Writer | None = None,
    ) -> Command:
        """Start ``argv``.

        Raises:
            OSError: If the program cannot be found or started
        """
        process = subprocess.Popen(
            argv,
            stdin=stdin,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE if stderr is not None else subprocess.STDOUT,
        )
        logger.debug("process started", argv=argv, pid=process.pid)
        command = cls(argv, process)
        if stderr is not None:
            command._spawn(command._copy_stderr, stderr)
        return command

    def _spawn(self, target: Callable[..., None], *args: Any) -> None:
        thread = threading.Thread(
            target=target, args=args, name=f"shellpipe-{self.argv[0]}", daemon=True
        )
        thread.start()
        self._threads.append(thread)

    def feed(self, source: Reader) -> None:
        """Copy ``source`` into the process's stdin on a helper thread."""
        self._spawn(self._feed, source)

    def _feed(self, source: Reader) -> None:
        stdin = self.process.stdin
        if stdin is None:
            return
        try:
            # The process may stop reading before input is exhausted.
            with contextlib.suppress(BrokenPipeError):
                while chunk := source.read(CHUNK_SIZE):
                    stdin.write(chunk)
                    stdin.flush()
        except Exception as e:
            self._feed_error = e
        finally:
            with contextlib.suppress(BrokenPipeError):
                stdin.close()

    def _copy_stderr(self, writer: Writer) -> None:
        stderr = self.process.stderr
        if stderr is None:
            return
        with contextlib.suppress(OSError, ValueError):
            while chunk := stderr.read1(CHUNK_SIZE):
                writer.write(chunk)

    def copy_output(self, writer: Writer) -> None:
        """Copy process output to ``writer`` until the process closes it.

        If ``writer`` fails the process is killed and the error re-raised.
        """
        stdout = self.process.stdout
        if stdout is None:
            return
        try:
            while chunk := stdout.read1(CHUNK_SIZE):
                writer.write(chunk)
        except BaseException:
            self.process.kill()
            self.process.wait()
            raise
        finally:
            stdout.close()

    def wait(self) -> None:
        """Wait for the process and its helper threads.

        Raises:
            ExitError: If the process exited non-zero or was killed
        """
        returncode = self.process.wait()
        for thread in self._threads:
            thread.join()
        logger.debug("process exited", argv=self.argv, returncode=returncode)
        if returncode != 0:
            raise ExitError(returncode, command=self.argv)
        if self._feed_error is not None:
            raise self._feed_error


def run_command(
    argv: list[str],
    writer: Writer,
    *,
    stdin: Reader | None = None,
    stderr: Writer | None = None,
) -> None:
    """Run ``argv`` to completion, streaming its output to ``writer``.

    Raises:
        OSError: If the program cannot be started
        ExitError: If it exits unsuccessfully
    """
    command = Command.start(
        argv,
        stdin=subprocess.PIPE if stdin is not None else subprocess.DEVNULL,
        stderr=stderr,
    )
    if stdin is not None:
        command.feed(stdin)
    command.copy_output(writer)
    command.wait()
