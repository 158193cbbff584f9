"""
Subprocess stages.

``exec`` pipes the current stream through an external command;
``exec_for_each`` runs one command per input line.
"""

from __future__ import annotations

from shellpipe.errors import CommandLineError, ShellpipeError, TemplateError
from shellpipe.pipe.core import P, PipeBase
from shellpipe.process import Command, CommandTemplate, run_command, split_command
from shellpipe.stream import Reader, Writer, encode, scan_lines


class ProcessStages(PipeBase):
    """Stages that run external commands."""

    def exec(self: P, cmd_line: str) -> P:
        """Run ``cmd_line`` with the pipe's contents as its standard input.

        The command is split and started before this call returns; a
        malformed command line or a program that cannot be started is
        recorded immediately. Its combined stdout and stderr become the
        pipe's contents (stderr goes to the pipe's stderr writer instead,
        if one is set). A non-zero exit is recorded as ``exit status <N>``
        once the output has been read.

        Args:
            cmd_line: Command line, split with shell quoting rules

        Returns:
            Self for chaining
        """
        if self._recorded() is not None:
            return self
        try:
            argv = split_command(cmd_line)
            command = Command.start(argv, stderr=self.stderr_writer)
        except (CommandLineError, OSError) as e:
            return self.with_error(e)

        def exec(reader: Reader, writer: Writer) -> None:
            command.feed(reader)
            command.copy_output(writer)
            command.wait()

        # The process is running, so its stage must start to reap it.
        self._start_stage(exec)
        return self

    def exec_for_each(self: P, template: str) -> P:
        """Run one command per input line.

        ``template`` is a Jinja2 template rendered with the current line as
        ``line``, for example ``"echo {{ line }}"``. Commands get no
        standard input. A line whose command cannot be rendered, split,
        started, or exits non-zero has the error text written in place of
        its output and processing continues; the first such error is
        recorded once all lines are done.

        Args:
            template: Command-line template

        Returns:
            Self for chaining
        """
        if self._recorded() is not None:
            return self
        try:
            command_template = CommandTemplate(template)
        except TemplateError as e:
            return self.with_error(e)
        stderr = self.stderr_writer

        def exec_for_each(reader: Reader, writer: Writer) -> None:
            first_error: Exception | None = None
            for line in scan_lines(reader):
                try:
                    argv = split_command(command_template.render(line))
                    run_command(argv, writer, stderr=stderr)
                except BrokenPipeError:
                    raise
                except (ShellpipeError, OSError) as e:
                    first_error = first_error or e
                    (stderr or writer).write(encode(f"{e}\n"))
            if first_error is not None:
                raise first_error

        return self.filter(exec_for_each)
