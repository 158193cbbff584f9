"""
Subprocess support - command-line splitting, templates, and process runners.
"""

from shellpipe.process.command import Command, run_command, split_command
from shellpipe.process.template import CommandTemplate

__all__ = [
    "Command",
    "CommandTemplate",
    "run_command",
    "split_command",
]
