"""GitHub Actions runner plumbing: step outputs, failure signal, log commands.

Mirrors the behaviour of the ``@actions/core`` toolkit for the subset this
tool needs.  Log records are rendered as workflow commands so that errors
and notices show up as annotations on the run.
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from typing import TYPE_CHECKING, Any, TextIO

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

NOTICE = 25
"""Log level for announcements rendered as ``::notice::`` annotations."""

logging.addLevelName(NOTICE, "NOTICE")

_COMMANDS: dict[int, str] = {
    logging.DEBUG: "debug",
    NOTICE: "notice",
    logging.WARNING: "warning",
    logging.ERROR: "error",
    logging.CRITICAL: "error",
}


def escape_data(value: str) -> str:
    """Escape a workflow command message."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def to_command_value(value: Any) -> str:
    """Serialise an output value like ``@actions/core`` does.

    Strings are passed through; everything else is compact JSON.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"))


def issue_command(command: str, message: str, stream: TextIO | None = None) -> None:
    """Write a ``::command::message`` line to *stream* (stdout by default)."""
    out = stream or sys.stdout
    out.write(f"::{command}::{escape_data(message)}\n")
    out.flush()


class GitHubActionsHandler(logging.Handler):
    """Render log records as GitHub Actions workflow commands.

    DEBUG, NOTICE, WARNING and ERROR records become ``::debug::``,
    ``::notice::``, ``::warning::`` and ``::error::`` commands; INFO records
    are written as plain lines.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        super().__init__()
        self._stream = stream

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            stream = self._stream or sys.stdout
            command = _COMMANDS.get(record.levelno)
            if command is None:
                stream.write(message + "\n")
                stream.flush()
            else:
                issue_command(command, message, stream)
        except Exception:
            self.handleError(record)


class StepOutputs:
    """Writer for step outputs.

    Inside a runner, outputs are appended to the ``GITHUB_OUTPUT`` file using
    the heredoc form; otherwise they are echoed to *stream* as ``name=value``.

    Args:
        output_file: Path from ``GITHUB_OUTPUT`` or ``None``.
        stream: Fallback stream when no output file is configured.
    """

    def __init__(self, output_file: Path | None = None, stream: TextIO | None = None) -> None:
        self._output_file = output_file
        self._stream = stream
        self.values: dict[str, str] = {}

    def set_output(self, name: str, value: Any) -> None:
        """Set step output *name* to *value*."""
        serialised = to_command_value(value)
        self.values[name] = serialised

        if self._output_file is None:
            out = self._stream or sys.stdout
            out.write(f"{name}={serialised}\n")
            out.flush()
            return

        delimiter = f"ghadelimiter_{uuid.uuid4()}"
        if delimiter in name or delimiter in serialised:
            raise ValueError(f"Unexpected input: delimiter {delimiter} found in output {name}")
        with self._output_file.open("a", encoding="utf-8") as fh:
            fh.write(f"{name}<<{delimiter}\n{serialised}\n{delimiter}\n")
        logger.debug("Set output %s", name)


def set_failed(message: str) -> None:
    """Report *message* as the reason this step failed.

    The caller is responsible for exiting with a non-zero status.
    """
    logging.getLogger("cypress_parallel").error(message)
