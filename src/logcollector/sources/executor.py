"""Command source: run a configured command line and capture its output."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass

from .errors import CommandFailure, SourceUnavailable

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class CommandOutput:
    """Captured result of a collection command.

    Attributes:
        command: Command line that was executed.
        stdout: Bytes written to standard output.
        stderr: Bytes written to standard error.
        exit_code: Exit status reported by the shell.
    """

    command: str
    stdout: bytes
    stderr: bytes
    exit_code: int

    @property
    def succeeded(self) -> bool:
        """Return whether the command exited with status zero."""
        return self.exit_code == 0


def run_source(command: str, *, timeout: float | None = None) -> CommandOutput:
    """Execute ``command`` through the host shell and capture its output.

    The command line comes from trusted configuration and may use pipes and
    redirection. A non-zero exit status is returned rather than raised.

    Args:
        command: Shell command line to execute.
        timeout: Optional limit in seconds; None waits for the command to exit.

    Returns:
        CommandOutput: Captured stdout, stderr, and exit status.

    Raises:
        SourceUnavailable: If the shell itself cannot be started.
        CommandFailure: If the command exceeds ``timeout``.
    """
    LOGGER.debug("Running collection command: %s", command)
    try:
        completed = subprocess.run(
            command,
            shell=True,
            capture_output=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as exc:
        raise CommandFailure(f"Command timed out after {timeout} seconds: {command}") from exc
    except OSError as exc:
        raise SourceUnavailable(f"Unable to start command {command!r}: {exc}") from exc

    return CommandOutput(
        command=command,
        stdout=completed.stdout or b"",
        stderr=completed.stderr or b"",
        exit_code=completed.returncode,
    )


def report_output(output: CommandOutput) -> list[str]:
    """Log a failed exit status and any stderr text of a finished command.

    Args:
        output: Captured command output.

    Returns:
        list[str]: Messages that were reported.
    """
    messages: list[str] = []
    if not output.succeeded:
        message = f"Command exited with status {output.exit_code}: {output.command}"
        LOGGER.error(message)
        messages.append(message)

    stderr_text = output.stderr.decode(errors="replace").rstrip()
    if stderr_text:
        LOGGER.warning("Command stderr: %s", stderr_text)
        messages.append(stderr_text)
    return messages


__all__ = ["CommandOutput", "run_source", "report_output"]
