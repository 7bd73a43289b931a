"""External commands used as activation actions."""

import logging
import shlex
import subprocess
from dataclasses import dataclass, field
from typing import Optional, Sequence

from usekit.config.constants import DEFAULT_SHELL_TIMEOUT_SECONDS
from usekit.exceptions import ShellActionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShellAction:
    """Run a command synchronously with a timeout.

    The call is bounded and never retried; any failure raises
    ``ShellActionError`` for the activator to isolate.
    """

    command: Sequence[str] = field(default_factory=tuple)
    timeout: float = DEFAULT_SHELL_TIMEOUT_SECONDS
    cwd: Optional[str] = None

    def __post_init__(self):
        command = self.command
        if isinstance(command, str):
            command = shlex.split(command)
        command = [str(part) for part in command]
        if not command:
            raise ValueError("Shell action needs a command")
        if self.timeout is None or self.timeout <= 0:
            raise ValueError("Shell action timeout must be positive")
        object.__setattr__(self, "command", tuple(command))

    @property
    def display(self) -> str:
        return shlex.join(self.command)

    def __call__(self) -> str:
        logger.debug(f"Running shell action: {self.display}")
        try:
            result = subprocess.run(
                list(self.command),
                capture_output=True,
                text=True,
                timeout=self.timeout,
                cwd=self.cwd,
            )
        except subprocess.TimeoutExpired as e:
            raise ShellActionError(
                f"Command timed out after {self.timeout}s", command=self.display
            ) from e
        except OSError as e:
            raise ShellActionError(f"Command could not start: {e}", command=self.display) from e

        if result.returncode != 0:
            raise ShellActionError(
                command=self.display,
                exit_code=result.returncode,
                stderr=result.stderr.strip(),
            )
        return result.stdout
