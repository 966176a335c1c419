"""
Execution of external commands for the resolver.

A CommandRequest is an immutable (program, args) value; runners are stateless
and may be shared between threads.
"""

import subprocess
from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple

from aks_registry.error_utils import create_invocation_error
from aks_registry.logging_utils import get_logger, redact_args

logger = get_logger(__name__)


@dataclass(frozen=True)
class CommandRequest:
    program: str
    args: Tuple[str, ...] = ()

    @property
    def command(self) -> List[str]:
        return [self.program, *self.args]

    def __str__(self) -> str:
        return " ".join(redact_args(self.command))


class CommandRunner(Protocol):
    def execute(self, request: CommandRequest) -> str:
        """Run the request once and return its stdout, stripped.

        Raises:
            InvocationError: If the program cannot be started, times out or exits non-zero
        """
        ...


class SubprocessRunner:
    """Runs commands with subprocess.run, without retries."""

    def __init__(self, timeout: Optional[int] = None):
        self.timeout = timeout

    def execute(self, request: CommandRequest) -> str:
        cmd = request.command
        logger.debug(f"Running: {request}")
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            logger.debug(f"Command timed out after {self.timeout}s: {request}")
            raise create_invocation_error(cmd, e) from e
        except subprocess.CalledProcessError as e:
            logger.debug(f"Command exited with {e.returncode}: {request}")
            raise create_invocation_error(cmd, e) from e
        except OSError as e:
            raise create_invocation_error(cmd, e) from e
        return (result.stdout or "").strip()
