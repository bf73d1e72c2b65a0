"""Sandbox capability consumed by the agent.

Concrete providers (E2B, Daytona, Docker, ...) live outside this package; they
only need to satisfy these protocols.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Protocol, runtime_checkable

OutputCallback = Callable[[str], None]


@dataclass
class CommandResult:
    """Result of a command run inside the sandbox."""
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    def to_dict(self) -> Dict:
        return {"exit_code": self.exit_code, "stdout": self.stdout, "stderr": self.stderr}


@runtime_checkable
class SandboxCommands(Protocol):
    def run(
        self,
        command: str,
        *,
        timeout_ms: Optional[int] = None,
        background: bool = False,
        on_stdout: Optional[OutputCallback] = None,
        on_stderr: Optional[OutputCallback] = None,
    ) -> CommandResult:
        """Run a shell command, pushing output chunks to the callbacks as they arrive.

        Providers may either raise on non-zero exit or return the exit code;
        callers treat both as failure.
        """
        ...


@runtime_checkable
class SandboxInstance(Protocol):
    sandbox_id: str
    commands: SandboxCommands

    def kill(self) -> None:
        ...

    def pause(self) -> None:
        ...

    def get_host(self, port: int) -> str:
        ...


@runtime_checkable
class SandboxProvider(Protocol):
    def create(
        self,
        env_vars: Optional[Dict[str, str]] = None,
        agent_type: Optional[str] = None,
        working_directory: Optional[str] = None,
    ) -> SandboxInstance:
        ...

    def resume(self, sandbox_id: str) -> SandboxInstance:
        ...
