"""Exception hierarchy for sandbox agent operations."""

from typing import Optional


class SandboxAgentError(Exception):
    """Base class for all errors raised by the sandbox agent."""


class ConfigurationError(SandboxAgentError):
    """Required configuration is missing (sandbox provider, GitHub token, branch)."""


class GitStateError(SandboxAgentError):
    """Repository is not in a state the requested operation can work with."""


class NoChangesError(GitStateError):
    """Nothing to commit, push, or open a pull request from."""


class SandboxTransportError(SandboxAgentError):
    """A command or network call inside the sandbox failed."""


class CommandFailedError(SandboxTransportError):
    """Exception raised when a sandbox command exits non-zero."""

    def __init__(self, cmd: str, exit_code: int, stderr: str = "", stdout: str = ""):
        self.cmd = cmd
        self.exit_code = exit_code
        self.stderr = stderr
        self.stdout = stdout
        super().__init__(
            f"Command failed with exit code {exit_code}: {cmd}\nstderr: {stderr}"
        )


class ExternalAPIError(SandboxAgentError):
    """Non-2xx response from the GitHub REST API."""

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


class SummarizationError(SandboxAgentError):
    """Raised by summarizer implementations when metadata synthesis fails.

    Never caught or retried locally; callers see it as-is.
    """
