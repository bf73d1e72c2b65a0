"""Sandbox session lifecycle for a single agent instance."""

import logging
from enum import Enum
from typing import Dict, Optional

from ..errors import ConfigurationError
from ..sandbox.protocol import SandboxInstance, SandboxProvider

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    PAUSED = "paused"
    KILLED = "killed"


class SandboxSessionManager:
    """Acquires, caches, pauses, resumes and kills the agent's sandbox.

    The handle is instance state: two agents never share a session, and a
    second ``get_sandbox()`` returns the cached handle instead of creating
    another one.
    """

    def __init__(
        self,
        provider: Optional[SandboxProvider],
        agent_type: str,
        working_directory: str,
        env_vars: Optional[Dict[str, str]] = None,
        secrets: Optional[Dict[str, str]] = None,
        session_id: Optional[str] = None,
        logger_instance=None,
    ):
        self._provider = provider
        self._agent_type = agent_type
        self._working_directory = working_directory
        self._env_vars = env_vars or {}
        self._secrets = secrets or {}
        self._session_id = session_id
        self._sandbox: Optional[SandboxInstance] = None
        self._resumed = False
        self.state = SessionState.UNINITIALIZED
        self.logger = logger_instance or logger

    @property
    def resumed(self) -> bool:
        """True when the cached sandbox came from a persisted session id."""
        return self._resumed

    @property
    def working_directory(self) -> str:
        return self._working_directory

    @working_directory.setter
    def working_directory(self, path: str) -> None:
        self._working_directory = path

    def _require_provider(self) -> SandboxProvider:
        if self._provider is None:
            raise ConfigurationError(
                "No sandbox provider configured. Use with_sandbox() to configure a provider."
            )
        return self._provider

    def get_sandbox(self) -> SandboxInstance:
        """Return the cached sandbox, resuming or creating it on first use."""
        if self._sandbox is not None:
            return self._sandbox

        provider = self._require_provider()

        if self._session_id:
            self.logger.info(f"Resuming sandbox session {self._session_id}")
            self._sandbox = provider.resume(self._session_id)
            self._resumed = True
        else:
            # Caller secrets override agent defaults on key collision
            env_vars = {**self._env_vars, **self._secrets}
            self._sandbox = provider.create(
                env_vars,
                self._agent_type,
                self._working_directory,
            )
            self._resumed = False
            self.logger.info(f"Created sandbox {self._sandbox.sandbox_id}")

        self.state = SessionState.ACTIVE
        return self._sandbox

    def kill_sandbox(self) -> None:
        if self._sandbox is None:
            return
        sandbox_id = self._sandbox.sandbox_id
        self._sandbox.kill()
        self._sandbox = None
        self._session_id = None
        self._resumed = False
        self.state = SessionState.KILLED
        self.logger.info(f"Killed sandbox {sandbox_id}")

    def pause_sandbox(self) -> None:
        if self._sandbox is None:
            return
        self._sandbox.pause()
        self.state = SessionState.PAUSED

    def resume_sandbox(self) -> None:
        if self._sandbox is None:
            return
        provider = self._require_provider()
        self._sandbox = provider.resume(self._sandbox.sandbox_id)
        self.state = SessionState.ACTIVE

    def get_session(self) -> Optional[str]:
        """Session id for external persistence (active sandbox first)."""
        if self._sandbox is not None:
            return self._sandbox.sandbox_id
        return self._session_id

    def set_session(self, session_id: str) -> None:
        """Remember a session id; used on the next acquisition."""
        self._session_id = session_id

    def get_host(self, port: int) -> str:
        return self.get_sandbox().get_host(port)
