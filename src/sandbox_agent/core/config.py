"""Configuration loading and validation."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..utils.validators import validate_owner_repo

logger = logging.getLogger(__name__)

AgentType = Literal["claude", "codex", "opencode", "gemini", "grok"]
AgentMode = Literal["ask", "code"]

DEFAULT_WORKING_DIRECTORY = "/vibe0"


class ModelConfig(BaseModel):
    """Model provider settings shared by the agent CLI and the summarizer."""
    provider: Optional[str] = None  # None = the agent variant's default provider
    api_key: Optional[str] = None
    # Claude can authenticate with an OAuth token instead of an API key
    oauth_token: Optional[str] = None
    model: Optional[str] = None
    base_url: Optional[str] = None

    @field_validator('base_url')
    @classmethod
    def validate_base_url(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.startswith(("http://", "https://")):
            raise ValueError(
                f"base_url must start with http:// or https://, got '{v}'"
            )
        return v


class WorktreeConfig(BaseModel):
    """Git worktree configuration for branch-isolated work inside the sandbox."""
    enabled: bool = False
    root: Optional[str] = None  # None = "<working_directory>-wt"
    cleanup: Optional[bool] = None  # Only an explicit False keeps worktrees after push

    def resolve_root(self, working_directory: str) -> str:
        return self.root or f"{working_directory.rstrip('/')}-wt"

    @property
    def cleanup_enabled(self) -> bool:
        return self.cleanup is not False


class GitHubConfig(BaseModel):
    """GitHub configuration."""
    token: Optional[str] = None
    repository: Optional[str] = None  # owner/repo format (e.g., "octocat/hello-world")

    @field_validator('repository')
    @classmethod
    def validate_repository(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return validate_owner_repo(v)


class SandboxAgentConfig(BaseSettings):
    """Main agent configuration."""
    model_config = SettingsConfigDict(
        env_prefix="SANDBOX_AGENT_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    agent_type: AgentType = "claude"
    model: ModelConfig = Field(default_factory=ModelConfig)
    working_directory: str = DEFAULT_WORKING_DIRECTORY
    secrets: Dict[str, str] = Field(default_factory=dict)
    session_id: Optional[str] = None  # Persisted sandbox id to resume
    worktrees: WorktreeConfig = Field(default_factory=WorktreeConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)

    @field_validator('working_directory')
    @classmethod
    def validate_working_directory(cls, v: str) -> str:
        if not v or not v.startswith("/"):
            raise ValueError(f"working_directory must be an absolute path, got '{v}'")
        return v


# Module-level mtime-based config cache: path -> (parsed_config, file_mtime)
_config_cache: Dict[str, tuple] = {}


def _get_cached_or_load(resolved_path: Path, loader):
    """Return cached config if file mtime unchanged, else reload."""
    key = str(resolved_path)
    try:
        current_mtime = resolved_path.stat().st_mtime
    except FileNotFoundError:
        _config_cache.pop(key, None)
        return None

    cached = _config_cache.get(key)
    if cached is not None:
        cached_result, cached_mtime = cached
        if cached_mtime == current_mtime:
            return cached_result

    result = loader(resolved_path)
    _config_cache[key] = (result, current_mtime)
    return result


def _load_config_from_file(config_path: Path) -> SandboxAgentConfig:
    """Internal loader for agent config (no caching)."""
    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    data = _expand_env_vars(data)
    return SandboxAgentConfig(**data)


def load_config(config_path: Path = Path("sandbox-agent.yaml")) -> SandboxAgentConfig:
    """Load agent configuration from YAML file.

    Uses mtime-based caching: returns cached config if the file hasn't changed.
    """
    config_path = Path(config_path)
    if not config_path.exists():
        logger.warning(
            f"Config file not found: {config_path}. Using default configuration. "
            "To customize settings, create a config file at this path."
        )
        return SandboxAgentConfig()

    result = _get_cached_or_load(config_path.resolve(), _load_config_from_file)
    return result if result is not None else SandboxAgentConfig()


def clear_config_cache() -> None:
    """Clear the module-level config cache. Useful for tests."""
    _config_cache.clear()


def _expand_env_vars(data: Any, _path: str = "") -> Any:
    """Recursively expand ``${VAR}`` references in config data.

    Args:
        data: Config data to process
        _path: Internal tracking for error messages (e.g., "github.token")
    """
    if isinstance(data, dict):
        return {k: _expand_env_vars(v, f"{_path}.{k}" if _path else k) for k, v in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item, f"{_path}[{i}]") for i, item in enumerate(data)]
    elif isinstance(data, str) and data.startswith("${") and data.endswith("}"):
        env_var = data[2:-1]
        value = os.environ.get(env_var)
        if value is None:
            logger.warning(
                f"Environment variable '{env_var}' not set (referenced at config path: {_path or 'root'}). "
                f"The literal string '{data}' will be used, which may cause errors."
            )
            return data
        return value
    return data
