"""Sandbox capability protocols."""

from .protocol import CommandResult, SandboxCommands, SandboxInstance, SandboxProvider

__all__ = [
    "CommandResult",
    "SandboxCommands",
    "SandboxInstance",
    "SandboxProvider",
]
