"""Rich logging with sandbox/branch context and better formatting."""

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional


class AgentLogFormatter(logging.Formatter):
    """Custom formatter with sandbox context."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",      # Cyan
        "INFO": "\033[32m",       # Green
        "WARNING": "\033[33m",    # Yellow
        "ERROR": "\033[31m",      # Red
        "CRITICAL": "\033[35m",   # Magenta
    }

    def __init__(self, agent_type: str, use_colors: bool = True):
        super().__init__()
        self.agent_type = agent_type
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with context."""
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        sandbox_context = ""
        if hasattr(record, "sandbox_id"):
            sandbox_context = f"[{record.sandbox_id[:12]}] "

        branch_context = ""
        if hasattr(record, "branch"):
            branch_context = f"[{record.branch}] "

        if self.use_colors:
            level_color = self.LEVEL_COLORS.get(record.levelname, "")
            reset = "\033[0m"
        else:
            level_color = ""
            reset = ""

        return (
            f"{timestamp} {level_color}{record.levelname:8s}{reset} "
            f"[{self.agent_type}] {sandbox_context}{branch_context}{record.getMessage()}"
        )


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that adds sandbox and branch context to all log messages."""

    def __init__(self, logger: logging.Logger, agent_type: str):
        super().__init__(logger, {})
        self.agent_type = agent_type
        self.current_sandbox_id: Optional[str] = None
        self.current_branch: Optional[str] = None

    def set_session_context(
        self,
        sandbox_id: Optional[str] = None,
        branch: Optional[str] = None,
    ):
        """Set current sandbox/branch context for logging."""
        if sandbox_id:
            self.current_sandbox_id = sandbox_id
        if branch:
            self.current_branch = branch

    def clear_context(self):
        """Clear sandbox context (after the sandbox is killed)."""
        self.current_sandbox_id = None
        self.current_branch = None

    def process(self, msg, kwargs):
        """Add context to log record."""
        extra = kwargs.get("extra", {})

        if self.current_sandbox_id:
            extra["sandbox_id"] = self.current_sandbox_id
        if self.current_branch:
            extra["branch"] = self.current_branch

        kwargs["extra"] = extra
        return msg, kwargs


def setup_rich_logging(
    agent_type: str,
    log_dir: Optional[Path] = None,
    log_level: str = "INFO",
    use_file: bool = False,
    use_json: bool = False,
) -> ContextLogger:
    """
    Setup rich logging with better formatting.

    Args:
        agent_type: Agent variant name (claude, codex, ...)
        log_dir: Directory for the log file (required when use_file=True)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        use_file: Write to log file
        use_json: Use JSON structured logging

    Returns:
        ContextLogger instance
    """
    # PID keeps loggers of independent agent processes apart
    unique_logger_name = f"sandbox_agent.{agent_type}-{os.getpid()}"
    logger = logging.getLogger(unique_logger_name)
    logger.setLevel(getattr(logging, log_level.upper()))
    logger.propagate = False

    # Close existing handlers before clearing (prevents file descriptor leak)
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)

    if use_json:
        formatter = logging.Formatter(
            '{"timestamp":"%(asctime)s","agent":"%(agent)s","level":"%(levelname)s",'
            '"message":"%(message)s","module":"%(module)s","function":"%(funcName)s"}',
            defaults={'agent': agent_type}
        )
    else:
        formatter = AgentLogFormatter(agent_type, use_colors=True)

    # Skip console output when stdout is redirected (running as subprocess)
    stdout_is_redirected = not sys.stdout.isatty() if hasattr(sys.stdout, 'isatty') else False

    if not stdout_is_redirected:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if use_file:
        if log_dir is None:
            raise ValueError("log_dir is required when use_file=True")
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        # Plain formatter for files (no ANSI codes)
        file_handler = logging.FileHandler(log_dir / f"{agent_type}.log")
        file_handler.setFormatter(AgentLogFormatter(agent_type, use_colors=False))
        logger.addHandler(file_handler)

    return ContextLogger(logger, agent_type)
