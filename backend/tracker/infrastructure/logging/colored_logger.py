"""Colored pipeline logger — ANSI-colored console logging for the query pipeline.

Provides a PipelineLogger with color-coded output per pipeline stage,
making it easy to visually trace a natural-language query in the terminal.

Color scheme:
    🔵 Blue    — Parsing
    🟡 Yellow  — Gate (unclear / meaningless input)
    🟣 Magenta — Dispatch to the task directory
    🟢 Green   — Complete
    🔴 Red     — Errors
"""

import logging
from typing import Any


# ── ANSI Color Codes ─────────────────────────────────────────────────

class _Colors:
    """ANSI escape codes for terminal colors."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    GRAY = "\033[90m"


# ── Pipeline Stage Definitions ───────────────────────────────────────

class PipelineStage:
    """Predefined query pipeline stages with colors and icons."""

    PARSE = ("PARSE", _Colors.BLUE, "🔎")
    GATE = ("GATE", _Colors.YELLOW, "🚧")
    DISPATCH = ("DISPATCH", _Colors.MAGENTA, "📋")
    COMPLETE = ("COMPLETE", _Colors.GREEN, "✅")
    ERROR = ("ERROR", _Colors.RED, "❌")


# ── PipelineLogger ───────────────────────────────────────────────────

class PipelineLogger:
    """Color-coded logger for the query pipeline.

    Usage:
        log = PipelineLogger("tracker.query_pipeline")
        log.step_start(PipelineStage.PARSE, "show alice tasks")
        log.detail("intent=query_tasks", confidence=0.9)
        log.step_complete(PipelineStage.COMPLETE, "3 results")
    """

    def __init__(self, component_name: str):
        self._logger = logging.getLogger(component_name)

    def step_start(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        """Log the start of a pipeline step with its stage color."""
        label, color, icon = stage
        formatted = (
            f"{color}{_Colors.BOLD}{icon} [{label}]{_Colors.RESET} "
            f"{color}{message}{_Colors.RESET}"
        )
        self._logger.info(formatted + _details(kwargs, _Colors.GRAY))

    def step_complete(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        """Log the successful completion of a pipeline step."""
        label, color, icon = stage
        formatted = (
            f"{color}{icon} [{label}]{_Colors.RESET} "
            f"{_Colors.GREEN}✓ {message}{_Colors.RESET}"
        )
        self._logger.info(formatted + _details(kwargs, _Colors.GRAY))

    def step_warning(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        """Log a step that ended without a usable result."""
        label, color, icon = stage
        formatted = f"{color}{icon} [{label}]{_Colors.RESET} {color}{message}{_Colors.RESET}"
        self._logger.warning(formatted + _details(kwargs, _Colors.GRAY))

    def step_error(self, stage: tuple[str, str, str], message: str, error: Exception | None = None) -> None:
        """Log a pipeline step error in red."""
        label, _, icon = stage
        formatted = (
            f"{_Colors.RED}{_Colors.BOLD}{icon} [{label}]{_Colors.RESET} "
            f"{_Colors.RED}{message}{_Colors.RESET}"
        )
        if error:
            formatted += f" {_Colors.DIM}→ {type(error).__name__}: {error}{_Colors.RESET}"
        self._logger.error(formatted)

    def detail(self, message: str, **kwargs: Any) -> None:
        """Log additional detail (gray/dimmed)."""
        formatted = f"   {_Colors.GRAY}├─ {message}{_Colors.RESET}"
        self._logger.info(formatted + _details(kwargs, _Colors.DIM))


def _details(kwargs: dict[str, Any], color: str) -> str:
    if not kwargs:
        return ""
    details = " | ".join(f"{k}={v}" for k, v in kwargs.items())
    return f" {color}({details}){_Colors.RESET}"
