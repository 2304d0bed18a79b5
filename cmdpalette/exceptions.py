"""Custom exception hierarchy for cmdpalette.

Exception Hierarchy:
    PaletteError (base)
    ├── ConfigurationError - invalid settings written through the config API
    ├── CommandSourceError - a command source produced something unusable
    └── CommandExecutionError - a selected command failed while executing

Nothing in the palette core lets these escape into the host's event loop.
They are raised at the API boundary (configuration) or built to carry
context into a log record (sources, execution).

Usage:
    from cmdpalette.exceptions import ConfigurationError

    if max_rows < 1:
        raise ConfigurationError("max_rows must be positive", max_rows=max_rows)
"""

from typing import Any, Optional


class PaletteError(Exception):
    """Base exception for all cmdpalette errors.

    Attributes:
        message: Human-readable error description
        context: Additional context about the error (e.g., titles, paths)
        retryable: Whether this error might succeed on retry
    """

    def __init__(
        self,
        message: str,
        *,
        retryable: bool = False,
        **context: Any,
    ) -> None:
        self.message = message
        self.context = context
        self.retryable = retryable
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context."""
        if self.context:
            context_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(PaletteError):
    """Invalid configuration value."""

    def __init__(
        self,
        message: str = "Invalid configuration",
        *,
        key: Optional[str] = None,
        **context: Any,
    ) -> None:
        if key:
            context["key"] = key
        super().__init__(message, **context)


# =============================================================================
# Command Errors
# =============================================================================


class CommandSourceError(PaletteError):
    """A command source failed or returned an item that is not a command."""

    def __init__(
        self,
        message: str = "Command source failed",
        *,
        source: Optional[str] = None,
        **context: Any,
    ) -> None:
        if source:
            context["source"] = source
        super().__init__(message, **context)


class CommandExecutionError(PaletteError):
    """A command raised while executing."""

    def __init__(
        self,
        message: str = "Command execution failed",
        *,
        title: Optional[str] = None,
        arguments: Optional[list[str]] = None,
        **context: Any,
    ) -> None:
        if title:
            context["title"] = title
        if arguments is not None:
            context["arguments"] = arguments
        super().__init__(message, **context)
