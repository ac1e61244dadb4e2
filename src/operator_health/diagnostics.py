"""Diagnostic sinks for health check warnings.

Checks report problems as (level, message key, args). The default sink
renders the message for the key, writes it to the module logger and keeps the
diagnostic so callers can inspect what was reported.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from operator_health.enums import MessageKey

logger = logging.getLogger(__name__)


class Diagnostic(BaseModel):
    """One reported health check problem."""

    level: int = Field(..., description="logging level, e.g. logging.WARNING")
    message_key: MessageKey = Field(..., description="Key identifying the class of problem")
    args: tuple[Any, ...] = Field(default_factory=tuple, description="Message substitution args")

    model_config = ConfigDict(frozen=True)

    @property
    def message(self) -> str:
        return self.message_key.render(*self.args)


class DiagnosticSink(ABC):
    """Receives diagnostics from health checks."""

    @abstractmethod
    def emit(self, level: int, message_key: MessageKey, *args: Any) -> None:
        """Record one diagnostic.

        Args:
            level: logging level
            message_key: Key identifying the message
            *args: Substitution args for the message template
        """
        pass

    def warning(self, message_key: MessageKey, *args: Any) -> None:
        self.emit(logging.WARNING, message_key, *args)


class LoggingDiagnosticSink(DiagnosticSink):
    """Logs diagnostics and keeps every one it received."""

    def __init__(self, sink_logger: logging.Logger = None):
        self.logger = sink_logger or logger
        self.diagnostics: list[Diagnostic] = []

    def emit(self, level: int, message_key: MessageKey, *args: Any) -> None:
        diagnostic = Diagnostic(level=level, message_key=message_key, args=args)
        self.diagnostics.append(diagnostic)
        self.logger.log(level, f"[{message_key.value}] {diagnostic.message}")

    def keys(self, level: int = logging.WARNING) -> list[MessageKey]:
        """Get the message keys recorded at a level, in emission order."""
        return [d.message_key for d in self.diagnostics if d.level == level]

    def contains_warning(self, message_key: MessageKey) -> bool:
        return message_key in self.keys(logging.WARNING)
