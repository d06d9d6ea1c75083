from __future__ import annotations


class PromptlineError(Exception):
    """Base class for errors raised by promptline."""


class ConfigurationError(PromptlineError):
    """The configuration document is malformed or fails validation."""


class TemplateError(PromptlineError):
    """A format string is malformed or references an unknown variable."""

    def __init__(self, message: str, position: int | None = None):
        self.position = position
        if position is not None:
            message = f"{message} (at offset {position})"
        super().__init__(message)
