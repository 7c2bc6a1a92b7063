"""Error hierarchy shared by every qtcli component.

Validation errors stay inside the text widget that raised them.  Every
other error propagates unchanged to the command layer, which maps each
kind to its own exit status.
"""

from __future__ import annotations


class QtCliError(Exception):
    """Base class for all qtcli errors."""


class ExpressionError(QtCliError):
    """Raised when a template expression cannot be parsed or evaluated."""

    def __init__(self, name: str, message: str) -> None:
        self.name = name
        super().__init__(f"{name}: {message}" if name else message)


class ValidationError(QtCliError):
    """Raised by a validator rule when the input buffer is rejected."""


class AbortedError(QtCliError):
    """Raised when the user cancels a flow or a selector."""

    def __init__(self, message: str = "aborted") -> None:
        super().__init__(message)


class NotFoundError(QtCliError):
    """Raised when a preset, built-in template or file type cannot be resolved."""


class ManifestError(QtCliError):
    """Raised when a template or question manifest is malformed."""


class PersistenceError(QtCliError):
    """Raised when the user preset store cannot be read or written."""


class PresetExistsError(QtCliError):
    """Raised when a preset name is already taken."""


class RenderError(QtCliError):
    """Raised when the generation pipeline fails.

    ``cause`` holds the underlying failure when the render error wraps one.
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        self.cause = cause
        super().__init__(message)


class ManifestNotFoundError(RenderError):
    """The template directory has no template manifest."""


class InputMissingError(RenderError):
    """A file rule points at a template input that does not exist."""


class OutputConflictError(RenderError):
    """An output path already exists on disk or is emitted twice."""
