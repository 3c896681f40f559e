"""Exception types raised by ml-toolkit.

Every error derives from :class:`MLToolkitError` and from the builtin
exception a caller would reach for anyway, so ``except ValueError`` keeps
working for configuration and format problems.
"""

from __future__ import annotations


class MLToolkitError(Exception):
    """Base class for all ml-toolkit errors."""


class NullArgumentError(MLToolkitError, TypeError):
    """A required argument was ``None``."""

    def __init__(self, name: str, where: str) -> None:
        super().__init__(f"{name} is None at {where}")
        self.name = name
        self.where = where


class InvalidConfigurationError(MLToolkitError, ValueError):
    """A smoothing delta or structural parameter is out of range."""


class UninitializedModelError(MLToolkitError, RuntimeError):
    """The model was used before ``train()`` or ``load_model()``."""


class MalformedModelFileError(MLToolkitError, ValueError):
    """A model file line has the wrong shape or appears out of order."""

    def __init__(self, message: str, line_number: int | None = None) -> None:
        if line_number is not None:
            message = f"{message} (line {line_number})"
        super().__init__(message)
        self.line_number = line_number


class CorpusFormatError(MLToolkitError, ValueError):
    """A training-vector line or JSON document could not be parsed."""

    def __init__(self, message: str, line_number: int | None = None) -> None:
        if line_number is not None:
            message = f"{message} (line {line_number})"
        super().__init__(message)
        self.line_number = line_number


class UnclassifiedDocumentError(MLToolkitError, AttributeError):
    """System output was read from a document that has not been classified."""


class IOFailureError(MLToolkitError, OSError):
    """Reading or writing a corpus or model file failed."""


class CorpusIOError(IOFailureError):
    """A corpus file could not be read."""


class ModelIOError(IOFailureError):
    """A model or system-output file could not be read or written."""
