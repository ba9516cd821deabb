"""Exception taxonomy for parameter registration, parsing and lookup."""
from __future__ import annotations

from pathlib import Path
from typing import Optional


class ParameterParserError(RuntimeError):
    """Base class for every error raised by :mod:`paramparser`."""


class DuplicateParameterError(ParameterParserError):
    """Raised when a parameter name is registered twice."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f'Parameter "{name}" already exists!')


class FileOpenError(ParameterParserError):
    """Raised when a parameter file cannot be opened for reading or writing."""

    def __init__(self, path: str | Path, mode: str) -> None:
        self.path = str(path)
        self.mode = mode
        super().__init__(f'Could not open file "{self.path}" for {mode}!')


class MalformedLineError(ParameterParserError):
    """Raised when a line violates the ``name value`` syntax or cannot be decoded."""

    def __init__(self, source: str | Path, line: int, content: str, reason: str) -> None:
        self.source = str(source)
        self.line = line
        self.content = content
        self.reason = reason
        super().__init__(
            f'Found {reason} in line {line} of configuration file "{self.source}"!'
        )


class ValueEncodingError(ParameterParserError):
    """Raised when a parameter cannot be written in the configured encoding."""

    def __init__(self, path: str | Path, encoding: str, name: Optional[str] = None) -> None:
        self.path = str(path)
        self.encoding = encoding
        self.name = name
        subject = f'Parameter "{name}"' if name is not None else "File header"
        super().__init__(
            f'{subject} cannot be encoded as {encoding} for file "{self.path}"!'
        )


class UnknownParameterError(ParameterParserError):
    """Raised when looking up a name that was never registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f'Unknown parameter name: "{name}"')


class NoValueError(ParameterParserError):
    """Raised when a registered parameter has neither a loaded nor a default value."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f'No value for parameter "{name}" read and no default value defined.'
        )


class SettingsError(ParameterParserError):
    """Raised when runtime settings fail validation."""


__all__ = [
    "ParameterParserError",
    "DuplicateParameterError",
    "FileOpenError",
    "MalformedLineError",
    "ValueEncodingError",
    "UnknownParameterError",
    "NoValueError",
    "SettingsError",
]
