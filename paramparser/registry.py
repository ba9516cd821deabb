"""Registry of named string parameters backed by a line-oriented text file.

A parameter file holds one ``<name> <value>`` pair per line::

    # generated defaults
    threads 4
    output_dir  /tmp/run   # trailing comments are ignored

Everything from the comment delimiter to the end of the line is dropped, the
line is split at its first space, and plain spaces around both halves are
trimmed. Only names registered beforehand are accepted; unknown names are
reported to the diagnostics sink and skipped.
"""
from __future__ import annotations

import shutil
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, Optional, TextIO

from paramparser.errors import (
    DuplicateParameterError,
    FileOpenError,
    MalformedLineError,
    NoValueError,
    UnknownParameterError,
    ValueEncodingError,
)
from paramparser.logger import create_module_logger
from paramparser.settings import ParserSettings

BACKUP_DIRNAME = "backups"
CURRENT_PARAMETERS_HEADER = "Current parameters:"
NO_VALUE_MARKER = "<no value set>"


@dataclass(frozen=True)
class ValueOrigin:
    """Provenance metadata for the current value of a parameter."""

    layer: str
    source: str
    line: int | None = None

    def render(self) -> str:
        """Return a human-readable provenance description."""

        details: list[str] = []
        if self.source:
            details.append(self.source)
        if self.line is not None:
            details.append(f"line {self.line}")
        if details:
            return f"{self.layer} ({', '.join(details)})"
        return self.layer


@dataclass
class ParameterEntry:
    """State of one registered parameter; ``value is None`` means unset."""

    name: str
    value: Optional[str] = None
    origin: Optional[ValueOrigin] = None

    @property
    def is_set(self) -> bool:
        return self.value is not None


def trim_spaces(text: str) -> str:
    """Remove leading and trailing ``' '`` characters.

    Tabs, line breaks and interior spaces are left alone; an empty or
    all-space string yields ``""``.
    """
    return text.strip(" ")


def _strip_terminator(raw: str) -> str:
    return raw.rstrip("\r\n")


class ParameterRegistry:
    """Declares parameters, loads them from files and serializes them back.

    Args:
        comment_delimiter: Overrides ``settings.comment_delimiter``.
        settings: Runtime settings; built-in defaults when omitted.
        diagnostics: Sink for non-fatal diagnostics. Any object exposing
            ``warning`` and ``debug`` methods that accept a payload dict,
            e.g. a loguru logger. Defaults to this module's loguru logger.
    """

    def __init__(
        self,
        comment_delimiter: Optional[str] = None,
        *,
        settings: Optional[ParserSettings] = None,
        diagnostics: Any = None,
    ) -> None:
        self.settings = settings if settings is not None else ParserSettings()
        self._comment_delimiter = (
            comment_delimiter
            if comment_delimiter is not None
            else self.settings.comment_delimiter
        )
        self._entries: Dict[str, ParameterEntry] = {}
        self.diagnostics = (
            diagnostics if diagnostics is not None else create_module_logger(__name__)
        )

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(parameters={len(self._entries)}, "
            f"comment_delimiter={self._comment_delimiter!r})"
        )

    # Registration
    # ------------

    def register(self, name: str, default: str = "") -> None:
        """Add ``name`` to the registry, optionally with a default value.

        An empty ``default`` leaves the parameter unset; any other default
        is stored verbatim.

        Raises:
            DuplicateParameterError: If ``name`` is already registered.
        """
        if name in self._entries:
            raise DuplicateParameterError(name)
        entry = ParameterEntry(name=name)
        if default != "":
            entry.value = default
            entry.origin = ValueOrigin(layer="default", source="register")
        self._entries[name] = entry

    @property
    def comment_delimiter(self) -> str:
        return self._comment_delimiter

    @comment_delimiter.setter
    def comment_delimiter(self, delimiter: str) -> None:
        self.set_comment_delimiter(delimiter)

    def set_comment_delimiter(self, delimiter: str) -> None:
        """Use ``delimiter`` for subsequent parses; ``""`` disables comments."""
        self._comment_delimiter = delimiter

    # Loading
    # -------

    def load_from_file(self, path: Path | str) -> int:
        """Read values for known parameters from the file at ``path``.

        Returns:
            The number of lines whose value was applied.

        Raises:
            FileOpenError: If the file cannot be opened.
            MalformedLineError: On the first line violating the syntax or not
                decodable with ``settings.encoding``. Lines before it may
                already have been applied.
        """
        file_path = Path(path)
        try:
            handle = file_path.open("r", encoding=self.settings.encoding)
        except OSError as exc:
            raise FileOpenError(file_path, "reading") from exc
        with handle:
            try:
                return self.load_from_stream(handle, source=str(file_path))
            except UnicodeDecodeError as exc:
                raise self._undecodable_line(file_path, exc) from exc

    def _undecodable_line(
        self, path: Path, error: UnicodeDecodeError
    ) -> MalformedLineError:
        # The text layer decodes whole chunks, so locate the offending line
        # by decoding the raw bytes in one piece.
        encoding = self.settings.encoding
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise FileOpenError(path, "reading") from exc
        offset = error.start
        try:
            data.decode(encoding)
        except UnicodeDecodeError as located:
            offset = located.start
        line_number = data.count(b"\n", 0, offset) + 1
        raw_line = data.split(b"\n")[line_number - 1]
        content = _strip_terminator(raw_line.decode(encoding, errors="replace"))
        return MalformedLineError(
            path, line_number, content, f"text that is not valid {encoding}"
        )

    def load_from_stream(self, stream: Iterable[str], source: str = "<stream>") -> int:
        """Parse ``stream`` line by line; see :meth:`load_from_file`."""
        applied = 0
        ignored = 0
        for line_number, raw in enumerate(stream, start=1):
            parsed = self._tokenize(_strip_terminator(raw), source, line_number)
            if parsed is None:
                continue
            name, value = parsed
            entry = self._entries.get(name)
            if entry is None:
                ignored += 1
                self._emit(
                    "warning",
                    "registry.load.unknown_parameter",
                    message=f'Unknown parameter identifier "{name}" will be ignored!',
                    name=name,
                    source=source,
                    line=line_number,
                )
                continue
            entry.value = value
            entry.origin = ValueOrigin(layer="file", source=source, line=line_number)
            applied += 1

        self._emit(
            "debug",
            "registry.load.completed",
            source=source,
            applied=applied,
            ignored=ignored,
        )
        return applied

    def _strip_comment(self, text: str) -> str:
        delimiter = self._comment_delimiter
        if not delimiter:
            return text
        start = text.find(delimiter)
        return text if start < 0 else text[:start]

    def _tokenize(
        self, text: str, source: str, line_number: int
    ) -> Optional[tuple[str, str]]:
        content = self._strip_comment(text)
        # Only a zero-length remainder is skipped; "   " still has to parse.
        if not content:
            return None
        name, separator, value = content.partition(" ")
        if not separator:
            raise MalformedLineError(
                source, line_number, text, "parameter without value"
            )
        name = trim_spaces(name)
        value = trim_spaces(value)
        if not value:
            raise MalformedLineError(
                source, line_number, text, "identifier without value"
            )
        return name, value

    # Serialization
    # -------------

    def write_parameter_file(self, path: Path | str, *, backup: bool = False) -> Path:
        """Write every parameter holding a value to ``path``, sorted by name.

        Unset parameters are omitted so the result can be loaded back as is.
        With ``backup=True`` an existing file is first copied to
        ``backups/<name>.<timestamp>.bak`` next to it.

        Raises:
            FileOpenError: If the file (or its backup) cannot be written.
            ValueEncodingError: If a line cannot be encoded with
                ``settings.encoding``; the target is left untouched.
        """
        target = Path(path)
        lines = self._render_parameter_file(target)
        if backup and target.is_file():
            self._backup(target)
        try:
            handle = target.open("w", encoding=self.settings.encoding)
        except OSError as exc:
            raise FileOpenError(target, "writing") from exc
        with handle:
            handle.writelines(lines)
        return target

    def _render_parameter_file(self, target: Path) -> list[str]:
        encoding = self.settings.encoding
        rendered: list[tuple[Optional[str], str]] = []
        if self._comment_delimiter:
            rendered.append(
                (
                    None,
                    f"{self._comment_delimiter} Default config file generated by "
                    f"{self.settings.generator_name}\n",
                )
            )
        for entry in self._iter_entries():
            if not entry.is_set:
                continue
            self._check_reloadable(entry, target)
            rendered.append((entry.name, f"{entry.name} {entry.value}\n"))

        for name, line in rendered:
            try:
                line.encode(encoding)
            except UnicodeEncodeError as exc:
                raise ValueEncodingError(target, encoding, name) from exc
        return [line for _, line in rendered]

    def _backup(self, target: Path) -> Path:
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
        backup_path = target.parent / BACKUP_DIRNAME / f"{target.name}.{timestamp}.bak"
        try:
            backup_path.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(target, backup_path)
        except OSError as exc:
            raise FileOpenError(backup_path, "writing") from exc
        self._emit(
            "debug",
            "registry.write.backup",
            source=str(target),
            backup=str(backup_path),
        )
        return backup_path

    def _check_reloadable(self, entry: ParameterEntry, target: Path) -> None:
        value = entry.value or ""
        problems: list[str] = []
        if not entry.name or " " in entry.name:
            problems.append("name is empty or contains a space")
        if self._comment_delimiter and (
            self._comment_delimiter in value or self._comment_delimiter in entry.name
        ):
            problems.append("contains the comment delimiter")
        if "\n" in value or "\r" in value:
            problems.append("value contains a line break")
        if value != trim_spaces(value):
            problems.append("value has leading or trailing spaces")
        if problems:
            self._emit(
                "warning",
                "registry.write.unreloadable_value",
                message=(
                    f'Parameter "{entry.name}" will not load back unchanged: '
                    + "; ".join(problems)
                ),
                name=entry.name,
                source=str(target),
            )

    def write_current_parameters(self, stream: Optional[TextIO] = None) -> None:
        """Write a human-readable dump of every parameter, unset ones included.

        Defaults to ``sys.stdout``. Stream errors propagate to the caller.
        """
        out = stream if stream is not None else sys.stdout
        out.write(f"{CURRENT_PARAMETERS_HEADER}\n")
        for entry in self._iter_entries():
            if entry.is_set:
                out.write(f"{entry.name} = {entry.value}\n")
            else:
                out.write(f"{entry.name} {NO_VALUE_MARKER}\n")

    # Lookup
    # ------

    def _entry(self, name: str) -> ParameterEntry:
        entry = self._entries.get(name)
        if entry is None:
            raise UnknownParameterError(name)
        return entry

    def get_value(self, name: str) -> str:
        """Return the current value of ``name``.

        Raises:
            UnknownParameterError: If ``name`` was never registered.
            NoValueError: If it has neither a default nor a loaded value.
        """
        entry = self._entry(name)
        if entry.value is None:
            raise NoValueError(name)
        return entry.value

    def is_set(self, name: str) -> bool:
        return self._entry(name).is_set

    def origin(self, name: str) -> Optional[ValueOrigin]:
        """Return where the current value of ``name`` came from, if it has one."""
        return self._entry(name).origin

    def explain(self, name: str) -> str:
        entry = self._entry(name)
        if entry.value is None:
            return f"{name} {NO_VALUE_MARKER}\nsource: none"
        origin_text = entry.origin.render() if entry.origin else "unknown"
        return f"{name} = {entry.value}\nsource: {origin_text}"

    def names(self) -> list[str]:
        return sorted(self._entries)

    def as_dict(self) -> Dict[str, str]:
        """Return the parameters holding a value, sorted by name."""
        return {
            entry.name: entry.value
            for entry in self._iter_entries()
            if entry.value is not None
        }

    def _iter_entries(self) -> Iterator[ParameterEntry]:
        for name in sorted(self._entries):
            yield self._entries[name]

    def _emit(self, level: str, event: str, **fields: Any) -> None:
        payload: Dict[str, Any] = {"event": event}
        payload.update({key: value for key, value in fields.items() if value is not None})
        log_method = getattr(self.diagnostics, level, None)
        if callable(log_method):
            log_method(payload)
        else:
            self.diagnostics.warning(payload)


__all__ = [
    "BACKUP_DIRNAME",
    "CURRENT_PARAMETERS_HEADER",
    "NO_VALUE_MARKER",
    "ParameterEntry",
    "ParameterRegistry",
    "ValueOrigin",
    "trim_spaces",
]
