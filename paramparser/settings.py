"""Runtime settings for the parameter parser.

Settings are resolved from three layers, later layers winning:

1. built-in defaults (:data:`DEFAULT_SETTINGS`)
2. a ``.env`` file (``PARAMPARSER__COMMENT_DELIMITER=;``)
3. the process environment, using the same key format
"""
from __future__ import annotations

import codecs
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from dotenv import dotenv_values
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from paramparser.errors import SettingsError

DEFAULT_ENV_PREFIX = "PARAMPARSER"
DEFAULT_ENV_FILENAME = ".env"
DEFAULT_COMMENT_DELIMITER = "#"
DEFAULT_GENERATOR_NAME = "ParameterParser"
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class StrictModel(BaseModel):
    """Base model enforcing strict validation rules."""

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
    )


class ParserSettings(StrictModel):
    """Settings shared by the registry, the logger and the CLI."""

    comment_delimiter: str = Field(
        default=DEFAULT_COMMENT_DELIMITER,
        description="Text starting a trailing comment. Empty disables comments.",
        examples=[";", "//"],
    )
    generator_name: str = Field(
        default=DEFAULT_GENERATOR_NAME,
        min_length=1,
        description="Tool name written into the header of generated files.",
    )
    encoding: str = Field(
        default="utf-8",
        description="Text encoding used to read and write parameter files.",
        examples=["latin-1"],
    )
    log_level: str = Field(
        default="WARNING",
        description="Minimum loguru level emitted by the console handler.",
    )
    log_file: Optional[Path] = Field(
        default=None,
        description="Optional file receiving a rotated copy of the log.",
    )

    @field_validator("encoding")
    @classmethod
    def _known_encoding(cls, value: str) -> str:
        try:
            codecs.lookup(value)
        except LookupError as exc:
            raise ValueError(f"unknown encoding: {value}") from exc
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of: {', '.join(LOG_LEVELS)}")
        return normalized

    @field_validator("log_file", mode="before")
    @classmethod
    def _blank_log_file(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


DEFAULT_SETTINGS = ParserSettings()


def _override_key(raw_key: str, prefix: str) -> Optional[str]:
    marker = prefix + "__"
    if not raw_key.startswith(marker):
        return None
    key_part = raw_key[len(marker) :]
    if not key_part:
        raise SettingsError(f"Environment override '{raw_key}' is missing a key")
    return key_part.lower()


def _format_validation_error(
    error: ValidationError, layers: Mapping[str, str]
) -> SettingsError:
    messages: list[str] = []
    for record in error.errors():
        location = ".".join(str(part) for part in record.get("loc", ()))
        origin = layers.get(location)
        origin_text = f" [{origin}]" if origin else ""
        detail = record.get("msg", "invalid value")
        input_value = record.get("input")
        if input_value is not None and not isinstance(input_value, dict):
            detail += f" (received={input_value!r})"
        messages.append(f"{location or '<root>'}: {detail}{origin_text}")
    combined = "\n - ".join(messages)
    return SettingsError(f"Settings validation failed:\n - {combined}")


def load_settings(
    env_file: Path | str | None = None,
    *,
    env_prefix: str = DEFAULT_ENV_PREFIX,
    environ: Mapping[str, str] | None = None,
) -> ParserSettings:
    """Merge defaults, the ``.env`` file and the environment into settings."""

    env_path = Path(env_file) if env_file else Path(DEFAULT_ENV_FILENAME)
    runtime_env = environ if environ is not None else os.environ

    merged: Dict[str, Any] = {}
    layers: Dict[str, str] = {}

    if env_path.exists():
        for key, value in dotenv_values(env_path, verbose=False).items():
            if value is None:
                continue
            field_name = _override_key(key, env_prefix)
            if field_name is None:
                continue
            merged[field_name] = value
            layers[field_name] = f"env-file ({key}, {env_path})"
    elif env_file:
        raise SettingsError(f"Settings file {env_path} does not exist")

    for key, value in runtime_env.items():
        field_name = _override_key(key, env_prefix)
        if field_name is None:
            continue
        merged[field_name] = value
        layers[field_name] = f"env ({key})"

    try:
        return ParserSettings.model_validate(merged)
    except ValidationError as exc:
        raise _format_validation_error(exc, layers) from exc


__all__ = [
    "DEFAULT_COMMENT_DELIMITER",
    "DEFAULT_ENV_PREFIX",
    "DEFAULT_GENERATOR_NAME",
    "DEFAULT_SETTINGS",
    "LOG_LEVELS",
    "ParserSettings",
    "load_settings",
]
