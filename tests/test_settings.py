from __future__ import annotations

from pathlib import Path

import pytest

from paramparser.errors import SettingsError
from paramparser.settings import DEFAULT_SETTINGS, ParserSettings, load_settings


def test_defaults_without_sources() -> None:
    settings = load_settings(None, environ={})
    assert settings == DEFAULT_SETTINGS
    assert settings.comment_delimiter == "#"
    assert settings.generator_name == "ParameterParser"


def test_precedence_env_overrides(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "PARAMPARSER__COMMENT_DELIMITER=;\nPARAMPARSER__LOG_LEVEL=info\n",
        encoding="utf-8",
    )
    environ = {"PARAMPARSER__COMMENT_DELIMITER": "//", "UNRELATED": "1"}
    settings = load_settings(env_file, environ=environ)
    assert settings.comment_delimiter == "//"
    assert settings.log_level == "INFO"


def test_empty_delimiter_and_log_file(tmp_path: Path) -> None:
    environ = {"PARAMPARSER__COMMENT_DELIMITER": "", "PARAMPARSER__LOG_FILE": ""}
    settings = load_settings(None, environ=environ)
    assert settings.comment_delimiter == ""
    assert settings.log_file is None


def test_custom_prefix() -> None:
    settings = load_settings(None, env_prefix="APP", environ={"APP__GENERATOR_NAME": "mytool"})
    assert settings.generator_name == "mytool"


def test_validation_errors_report_source(tmp_path: Path) -> None:
    env_file = tmp_path / "settings.env"
    env_file.write_text("PARAMPARSER__LOG_LEVEL=chatty\n", encoding="utf-8")
    with pytest.raises(SettingsError) as excinfo:
        load_settings(env_file, environ={})
    message = str(excinfo.value)
    assert "log_level" in message
    assert "env-file" in message


def test_unknown_key_is_rejected() -> None:
    with pytest.raises(SettingsError) as excinfo:
        load_settings(None, environ={"PARAMPARSER__COLOR": "blue"})
    assert "color" in str(excinfo.value)
    assert "PARAMPARSER__COLOR" in str(excinfo.value)


def test_explicit_missing_env_file(tmp_path: Path) -> None:
    with pytest.raises(SettingsError):
        load_settings(tmp_path / "missing.env", environ={})


@pytest.mark.parametrize(
    "field, value",
    [("encoding", "no-such-codec"), ("generator_name", "")],
)
def test_invalid_fields(field: str, value: str) -> None:
    with pytest.raises(SettingsError) as excinfo:
        load_settings(None, environ={f"PARAMPARSER__{field.upper()}": value})
    assert field in str(excinfo.value)


def test_model_rejects_assignment_of_bad_level() -> None:
    settings = ParserSettings()
    with pytest.raises(ValueError):
        settings.log_level = "LOUD"
