from __future__ import annotations

import string

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from paramparser.registry import ParameterRegistry, trim_spaces


TEXT_STRATEGY = st.text(alphabet=st.sampled_from(" \t\nab#"))
NAME_STRATEGY = st.text(
    alphabet=string.ascii_letters + string.digits + "_.",
    min_size=1,
    max_size=12,
)
VALUE_STRATEGY = st.text(
    alphabet=string.ascii_letters + string.digits + " /:.,-_=\t",
    min_size=1,
    max_size=20,
).filter(lambda value: trim_spaces(value) == value and value != "")


class _SilentSink:
    def warning(self, payload) -> None:
        raise AssertionError(f"unexpected warning: {payload}")

    def debug(self, payload) -> None:
        pass


@given(TEXT_STRATEGY)
@settings(max_examples=150)
def test_trim_spaces_is_idempotent_and_space_bounded(raw: str) -> None:
    trimmed = trim_spaces(raw)
    assert trim_spaces(trimmed) == trimmed
    assert not trimmed.startswith(" ")
    assert not trimmed.endswith(" ")
    assert trimmed in raw
    for kept in ("\t", "\n", "a", "b", "#"):
        assert trimmed.count(kept) == raw.count(kept)


@given(st.dictionaries(NAME_STRATEGY, VALUE_STRATEGY, min_size=1, max_size=8))
@settings(max_examples=50)
def test_generated_file_loads_back_unchanged(
    tmp_path_factory: pytest.TempPathFactory, values: dict[str, str]
) -> None:
    original = ParameterRegistry(diagnostics=_SilentSink())
    for name, value in values.items():
        original.register(name, value)
    path = original.write_parameter_file(tmp_path_factory.mktemp("roundtrip") / "p.cfg")

    fresh = ParameterRegistry(diagnostics=_SilentSink())
    for name in values:
        fresh.register(name)
    fresh.load_from_file(path)

    assert fresh.as_dict() == original.as_dict()
