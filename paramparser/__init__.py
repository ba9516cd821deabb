"""Declare named string parameters, load them from text files and write them back.

Attributes are resolved lazily so that reading ``paramparser.version`` during
packaging does not import loguru or pydantic.
"""
from __future__ import annotations

from importlib import import_module
from typing import Any, Dict, Iterable

__all__ = [
    "ParameterRegistry",
    "ParameterEntry",
    "ValueOrigin",
    "trim_spaces",
    "ParameterParserError",
    "DuplicateParameterError",
    "FileOpenError",
    "MalformedLineError",
    "ValueEncodingError",
    "UnknownParameterError",
    "NoValueError",
    "SettingsError",
    "ParserSettings",
    "DEFAULT_SETTINGS",
    "load_settings",
    "setup_logging",
    "PROJECT_VERSION",
    "__version__",
]

_MODULE_ATTRS: Dict[str, Iterable[str]] = {
    "paramparser.registry": [
        "ParameterRegistry",
        "ParameterEntry",
        "ValueOrigin",
        "trim_spaces",
    ],
    "paramparser.errors": [
        "ParameterParserError",
        "DuplicateParameterError",
        "FileOpenError",
        "MalformedLineError",
    "ValueEncodingError",
        "UnknownParameterError",
        "NoValueError",
        "SettingsError",
    ],
    "paramparser.settings": [
        "ParserSettings",
        "DEFAULT_SETTINGS",
        "load_settings",
    ],
    "paramparser.logger": [
        "setup_logging",
    ],
    "paramparser.version": [
        "PROJECT_VERSION",
        "__version__",
    ],
}

_ATTR_TO_MODULE: Dict[str, str] = {
    attribute: module for module, attributes in _MODULE_ATTRS.items() for attribute in attributes
}


def __getattr__(name: str) -> Any:
    module_name = _ATTR_TO_MODULE.get(name)
    if module_name is None:
        raise AttributeError(f"module 'paramparser' has no attribute {name!r}")
    module = import_module(module_name)
    for attribute in _MODULE_ATTRS[module_name]:
        globals()[attribute] = getattr(module, attribute)
    return globals()[name]
