"""Command-line utilities for inspecting and generating parameter files."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from loguru import logger

from paramparser.errors import ParameterParserError
from paramparser.logger import setup_logging
from paramparser.registry import ParameterRegistry
from paramparser.settings import DEFAULT_ENV_PREFIX, ParserSettings, load_settings


def _parse_declaration(raw: str) -> tuple[str, str]:
    name, _, default = raw.partition("=")
    name = name.strip()
    if not name:
        raise ParameterParserError(f"Invalid --param declaration: '{raw}'")
    return name, default


def _build_registry(args: argparse.Namespace, settings: ParserSettings) -> ParameterRegistry:
    registry = ParameterRegistry(args.comment, settings=settings)
    for raw in args.param or []:
        name, default = _parse_declaration(raw)
        registry.register(name, default)
    for path in args.config or []:
        applied = registry.load_from_file(path)
        logger.debug(f"Loaded {applied} value(s) from {path}")
    return registry


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="paramparser",
        description="Inspect and generate line-oriented parameter files",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--env-file", type=Path, help="Path to a .env file with PARAMPARSER__* settings")
    parser.add_argument(
        "--env-prefix",
        default=DEFAULT_ENV_PREFIX,
        help="Environment variable prefix (e.g. PARAMPARSER__COMMENT_DELIMITER)",
    )
    parser.add_argument("--comment", help="Comment delimiter overriding the settings value")
    parser.add_argument(
        "-p",
        "--param",
        action="append",
        metavar="NAME[=DEFAULT]",
        help="Declare a parameter, optionally with a default (repeatable)",
    )
    parser.add_argument(
        "-c",
        "--config",
        action="append",
        type=Path,
        metavar="FILE",
        help="Parameter file to load; later files override earlier ones (repeatable)",
    )
    parser.add_argument(
        "--backup",
        action="store_true",
        help="With --write-template, keep a timestamped copy of the previous file",
    )
    actions = parser.add_mutually_exclusive_group(required=True)
    actions.add_argument("--validate", action="store_true", help="Parse the files and report syntax errors")
    actions.add_argument("--show", action="store_true", help="Print every declared parameter and its value")
    actions.add_argument("--get", metavar="NAME", help="Print the value of a single parameter")
    actions.add_argument("--explain", metavar="NAME", help="Explain where a parameter value originates")
    actions.add_argument(
        "--write-template",
        type=Path,
        metavar="OUT",
        help="Write the parameters holding a value to a parameter file",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.env_file, env_prefix=args.env_prefix)
        setup_logging(settings)
        registry = _build_registry(args, settings)
        if args.validate:
            print("Configuration OK")
            return 0
        if args.show:
            registry.write_current_parameters(sys.stdout)
            return 0
        if args.get is not None:
            print(registry.get_value(args.get))
            return 0
        if args.explain is not None:
            print(registry.explain(args.explain))
            return 0
        if args.write_template is not None:
            target = registry.write_parameter_file(args.write_template, backup=args.backup)
            print(f"Saved parameters to {target}")
            return 0
    except ParameterParserError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - module CLI entry point
    raise SystemExit(main())
