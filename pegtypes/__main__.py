"""
Command-line entry point.

    python -m pegtypes grammar.pegjs
    python -m pegtypes grammar.pegjs -o types.ts --return-types '{"Integer": "number"}'
    python -m pegtypes grammar.pegjs --return-types @types.json --no-camel-case
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence, TextIO

from pegtypes import __version__
from pegtypes.config import DEFAULT_FALLBACK_TYPE, GeneratorConfig
from pegtypes.errors import PegTypesError
from pegtypes.generator import generate_types
from pegtypes.peg import parse_grammar

_log = logging.getLogger("pegtypes")

# Exit codes ----------------------------------------------------------------

EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_INFRA: int = 2


def _configure_logging(verbosity: int) -> None:
    """Set up the root ``pegtypes`` logger.

    Parameters
    ----------
    verbosity:
        0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger("pegtypes")
    root.setLevel(level)
    root.handlers = [handler]


def _load_return_types(raw: Optional[str]) -> Dict[str, str]:
    """Parse ``--return-types``: inline JSON, or ``@path`` to a JSON file."""
    if not raw:
        return {}
    if raw.startswith("@"):
        raw = Path(raw[1:]).expanduser().read_text(encoding="utf-8")
    value = json.loads(raw)
    if not isinstance(value, dict):
        raise ValueError("return types must be a JSON object")
    return {str(key): str(text) for key, text in value.items()}


def _open_output(dest: Optional[str]) -> TextIO:
    """*dest* ``None`` or ``"-"`` → ``sys.stdout``; otherwise open the path."""
    if dest is None or dest == "-":
        return sys.stdout
    path = Path(dest).expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    return open(path, "w", encoding="utf-8")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pegtypes",
        description="Emit TypeScript type declarations for the rules of a peggy grammar.",
    )
    parser.add_argument("grammar", help="peggy grammar file")
    parser.add_argument("-o", "--output", default=None, help="output file (default: stdout)")
    parser.add_argument(
        "--return-types",
        default=None,
        metavar="JSON",
        help="rule name → type mapping as JSON, or @file.json",
    )
    parser.add_argument(
        "--allowed-start-rules",
        default=None,
        metavar="RULES",
        help="comma-separated start rules, or '*' for all (default: first rule)",
    )
    parser.add_argument(
        "--no-camel-case",
        action="store_true",
        help="use rule names unchanged as type names",
    )
    parser.add_argument("--header", default=None, help="text emitted before the declarations")
    parser.add_argument(
        "--fallback-type",
        default=DEFAULT_FALLBACK_TYPE,
        help=f"type for rules without structural signal (default: {DEFAULT_FALLBACK_TYPE})",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0)
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    grammar_path = Path(args.grammar).expanduser()
    if not grammar_path.exists():
        _log.error("grammar not found: %s", grammar_path)
        return EXIT_INFRA

    try:
        return_types = _load_return_types(args.return_types)
    except (OSError, ValueError) as exc:
        _log.error("invalid --return-types: %s", exc)
        return EXIT_INFRA

    start_rules: Optional[List[str]] = None
    if args.allowed_start_rules:
        start_rules = [name.strip() for name in args.allowed_start_rules.split(",") if name.strip()]

    config = GeneratorConfig(
        do_not_camel_case_types=args.no_camel_case,
        custom_header=args.header,
        fallback_type=args.fallback_type,
    )

    try:
        grammar = parse_grammar(grammar_path.read_text(encoding="utf-8"), start_rules)
        text = generate_types(grammar, return_types, config)
    except PegTypesError as exc:
        _log.error("%s: %s", grammar_path, exc)
        return EXIT_ERROR

    stream = _open_output(args.output)
    try:
        stream.write(text)
    finally:
        if stream is not sys.stdout:
            stream.close()
    _log.info("wrote %d declarations", len(grammar))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
