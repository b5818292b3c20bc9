"""Command-line interface for texptx."""

from __future__ import annotations

import argparse
import logging
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from texptx.convert import UNKNOWN_ENV_POLICIES, ConversionResult, EngineOptions
from texptx.errors import CodecError, format_snippet


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path
    output_file: Path | None
    source_file: Path | None
    unknown_environments: str
    remove_environments: list[str]
    strict: bool
    debug: bool
    verbose: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="texptx",
        description="Rewrite a LaTeX JSON AST into PreTeXt elements",
    )
    p.add_argument("input", help="Input JSON AST file")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument(
        "--source",
        metavar="FILE",
        help="Original .tex file, used to show source lines in diagnostics",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: auto-discover texptx.toml)",
    )
    p.add_argument(
        "--unknown-env",
        choices=UNKNOWN_ENV_POLICIES,
        default=None,
        help="What to do with environments that have no rule (default: keep)",
    )
    p.add_argument(
        "--remove-env",
        action="append",
        default=[],
        metavar="NAME",
        help="Remove this environment, keeping its content (repeatable)",
    )
    p.add_argument("--strict", action="store_true", help="Exit 2 if any diagnostic is emitted")
    p.add_argument("--debug", action="store_true", help="Dump the rewritten AST to stderr")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return p


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / "texptx.toml"

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags.
    """
    input_file = Path(args.input)
    input_dir = input_file.parent
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, input_dir)

    # Unknown-environment policy and strictness: config < CLI
    unknown_environments = "keep"
    strict = False
    cfg_convert = config.get("convert")
    if isinstance(cfg_convert, dict):
        cfg_unknown = cfg_convert.get("unknown_environments")
        if cfg_unknown is not None:
            if cfg_unknown not in UNKNOWN_ENV_POLICIES:
                raise argparse.ArgumentTypeError(
                    f"invalid unknown_environments in config: {cfg_unknown!r}"
                )
            unknown_environments = cfg_unknown
        if isinstance(cfg_convert.get("strict"), bool):
            strict = cfg_convert["strict"]
    if args.unknown_env is not None:
        unknown_environments = args.unknown_env
    strict = strict or args.strict

    # Removed environments: config + CLI
    remove_environments: list[str] = []
    cfg_envs = config.get("environments")
    if isinstance(cfg_envs, dict):
        cfg_remove = cfg_envs.get("remove")
        if isinstance(cfg_remove, list):
            remove_environments.extend(str(name) for name in cfg_remove)
    remove_environments.extend(args.remove_env)

    return CliOptions(
        input_file=input_file,
        output_file=Path(args.output) if args.output else None,
        source_file=Path(args.source) if args.source else None,
        unknown_environments=unknown_environments,
        remove_environments=remove_environments,
        strict=strict,
        debug=args.debug,
        verbose=args.verbose,
    )


def convert_file(options: CliOptions) -> ConversionResult:
    """Read, decode and convert a JSON AST file."""
    from texptx.codec import loads
    from texptx.convert import SubstitutionEngine
    from texptx.debug import dump_ast

    text = options.input_file.read_text(encoding="utf-8")
    root = loads(text)

    engine = SubstitutionEngine(
        EngineOptions(
            unknown_environments=options.unknown_environments,
            remove_environments=tuple(options.remove_environments),
        )
    )
    filename = str(options.source_file or options.input_file)
    result = engine.convert(root, filename)

    if options.debug:
        dump_ast(result.root, file=sys.stderr)

    return result


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_options(args)
    except (argparse.ArgumentTypeError, tomllib.TOMLDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=logging.DEBUG if options.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        result = convert_file(options)
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except CodecError as exc:
        print(format_snippet("error", exc.message, exc.span, "", str(options.input_file)), file=sys.stderr)
        return 1

    from texptx.codec import dumps

    source = ""
    if options.source_file is not None and options.source_file.is_file():
        source = options.source_file.read_text(encoding="utf-8")
    filename = str(options.source_file or options.input_file)
    for diagnostic in result.diagnostics:
        print(diagnostic.format(source, filename), file=sys.stderr)

    output = dumps(result.root) + "\n"
    if options.output_file:
        options.output_file.write_text(output, encoding="utf-8")
    else:
        sys.stdout.write(output)

    if options.strict and result.diagnostics:
        return 2
    return 0
