"""Command-line interface for duoparse."""

from __future__ import annotations

import argparse
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from duoparse.tokens import DEFAULT_EXTENSIONS, LanguageProfile, profile_for_filename

CONFIG_NAME = "duoparse.toml"


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path | None
    code: str | None
    profile: LanguageProfile
    show_tokens: bool
    show_tree: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="duoparse",
        description="Tokenize and parse boolean or C++-subset source, reporting every diagnostic",
    )
    p.add_argument("input", nargs="?", help="Source file to analyze")
    p.add_argument("-c", "--code", metavar="SOURCE", help="Analyze SOURCE instead of a file")
    p.add_argument(
        "-p",
        "--profile",
        choices=[profile.value for profile in LanguageProfile],
        help="Language profile (default: from file extension, then config, then boolean)",
    )
    p.add_argument(
        "--tokens",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Print the token table (default: off)",
    )
    p.add_argument(
        "--tree",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Print the syntax tree (default: on)",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help=f"Config file (default: auto-discover {CONFIG_NAME})",
    )
    return p


def parse_profile_arg(s: str) -> LanguageProfile:
    """Parse a profile name ('boolean' or 'cpp')."""
    try:
        return LanguageProfile(s)
    except ValueError:
        choices = ", ".join(profile.value for profile in LanguageProfile)
        raise argparse.ArgumentTypeError(
            f"invalid profile {s!r} (expected one of: {choices})"
        ) from None


def load_config(config_path: Path | None, base_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else base_dir / CONFIG_NAME

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: defaults < config file < CLI flags.
    """
    if (args.input is None) == (args.code is None):
        raise argparse.ArgumentTypeError("exactly one of FILE or --code is required")

    input_file = Path(args.input) if args.input is not None else None
    base_dir = input_file.parent if input_file is not None else Path(".")
    if not base_dir.parts:
        base_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, base_dir)

    # Extension mapping: built-in < config
    extensions = dict(DEFAULT_EXTENSIONS)
    cfg_ext = config.get("extensions")
    if isinstance(cfg_ext, dict):
        for suffix, name in cfg_ext.items():
            suffix = str(suffix).lower()
            if not suffix.startswith("."):
                suffix = "." + suffix
            extensions[suffix] = parse_profile_arg(str(name))

    # Profile: CLI < file extension < config default < boolean
    profile: LanguageProfile | None = None
    if args.profile is not None:
        profile = parse_profile_arg(args.profile)
    elif input_file is not None:
        profile = profile_for_filename(input_file.name, extensions)
    if profile is None:
        cfg_profile = config.get("profile")
        if isinstance(cfg_profile, str):
            profile = parse_profile_arg(cfg_profile)
        else:
            profile = LanguageProfile.BOOLEAN

    # Output switches: config < CLI
    show_tokens = False
    show_tree = True
    cfg_output = config.get("output")
    if isinstance(cfg_output, dict):
        if isinstance(cfg_output.get("tokens"), bool):
            show_tokens = cfg_output["tokens"]
        if isinstance(cfg_output.get("tree"), bool):
            show_tree = cfg_output["tree"]
    if args.tokens is not None:
        show_tokens = args.tokens
    if args.tree is not None:
        show_tree = args.tree

    return CliOptions(
        input_file=input_file,
        code=args.code,
        profile=profile,
        show_tokens=show_tokens,
        show_tree=show_tree,
    )


def run(options: CliOptions) -> int:
    """Analyze the selected source and print tokens, diagnostics, and tree.

    Returns 0 when no diagnostics were reported, 1 otherwise. Raises OSError
    when the input file cannot be read and UnicodeDecodeError when it is not
    UTF-8.
    """
    from duoparse import analyze
    from duoparse.printer import dump_tokens, dump_tree

    if options.input_file is not None:
        source = options.input_file.read_text(encoding="utf-8")
        filename = str(options.input_file)
    else:
        source = options.code or ""
        filename = "<code>"

    result = analyze(source, options.profile)

    if options.show_tokens:
        dump_tokens(result.tokens)

    # Lexical diagnostics first, then syntactic, each in discovery order
    for lex_error in result.lex_errors:
        print(lex_error.format(source, filename), file=sys.stderr)
    for parse_error in result.parse_errors:
        print(parse_error.format(source, filename), file=sys.stderr)

    if options.show_tree:
        dump_tree(result.program)

    if result.ok:
        return 0
    print(
        f"{filename}: {len(result.lex_errors)} lexical error(s), "
        f"{len(result.parse_errors)} syntax error(s)",
        file=sys.stderr,
    )
    return 1


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_options(args)
    except argparse.ArgumentTypeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except tomllib.TOMLDecodeError as exc:
        print(f"error: invalid config file: {exc}", file=sys.stderr)
        return 2

    try:
        return run(options)
    except OSError as exc:
        print(f"error: cannot read {options.input_file}: {exc}", file=sys.stderr)
        return 2
    except UnicodeDecodeError as exc:
        print(f"error: {options.input_file} is not valid UTF-8: {exc}", file=sys.stderr)
        return 2
