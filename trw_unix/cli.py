"""
TRW CLI - Apply rewriting rules to files from the command line

Commands:
    trw apply -r RULES [FILE ...]   rewrite files (stdin when none) to stdout
    trw check -r RULES              validate a rules file and list its stages
    trw version                     print version information

Author: TRW maintainers | 2026-10-18
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from trw_core.config import TRWConfig, configure_logging, load_config
from trw_core.errors import ConfigurationError
from trw_core.rules import build_rules_pipeline, read_rules
from trw_core.version import get_short_banner, get_version_info

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_IO_ERROR = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    """Build argument parser for the trw CLI."""
    parser = argparse.ArgumentParser(
        prog="trw",
        description="Composable text rewriting: delete, replace and expand matches in files"
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config file (default: trw.yaml, searched upward)"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging (shortcut for --log-level DEBUG)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    apply_parser = subparsers.add_parser("apply", help="Rewrite files with a rules file")
    apply_parser.add_argument("files", nargs="*", type=Path, help="Input files (default: stdin)")
    apply_parser.add_argument("-r", "--rules", type=Path, help="YAML rules file")
    apply_parser.add_argument("-o", "--output", type=Path, help="Write the result to this file")
    apply_parser.add_argument("-i", "--in-place", action="store_true", help="Rewrite files in place")
    apply_parser.add_argument(
        "--backup-suffix",
        help="With --in-place, keep the original as FILE+SUFFIX"
    )

    check_parser = subparsers.add_parser("check", help="Validate a rules file")
    check_parser.add_argument("-r", "--rules", type=Path, help="YAML rules file")
    check_parser.add_argument("--json", action="store_true", help="Output as JSON")

    version_parser = subparsers.add_parser("version", help="Show version information")
    version_parser.add_argument("--json", action="store_true", help="Output as JSON")

    return parser


def _rules_path(args: argparse.Namespace, config: TRWConfig) -> Optional[Path]:
    if args.rules:
        return args.rules
    if config.io.rules:
        return Path(config.io.rules)
    return None


def cmd_apply(args: argparse.Namespace, config: TRWConfig) -> int:
    """Rewrite the given files (or stdin)."""
    rules_path = _rules_path(args, config)
    if rules_path is None:
        print("Error: no rules file given (use --rules or set io.rules / TRW_RULES)", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    if args.in_place and (args.output or not args.files):
        print("Error: --in-place needs input files and no --output", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    try:
        rewriter = build_rules_pipeline(read_rules(rules_path))
    except ConfigurationError as e:
        print(f"Error: {rules_path}: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except OSError as e:
        print(f"Error: cannot read rules: {e}", file=sys.stderr)
        return EXIT_IO_ERROR

    backup_suffix = args.backup_suffix if args.backup_suffix is not None else config.io.backup_suffix
    results: List[bytes] = []

    try:
        if not args.files:
            results.append(rewriter.apply(sys.stdin.buffer.read()))

        for path in args.files:
            result = rewriter.apply_file(path)
            logger.debug(f"Rewrote {path}")
            if args.in_place:
                _write_in_place(path, result, backup_suffix)
            else:
                results.append(result)

        if args.in_place:
            return EXIT_OK

        if args.output:
            args.output.write_bytes(b"".join(results))
        else:
            out = sys.stdout.buffer
            for result in results:
                out.write(result)
            out.flush()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_IO_ERROR

    return EXIT_OK


def _write_in_place(path: Path, content: bytes, backup_suffix: str) -> None:
    """Replace ``path`` with ``content`` atomically, keeping an optional backup."""
    if backup_suffix:
        backup = path.with_name(path.name + backup_suffix)
        backup.write_bytes(path.read_bytes())
        logger.info(f"Backup written to {backup}")

    # Write atomically
    temp_path = path.with_name(f".{path.name}.tmp")
    try:
        temp_path.write_bytes(content)
        temp_path.replace(path)
    except OSError:
        if temp_path.exists():
            temp_path.unlink()
        raise


def cmd_check(args: argparse.Namespace, config: TRWConfig) -> int:
    """Validate a rules file and list its stages."""
    rules_path = _rules_path(args, config)
    if rules_path is None:
        print("Error: no rules file given (use --rules or set io.rules / TRW_RULES)", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    try:
        specs = read_rules(rules_path)
        build_rules_pipeline(specs)
    except ConfigurationError as e:
        if args.json:
            print(json.dumps({"valid": False, "error": str(e)}, indent=2))
        else:
            print(f"Error: {rules_path}: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except OSError as e:
        print(f"Error: cannot read rules: {e}", file=sys.stderr)
        return EXIT_IO_ERROR

    if args.json:
        output = {
            "valid": True,
            "rules": [spec.to_dict() for spec in specs],
            "count": len(specs),
        }
        print(json.dumps(output, indent=2))
        return EXIT_OK

    print(f"{rules_path}: {len(specs)} rule(s)")
    for spec in specs:
        print(f"  {spec.index + 1:>3}. {spec.describe()}")
    return EXIT_OK


def cmd_version(args: argparse.Namespace, config: TRWConfig) -> int:
    """Show version information."""
    if args.json:
        print(json.dumps(get_version_info(), indent=2))
    else:
        print(get_short_banner())
    return EXIT_OK


COMMANDS = {
    "apply": cmd_apply,
    "check": cmd_check,
    "version": cmd_version,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the trw CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = load_config(args.config)
    level = "DEBUG" if args.debug else args.log_level
    configure_logging(config, level)

    if not args.command:
        parser.print_help()
        return EXIT_CONFIG_ERROR

    return COMMANDS[args.command](args, config)


if __name__ == "__main__":
    sys.exit(main())
