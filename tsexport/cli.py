"""CLI entrypoints for tsexport commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError
from .errors import DeclarationError, SchemaError
from .exporter import Exporter
from .logging import configure_logging


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_log_file_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "--log-file",
        default=argparse.SUPPRESS if suppress_default else None,
        metavar="PATH",
        help="Also write log records to this file.",
    )


def _add_project_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )
    parser.add_argument(
        "--source",
        dest="sources",
        action="append",
        default=None,
        metavar="PREFIX",
        help="Only scan files under this project-relative prefix (repeatable).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tsexport",
        description="Export tagged .NET model declarations as TypeScript types.",
    )
    _add_verbose_option(parser)
    _add_log_file_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    export_parser = subparsers.add_parser(
        "export",
        help="Generate TypeScript files for every exportable declaration.",
    )
    _add_verbose_option(export_parser, suppress_default=True)
    _add_log_file_option(export_parser, suppress_default=True)
    _add_project_arguments(export_parser)
    export_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output root for generated files (overrides output_root in .tsexport.yml).",
    )
    export_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Preview changes as a diff without writing files.",
    )
    export_parser.add_argument(
        "--fail-fast",
        action="store_true",
        help="Stop at the first declaration that cannot be exported.",
    )

    list_parser = subparsers.add_parser(
        "list",
        help="List the declarations that would be exported.",
    )
    _add_verbose_option(list_parser, suppress_default=True)
    _add_log_file_option(list_parser, suppress_default=True)
    _add_project_arguments(list_parser)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for tsexport commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file) if args.log_file else None
    configure_logging(verbose=bool(args.verbose), log_file=log_file)

    exporter = Exporter()

    if args.command == "export":
        try:
            report = exporter.run(
                args.path,
                output=args.output,
                allow=args.sources,
                dry_run=bool(getattr(args, "dry_run", False)),
                fail_fast=bool(getattr(args, "fail_fast", False)),
            )
        except (FileNotFoundError, NotADirectoryError) as exc:
            parser.exit(1, f"{exc}\n")
        except (ConfigError, SchemaError, DeclarationError) as exc:
            parser.exit(1, f"tsexport export failed: {exc}\n")
        except Exception as exc:  # pragma: no cover - defensive guard
            parser.exit(1, f"tsexport export failed: {exc}\nRun with --verbose for more details.\n")

        if report.dry_run:
            if report.diffs:
                print("Generated file changes (dry-run):")
                for diff in report.diffs.values():
                    print(diff, end="" if diff.endswith("\n") else "\n")
            else:
                print("Generated files already up to date (dry-run)")
        else:
            total = len(report.written) + len(report.unchanged)
            print(
                f"Exported {total} file(s) to {_relativize(report.output_root)}"
                f" ({len(report.written)} changed)"
            )
        if report.failures:
            for failure in report.failures:
                print(f"error: {failure}", file=sys.stderr)
            parser.exit(1, f"{len(report.failures)} declaration(s) failed to export\n")
    elif args.command == "list":
        try:
            declarations = exporter.discover(args.path, allow=args.sources)
        except (FileNotFoundError, NotADirectoryError) as exc:
            parser.exit(1, f"{exc}\n")
        except (ConfigError, SchemaError) as exc:
            parser.exit(1, f"tsexport list failed: {exc}\n")
        for declaration in declarations:
            print(
                f"{declaration.kind.value:<9} {declaration.qualified_name}"
                f" ({len(declaration.members)} members)"
            )
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
