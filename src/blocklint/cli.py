"""blocklint CLI: validate block documents against component props."""

import argparse
import logging
import sys
from importlib.metadata import version as get_version, PackageNotFoundError
from pathlib import Path


def _print_component_result(result, verbose: bool) -> None:
    for component in result.components:
        if component.unused:
            print(f"[UNUSED] {component.file} - not used in any JSON")
        elif component.total_errors:
            print(f"[FAILED] {component.file} - {len(component.occurrences)} occurrence(s), {component.total_errors} error(s)")
            for occurrence in component.occurrences:
                location = f" ({occurrence.document}:{occurrence.line})" if occurrence.line else f" ({occurrence.document})"
                for issue in occurrence.errors:
                    prefix = f'"{issue.path}": ' if issue.path else ""
                    print(f"  - {prefix}{issue.message}{location}")
        elif component.total_warnings:
            print(f"[WARN] {component.file} - {len(component.occurrences)} occurrence(s), {component.total_warnings} warning(s)")
            for occurrence in component.occurrences:
                for issue in occurrence.warnings:
                    prefix = f'"{issue.path}": ' if issue.path else ""
                    print(f"  - {prefix}{issue.message} ({occurrence.document})")
        elif verbose:
            print(f"[OK] {component.file} - {len(component.occurrences)} occurrence(s)")

    for issue in result.document_errors:
        print(f"[FAILED] {issue.document} - {issue.message}")

    for pattern in result.anti_patterns:
        line = f":{pattern.line}" if pattern.line else ""
        print(f"[ANTI-PATTERN] {pattern.type} {pattern.document}{line} at {pattern.path}")
        print(f"  {pattern.message}")

    print(f"Status: {'OK' if result.ok else 'FAILED'}")
    print(f"  Components: {len(result.components)}")
    print(f"  Occurrences: {result.occurrence_count}")
    print(f"  Errors: {result.error_count}")
    print(f"  Warnings: {result.warning_count}")
    print(f"  Unused: {len(result.unused)}")
    if result.anti_patterns:
        print(f"  Anti-patterns: {len(result.anti_patterns)}")


def _print_document_result(result) -> None:
    for report in result.reports:
        for issue in report.issues:
            level = "FAILED" if issue.severity == "error" else "WARN"
            where = f"{report.path} " if report.path else ""
            prefix = f'"{issue.path}": ' if issue.path else ""
            print(f"[{level}] {report.file} {where}{report.identifier}".rstrip())
            print(f"  - {prefix}{issue.message}")

    if result.unused_saved_blocks:
        print("Unused saved blocks:")
        for name in result.unused_saved_blocks:
            print(f"  - {name}")

    print(f"Status: {'OK' if result.ok else 'FAILED'}")
    print(f"  Documents: {result.documents}")
    print(f"  Errors: {len(result.errors)}")
    print(f"  Warnings: {len(result.warnings)}")
    print(f"  Unresolved: {len(result.unresolved)}")
    print(f"  Unused saved blocks: {len(result.unused_saved_blocks)}")


def main():
    """Main CLI entry point for blocklint commands."""
    try:
        blocklint_version = get_version("blocklint")
    except PackageNotFoundError:
        blocklint_version = "dev"

    parser = argparse.ArgumentParser(
        prog="blocklint",
        description="blocklint: validate CMS block documents against component props types"
    )
    parser.add_argument("--version", action="version", version=f"blocklint {blocklint_version}")
    # Common arguments
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument(
        "--project-root",
        type=Path,
        default=Path("."),
        help="Project directory (defaults to the current directory)"
    )
    parent_parser.add_argument(
        "--blocks",
        type=Path,
        default=None,
        help="Blocks directory (defaults to <project-root>/.deco/blocks)"
    )
    parent_parser.add_argument(
        "--unused",
        action="store_true",
        help="Warn about properties not declared in the component's props type."
    )
    parent_parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress all non-error output."
    )
    parent_parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log progress to stderr and list clean components."
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # sections command
    sections_parser = subparsers.add_parser(
        "sections",
        help="Validate every occurrence of each section, loader and action",
        parents=[parent_parser]
    )
    sections_parser.add_argument(
        "file",
        nargs="?",
        type=Path,
        default=None,
        help="Validate only this component source file"
    )
    sections_parser.add_argument(
        "--report",
        nargs="?",
        const=Path("validation-report.json"),
        type=Path,
        default=None,
        help="Write a JSON report (defaults to validation-report.json)"
    )

    # blocks command
    subparsers.add_parser(
        "blocks",
        help="Validate every reference in every block document, following saved blocks",
        parents=[parent_parser]
    )

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Lazy import: only load config (and kernel) once a command is given
    from .config import ConfigError, LintConfig

    try:
        config = LintConfig.for_project(
            args.project_root,
            blocks_dir=args.blocks,
            report_unused_properties=args.unused,
        )
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.command == "sections":
        from .api import lint_components, write_report

        try:
            result = lint_components(config, target=args.file)
            report_path = write_report(result, args.report) if args.report is not None else None
        except FileNotFoundError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        except Exception as e:
            print(f"Unexpected error: {e}", file=sys.stderr)
            import traceback
            traceback.print_exc()
            sys.exit(1)

        if not args.quiet:
            _print_component_result(result, args.verbose)
            if report_path is not None:
                print(f"  Report: {report_path}")
        if not result.ok:
            sys.exit(1)
    elif args.command == "blocks":
        from .api import lint_documents

        try:
            result = lint_documents(config)
        except Exception as e:
            print(f"Unexpected error: {e}", file=sys.stderr)
            import traceback
            traceback.print_exc()
            sys.exit(1)

        if not args.quiet:
            _print_document_result(result)
        if not result.ok:
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
