"""CLI entry point for schemagate.

Usage:
    python -m schemagate list
    python -m schemagate show pinpoint
    python -m schemagate verify --actual ./snapshots/prod-hbase.yaml
    python -m schemagate verify pinpoint --actual ./snapshots/prod-hbase.yaml
    python -m schemagate verify --expected ./schemas/custom.yaml --actual ./snapshot.yaml --json

Exit codes:
    0  store satisfies the expected schema (or --no-fail was given)
    1  schema mismatch
    2  configuration, definition or source error
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from schemagate.lib.definition import list_packaged_definitions, resolve_definition
from schemagate.lib.errors import ConfigurationError, SchemaGateError, SchemaMismatchError
from schemagate.lib.gate import build_reporters, close_reporters, run_preflight
from schemagate.lib.logging import setup_logging
from schemagate.lib.settings import load_settings
from schemagate.lib.sources import DefinitionSchemaSource, SnapshotSchemaSource
from schemagate.lib.verifier import VerificationResult

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_MISMATCH = 1
EXIT_ERROR = 2


def list_definitions_command() -> int:
    """Print the packaged schema definitions."""
    names = list_packaged_definitions()
    if not names:
        print("No packaged schema definitions found.")
        return EXIT_OK

    print("Packaged schema definitions:")
    for name in names:
        print(f"  {name}")
    return EXIT_OK


def show_definition_command(definition: str, namespace: Optional[str] = None) -> int:
    """Print the tables and column families of a definition."""
    schemas = resolve_definition(definition, namespace)
    if not schemas:
        print(f"{definition}: no tables declared")
        return EXIT_OK

    width = max(len(s.identity) for s in schemas)
    width = max(width, 10)
    print(f"  {'Table':<{width}}  Column families")
    print(f"  {'-' * width}  {'-' * 30}")
    for schema in schemas:
        families = ", ".join(sorted(schema.families)) or "-"
        print(f"  {schema.identity:<{width}}  {families}")
    print()
    print(f"{len(schemas)} table(s)")
    return EXIT_OK


def print_result(result: VerificationResult, as_json: bool = False) -> None:
    """Print a verification result for humans or machines."""
    if as_json:
        print(json.dumps(result.to_dict(), indent=2))
        return

    status = "COMPATIBLE" if result.compatible else "MISMATCH"
    print(f"Schema check: {status}")
    print(f"  Expected tables: {result.expected_count}")
    print(f"  Store tables:    {result.actual_count}")
    for table in result.missing_tables:
        print(f"  Missing table:   {table}")
    for table, families in sorted(result.missing_families.items()):
        print(f"  Missing families on {table}: {', '.join(sorted(families))}")
    for table in result.duplicate_tables:
        print(f"  Duplicate table in store (last entry used): {table}")


def verify_command(args: argparse.Namespace) -> int:
    """Run the preflight check against a metadata snapshot."""
    settings = load_settings(
        definition=args.expected or args.definition,
        namespace=args.namespace,
        webhook_urls=args.webhook or None,
        webhook_id=args.webhook_id,
        fail_on_mismatch=False if args.no_fail else None,
    )

    reporters = build_reporters(settings)
    try:
        result = run_preflight(
            DefinitionSchemaSource(settings.definition, settings.namespace),
            SnapshotSchemaSource(args.actual),
            reporters=reporters,
            fail_on_mismatch=settings.fail_on_mismatch,
        )
    except SchemaMismatchError as e:
        if e.result is not None:
            print_result(e.result, as_json=args.json)
        return EXIT_MISMATCH
    finally:
        close_reporters(reporters)

    print_result(result, as_json=args.json)
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schemagate",
        description="Verify that a store's tables and column families satisfy an expected schema",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # List packaged schema definitions
    python -m schemagate list

    # Show the tables a definition declares
    python -m schemagate show pinpoint

    # Verify a store snapshot against the packaged definition
    python -m schemagate verify --actual ./prod-hbase.yaml

    # Verify and notify a webhook; report but do not fail on mismatch
    python -m schemagate verify --actual ./prod-hbase.yaml \\
        --webhook https://hooks.example.com/schema --webhook-id collector-7 --no-fail
        """,
    )

    parser.add_argument(
        "command",
        choices=["verify", "show", "list"],
        help="Command to run",
    )
    parser.add_argument(
        "definition",
        nargs="?",
        help="Definition name or path (for show and verify; same as --expected)",
    )
    parser.add_argument(
        "--expected",
        help="Expected schema: packaged definition name or file path (default: SCHEMAGATE_DEFINITION or 'pinpoint')",
    )
    parser.add_argument(
        "--actual",
        help="Store metadata snapshot file (required for verify)",
    )
    parser.add_argument(
        "--namespace",
        help="Namespace for unqualified table names in the expected definition",
    )
    parser.add_argument(
        "--webhook",
        action="append",
        default=[],
        help="Webhook URL to notify (repeatable)",
    )
    parser.add_argument(
        "--webhook-id",
        help="Correlation id sent with webhook notifications",
    )
    parser.add_argument(
        "--no-fail",
        action="store_true",
        help="Exit 0 even when the schema does not match",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the verification result as JSON",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--json-log",
        action="store_true",
        help="Output logs in JSON format (for log aggregation systems)",
    )
    parser.add_argument(
        "--log-file",
        help="Write logs to a file in addition to console",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "verify":
        if not args.actual:
            parser.error("--actual is required for verify")
        if args.definition and args.expected:
            parser.error("give the expected definition either positionally or with --expected, not both")
    elif args.command == "list" and args.definition:
        parser.error("list takes no definition argument")

    try:
        settings = load_settings()
    except ConfigurationError as e:
        print(f"\nError: {e}", file=sys.stderr)
        sys.exit(EXIT_ERROR)

    # Flags switch options on; settings (SCHEMAGATE_LOG_*) supply the rest
    log_config = settings.logging_config
    setup_logging(
        verbose=args.verbose or log_config.verbose,
        json_format=args.json_log or log_config.json_format,
        log_file=args.log_file or log_config.file,
        level=log_config.level,
    )

    try:
        if args.command == "list":
            code = list_definitions_command()
        elif args.command == "show":
            code = show_definition_command(args.definition or args.expected or settings.definition, args.namespace)
        else:
            code = verify_command(args)

    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(130)

    except SchemaGateError as e:
        logger.error("%s failed: %s", args.command, e)
        print(f"\nError: {e}", file=sys.stderr)
        sys.exit(EXIT_ERROR)

    sys.exit(code)


if __name__ == "__main__":
    main()
