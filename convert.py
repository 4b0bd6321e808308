#!/usr/bin/env python3
"""
Notion to Obsidian Converter - Main CLI Entry Point

This script provides the command-line interface for converting a Notion
database into Obsidian notes, a Dataview table, a markdown table or an
Obsidian Bases view.
"""

import argparse
import logging
import sys
import uuid

from config_loader import ConfigLoader, get_nested
from fetchers import FetcherError, NotionApiFetcher
from logger import log_config, log_section, setup_logging
from models import ConversionFormat
from notion_client import ConfigurationError
from orchestrator import ConversionFailed, ConversionOrchestrator, ConversionReport
from progress import ProgressRegistry, TqdmProgressChannel

# Version
__version__ = "1.0.0"


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for CLI."""
    parser = argparse.ArgumentParser(
        description="Convert Notion databases into Obsidian-ready markdown",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List the databases shared with the integration
  python convert.py --list-databases

  # Convert a database to one note per record
  python convert.py --database-id 1a2b3c...

  # Write straight into a vault with a Dataview table
  python convert.py --database-id 1a2b3c... --vault-path ~/Vault --format dataview-table

  # Preview the files without writing anything
  python convert.py --database-id 1a2b3c... --dry-run

  # Verbose logging
  python convert.py --database-id 1a2b3c... -vv
        """
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    parser.add_argument(
        '--config',
        type=str,
        help='Path to configuration YAML file (default: built-in settings)'
    )

    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument(
        '--list-databases',
        action='store_true',
        help='List the databases the integration can access and exit'
    )
    target.add_argument(
        '--database-id',
        type=str,
        help='ID of the database or data source to convert'
    )

    parser.add_argument(
        '--format',
        choices=[f.value for f in ConversionFormat],
        help='Conversion format (default: from config, separate-pages)'
    )

    parser.add_argument(
        '--output-dir',
        type=str,
        help='Directory for converted files when no vault is given'
    )

    parser.add_argument(
        '--vault-path',
        type=str,
        help='Obsidian vault to write into'
    )

    parser.add_argument(
        '--no-notion-folder',
        action='store_true',
        help="Write directly below the vault instead of into 'Notion Imports'"
    )

    parser.add_argument(
        '--conversion-id',
        type=str,
        help='Correlation id for progress updates (default: random)'
    )

    parser.add_argument(
        '--report',
        type=str,
        help='Write a JSON conversion report to this path'
    )

    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Fetch records and list the files that would be written'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        help='Also write log output to this file'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='count',
        default=0,
        help='Increase verbosity (-v for INFO, -vv for DEBUG)'
    )

    return parser


def list_databases(fetcher: NotionApiFetcher) -> int:
    """Print every accessible database with its id."""
    databases = fetcher.list_databases()
    if not databases:
        print("No databases found. Share a database with your integration first.")
        return 0

    for database in databases:
        print(f"{database.id}  {database.title}  ({database.object_type}, {len(database.properties)} properties)")
    return 0


def run_conversion(config: dict, args: argparse.Namespace, logger: logging.Logger) -> int:
    """
    Convert the requested database.

    Args:
        config: Validated configuration
        args: Parsed CLI arguments
        logger: Logger instance

    Returns:
        Exit code
    """
    fetcher = NotionApiFetcher.from_config(config)

    if args.list_databases:
        return list_databases(fetcher)

    registry = ProgressRegistry()
    orchestrator = ConversionOrchestrator.from_config(config, fetcher, registry=registry)
    job = orchestrator.job_from_config(
        config,
        args.database_id,
        conversion_id=args.conversion_id or str(uuid.uuid4())
    )

    if args.dry_run:
        log_section("Dry run")
        output_dir, files = orchestrator.plan(job)
        print(f"Would write {len(files)} files to {output_dir}:")
        for name in files:
            print(f"  {name}")
        return 0

    registry.register(job.conversion_id, TqdmProgressChannel(description="Converting"))

    try:
        result = orchestrator.run(job)
    except ConversionFailed as e:
        logger.error(str(e))
        return 1

    reporter = ConversionReport()
    report = reporter.generate_report(result)
    print(reporter.format_console_report(report))

    if args.report:
        reporter.export_json_report(report, args.report)

    return 0


def main() -> int:
    """Main entry point for the CLI."""
    parser = create_argument_parser()
    args = parser.parse_args()

    try:
        # Minimal logging until the config file has been read
        setup_logging(verbosity=args.verbose)
        logger = logging.getLogger('notion_obsidian_converter.cli')

        log_section("Notion to Obsidian Converter")
        logger.info(f"Version: {__version__}")

        logger.info(f"Loading configuration from {args.config or 'defaults'}")
        config = ConfigLoader.load(args.config)

        # CLI takes precedence
        config = ConfigLoader.merge_with_args(config, args)
        ConfigLoader.validate(config)

        setup_logging(
            verbosity=args.verbose,
            log_file=get_nested(config, 'logging.file'),
            level=get_nested(config, 'logging.level') if not args.verbose else None
        )
        log_config(config)

        return run_conversion(config, args, logger)

    except FileNotFoundError as e:
        print(f"ERROR: File not found: {e}", file=sys.stderr)
        return 2
    except (ValueError, ConfigurationError) as e:
        print(f"ERROR: Configuration error: {e}", file=sys.stderr)
        return 2
    except FetcherError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nConversion interrupted by user", file=sys.stderr)
        return 130
    except Exception as e:
        print(f"ERROR: Unexpected error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
