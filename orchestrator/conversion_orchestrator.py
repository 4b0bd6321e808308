"""
Conversion orchestrator for turning one Notion database into Obsidian files.

This module sequences the stages of a conversion job: resolve the database,
retrieve its metadata, page through every record, create the output
directory and hand the batch to the selected format strategy. Progress is
published to the job's channel throughout.
"""

import logging
import os
import time
from typing import Any, Dict, List, Optional, Set, Tuple

from config_loader import get_nested, get_optional
from converters import record_filename, sanitize_filename, unique_filename
from exporters import FileSink, create_exporter
from exporters.dataview_exporter import TABLE_SUFFIX
from exporters.obsidian_base_exporter import BASE_SUFFIX
from fetchers.base_fetcher import DEFAULT_PAGE_SIZE, RecordSource
from models import ConversionFormat, ConversionJob, ConversionResult, NotionDatabase, NotionRecord
from notion_client import ConfigurationError
from progress import ProgressRegistry, ProgressReporter, Stage

logger = logging.getLogger('notion_obsidian_converter.orchestrator')


class ConversionFailed(Exception):
    """Raised when a conversion job cannot be completed."""

    def __init__(self, message: str, conversion_id: Optional[str] = None):
        self.conversion_id = conversion_id
        super().__init__(message)


class ConversionOrchestrator:
    """Central coordinator sequencing a conversion: Resolve → Retrieve → Query → Convert."""

    def __init__(
        self,
        source: RecordSource,
        registry: Optional[ProgressRegistry] = None,
        file_sink: Optional[FileSink] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize conversion orchestrator.

        Args:
            source: Record source for databases, records and blocks
            registry: Progress registry shared by concurrent jobs
            file_sink: Writer for the output files
            page_size: Page size used for record and block pagination
            logger: Optional logger instance
        """
        self.source = source
        self.registry = registry if registry is not None else ProgressRegistry()
        self.file_sink = file_sink or FileSink()
        self.page_size = page_size
        self.logger = logger or logging.getLogger('notion_obsidian_converter.orchestrator')

    @classmethod
    def from_config(
        cls,
        config: Dict[str, Any],
        source: RecordSource,
        registry: Optional[ProgressRegistry] = None,
        logger: Optional[logging.Logger] = None
    ) -> 'ConversionOrchestrator':
        """Build an orchestrator using the ``advanced`` settings of a configuration."""
        return cls(
            source,
            registry=registry,
            page_size=get_nested(config, 'advanced.page_size', DEFAULT_PAGE_SIZE),
            logger=logger
        )

    @staticmethod
    def job_from_config(
        config: Dict[str, Any],
        database_id: str,
        conversion_id: Optional[str] = None
    ) -> ConversionJob:
        """Build a job from the ``export`` settings of a configuration."""
        return ConversionJob(
            database_id=database_id,
            conversion_format=ConversionFormat(
                get_nested(config, 'export.conversion_format', ConversionFormat.SEPARATE_PAGES.value)
            ),
            output_path=get_optional(config, 'export.output_directory', './output'),
            obsidian_vault_path=get_optional(config, 'export.obsidian_vault_path'),
            create_notion_folder=get_nested(config, 'export.create_notion_folder', True),
            conversion_id=conversion_id
        )

    def run(self, job: ConversionJob) -> ConversionResult:
        """
        Execute a conversion job.

        Args:
            job: Job parameters

        Returns:
            ConversionResult describing the written files

        Raises:
            ConfigurationError: If the job names an unknown format
            ConversionFailed: If any stage fails; wraps the cause
        """
        conversion_format = self._resolve_format(job)
        reporter = ProgressReporter(self.registry, job.conversion_id)
        start_time = time.time()

        self.logger.info(
            f"Starting conversion of database {job.database_id} "
            f"(format: {conversion_format.value}, id: {job.conversion_id})"
        )

        try:
            reporter.report(Stage.STARTING, "Starting conversion...", 0)
            database, records = self._collect(job, reporter)

            output_dir = job.resolve_output_dir(sanitize_filename(database.title))
            self.file_sink.ensure_directory(output_dir)

            reporter.report(
                Stage.CONVERTING,
                f"Converting {len(records)} pages to Markdown...",
                50,
                total_records=len(records)
            )

            exporter = create_exporter(
                conversion_format,
                self.source,
                file_sink=self.file_sink,
                reporter=reporter,
                page_size=self.page_size,
                query_folder=self._query_folder(job, output_dir)
            )
            files = exporter.export(records, database, output_dir)

            reporter.report(
                Stage.COMPLETE,
                f"Conversion complete! Created {len(files)} files.",
                100,
                total_records=len(records),
                files_created=len(files)
            )
        except Exception as e:
            self.logger.error(f"Conversion of database {job.database_id} failed: {e}", exc_info=True)
            raise ConversionFailed(f"Failed to convert database: {e}", job.conversion_id) from e
        finally:
            if job.conversion_id is not None:
                self.registry.unregister(job.conversion_id)

        duration = time.time() - start_time
        self.logger.info(
            f"Converted '{database.title}': {len(files)} files in {output_dir} "
            f"({exporter.records_failed} records failed, {duration:.1f}s)"
        )

        return ConversionResult(
            success=True,
            database_title=database.title,
            files_created=len(files),
            output_path=output_dir,
            files=files,
            obsidian_integration=bool(job.obsidian_vault_path),
            conversion_id=job.conversion_id,
            conversion_format=conversion_format.value,
            records_total=len(records),
            records_failed=exporter.records_failed,
            duration_seconds=duration
        )

    def plan(self, job: ConversionJob) -> Tuple[str, List[str]]:
        """
        Fetch the records of a job and list the files it would write.

        Nothing is written and no blocks are fetched.

        Returns:
            Tuple of (output directory, planned file names)
        """
        conversion_format = self._resolve_format(job)
        database, records = self._collect(job, ProgressReporter(None, None))
        output_dir = job.resolve_output_dir(sanitize_filename(database.title))

        used: Set[str] = set()
        files: List[str] = []
        if conversion_format is not ConversionFormat.MARKDOWN_TABLE:
            files.extend(unique_filename(record_filename(record), used) for record in records)

        folder_name = sanitize_filename(database.title)
        if conversion_format in (ConversionFormat.DATAVIEW_TABLE, ConversionFormat.MARKDOWN_TABLE):
            files.append(unique_filename(f"{folder_name}{TABLE_SUFFIX}", used))
        elif conversion_format is ConversionFormat.OBSIDIAN_BASE:
            files.append(unique_filename(f"{folder_name}{BASE_SUFFIX}", used))

        return output_dir, files

    def _collect(self, job: ConversionJob, reporter: ProgressReporter) -> Tuple[NotionDatabase, List[NotionRecord]]:
        """Resolve the database and gather every record, following cursors."""
        reporter.report(Stage.SEARCHING, "Finding database...", 10)
        summary = self.source.find_database(job.database_id)
        object_type = summary.object_type if summary is not None else 'database'

        reporter.report(Stage.RETRIEVING, "Retrieving database information...", 20)
        database = self.source.retrieve_database(job.database_id, object_type)
        self.logger.info(
            f"Database retrieved: '{database.title}' ({database.object_type}, "
            f"{len(database.properties)} properties)"
        )

        reporter.report(Stage.QUERYING, f'Fetching pages from "{database.title}"...', 30)
        records: List[NotionRecord] = []
        cursor = None
        while True:
            page = self.source.query_records(database, cursor=cursor, page_size=self.page_size)
            records.extend(page.records)
            cursor = page.next_cursor
            reporter.report(
                Stage.QUERYING,
                f'Fetched {len(records)} pages from "{database.title}"...',
                30 + (10 if cursor else 20)
            )
            if not cursor:
                break

        self.logger.info(f"Fetched {len(records)} records from '{database.title}'")
        return database, records

    @staticmethod
    def _resolve_format(job: ConversionJob) -> ConversionFormat:
        try:
            return ConversionFormat(job.conversion_format)
        except ValueError:
            raise ConfigurationError(f"Unknown conversion format: {job.conversion_format}")

    @staticmethod
    def _query_folder(job: ConversionJob, output_dir: str) -> Optional[str]:
        """Output folder relative to the vault, as Dataview expects it."""
        if not job.obsidian_vault_path:
            return None
        relative = os.path.relpath(output_dir, job.obsidian_vault_path)
        return relative.replace(os.sep, '/')


__all__ = ['ConversionFailed', 'ConversionOrchestrator']
