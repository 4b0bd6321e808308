"""Common machinery shared by all conversion format strategies."""

import logging
import os
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Set, Tuple

from converters import record_filename, render_record, sanitize_filename, unique_filename
from fetchers.base_fetcher import DEFAULT_PAGE_SIZE, RecordSource
from logger import ProgressTracker
from models import ConversionFormat, NotionDatabase, NotionRecord
from progress import ProgressReporter, Stage
from .file_sink import FileSink

# Per-record progress is published for every Nth record and the last one
PROGRESS_INTERVAL = 10


class BaseExporter(ABC):
    """
    Base class of the format strategies.

    A strategy receives the complete record batch and writes its files
    through a ``FileSink``. Record level failures are logged and skipped;
    file system errors propagate to the caller.
    """

    conversion_format: ConversionFormat

    def __init__(
        self,
        source: RecordSource,
        file_sink: Optional[FileSink] = None,
        reporter: Optional[ProgressReporter] = None,
        logger: Optional[logging.Logger] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        query_folder: Optional[str] = None
    ):
        """
        Initialize the exporter.

        Args:
            source: Record source used to fetch each record's blocks
            file_sink: Writer for the output files
            reporter: Progress reporter bound to the job
            logger: Logger instance
            page_size: Page size for block fetches
            query_folder: Vault-relative folder aggregate queries should read from
        """
        self.source = source
        self.file_sink = file_sink or FileSink()
        self.reporter = reporter or ProgressReporter(None, None)
        self.logger = logger or logging.getLogger(f'notion_obsidian_converter.exporters.{self.__class__.__name__}')
        self.page_size = page_size
        self.query_folder = query_folder
        self.records_failed = 0
        self._used_names: Set[str] = set()

    @abstractmethod
    def export(self, records: Sequence[NotionRecord], database: NotionDatabase, output_dir: str) -> List[str]:
        """
        Write the batch in this strategy's format.

        Args:
            records: Every record of the database
            database: Database metadata
            output_dir: Existing output directory

        Returns:
            Names of the written files, in write order
        """
        pass

    def convert_record(self, record: NotionRecord) -> Tuple[str, str]:
        """
        Fetch a record's blocks and render it.

        Returns:
            Tuple of (desired file name, document text)
        """
        blocks = self.source.fetch_all_blocks(record.id, page_size=self.page_size)
        return record_filename(record), render_record(record, blocks)

    def write_file(self, output_dir: str, filename: str, content: str) -> str:
        """Write a file under a name not yet used by this export; returns the name."""
        final_name = unique_filename(filename, self._used_names)
        if final_name != filename:
            self.logger.warning(f"File name '{filename}' already used, writing '{final_name}' instead")
        self.file_sink.write_text(output_dir, final_name, content)
        return final_name

    def export_records(
        self,
        records: Sequence[NotionRecord],
        output_dir: str,
        progress_start: float = 50,
        progress_span: float = 40,
        message: str = "Converted {current}/{total} pages..."
    ) -> List[str]:
        """
        Write one note per record.

        Args:
            records: Records to convert
            output_dir: Existing output directory
            progress_start: Percentage before the first record
            progress_span: Percentage points covered by the whole batch
            message: Progress message template with {current} and {total}

        Returns:
            Names of the written notes
        """
        files: List[str] = []
        total = len(records)

        with ProgressTracker(total_items=total, item_type='records', logger=self.logger) as tracker:
            for index, record in enumerate(records):
                try:
                    filename, content = self.convert_record(record)
                except Exception as e:
                    self.logger.error(f"Error converting page {record.id}: {e}", exc_info=True)
                    self.records_failed += 1
                    tracker.increment(success=False)
                else:
                    files.append(self.write_file(output_dir, filename, content))
                    tracker.increment(success=True)

                if index % PROGRESS_INTERVAL == 0 or index == total - 1:
                    self.reporter.report(
                        Stage.CONVERTING,
                        message.format(current=index + 1, total=total),
                        progress_start + (index + 1) / total * progress_span,
                        current_record=index + 1,
                        total_records=total
                    )

        return files

    def aggregate_filename(self, database: NotionDatabase, suffix: str) -> str:
        """Name of a database-level file, e.g. ``Tasks_Table.md``."""
        return f"{sanitize_filename(database.title)}{suffix}"

    def resolve_query_folder(self, output_dir: str) -> str:
        """Folder that vault queries should be scoped to."""
        if self.query_folder:
            return self.query_folder
        return os.path.basename(os.path.normpath(output_dir))


__all__ = ['BaseExporter', 'PROGRESS_INTERVAL']
