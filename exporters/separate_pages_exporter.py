"""One markdown note per record."""

from typing import List, Sequence

from models import ConversionFormat, NotionDatabase, NotionRecord
from .base_exporter import BaseExporter


class SeparatePagesExporter(BaseExporter):
    """Writes every record as its own note and nothing else."""

    conversion_format = ConversionFormat.SEPARATE_PAGES

    def export(self, records: Sequence[NotionRecord], database: NotionDatabase, output_dir: str) -> List[str]:
        files = self.export_records(records, output_dir, progress_start=50, progress_span=40)
        self.logger.info(f"Wrote {len(files)} notes for '{database.title}' to {output_dir}")
        return files


__all__ = ['SeparatePagesExporter']
