"""The whole database as a single markdown table."""

from datetime import datetime, timezone
from typing import List, Optional, Sequence

from converters import escape_table_cell, extract_value
from models import ConversionFormat, NotionDatabase, NotionRecord
from progress import Stage
from .base_exporter import BaseExporter

TABLE_SUFFIX = '_Table.md'
EMPTY_CELL = '-'
ROW_PROGRESS_INTERVAL = 50


def table_title(record: NotionRecord) -> str:
    """Title cell text; untitled records show the tail of their id."""
    if record.has_title:
        return record.title
    return f"Page {record.id[-8:]}"


def table_row(record: NotionRecord, columns: Sequence[str]) -> List[str]:
    """Cells of one record, in header order."""
    row = [escape_table_cell(table_title(record)) or EMPTY_CELL]
    for name in columns:
        prop = record.properties.get(name)
        value = extract_value(prop) if prop is not None else ''
        row.append(escape_table_cell(value) or EMPTY_CELL)
    row.append(record.created_time.split('T')[0])
    row.append(record.last_edited_time.split('T')[0])
    return row


def render_markdown_table(
    database: NotionDatabase,
    records: Sequence[NotionRecord],
    generated_on: Optional[str] = None
) -> str:
    """
    Build the table document without reporting progress.

    Args:
        database: Database metadata; declared properties define the columns
        records: Records, one row each
        generated_on: ``YYYY-MM-DD`` stamp, defaults to today in UTC

    Returns:
        Document text
    """
    return ''.join(_iter_table_lines(database, records, generated_on))


def _iter_table_lines(database, records, generated_on=None, on_row=None):
    if generated_on is None:
        generated_on = datetime.now(timezone.utc).strftime('%Y-%m-%d')

    columns = database.other_property_names
    headers = [
        escape_table_cell(name, limit=None)
        for name in (database.title_property_name, *columns, 'Created', 'Updated')
    ]

    yield f"# {database.title}\n\n"
    yield f"**Total records:** {len(records)}  \n"
    yield f"**Last updated:** {generated_on}\n\n"
    yield f"| {' | '.join(headers)} |\n"
    yield f"| {' | '.join('---' for _ in headers)} |\n"

    for index, record in enumerate(records):
        yield f"| {' | '.join(table_row(record, columns))} |\n"
        if on_row is not None:
            on_row(index)

    yield "\n## Notes\n\n"
    yield "- This table contains all data from your Notion database\n"
    yield "- Long text values are truncated to 100 characters\n"
    yield "- You can sort columns by clicking the header in Obsidian's reading view\n"
    yield "- To edit data, you'll need to modify the original Notion database and re-export\n"


class MarkdownTableExporter(BaseExporter):
    """Writes a single ``<db>_Table.md``; no per-record notes and no block fetches."""

    conversion_format = ConversionFormat.MARKDOWN_TABLE

    def export(self, records: Sequence[NotionRecord], database: NotionDatabase, output_dir: str) -> List[str]:
        self.reporter.report(Stage.CONVERTING, "Creating markdown table...", 60)
        total = len(records)

        def on_row(index: int) -> None:
            if index % ROW_PROGRESS_INTERVAL == 0 or index == total - 1:
                self.reporter.report(
                    Stage.CONVERTING,
                    f"Added row {index + 1}/{total} to table...",
                    60 + (index + 1) / total * 30
                )

        content = ''.join(_iter_table_lines(database, records, on_row=on_row))
        filename = self.write_file(output_dir, self.aggregate_filename(database, TABLE_SUFFIX), content)
        self.logger.info(f"Wrote {total} rows for '{database.title}' to {filename}")
        return [filename]


__all__ = ['MarkdownTableExporter', 'render_markdown_table', 'table_row', 'table_title']
