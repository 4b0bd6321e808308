"""Per-record notes plus a Dataview query that tabulates them."""

import re
from typing import List, Sequence

from models import ConversionFormat, NotionDatabase, NotionRecord
from progress import Stage
from .base_exporter import BaseExporter

TABLE_SUFFIX = '_Table.md'
DATAVIEW_PLUGIN_URL = 'https://github.com/blacksmithgu/obsidian-dataview'

PLAIN_FIELD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")


def dataview_column(name: str) -> str:
    """Column expression for a property; names that are not bare identifiers are indexed and aliased."""
    if PLAIN_FIELD_RE.match(name):
        return name
    quoted = name.replace("\\", "\\\\").replace('"', '\\"')
    return f'row["{quoted}"] AS "{quoted}"'


def render_dataview_table(database: NotionDatabase, folder: str, total_records: int) -> str:
    """
    Build the document holding the Dataview query.

    Args:
        database: Database metadata; its declared non-title properties become columns
        folder: Vault folder the query reads notes from
        total_records: Number of records in the batch

    Returns:
        Document text
    """
    columns = database.other_property_names
    column_list = ', '.join(dataview_column(name) for name in columns) if columns else 'created, updated'

    lines = [
        f"# {database.title} - Table View",
        "",
        "This table is automatically generated from your notes using the Dataview plugin.",
        "",
        "```dataview",
        f"TABLE {column_list}",
        f'FROM "{folder}"',
        "WHERE notion_id",
        "SORT file.name ASC",
        "```",
        "",
        "## Instructions",
        "",
        f"1. Install the [Dataview plugin]({DATAVIEW_PLUGIN_URL}) in Obsidian",
        "2. Enable the plugin in Settings → Community Plugins",
        "3. This table will automatically update when you modify the notes",
        "",
        f"**Total records:** {total_records}",
    ]
    return '\n'.join(lines) + '\n'


class DataviewExporter(BaseExporter):
    """Writes per-record notes and a ``<db>_Table.md`` Dataview view over them."""

    conversion_format = ConversionFormat.DATAVIEW_TABLE

    def export(self, records: Sequence[NotionRecord], database: NotionDatabase, output_dir: str) -> List[str]:
        files = self.export_records(
            records,
            output_dir,
            progress_start=50,
            progress_span=30,
            message="Created note {current}/{total}..."
        )

        self.reporter.report(Stage.CONVERTING, "Creating Dataview table...", 85)

        folder = self.resolve_query_folder(output_dir)
        content = render_dataview_table(database, folder, len(records))
        files.append(self.write_file(output_dir, self.aggregate_filename(database, TABLE_SUFFIX), content))
        self.logger.info(f"Dataview table for '{database.title}' queries folder \"{folder}\"")
        return files


__all__ = ['DataviewExporter', 'dataview_column', 'render_dataview_table']
