"""Per-record notes plus an Obsidian Bases view definition."""

from typing import Any, Dict, List, Sequence

import yaml

from converters import extract_value, has_value
from models import ConversionFormat, NotionDatabase, NotionRecord
from progress import Stage
from .base_exporter import BaseExporter

BASE_SUFFIX = '.base'
TABLE_VIEW_LIMIT = 100
CARD_VIEW_LIMIT = 50
# Columns beyond this many are left out of the table view's order
MAX_ORDERED_PROPERTIES = 8

BASE_INSTRUCTIONS = (
    "# Instructions:\n"
    "# 1. This .base file creates native Obsidian database views\n"
    "# 2. Requires Obsidian 1.7+ with Bases feature enabled\n"
    "# 3. Open this file in Obsidian to see your database\n"
    "# 4. You can edit views, filters, and properties as needed\n"
    "# 5. See https://help.obsidian.md/bases/syntax for full documentation\n"
)


def used_properties(records: Sequence[NotionRecord]) -> List[str]:
    """Non-title property names holding a value in at least one record, first seen first."""
    seen: Dict[str, None] = {}
    for record in records:
        for name, prop in record.other_properties():
            if name not in seen and has_value(extract_value(prop)):
                seen[name] = None
    return list(seen)


def build_base_definition(database: NotionDatabase, properties: Sequence[str]) -> Dict[str, Any]:
    """
    Build the mapping serialized into the ``.base`` file.

    Args:
        database: Database metadata, used for view names
        properties: Used property names, in display order

    Returns:
        Dict with ``properties`` and ``views`` keys
    """
    display: Dict[str, Any] = {name: {'displayName': name} for name in properties}
    display['file.ctime'] = {'displayName': 'Created'}
    display['file.mtime'] = {'displayName': 'Modified'}

    order = ['file.name', *properties[:MAX_ORDERED_PROPERTIES], 'file.ctime', 'file.mtime']

    return {
        'properties': display,
        'views': [
            {
                'type': 'table',
                'name': f"{database.title} Table",
                'limit': TABLE_VIEW_LIMIT,
                'filters': 'file.ext == "md"',
                'order': order,
            },
            {
                'type': 'card',
                'name': f"{database.title} Cards",
                'limit': CARD_VIEW_LIMIT,
            },
        ],
    }


def render_base_file(database: NotionDatabase, properties: Sequence[str]) -> str:
    """Full text of the ``.base`` file: comment header, YAML body, instructions."""
    body = yaml.safe_dump(
        build_base_definition(database, properties),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=1000
    )
    header = (
        f"# Obsidian Base file for {database.title}\n"
        "# Generated from Notion database\n\n"
    )
    return f"{header}{body}\n{BASE_INSTRUCTIONS}"


class ObsidianBaseExporter(BaseExporter):
    """Writes per-record notes and a ``<db>.base`` file with table and card views."""

    conversion_format = ConversionFormat.OBSIDIAN_BASE

    def export(self, records: Sequence[NotionRecord], database: NotionDatabase, output_dir: str) -> List[str]:
        files = self.export_records(
            records,
            output_dir,
            progress_start=50,
            progress_span=30,
            message="Created note {current}/{total}..."
        )

        self.reporter.report(Stage.CONVERTING, "Creating Obsidian Base file...", 85)

        properties = used_properties(records)
        self.logger.debug(f"Properties with values: {properties}")
        content = render_base_file(database, properties)
        files.append(self.write_file(output_dir, self.aggregate_filename(database, BASE_SUFFIX), content))
        return files


__all__ = [
    'ObsidianBaseExporter',
    'build_base_definition',
    'render_base_file',
    'used_properties'
]
