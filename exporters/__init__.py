"""Format strategies writing a converted Notion database to disk.

Package Structure:
- file_sink: Creates the output directory and writes UTF-8 files
- base_exporter: Shared per-record conversion loop and name allocation
- separate_pages_exporter: One note per record
- dataview_exporter: Notes plus a Dataview query document
- markdown_table_exporter: A single markdown table, no notes
- obsidian_base_exporter: Notes plus an Obsidian ``.base`` view definition

Configuration Referenced:
- export.conversion_format: Selects the strategy
- advanced.page_size: Page size of block fetches
"""

from typing import Dict, Type

from models import ConversionFormat
from .base_exporter import BaseExporter
from .dataview_exporter import DataviewExporter
from .file_sink import FileSink
from .markdown_table_exporter import MarkdownTableExporter
from .obsidian_base_exporter import ObsidianBaseExporter
from .separate_pages_exporter import SeparatePagesExporter

EXPORTERS: Dict[ConversionFormat, Type[BaseExporter]] = {
    ConversionFormat.SEPARATE_PAGES: SeparatePagesExporter,
    ConversionFormat.DATAVIEW_TABLE: DataviewExporter,
    ConversionFormat.MARKDOWN_TABLE: MarkdownTableExporter,
    ConversionFormat.OBSIDIAN_BASE: ObsidianBaseExporter,
}


def create_exporter(conversion_format: ConversionFormat, *args, **kwargs) -> BaseExporter:
    """
    Instantiate the strategy for a conversion format.

    Args:
        conversion_format: Requested format
        *args, **kwargs: Passed to the exporter constructor

    Returns:
        Exporter instance
    """
    return EXPORTERS[ConversionFormat(conversion_format)](*args, **kwargs)


__all__ = [
    'BaseExporter',
    'DataviewExporter',
    'EXPORTERS',
    'FileSink',
    'MarkdownTableExporter',
    'ObsidianBaseExporter',
    'SeparatePagesExporter',
    'create_exporter'
]
