"""Converters package turning Notion properties and blocks into markdown text."""

from .block_renderer import render_blocks
from .page_renderer import record_filename, render_frontmatter, render_record
from .property_extractor import extract_value, has_value
from .text_utils import (
    escape_frontmatter_value,
    escape_table_cell,
    format_scalar,
    join_rich_text,
    sanitize_filename,
    unique_filename
)

__all__ = [
    'escape_frontmatter_value',
    'escape_table_cell',
    'extract_value',
    'format_scalar',
    'has_value',
    'join_rich_text',
    'record_filename',
    'render_blocks',
    'render_frontmatter',
    'render_record',
    'sanitize_filename',
    'unique_filename'
]
