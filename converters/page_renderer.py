"""Render a full Notion record as an Obsidian markdown note."""

from typing import Iterable, List

from models import ContentBlock, NotionRecord
from .block_renderer import render_blocks
from .property_extractor import extract_value
from .text_utils import escape_frontmatter_value, sanitize_filename

FRONTMATTER_DELIMITER = '---'
NOTE_EXTENSION = '.md'


def render_frontmatter(record: NotionRecord) -> str:
    """
    Build the ``---`` delimited header of a note.

    The id and timestamps come first and are written as-is. Every other
    non-title property follows in source order when its value is truthy.

    Args:
        record: Source record

    Returns:
        Front matter block including both delimiters and a trailing newline
    """
    lines: List[str] = [
        FRONTMATTER_DELIMITER,
        f"notion_id: {record.id}",
        f"created: {record.created_time}",
        f"updated: {record.last_edited_time}",
    ]

    for name, prop in record.other_properties():
        value = extract_value(prop)
        if value:
            lines.append(f"{name}: {escape_frontmatter_value(value)}")

    lines.append(FRONTMATTER_DELIMITER)
    return '\n'.join(lines) + '\n'


def render_record(record: NotionRecord, blocks: Iterable[ContentBlock]) -> str:
    """
    Render one record as a complete markdown document.

    Args:
        record: Source record
        blocks: The record's content blocks, in source order

    Returns:
        Document text
    """
    return (
        f"{render_frontmatter(record)}\n"
        f"# {record.title}\n\n"
        f"{render_blocks(blocks)}"
    )


def record_filename(record: NotionRecord) -> str:
    """File name a record is written to, before collision handling."""
    return f"{sanitize_filename(record.title)}{NOTE_EXTENSION}"


__all__ = ['record_filename', 'render_frontmatter', 'render_record']
