"""Filename and front matter text helpers shared by the renderers and exporters."""

import re
from typing import Any, Iterable, Optional, Set

from models import RichTextRun

UNSAFE_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*]')
WHITESPACE_RUN = re.compile(r'\s+')

# Values longer than this are quoted in front matter and truncated in tables
MAX_INLINE_LENGTH = 100


def join_rich_text(runs: Optional[Iterable[RichTextRun]]) -> str:
    """Concatenate the plain text of every run with no separator."""
    if not runs:
        return ''
    return ''.join(run.plain_text for run in runs)


def sanitize_filename(name: str) -> str:
    """
    Make a title safe to use as a file name.

    Every character in ``< > : " / \\ | ? *`` becomes ``_`` and each run of
    whitespace collapses into a single ``_``.

    Args:
        name: Raw title

    Returns:
        Sanitized name (without extension)
    """
    return WHITESPACE_RUN.sub('_', UNSAFE_FILENAME_CHARS.sub('_', name))


def unique_filename(filename: str, used: Set[str]) -> str:
    """
    Return ``filename`` or a numbered variant that is not yet in ``used``.

    Names are compared case-insensitively so that two records cannot
    overwrite each other on case-insensitive file systems. The chosen
    name is added to ``used``.

    Args:
        filename: Desired file name including extension
        used: Lower-cased names already taken in this output directory

    Returns:
        Available file name
    """
    stem, dot, ext = filename.rpartition('.')
    if not dot:
        stem, ext = filename, ''
    candidate = filename
    counter = 2
    while candidate.lower() in used:
        candidate = f"{stem}_{counter}{dot}{ext}"
        counter += 1
    used.add(candidate.lower())
    return candidate


def format_scalar(value: Any) -> str:
    """String form of an extracted property value, YAML-style for bools."""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if value is None:
        return ''
    return str(value)


def escape_frontmatter_value(value: Any) -> str:
    """
    Render a value for a ``key: value`` front matter line.

    Booleans and numbers pass through unquoted. Strings have newlines
    folded into spaces and double quotes escaped, and are wrapped in
    double quotes when they contain a colon, a newline or are longer
    than 100 characters.

    Args:
        value: Extracted property value

    Returns:
        Text to place after ``key: ``
    """
    if isinstance(value, (bool, int, float)):
        return format_scalar(value)

    raw = str(value)
    clean = raw.replace('\n', ' ').replace('"', '\\"')
    if ':' in clean or '\n' in raw or len(clean) > MAX_INLINE_LENGTH:
        return f'"{clean}"'
    return clean


def escape_table_cell(value: Any, limit: Optional[int] = MAX_INLINE_LENGTH) -> str:
    """
    Render a value as a markdown table cell.

    The text is truncated first, then pipes are escaped and newlines
    folded, so an escape sequence is never cut in half.
    """
    text = format_scalar(value)
    if limit is not None:
        text = text[:limit]
    return text.replace('|', '\\|').replace('\r', ' ').replace('\n', ' ')


__all__ = [
    'MAX_INLINE_LENGTH',
    'escape_frontmatter_value',
    'escape_table_cell',
    'format_scalar',
    'join_rich_text',
    'sanitize_filename',
    'unique_filename'
]
