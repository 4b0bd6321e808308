"""Render Notion content blocks as markdown."""

import logging
from typing import Callable, Dict, Iterable, Iterator

from models import BlockKind, ContentBlock
from .text_utils import join_rich_text

logger = logging.getLogger('notion_obsidian_converter.converters.blocks')


def _paragraph(block: ContentBlock) -> str:
    return f"{join_rich_text(block.rich_text)}\n\n"


def _heading(prefix: str) -> Callable[[ContentBlock], str]:
    def render(block: ContentBlock) -> str:
        return f"{prefix} {join_rich_text(block.rich_text)}\n\n"
    return render


def _bulleted(block: ContentBlock) -> str:
    # No blank line so consecutive items stay in one list
    return f"- {join_rich_text(block.rich_text)}\n"


def _numbered(block: ContentBlock) -> str:
    # Markdown renumbers the list
    return f"1. {join_rich_text(block.rich_text)}\n"


def _code(block: ContentBlock) -> str:
    return f"```{block.language or ''}\n{join_rich_text(block.rich_text)}\n```\n\n"


def _quote(block: ContentBlock) -> str:
    return f"> {join_rich_text(block.rich_text)}\n\n"


def _fallback(block: ContentBlock) -> str:
    text = join_rich_text(block.rich_text)
    if text:
        return f"{text}\n\n"
    logger.debug(f"Skipping block {block.id} of type '{block.type_name}' with no text")
    return ''


BLOCK_RENDERERS: Dict[BlockKind, Callable[[ContentBlock], str]] = {
    BlockKind.PARAGRAPH: _paragraph,
    BlockKind.HEADING_1: _heading('#'),
    BlockKind.HEADING_2: _heading('##'),
    BlockKind.HEADING_3: _heading('###'),
    BlockKind.BULLETED_LIST_ITEM: _bulleted,
    BlockKind.NUMBERED_LIST_ITEM: _numbered,
    BlockKind.CODE: _code,
    BlockKind.QUOTE: _quote,
    BlockKind.UNSUPPORTED: _fallback,
}


def iter_block_chunks(blocks: Iterable[ContentBlock]) -> Iterator[str]:
    """Yield the markdown chunk of each block in source order."""
    for block in blocks:
        yield BLOCK_RENDERERS[block.kind](block)


def render_blocks(blocks: Iterable[ContentBlock]) -> str:
    """
    Convert a sequence of blocks into a markdown body.

    Args:
        blocks: Blocks of one page, in source order

    Returns:
        Markdown text; every chunk carries its own line terminators
    """
    return ''.join(iter_block_chunks(blocks))


__all__ = ['BLOCK_RENDERERS', 'iter_block_chunks', 'render_blocks']
