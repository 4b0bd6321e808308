"""Shared fixtures: record builders and an in-memory record source."""

import logging
from typing import Dict, List, Optional, Sequence

import pytest

from fetchers.base_fetcher import DEFAULT_PAGE_SIZE, BlockPage, RecordPage, RecordSource
from logger import LOGGER_NAME
from models import (
    BlockKind,
    ContentBlock,
    NotionDatabase,
    NotionRecord,
    PropertyKind,
    PropertyValue,
    RichTextRun
)
from progress import ProgressChannel, ProgressRegistry


def runs(*texts: str):
    return tuple(RichTextRun(plain_text=text) for text in texts)


def title_prop(*texts: str) -> PropertyValue:
    return PropertyValue(kind=PropertyKind.TITLE, rich_text=runs(*texts), type_name='title')


def text_prop(*texts: str) -> PropertyValue:
    return PropertyValue(kind=PropertyKind.RICH_TEXT, rich_text=runs(*texts), type_name='rich_text')


def select_prop(label: Optional[str]) -> PropertyValue:
    return PropertyValue(kind=PropertyKind.SELECT, select=label, type_name='select')


def number_prop(value: Optional[float]) -> PropertyValue:
    return PropertyValue(kind=PropertyKind.NUMBER, number=value, type_name='number')


def checkbox_prop(value: Optional[bool]) -> PropertyValue:
    return PropertyValue(kind=PropertyKind.CHECKBOX, checkbox=value, type_name='checkbox')


def make_record(
    record_id: str,
    title: Optional[str] = None,
    created: str = '2024-01-15T10:00:00.000Z',
    updated: str = '2024-02-01T08:30:00.000Z',
    **properties: PropertyValue
) -> NotionRecord:
    props: Dict[str, PropertyValue] = {}
    if title is not None:
        props['Name'] = title_prop(title)
    props.update(properties)
    return NotionRecord(id=record_id, created_time=created, last_edited_time=updated, properties=props)


def make_block(kind: BlockKind, *texts: str, language: str = '', block_id: str = 'b1') -> ContentBlock:
    return ContentBlock(id=block_id, kind=kind, rich_text=runs(*texts), language=language, type_name=kind.value)


def make_database(title: str = 'Tasks', **properties: str) -> NotionDatabase:
    declared = {'Name': 'title'}
    declared.update(properties)
    return NotionDatabase(id='db-1', title=title, properties=declared)


class FakeRecordSource(RecordSource):
    """Serves a fixed database, pages of records and per-record blocks."""

    def __init__(
        self,
        database: NotionDatabase,
        record_pages: Sequence[Sequence[NotionRecord]] = (),
        blocks: Optional[Dict[str, List[ContentBlock]]] = None,
        failing_records: Sequence[str] = (),
        failing_page: Optional[int] = None,
        object_type: Optional[str] = 'database'
    ):
        super().__init__()
        self.database = database
        self.record_pages = [list(page) for page in record_pages] or [[]]
        self.blocks = blocks or {}
        self.failing_records = set(failing_records)
        self.failing_page = failing_page
        self.object_type = object_type
        self.queried_cursors: List[Optional[str]] = []
        self.retrieved_as: Optional[str] = None

    def list_databases(self) -> List[NotionDatabase]:
        return [self.database]

    def find_database(self, database_id: str) -> Optional[NotionDatabase]:
        if self.object_type is None:
            return None
        return NotionDatabase(id=database_id, title=self.database.title, object_type=self.object_type)

    def retrieve_database(self, database_id: str, object_type: str = 'database') -> NotionDatabase:
        self.retrieved_as = object_type
        return self.database

    def query_records(self, database, cursor=None, page_size=DEFAULT_PAGE_SIZE) -> RecordPage:
        self.queried_cursors.append(cursor)
        index = int(cursor) if cursor else 0
        if self.failing_page == index:
            raise RuntimeError(f"page {index} unavailable")
        next_cursor = str(index + 1) if index + 1 < len(self.record_pages) else None
        return RecordPage(records=self.record_pages[index], next_cursor=next_cursor)

    def list_blocks(self, record_id, cursor=None, page_size=DEFAULT_PAGE_SIZE) -> BlockPage:
        if record_id in self.failing_records:
            raise RuntimeError(f"blocks of {record_id} unavailable")
        return BlockPage(blocks=list(self.blocks.get(record_id, [])))


class RecordingChannel(ProgressChannel):
    """Keeps every update it receives."""

    def __init__(self):
        self.updates = []
        self.closed = False

    def send(self, update) -> None:
        self.updates.append(update)

    def close(self) -> None:
        self.closed = True

    @property
    def progress_values(self) -> List[int]:
        return [update.progress for update in self.updates]


@pytest.fixture
def registry():
    return ProgressRegistry()


@pytest.fixture
def channel():
    return RecordingChannel()


@pytest.fixture
def database():
    return make_database('Tasks', Status='select', Notes='rich_text', Done='checkbox')


@pytest.fixture
def reset_logger():
    """Remove handlers installed by ``setup_logging`` after the test."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
