"""Abstract record source interface and common functionality."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

from models import ContentBlock, NotionDatabase, NotionRecord

DEFAULT_PAGE_SIZE = 100


class FetcherError(Exception):
    """Base exception for fetcher-related errors."""
    pass


@dataclass
class RecordPage:
    """One page of database records plus the cursor of the next page."""
    records: List[NotionRecord] = field(default_factory=list)
    next_cursor: Optional[str] = None


@dataclass
class BlockPage:
    """One page of content blocks plus the cursor of the next page."""
    blocks: List[ContentBlock] = field(default_factory=list)
    next_cursor: Optional[str] = None


class RecordSource(ABC):
    """Abstract base class for sources of Notion databases and records."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger('notion_obsidian_converter.fetcher')

    @abstractmethod
    def list_databases(self) -> List[NotionDatabase]:
        """
        List the databases the integration can see.

        Returns:
            Databases with title and declared property names
        """
        pass

    @abstractmethod
    def find_database(self, database_id: str) -> Optional[NotionDatabase]:
        """
        Look a database up in the search index.

        Args:
            database_id: Database or data source id

        Returns:
            Summary with ``object_type`` set, or None if search does not know it
        """
        pass

    @abstractmethod
    def retrieve_database(self, database_id: str, object_type: str = 'database') -> NotionDatabase:
        """
        Fetch full metadata of a database or data source.

        Args:
            database_id: Database or data source id
            object_type: 'database' or 'data_source'

        Returns:
            NotionDatabase with title and property schema
        """
        pass

    @abstractmethod
    def query_records(
        self,
        database: NotionDatabase,
        cursor: Optional[str] = None,
        page_size: int = DEFAULT_PAGE_SIZE
    ) -> RecordPage:
        """
        Fetch one page of records.

        Args:
            database: Database to query
            cursor: Opaque cursor from the previous page, None for the first
            page_size: Page size hint

        Returns:
            RecordPage; ``next_cursor`` is None on the last page
        """
        pass

    @abstractmethod
    def list_blocks(
        self,
        record_id: str,
        cursor: Optional[str] = None,
        page_size: int = DEFAULT_PAGE_SIZE
    ) -> BlockPage:
        """
        Fetch one page of the top-level blocks of a record.

        Args:
            record_id: Page id
            cursor: Opaque cursor from the previous page
            page_size: Page size hint

        Returns:
            BlockPage; ``next_cursor`` is None on the last page
        """
        pass

    def fetch_all_blocks(self, record_id: str, page_size: int = DEFAULT_PAGE_SIZE) -> List[ContentBlock]:
        """Follow block cursors until the record's content is complete."""
        blocks: List[ContentBlock] = []
        cursor = None
        while True:
            page = self.list_blocks(record_id, cursor=cursor, page_size=page_size)
            blocks.extend(page.blocks)
            cursor = page.next_cursor
            if not cursor:
                break
        self.logger.debug(f"Fetched {len(blocks)} blocks for record {record_id}")
        return blocks


__all__ = ['BlockPage', 'DEFAULT_PAGE_SIZE', 'FetcherError', 'RecordPage', 'RecordSource']
