"""Record source backed by the Notion REST API."""

import logging
from typing import Any, Dict, List, Optional, Tuple

from models import (
    BlockKind,
    ContentBlock,
    NotionDatabase,
    NotionRecord,
    PropertyKind,
    PropertyValue,
    RichTextRun
)
from notion_client import NotionApiError, NotionClient
from .base_fetcher import DEFAULT_PAGE_SIZE, BlockPage, FetcherError, RecordPage, RecordSource

logger = logging.getLogger('notion_obsidian_converter.fetcher.api')


def rich_text_from_api(items: Optional[List[Dict[str, Any]]]) -> Tuple[RichTextRun, ...]:
    """Convert a Notion rich text array into runs."""
    return tuple(
        RichTextRun(plain_text=item.get('plain_text') or '', href=item.get('href'))
        for item in items or []
    )


def property_from_api(data: Dict[str, Any]) -> PropertyValue:
    """
    Convert a page property object into a typed PropertyValue.

    Unknown property types are kept as ``PropertyKind.OTHER`` with their
    raw type name so that extraction can degrade gracefully.

    Args:
        data: Property object from a page response

    Returns:
        PropertyValue
    """
    type_name = data.get('type') or ''
    kind = PropertyKind.from_type_name(type_name)

    if kind in (PropertyKind.TITLE, PropertyKind.RICH_TEXT):
        return PropertyValue(kind=kind, rich_text=rich_text_from_api(data.get(type_name)), type_name=type_name)
    if kind is PropertyKind.NUMBER:
        return PropertyValue(kind=kind, number=data.get('number'), type_name=type_name)
    if kind is PropertyKind.SELECT:
        return PropertyValue(kind=kind, select=(data.get('select') or {}).get('name'), type_name=type_name)
    if kind is PropertyKind.MULTI_SELECT:
        labels = tuple(item.get('name') or '' for item in data.get('multi_select') or [])
        return PropertyValue(kind=kind, multi_select=labels, type_name=type_name)
    if kind is PropertyKind.DATE:
        return PropertyValue(kind=kind, date_start=(data.get('date') or {}).get('start'), type_name=type_name)
    if kind is PropertyKind.CHECKBOX:
        return PropertyValue(kind=kind, checkbox=data.get('checkbox'), type_name=type_name)
    if kind in (PropertyKind.URL, PropertyKind.EMAIL, PropertyKind.PHONE_NUMBER):
        return PropertyValue(kind=kind, text=data.get(type_name), type_name=type_name)
    return PropertyValue(kind=PropertyKind.OTHER, type_name=type_name)


def page_from_api(data: Dict[str, Any]) -> NotionRecord:
    """Convert a page object from a query response into a NotionRecord."""
    properties = {
        name: property_from_api(prop or {})
        for name, prop in (data.get('properties') or {}).items()
    }
    return NotionRecord(
        id=data['id'],
        created_time=data.get('created_time') or '',
        last_edited_time=data.get('last_edited_time') or '',
        properties=properties,
        url=data.get('url')
    )


def block_from_api(data: Dict[str, Any]) -> ContentBlock:
    """Convert a block object into a ContentBlock."""
    type_name = data.get('type') or ''
    payload = data.get(type_name) or {}
    if not isinstance(payload, dict):
        payload = {}
    runs = payload.get('rich_text')
    return ContentBlock(
        id=data.get('id') or '',
        kind=BlockKind.from_type_name(type_name),
        rich_text=rich_text_from_api(runs) if isinstance(runs, list) else None,
        language=payload.get('language') or '',
        type_name=type_name
    )


def database_from_api(data: Dict[str, Any]) -> NotionDatabase:
    """Convert a database or data source object into a NotionDatabase."""
    title = ''.join(run.plain_text for run in rich_text_from_api(data.get('title')))
    return NotionDatabase(
        id=data['id'],
        title=title or 'Untitled Database',
        object_type=data.get('object') or 'database',
        properties={
            name: (prop or {}).get('type') or ''
            for name, prop in (data.get('properties') or {}).items()
        },
        url=data.get('url')
    )


class NotionApiFetcher(RecordSource):
    """Fetches Notion databases, records and blocks through the REST API."""

    def __init__(self, client: NotionClient, logger: Optional[logging.Logger] = None):
        """
        Initialize API fetcher.

        Args:
            client: Authenticated Notion client
            logger: Logger instance (optional)
        """
        super().__init__(logger or logging.getLogger('notion_obsidian_converter.fetcher.api'))
        self.client = client

    @classmethod
    def from_config(cls, config: Dict[str, Any], logger: Optional[logging.Logger] = None) -> 'NotionApiFetcher':
        return cls(NotionClient.from_config(config), logger)

    def _search_data_sources(self) -> List[Dict[str, Any]]:
        results: List[Dict[str, Any]] = []
        cursor = None
        while True:
            response = self.client.search(object_type='data_source', start_cursor=cursor)
            results.extend(response.get('results', []))
            cursor = response.get('next_cursor')
            if not cursor:
                break
        return results

    def list_databases(self) -> List[NotionDatabase]:
        databases = [database_from_api(item) for item in self._search_data_sources()]
        self.logger.info(f"Found {len(databases)} databases")
        return databases

    def find_database(self, database_id: str) -> Optional[NotionDatabase]:
        wanted = database_id.replace('-', '')
        for item in self._search_data_sources():
            if item.get('id', '').replace('-', '') == wanted:
                return database_from_api(item)
        self.logger.debug(f"Database {database_id} not found in search results")
        return None

    def retrieve_database(self, database_id: str, object_type: str = 'database') -> NotionDatabase:
        try:
            if object_type == 'data_source':
                try:
                    return database_from_api(self.client.retrieve_data_source(database_id))
                except NotionApiError as e:
                    self.logger.warning(f"Data source lookup failed ({e}), retrying as database")

            data = self.client.retrieve_database(database_id)
            database = database_from_api(data)

            # Newer API versions keep the schema on the database's data sources
            data_sources = data.get('data_sources') or []
            if not database.properties and data_sources:
                source = database_from_api(self.client.retrieve_data_source(data_sources[0]['id']))
                source.title = database.title
                return source
            return database
        except NotionApiError as e:
            raise FetcherError(f"Database '{database_id}' could not be retrieved: {e}") from e

    def query_records(
        self,
        database: NotionDatabase,
        cursor: Optional[str] = None,
        page_size: int = DEFAULT_PAGE_SIZE
    ) -> RecordPage:
        if database.is_data_source:
            response = self.client.query_data_source(database.id, start_cursor=cursor, page_size=page_size)
        else:
            response = self.client.query_database(database.id, start_cursor=cursor, page_size=page_size)

        records = [
            page_from_api(item) for item in response.get('results', [])
            if item.get('object', 'page') == 'page'
        ]
        return RecordPage(records=records, next_cursor=response.get('next_cursor'))

    def list_blocks(
        self,
        record_id: str,
        cursor: Optional[str] = None,
        page_size: int = DEFAULT_PAGE_SIZE
    ) -> BlockPage:
        response = self.client.list_block_children(record_id, start_cursor=cursor, page_size=page_size)
        blocks = [block_from_api(item) for item in response.get('results', [])]
        return BlockPage(blocks=blocks, next_cursor=response.get('next_cursor'))


__all__ = [
    'NotionApiFetcher',
    'block_from_api',
    'database_from_api',
    'page_from_api',
    'property_from_api',
    'rich_text_from_api'
]
