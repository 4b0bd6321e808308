"""Fetchers package for retrieving Notion databases, records and blocks."""

from .base_fetcher import BlockPage, FetcherError, RecordPage, RecordSource
from .api_fetcher import NotionApiFetcher

__all__ = [
    'BlockPage',
    'FetcherError',
    'NotionApiFetcher',
    'RecordPage',
    'RecordSource'
]
