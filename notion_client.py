"""Notion REST API client built on a shared requests session."""

import json
import logging
import time
from typing import Any, Dict, Optional
from urllib.parse import urljoin

import requests

logger = logging.getLogger('notion_obsidian_converter.client')

DEFAULT_BASE_URL = "https://api.notion.com"
DEFAULT_API_VERSION = "2025-09-03"
MAX_PAGE_SIZE = 100


class ConfigurationError(Exception):
    """Raised when the client cannot be used with the given settings."""
    pass


class NotionApiError(Exception):
    """Raised when the Notion API answers with an error status."""

    def __init__(self, status_code: int, code: str = "", message: str = ""):
        self.status_code = status_code
        self.code = code
        self.message = message
        super().__init__(f"Notion API error {status_code} {code}: {message}".strip())


class NotionClient:
    """Minimal Notion REST API client for databases, data sources and blocks."""

    def __init__(
        self,
        token: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        api_version: str = DEFAULT_API_VERSION,
        timeout: float = 30,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the client with bearer authentication.

        Args:
            token: Notion integration token
            base_url: API base URL
            api_version: Value of the Notion-Version header
            timeout: HTTP request timeout in seconds
            session: Optional pre-built session (used by tests)

        Raises:
            ConfigurationError: If no token is configured
        """
        if not token:
            raise ConfigurationError("Notion token not configured")

        self.base_url = base_url.rstrip('/') + '/'
        self.api_version = api_version
        self.timeout = timeout

        self.session = session or requests.Session()
        self.session.headers.update({
            'Authorization': f'Bearer {token}',
            'Notion-Version': api_version,
            'Content-Type': 'application/json'
        })

        logger.info(f"Initialized Notion client for {base_url} (API version {api_version})")

    def _make_request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Send a request and decode the JSON answer.

        Args:
            method: HTTP method
            endpoint: Path below the base URL, e.g. "v1/search"
            params: Query string parameters; None values are dropped
            body: JSON body; None values are dropped

        Returns:
            Decoded JSON object

        Raises:
            NotionApiError: For non-2xx answers
            requests.exceptions.RequestException: For transport errors
        """
        url = urljoin(self.base_url, endpoint.lstrip('/'))
        kwargs: Dict[str, Any] = {'timeout': self.timeout}
        if params:
            kwargs['params'] = {k: v for k, v in params.items() if v is not None}
        if body is not None:
            kwargs['json'] = {k: v for k, v in body.items() if v is not None}

        start_time = time.time()
        logger.debug(f"API Request: {method} {url}")

        try:
            response = self.session.request(method, url, **kwargs)
        except requests.exceptions.Timeout:
            logger.error(f"Request timeout after {self.timeout}s: {method} {url}")
            raise
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error: {method} {url} - {str(e)}")
            raise

        elapsed = time.time() - start_time
        logger.debug(f"API Response: {response.status_code} {url} ({elapsed:.3f}s)")

        if not response.ok:
            code, message = "", response.text[:500]
            try:
                error_data = response.json()
                code = error_data.get('code', '')
                message = error_data.get('message', message)
                logger.error(f"Error details: {json.dumps(error_data, indent=2)}")
            except ValueError:
                logger.error(f"Error response: {message}")
            raise NotionApiError(response.status_code, code, message)

        return response.json()

    def search(
        self,
        query: Optional[str] = None,
        object_type: Optional[str] = None,
        start_cursor: Optional[str] = None,
        page_size: int = MAX_PAGE_SIZE
    ) -> Dict[str, Any]:
        """
        Run one page of a workspace search.

        Args:
            query: Optional title query
            object_type: Restrict results to 'page', 'database' or 'data_source'
            start_cursor: Cursor returned by the previous page
            page_size: Results per page (max 100)

        Returns:
            Raw search response with ``results`` and ``next_cursor``
        """
        body: Dict[str, Any] = {
            'query': query,
            'start_cursor': start_cursor,
            'page_size': page_size,
            'sort': {'direction': 'ascending', 'timestamp': 'last_edited_time'}
        }
        if object_type:
            body['filter'] = {'property': 'object', 'value': object_type}
        return self._make_request('POST', 'v1/search', body=body)

    def retrieve_database(self, database_id: str) -> Dict[str, Any]:
        """Fetch database metadata including its property schema."""
        return self._make_request('GET', f'v1/databases/{database_id}')

    def retrieve_data_source(self, data_source_id: str) -> Dict[str, Any]:
        """Fetch data source metadata including its property schema."""
        return self._make_request('GET', f'v1/data_sources/{data_source_id}')

    def query_database(
        self,
        database_id: str,
        start_cursor: Optional[str] = None,
        page_size: int = MAX_PAGE_SIZE
    ) -> Dict[str, Any]:
        """Fetch one page of records from a database."""
        return self._make_request(
            'POST',
            f'v1/databases/{database_id}/query',
            body={'start_cursor': start_cursor, 'page_size': page_size}
        )

    def query_data_source(
        self,
        data_source_id: str,
        start_cursor: Optional[str] = None,
        page_size: int = MAX_PAGE_SIZE
    ) -> Dict[str, Any]:
        """Fetch one page of records from a data source."""
        return self._make_request(
            'POST',
            f'v1/data_sources/{data_source_id}/query',
            body={'start_cursor': start_cursor, 'page_size': page_size}
        )

    def list_block_children(
        self,
        block_id: str,
        start_cursor: Optional[str] = None,
        page_size: int = MAX_PAGE_SIZE
    ) -> Dict[str, Any]:
        """Fetch one page of the child blocks of a page or block."""
        return self._make_request(
            'GET',
            f'v1/blocks/{block_id}/children',
            params={'start_cursor': start_cursor, 'page_size': page_size}
        )

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'NotionClient':
        """
        Initialize Notion client from configuration dictionary.

        Args:
            config: Configuration dictionary with notion and advanced settings

        Returns:
            NotionClient instance
        """
        notion_config = config.get('notion', {})
        advanced_config = config.get('advanced', {})

        return cls(
            token=notion_config.get('token'),
            base_url=notion_config.get('base_url', DEFAULT_BASE_URL),
            api_version=notion_config.get('api_version', DEFAULT_API_VERSION),
            timeout=advanced_config.get('request_timeout', 30)
        )


__all__ = ['ConfigurationError', 'NotionApiError', 'NotionClient']
