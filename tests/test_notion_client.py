"""Tests for the Notion REST client."""

from unittest.mock import MagicMock

import pytest
import requests

from notion_client import ConfigurationError, NotionApiError, NotionClient


def make_response(status_code=200, payload=None, text=''):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.text = text
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload if payload is not None else {}
    return response


@pytest.fixture
def session():
    mock_session = MagicMock(spec=requests.Session)
    mock_session.headers = {}
    mock_session.request.return_value = make_response(payload={'results': [], 'next_cursor': None})
    return mock_session


@pytest.fixture
def client(session):
    return NotionClient('secret-token', session=session, timeout=12)


class TestNotionClient:
    """Test request construction and error mapping."""

    def test_missing_token(self):
        with pytest.raises(ConfigurationError):
            NotionClient(None)
        with pytest.raises(ConfigurationError):
            NotionClient('')

    def test_headers(self, client, session):
        assert session.headers['Authorization'] == 'Bearer secret-token'
        assert session.headers['Notion-Version'] == '2025-09-03'
        assert session.headers['Content-Type'] == 'application/json'

    def test_search_body(self, client, session):
        client.search(object_type='data_source', start_cursor='abc')

        method, url = session.request.call_args.args
        kwargs = session.request.call_args.kwargs
        assert method == 'POST'
        assert url == 'https://api.notion.com/v1/search'
        assert kwargs['timeout'] == 12
        assert kwargs['json']['filter'] == {'property': 'object', 'value': 'data_source'}
        assert kwargs['json']['start_cursor'] == 'abc'
        assert 'query' not in kwargs['json']

    def test_query_database_drops_empty_cursor(self, client, session):
        client.query_database('db1', page_size=50)

        method, url = session.request.call_args.args
        assert method == 'POST'
        assert url == 'https://api.notion.com/v1/databases/db1/query'
        assert session.request.call_args.kwargs['json'] == {'page_size': 50}

    def test_query_data_source(self, client, session):
        client.query_data_source('ds1', start_cursor='next')
        assert session.request.call_args.args == ('POST', 'https://api.notion.com/v1/data_sources/ds1/query')

    def test_retrieve_endpoints(self, client, session):
        client.retrieve_database('db1')
        assert session.request.call_args.args == ('GET', 'https://api.notion.com/v1/databases/db1')
        client.retrieve_data_source('ds1')
        assert session.request.call_args.args == ('GET', 'https://api.notion.com/v1/data_sources/ds1')

    def test_block_children_use_query_string(self, client, session):
        client.list_block_children('page1', start_cursor='c2')

        assert session.request.call_args.args == ('GET', 'https://api.notion.com/v1/blocks/page1/children')
        assert session.request.call_args.kwargs['params'] == {'start_cursor': 'c2', 'page_size': 100}

    def test_custom_base_url(self, session):
        client = NotionClient('t', base_url='http://localhost:8080/', session=session)
        client.retrieve_database('x')
        assert session.request.call_args.args[1] == 'http://localhost:8080/v1/databases/x'

    def test_error_response(self, client, session):
        session.request.return_value = make_response(
            404, {'object': 'error', 'code': 'object_not_found', 'message': 'Could not find database'}
        )
        with pytest.raises(NotionApiError) as excinfo:
            client.retrieve_database('missing')

        assert excinfo.value.status_code == 404
        assert excinfo.value.code == 'object_not_found'
        assert excinfo.value.message == 'Could not find database'

    def test_error_without_json_body(self, client, session):
        session.request.return_value = make_response(502, ValueError('no json'), text='Bad Gateway')
        with pytest.raises(NotionApiError) as excinfo:
            client.retrieve_database('x')
        assert excinfo.value.message == 'Bad Gateway'

    def test_transport_error_propagates(self, client, session):
        session.request.side_effect = requests.exceptions.ConnectionError('down')
        with pytest.raises(requests.exceptions.ConnectionError):
            client.search()

    def test_from_config(self):
        client = NotionClient.from_config({
            'notion': {'token': 't', 'base_url': 'https://example.com', 'api_version': '2022-06-28'},
            'advanced': {'request_timeout': 5}
        })
        assert client.timeout == 5
        assert client.api_version == '2022-06-28'
        assert client.session.headers['Notion-Version'] == '2022-06-28'
