from unittest import mock

import pytest
import requests

from data_processing import load_snapshot
from supabase_client import StoreError, SupabaseRepository


def _response(payload, status=200):
    response = mock.Mock()
    response.json.return_value = payload
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    else:
        response.raise_for_status.return_value = None
    return response


def _repository(http):
    return SupabaseRepository('https://example.supabase.co/', 'anon-key', timeout=3, session=http)


def test_select_sends_auth_headers_and_query():
    http = mock.Mock()
    http.get.return_value = _response([{'id': 'p1'}])

    rows = _repository(http).list_problems()

    assert rows == [{'id': 'p1'}]
    url = http.get.call_args.args[0]
    kwargs = http.get.call_args.kwargs
    assert url == 'https://example.supabase.co/rest/v1/problems'
    assert kwargs['headers']['apikey'] == 'anon-key'
    assert kwargs['headers']['Authorization'] == 'Bearer anon-key'
    assert kwargs['params']['order'] == 'created_at.asc'
    assert 'grade_id' in kwargs['params']['select']
    assert kwargs['timeout'] == 3


def test_http_errors_raise_store_error():
    http = mock.Mock()
    http.get.return_value = _response({'message': 'nope'}, status=500)

    with pytest.raises(StoreError):
        _repository(http).list_attempts()


def test_network_errors_raise_store_error():
    http = mock.Mock()
    http.get.side_effect = requests.ConnectionError("offline")

    with pytest.raises(StoreError):
        _repository(http).list_gyms()


def test_unexpected_shape_raises_store_error():
    http = mock.Mock()
    http.get.return_value = _response({'not': 'a list'})

    with pytest.raises(StoreError):
        _repository(http).list_sessions()


def test_missing_credentials():
    with pytest.raises(StoreError):
        SupabaseRepository('', 'key')


def test_repository_feeds_snapshot():
    tables = {
        'problems': [{'id': 'p1', 'grade': '6a', 'status': 'project', 'created_at': '2025-06-01T10:00:00Z',
                      'gym_id': None, 'grade_id': None}],
        'attempts': [{'problem_id': 'p1', 'session_id': 's1', 'outcome': 'sent',
                      'created_at': '2025-06-01T11:00:00Z'}],
        'gym_grades': [],
        'gyms': [],
        'sessions': [{'id': 's1', 'date': '2025-06-01', 'energy': 'high'}],
    }
    http = mock.Mock()
    http.get.side_effect = lambda url, **kwargs: _response(tables[url.rsplit('/', 1)[-1]])

    snapshot = load_snapshot(_repository(http))

    assert [p.id for p in snapshot.problems] == ['p1']
    assert snapshot.attempts[0].is_send
    assert http.get.call_count == 5
