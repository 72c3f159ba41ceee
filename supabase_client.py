"""
Read repository backed by the hosted store's REST interface (PostgREST).
"""

import logging
from typing import Any, Dict, List, Optional

import requests

import config
from data_processing import ProgressRepository
from utils import get_store_credentials, get_store_timeout

logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    """Raised when a table cannot be fetched from the store."""


class SupabaseRepository(ProgressRepository):
    """
    Reads the progress tables over HTTP.

    Args:
        url: Project URL, e.g. https://xyz.supabase.co
        api_key: Anon or service key, sent as both apikey and bearer token.
        timeout: Per-request timeout in seconds.
        session: Optional requests.Session (mainly for connection reuse).
    """

    def __init__(self, url: str, api_key: str, timeout: float = config.DEFAULT_STORE_TIMEOUT_SECONDS,
                 session: Optional[requests.Session] = None):
        if not url or not api_key:
            raise StoreError("Store URL and API key are required")
        self.base_url = url.rstrip('/') + '/rest/v1'
        self.timeout = timeout
        self.http = session or requests.Session()
        self.headers = {
            'apikey': api_key,
            'Authorization': f'Bearer {api_key}',
            'Accept': 'application/json',
        }

    @classmethod
    def from_env(cls) -> 'SupabaseRepository':
        url, key = get_store_credentials()
        return cls(url, key, timeout=get_store_timeout())

    def _select(self, table: str, columns: str = '*', order: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {'select': columns}
        if order:
            params['order'] = order
        try:
            response = self.http.get(f'{self.base_url}/{table}', headers=self.headers,
                                     params=params, timeout=self.timeout)
            response.raise_for_status()
            rows = response.json()
        except requests.RequestException as e:
            logger.error("Failed to load table '%s': %s", table, e)
            raise StoreError(f"Could not load '{table}'") from e
        except ValueError as e:
            raise StoreError(f"Invalid JSON from '{table}'") from e
        if not isinstance(rows, list):
            raise StoreError(f"Unexpected response shape from '{table}'")
        logger.debug("Loaded %d rows from '%s'", len(rows), table)
        return rows

    def list_problems(self) -> List[Dict[str, Any]]:
        return self._select(config.TABLE_PROBLEMS, 'id,grade,status,created_at,gym_id,grade_id',
                            order='created_at.asc')

    def list_attempts(self) -> List[Dict[str, Any]]:
        return self._select(config.TABLE_ATTEMPTS, 'problem_id,session_id,outcome,created_at',
                            order='created_at.asc')

    def list_gym_grades(self) -> List[Dict[str, Any]]:
        return self._select(config.TABLE_GYM_GRADES, 'id,gym_id,name,color,sort_order,created_at',
                            order='sort_order.asc.nullslast,created_at.asc')

    def list_gyms(self) -> List[Dict[str, Any]]:
        return self._select(config.TABLE_GYMS, 'id,name,is_home,grading_mode', order='created_at.asc')

    def list_sessions(self) -> List[Dict[str, Any]]:
        return self._select(config.TABLE_SESSIONS, 'id,date,energy', order='date.desc')
