# stockflow/api_client.py
"""
Inventory API Connection Management

Features:
- Singleton requests.Session with thread-safe double-checked locking
- Health check utilities
- JSON request helpers that raise ApiError on any transport failure
"""

import logging
import threading
from typing import Any, Dict, Optional, Tuple

import requests

from .config import config

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Raised when the inventory API cannot be reached or answers non-2xx"""

    def __init__(self, message: str, status_code: Optional[int] = None, url: str = ''):
        self.status_code = status_code
        self.url = url
        super().__init__(message)


# ==================== SINGLETON SESSION ====================

_session = None
_session_lock = threading.Lock()


def get_api_session() -> requests.Session:
    """
    Get the shared requests Session (singleton pattern)

    Thread-safe implementation using double-checked locking.
    Reuses one session so connections are pooled across calls.
    """
    global _session

    if _session is None:
        with _session_lock:
            if _session is None:
                _session = _create_session()

    return _session


def _create_session() -> requests.Session:
    """Create new session with configured default headers"""
    api_config = config.get_api_config()

    session = requests.Session()
    session.headers.update({'Accept': 'application/json'})
    session.headers.update(api_config.headers)

    logger.info(f"🔌 API session created for {api_config.base_url}")
    return session


def reset_api_session():
    """Close the shared session; a new one is created on next request"""
    global _session

    with _session_lock:
        if _session is not None:
            try:
                _session.close()
                logger.info("🔄 API session closed")
            except Exception as e:
                logger.error(f"Error closing API session: {e}")
            _session = None


def check_api_connection() -> Tuple[bool, Optional[str]]:
    """
    Check if the inventory API is reachable

    Returns:
        Tuple of (is_connected: bool, error_message: str or None)
    """
    try:
        get_json('/health')
        return True, None
    except ApiError as e:
        logger.error(f"❌ API health check failed: {e}")
        if e.status_code is None:
            return False, "Cannot reach the inventory API. Please check your network connection."
        return False, f"Inventory API error: {e}"


# ==================== REQUEST HELPERS ====================

def _request(method: str, path: str, payload: Optional[Dict] = None,
             session: Optional[requests.Session] = None,
             params: Optional[Dict] = None) -> Any:
    api_config = config.get_api_config()
    url = api_config.build_url(path)
    session = session or get_api_session()

    try:
        response = session.request(
            method,
            url,
            json=payload,
            params=params,
            timeout=api_config.timeout_seconds,
        )
    except requests.exceptions.Timeout as e:
        raise ApiError(f"Request timed out: {method} {url}", url=url) from e
    except requests.exceptions.RequestException as e:
        raise ApiError(f"Request failed: {method} {url}: {e}", url=url) from e

    if not response.ok:
        detail = response.text[:200] if response.text else response.reason
        raise ApiError(
            f"{method} {url} returned {response.status_code}: {detail}",
            status_code=response.status_code,
            url=url,
        )

    if not response.content:
        return None

    try:
        return response.json()
    except ValueError as e:
        raise ApiError(f"Invalid JSON from {url}", status_code=response.status_code, url=url) from e


def get_json(path: str, params: Optional[Dict] = None) -> Any:
    """Send GET and return the decoded JSON body"""
    return _request('GET', path, params=params)


def post_json(path: str, payload: Optional[Dict] = None) -> Any:
    """Send POST with an optional JSON body and return the decoded response"""
    return _request('POST', path, payload)


class ApiClient:
    """
    Thin object wrapper over the request helpers

    Repositories and services take an ApiClient so tests can pass a fake.
    """

    def __init__(self, session: Optional[requests.Session] = None):
        self._session = session

    def get(self, path: str, params: Optional[Dict] = None) -> Any:
        return _request('GET', path, session=self._session, params=params)

    def post(self, path: str, payload: Optional[Dict] = None) -> Any:
        return _request('POST', path, payload, session=self._session)


# ==================== EXPORTS ====================

__all__ = [
    'ApiError',
    'ApiClient',
    'get_api_session',
    'reset_api_session',
    'check_api_connection',
    'get_json',
    'post_json',
]
