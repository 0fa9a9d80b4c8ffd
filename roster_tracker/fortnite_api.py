import hashlib
import json
import os
import time
from typing import Any, Dict, List, Optional

import requests

from . import config
from .utils import setup_logging

BASE = config.API_BASE_URL

logger = setup_logging(__name__)


class FortniteAPIError(Exception):
    pass


class FortniteClient:
    """Thin client for the api-fortnite.com events endpoints.

    Every request carries the x-api-key header. When cache_dir is set,
    JSON responses are stored on disk and reused until their TTL expires.
    """

    def __init__(self, api_key: str, base_url: str = BASE, timeout: int = config.REQUEST_TIMEOUT,
                 cache_dir: Optional[str] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.cache_dir = cache_dir
        self.session = requests.Session()
        self.session.headers.update({'x-api-key': api_key})

    @classmethod
    def from_env(cls) -> Optional['FortniteClient']:
        """Build a client from FORTNITE_API_KEY, or return None when it is unset."""
        api_key = os.environ.get(config.API_KEY_ENV)
        if not api_key:
            return None
        return cls(api_key, cache_dir=config.CACHE_DIR)

    # simple caching helpers (file-based)
    def _cache_path(self, key: str) -> str:
        return os.path.join(self.cache_dir, hashlib.sha256(key.encode()).hexdigest() + '.json')

    def _cache_load(self, key: str, ttl: int) -> Any:
        if not self.cache_dir or ttl <= 0:
            return None
        path = self._cache_path(key)
        try:
            if time.time() - os.path.getmtime(path) > ttl:
                return None
            with open(path, 'r', encoding='utf-8') as fh:
                return json.load(fh)
        except (OSError, ValueError):
            return None

    def _cache_save(self, key: str, obj: Any) -> None:
        if not self.cache_dir:
            return
        try:
            os.makedirs(self.cache_dir, exist_ok=True)
            with open(self._cache_path(key), 'w', encoding='utf-8') as fh:
                json.dump(obj, fh)
        except OSError as e:
            logger.debug("Cache write failed for %s: %s", key, e)

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None, ttl: int = 0) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        cache_key = f"{url}?{json.dumps(params or {}, sort_keys=True)}"
        cached = self._cache_load(cache_key, ttl)
        if cached is not None:
            return cached
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise FortniteAPIError(f"GET {url} failed: {e}") from e
        if not resp.ok:
            raise FortniteAPIError(f"GET {url} failed: {resp.status_code} {resp.text[:200]}")
        try:
            data = resp.json()
        except ValueError as e:
            raise FortniteAPIError(f"GET {url} returned invalid JSON") from e
        self._cache_save(cache_key, data)
        return data

    def get_leaderboard_page(self, event_id: str, event_window_id: str, page: int) -> List[Dict[str, Any]]:
        """Return the entries of one leaderboard page; any failure yields an empty page."""
        params = {'eventId': event_id, 'eventWindowId': event_window_id, 'page': page}
        try:
            data = self._get('/events/leaderboard', params=params, ttl=config.LEADERBOARD_TTL)
        except FortniteAPIError as e:
            logger.warning("Leaderboard page %s of %s/%s unavailable: %s", page, event_id, event_window_id, e)
            return []
        # Recognize shapes: bare list OR {'entries': [...]}
        if isinstance(data, list):
            entries = data
        elif isinstance(data, dict) and isinstance(data.get('entries'), list):
            entries = data['entries']
        else:
            entries = []
        return [e for e in entries if isinstance(e, dict)]

    def _get_events(self, path: str, ttl: int) -> List[Dict[str, Any]]:
        try:
            data = self._get(path, ttl=ttl)
        except FortniteAPIError as e:
            logger.warning("Event metadata unavailable: %s", e)
            return []
        events = data.get('events') if isinstance(data, dict) else None
        if not isinstance(events, list):
            return []
        return [ev for ev in events if isinstance(ev, dict)]

    def get_past_events(self) -> List[Dict[str, Any]]:
        return self._get_events('/events/data/past', config.PAST_EVENTS_TTL)

    def get_current_events(self) -> List[Dict[str, Any]]:
        return self._get_events('/events/data/current', config.CURRENT_EVENTS_TTL)
