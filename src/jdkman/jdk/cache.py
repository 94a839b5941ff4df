"""
Cache Management for Remote Catalog Responses

Stores JSON documents on disk keyed by URL, with an expiry timestamp so fresh
entries can be served without a network round trip and stale ones can still be
used when the catalog is unreachable.
"""

import json
import os
import re
import tempfile
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Tuple

from jdkman.log_utils import logger

_UNSAFE_KEY_CHARS_RX = re.compile(r"[^A-Za-z0-9_-]+")
_MAX_KEY_LENGTH = 180


def build_cache_key(url: str) -> str:
    """
    Turn a URL into a file name made of letters, digits, underscores and dashes.

    Parameters:
        url (str): The URL the cached document was fetched from.

    Returns:
        str: A sanitized key, truncated to a filesystem friendly length.
    """
    key = _UNSAFE_KEY_CHARS_RX.sub("_", url).strip("_")
    if len(key) > _MAX_KEY_LENGTH:
        # keep the tail, query parameters are what tell entries apart
        key = key[-_MAX_KEY_LENGTH:]
    return key or "root"


def _parse_iso_datetime_utc(value: Any) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except (ValueError, TypeError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class JsonCache:
    """
    A directory of JSON cache entries with expiry.

    Each entry is stored as ``{"cached_at": ..., "url": ..., "data": ...}`` and
    written atomically through a temporary file.
    """

    def __init__(self, cache_dir: str, expiry_hours: float):
        self.cache_dir = str(cache_dir)
        self.expiry = timedelta(hours=expiry_hours)

    def get_cache_file_path(self, url: str) -> str:
        return os.path.join(self.cache_dir, f"{build_cache_key(url)}.json")

    def _read_entry(self, url: str) -> Optional[Tuple[datetime, Any]]:
        file_path = self.get_cache_file_path(url)
        if not os.path.exists(file_path):
            return None
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                entry = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read cache file {file_path}: {e}")
            return None
        if not isinstance(entry, dict) or entry.get("url") != url:
            return None
        cached_at = _parse_iso_datetime_utc(entry.get("cached_at"))
        if cached_at is None:
            return None
        return cached_at, entry.get("data")

    def get(self, url: str) -> Optional[Any]:
        """
        Return the cached document for `url` if it hasn't expired.

        Returns:
            Optional[Any]: The decoded JSON document, or `None` when missing, unreadable or expired.
        """
        entry = self._read_entry(url)
        if entry is None:
            return None
        cached_at, data = entry
        if datetime.now(timezone.utc) - cached_at > self.expiry:
            logger.debug(f"Cache expired for {url}")
            return None
        logger.debug(f"Cache hit for {url}")
        return data

    def get_stale(self, url: str) -> Optional[Any]:
        """Return the cached document for `url` regardless of its age."""
        entry = self._read_entry(url)
        return entry[1] if entry is not None else None

    def put(self, url: str, data: Any) -> bool:
        """
        Store a document for `url`.

        Returns:
            bool: `True` if the entry was written, `False` on any error.
        """
        file_path = self.get_cache_file_path(url)
        entry = {
            "cached_at": datetime.now(timezone.utc).isoformat(),
            "url": url,
            "data": data,
        }
        try:
            os.makedirs(self.cache_dir, exist_ok=True)
            temp_fd, temp_path = tempfile.mkstemp(
                dir=self.cache_dir, prefix="tmp-", suffix=".json"
            )
        except OSError as e:
            logger.warning(f"Could not create temporary file for {file_path}: {e}")
            return False
        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                json.dump(entry, f)
            os.replace(temp_path, file_path)
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Could not write cache file {file_path}: {e}")
            return False
        finally:
            if os.path.exists(temp_path):
                try:
                    os.remove(temp_path)
                except OSError:
                    pass
        return True

    def clear(self) -> None:
        if not os.path.isdir(self.cache_dir):
            return
        for name in os.listdir(self.cache_dir):
            if name.endswith(".json"):
                try:
                    os.remove(os.path.join(self.cache_dir, name))
                except OSError as e:
                    logger.warning(f"Could not remove cache file {name}: {e}")
