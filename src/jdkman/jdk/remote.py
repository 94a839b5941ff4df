"""
HTTP access to the remote JDK catalogs.

`RemoteAccess` fetches JSON documents (with an on-disk cache that also serves
stale entries when the network fails) and downloads package archives into the
cache folder.
"""

import os
import re
import time
from pathlib import Path
from typing import Any, Optional
from urllib.parse import unquote, urlparse

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry  # type: ignore

from jdkman.constants import (
    CATALOG_CACHE_EXPIRY_HOURS,
    DEFAULT_BACKOFF_FACTOR,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_CONNECT_RETRIES,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_READ_TIMEOUT,
    DOWNLOADS_DIR_NAME,
    HTTP_CACHE_DIR_NAME,
    JSON_MIME_TYPE,
    RETRY_STATUS_FORCELIST,
)
from jdkman.exceptions import HTTPError, NetworkError
from jdkman.jdk.cache import JsonCache
from jdkman.log_utils import logger
from jdkman.utils import get_user_agent

_FILENAME_RX = re.compile(r"filename\*?=(?:UTF-8'')?\"?([^\";]+)\"?", re.IGNORECASE)
_UNSAFE_NAME_CHARS_RX = re.compile(r"[^A-Za-z0-9._+-]+")


def _create_session() -> requests.Session:
    session = requests.Session()
    retry_strategy: Retry = Retry(
        total=DEFAULT_CONNECT_RETRIES,
        connect=DEFAULT_CONNECT_RETRIES,
        read=DEFAULT_CONNECT_RETRIES,
        status=DEFAULT_CONNECT_RETRIES,
        backoff_factor=DEFAULT_BACKOFF_FACTOR,
        status_forcelist=list(RETRY_STATUS_FORCELIST),
        allowed_methods=frozenset({"GET", "HEAD"}),
        raise_on_status=False,
        respect_retry_after_header=True,
    )
    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers["User-Agent"] = get_user_agent()
    return session


def _archive_name(response: requests.Response, url: str) -> str:
    """Pick a file name for a downloaded archive from the response headers or its final URL."""
    name = None
    disposition = response.headers.get("Content-Disposition")
    if disposition:
        match = _FILENAME_RX.search(disposition)
        if match:
            name = unquote(match.group(1).strip())
    if not name:
        name = unquote(os.path.basename(urlparse(response.url or url).path))
    name = _UNSAFE_NAME_CHARS_RX.sub("_", os.path.basename(name)).lstrip(".")
    return name or "download"


class RemoteAccess:
    """
    Cached JSON fetching and archive downloading over a retrying session.

    Parameters:
        cache_dir (Path): Root folder for cached catalog responses and downloaded archives.
        session (Optional[requests.Session]): Session to use, one with retries is created when omitted.
        expiry_hours (float): How long catalog responses are served from cache.
    """

    def __init__(
        self,
        cache_dir: Path,
        session: Optional[requests.Session] = None,
        expiry_hours: float = CATALOG_CACHE_EXPIRY_HOURS,
    ):
        self.cache_dir = Path(cache_dir)
        self.session = session or _create_session()
        self.timeout = (DEFAULT_CONNECT_TIMEOUT, DEFAULT_READ_TIMEOUT)
        self.json_cache = JsonCache(
            str(self.cache_dir / HTTP_CACHE_DIR_NAME), expiry_hours
        )

    @property
    def downloads_dir(self) -> Path:
        return self.cache_dir / DOWNLOADS_DIR_NAME

    def fetch_json(self, url: str) -> Any:
        """
        Fetch and decode a JSON document.

        A fresh cache entry is returned without touching the network. When the
        request fails with a network error a stale cache entry is used instead,
        if there is one.

        Raises:
            HTTPError: If the server doesn't answer 200 with a JSON body.
            NetworkError: If the request fails and nothing is cached.
        """
        cached = self.json_cache.get(url)
        if cached is not None:
            return cached
        try:
            data = self._request_json(url)
        except NetworkError:
            stale = self.json_cache.get_stale(url)
            if stale is not None:
                logger.warning(f"Using cached catalog data, unable to reach {url}")
                return stale
            raise
        self.json_cache.put(url, data)
        return data

    def _request_json(self, url: str) -> Any:
        logger.debug(f"Requesting {url}")
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise NetworkError(
                f"Unable to reach {url}", url=url, details=str(e)
            ) from e
        try:
            if response.status_code != 200:
                raise HTTPError(
                    f"Unexpected HTTP response {response.status_code} for {url}",
                    status_code=response.status_code,
                    url=url,
                )
            content_type = response.headers.get("Content-Type", "")
            if JSON_MIME_TYPE not in content_type.lower():
                raise HTTPError(
                    f"Expected a JSON response from {url}",
                    status_code=response.status_code,
                    url=url,
                    details=content_type or "no content type",
                )
            try:
                return response.json()
            except ValueError as e:
                raise HTTPError(
                    f"Invalid JSON response from {url}",
                    status_code=response.status_code,
                    url=url,
                    details=str(e),
                ) from e
        finally:
            response.close()

    def download(self, url: str) -> Path:
        """
        Download `url` into the downloads folder and return the local file.

        The body is streamed to a temporary file which is renamed into place once
        complete, so a partial download never masquerades as a finished one.

        Raises:
            HTTPError: If the server answers with an error status.
            NetworkError: If the transfer fails.
        """
        self.downloads_dir.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Downloading {url}")
        temp_path: Optional[Path] = None
        response = None
        try:
            response = self.session.get(url, stream=True, timeout=self.timeout)
            if response.status_code != 200:
                raise HTTPError(
                    f"Unexpected HTTP response {response.status_code} for {url}",
                    status_code=response.status_code,
                    url=url,
                )
            target = self.downloads_dir / _archive_name(response, url)
            temp_path = target.with_name(
                f"{target.name}.tmp.{os.getpid()}.{int(time.time() * 1000)}"
            )
            downloaded_bytes = 0
            with open(temp_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=DEFAULT_CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
                        downloaded_bytes += len(chunk)
            os.replace(temp_path, target)
            logger.debug(f"Downloaded {downloaded_bytes} bytes to {target}")
            return target
        except requests.RequestException as e:
            raise NetworkError(
                f"Unable to download {url}", url=url, details=str(e)
            ) from e
        except OSError as e:
            raise NetworkError(
                f"Unable to store download from {url}", url=url, details=str(e)
            ) from e
        finally:
            if response is not None:
                response.close()
            if temp_path is not None and temp_path.exists():
                try:
                    temp_path.unlink()
                except OSError as e_rm:
                    logger.debug(f"Error removing temporary file {temp_path}: {e_rm}")
