"""
Tests for remote catalog access and the JSON response cache.
"""

import json
import os
from unittest.mock import MagicMock

import pytest
import requests

from jdkman.exceptions import HTTPError, NetworkError
from jdkman.jdk.cache import JsonCache, build_cache_key
from jdkman.jdk.remote import RemoteAccess

pytestmark = [pytest.mark.unit, pytest.mark.infrastructure]

URL = "https://api.example.org/packages?version=17&distro=temurin"


def _response(status=200, json_data=None, content_type="application/json", chunks=(), headers=None, url=URL):
    response = MagicMock()
    response.status_code = status
    response.url = url
    response.headers = {"Content-Type": content_type, **(headers or {})}
    response.json.return_value = json_data
    response.iter_content.return_value = list(chunks)
    return response


class TestJsonCache:
    """Test the on-disk cache of catalog responses."""

    def test_put_and_get(self, tmp_path):
        cache = JsonCache(str(tmp_path), 12)
        assert cache.put(URL, {"result": [1, 2]})
        assert cache.get(URL) == {"result": [1, 2]}

    def test_expired_entry_is_only_stale(self, tmp_path):
        cache = JsonCache(str(tmp_path), -1)
        cache.put(URL, [1])
        assert cache.get(URL) is None
        assert cache.get_stale(URL) == [1]

    def test_key_collision_is_not_served(self, tmp_path):
        """An entry is only returned for the exact URL it was stored for."""
        cache = JsonCache(str(tmp_path), 12)
        cache.put(URL, [1])
        with open(cache.get_cache_file_path(URL), "w", encoding="utf-8") as f:
            json.dump({"cached_at": "2026-01-01T00:00:00+00:00", "url": "other", "data": [2]}, f)
        assert cache.get_stale(URL) is None

    def test_corrupt_entry(self, tmp_path):
        cache = JsonCache(str(tmp_path), 12)
        with open(cache.get_cache_file_path(URL), "w", encoding="utf-8") as f:
            f.write("{not json")
        assert cache.get(URL) is None

    def test_unserializable_data(self, tmp_path):
        cache = JsonCache(str(tmp_path), 12)
        assert not cache.put(URL, {"bad": object()})
        assert [p for p in os.listdir(tmp_path) if p.startswith("tmp-")] == []

    def test_clear(self, tmp_path):
        cache = JsonCache(str(tmp_path), 12)
        cache.put(URL, [1])
        cache.clear()
        assert cache.get_stale(URL) is None

    def test_cache_key(self):
        key = build_cache_key(URL)
        assert "/" not in key and "?" not in key and "&" not in key
        assert len(build_cache_key("x" * 500)) == 180
        assert build_cache_key("://") == "root"


class TestFetchJson:
    """Test JSON fetching through the session."""

    def test_fetch_and_cache(self, tmp_path):
        session = MagicMock()
        session.get.return_value = _response(json_data={"result": []})
        remote = RemoteAccess(tmp_path, session=session)
        assert remote.fetch_json(URL) == {"result": []}
        assert remote.fetch_json(URL) == {"result": []}
        session.get.assert_called_once()

    def test_http_error(self, tmp_path):
        session = MagicMock()
        session.get.return_value = _response(status=404)
        with pytest.raises(HTTPError) as exc_info:
            RemoteAccess(tmp_path, session=session).fetch_json(URL)
        assert exc_info.value.status_code == 404
        assert exc_info.value.url == URL

    def test_not_json(self, tmp_path):
        session = MagicMock()
        session.get.return_value = _response(content_type="text/html")
        with pytest.raises(HTTPError, match="Expected a JSON response"):
            RemoteAccess(tmp_path, session=session).fetch_json(URL)

    def test_invalid_json(self, tmp_path):
        session = MagicMock()
        response = _response()
        response.json.side_effect = ValueError("bad json")
        session.get.return_value = response
        with pytest.raises(HTTPError, match="Invalid JSON response"):
            RemoteAccess(tmp_path, session=session).fetch_json(URL)

    def test_network_error(self, tmp_path):
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("refused")
        with pytest.raises(NetworkError):
            RemoteAccess(tmp_path, session=session).fetch_json(URL)

    def test_stale_cache_when_offline(self, tmp_path):
        session = MagicMock()
        session.get.side_effect = requests.Timeout("slow")
        remote = RemoteAccess(tmp_path, session=session, expiry_hours=-1)
        remote.json_cache.put(URL, {"result": ["old"]})
        assert remote.fetch_json(URL) == {"result": ["old"]}

    def test_default_session_has_retries(self, tmp_path):
        remote = RemoteAccess(tmp_path)
        adapter = remote.session.get_adapter("https://api.foojay.io")
        assert adapter.max_retries.total == 3
        assert remote.session.headers["User-Agent"].startswith("jdkman/")


class TestDownload:
    """Test archive downloads."""

    def test_download_uses_url_name(self, tmp_path):
        session = MagicMock()
        session.get.return_value = _response(
            chunks=[b"abc", b"", b"def"],
            url="https://cdn.example.org/files/OpenJDK17U-jdk_x64_linux.tar.gz",
        )
        remote = RemoteAccess(tmp_path, session=session)
        path = remote.download("https://api.example.org/redirect/123")
        assert path == tmp_path / "downloads" / "OpenJDK17U-jdk_x64_linux.tar.gz"
        assert path.read_bytes() == b"abcdef"
        assert sorted(os.listdir(path.parent)) == ["OpenJDK17U-jdk_x64_linux.tar.gz"]

    def test_download_uses_content_disposition(self, tmp_path):
        session = MagicMock()
        session.get.return_value = _response(
            chunks=[b"zip"],
            headers={"Content-Disposition": 'attachment; filename="zulu21.zip"'},
        )
        path = RemoteAccess(tmp_path, session=session).download(URL)
        assert path.name == "zulu21.zip"

    def test_download_http_error(self, tmp_path):
        session = MagicMock()
        session.get.return_value = _response(status=503)
        with pytest.raises(HTTPError):
            RemoteAccess(tmp_path, session=session).download(URL)

    def test_interrupted_download_leaves_nothing(self, tmp_path):
        session = MagicMock()
        response = _response(url="https://cdn.example.org/jdk.tar.gz")
        response.iter_content.side_effect = requests.ConnectionError("reset")
        session.get.return_value = response
        with pytest.raises(NetworkError):
            RemoteAccess(tmp_path, session=session).download(URL)
        assert os.listdir(tmp_path / "downloads") == []
