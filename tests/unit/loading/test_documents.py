"""HttpDocumentClient: HTTP retrieval with retries, and file documents."""

import json
from pathlib import Path
from unittest.mock import Mock

import pytest
import requests

from schemagraph.loading.documents import DocumentFetchError, HttpDocumentClient

URI = "https://example.com/schema.json"


def _client_with_response(response: Mock) -> HttpDocumentClient:
    client = HttpDocumentClient(timeout_seconds=5.0, retries=3)
    client.session = Mock()
    client.session.get.return_value = response
    return client


@pytest.mark.unit
@pytest.mark.P0
class TestHttpDocumentClient:
    """HTTP fetching through a mocked session."""

    def test_fetch_returns_parsed_json(self) -> None:
        response = Mock()
        response.json.return_value = {"type": "string"}
        client = _client_with_response(response)

        document = client.fetch(URI)

        assert document == {"type": "string"}
        client.session.get.assert_called_once_with(URI, timeout=5.0)
        response.raise_for_status.assert_called_once()

    def test_http_error_raises_fetch_error(self) -> None:
        response = Mock()
        response.raise_for_status.side_effect = requests.HTTPError("404 Client Error")
        client = _client_with_response(response)

        with pytest.raises(DocumentFetchError) as exc_info:
            client.fetch(URI)

        assert exc_info.value.uri == URI
        assert "404" in exc_info.value.reason

    def test_connection_error_raises_fetch_error(self) -> None:
        client = HttpDocumentClient()
        client.session = Mock()
        client.session.get.side_effect = requests.ConnectionError("connection refused")

        with pytest.raises(DocumentFetchError) as exc_info:
            client.fetch(URI)

        assert "connection refused" in str(exc_info.value)

    def test_invalid_json_raises_fetch_error(self) -> None:
        response = Mock()
        response.json.side_effect = requests.exceptions.JSONDecodeError("Expecting value", "<html>", 0)
        client = _client_with_response(response)

        with pytest.raises(DocumentFetchError) as exc_info:
            client.fetch(URI)

        assert exc_info.value.reason.startswith("invalid JSON")

    def test_unsupported_scheme(self) -> None:
        client = HttpDocumentClient()

        with pytest.raises(DocumentFetchError) as exc_info:
            client.fetch("ftp://example.com/schema.json")

        assert "ftp" in exc_info.value.reason

    def test_session_retries(self) -> None:
        client = HttpDocumentClient(retries=4)

        retry = client.session.get_adapter(URI).max_retries

        assert retry.total == 4
        assert 503 in retry.status_forcelist
        client.close()


@pytest.mark.unit
@pytest.mark.P1
class TestFileDocuments:
    """file:// URIs are read from disk."""

    def test_fetch_file(self, tmp_path: Path) -> None:
        path = tmp_path / "schema.json"
        path.write_text(json.dumps({"type": "integer"}), encoding="utf-8")

        document = HttpDocumentClient().fetch(path.as_uri())

        assert document == {"type": "integer"}

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(DocumentFetchError):
            HttpDocumentClient().fetch((tmp_path / "missing.json").as_uri())

    def test_invalid_json_file(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(DocumentFetchError) as exc_info:
            HttpDocumentClient().fetch(path.as_uri())

        assert exc_info.value.reason.startswith("invalid JSON")
