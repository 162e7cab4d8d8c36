"""Retrieval of schema documents that were not preloaded."""

import json
import logging
from pathlib import Path
from typing import Any, Protocol
from urllib.parse import urlsplit
from urllib.request import url2pathname

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)


class DocumentFetchError(Exception):
    """Raised when a schema document cannot be retrieved or parsed.

    Attributes:
        uri: URI of the document
        reason: Why retrieval failed
    """

    def __init__(self, uri: str, reason: str) -> None:
        """Initialize document fetch error.

        Args:
            uri: URI of the document
            reason: Why retrieval failed
        """
        super().__init__(f"Unable to fetch schema document '{uri}': {reason}")
        self.uri = uri
        self.reason = reason


class DocumentClient(Protocol):
    """Fetch-by-URI collaborator of the loader."""

    def fetch(self, uri: str) -> Any:
        """Return the parsed JSON document at ``uri``.

        Raises:
            DocumentFetchError: If the document cannot be retrieved or parsed
        """
        ...


class HttpDocumentClient:
    """Fetches ``http``/``https`` documents with retries and ``file`` documents from disk."""

    def __init__(self, timeout_seconds: float = 10.0, retries: int = 2) -> None:
        """Initialize document client.

        Args:
            timeout_seconds: Timeout of one request
            retries: Retries of a failed request (connection errors and 5xx)
        """
        self.timeout_seconds = timeout_seconds
        self.session = self._create_session(retries)

    def _create_session(self, retries: int) -> requests.Session:
        """Create HTTP session with retry logic"""
        session = requests.Session()
        retry = Retry(
            total=retries,
            read=retries,
            connect=retries,
            backoff_factor=0.3,
            status_forcelist=(500, 502, 503, 504),
        )
        adapter = HTTPAdapter(max_retries=retry)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        session.headers.update({"Accept": "application/schema+json, application/json"})
        return session

    def fetch(self, uri: str) -> Any:
        """Fetch and parse the JSON document at ``uri``.

        Args:
            uri: Absolute URI without fragment

        Returns:
            The parsed document

        Raises:
            DocumentFetchError: On unsupported schemes, transport errors,
                non-2xx responses or invalid JSON
        """
        scheme = urlsplit(uri).scheme
        if scheme == "file":
            return self._fetch_file(uri)
        if scheme not in ("http", "https"):
            raise DocumentFetchError(uri, f"unsupported scheme '{scheme}'")

        logger.info(f"Fetching schema document {uri}")
        try:
            response = self.session.get(uri, timeout=self.timeout_seconds)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.JSONDecodeError as e:
            raise DocumentFetchError(uri, f"invalid JSON: {e}") from e
        except requests.RequestException as e:
            raise DocumentFetchError(uri, str(e)) from e

    def _fetch_file(self, uri: str) -> Any:
        path = Path(url2pathname(urlsplit(uri).path))
        logger.info(f"Reading schema document {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except OSError as e:
            raise DocumentFetchError(uri, str(e)) from e
        except json.JSONDecodeError as e:
            raise DocumentFetchError(uri, f"invalid JSON: {e}") from e

    def close(self) -> None:
        self.session.close()
