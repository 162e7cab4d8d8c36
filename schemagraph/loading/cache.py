"""SchemaCache: per-session store of schema handles, documents and ``$id`` indexes."""

import logging
from collections.abc import Mapping
from typing import Any

from schemagraph.keywords.metadata import JsonSchemaVersion
from schemagraph.model.json_utils import JsonPointer, parse_fragment
from schemagraph.model.location import SchemaLocation
from schemagraph.model.schema import Schema, SchemaHandle
from schemagraph.model.uris import normalize_uri, split_fragment, without_fragment

logger = logging.getLogger(__name__)

# Keywords whose values are plain JSON data, never subschemas.
_DATA_KEYWORDS = frozenset({"enum", "const", "default", "examples"})

# Keywords whose values map names to subschemas.
_SCHEMA_MAP_KEYWORDS = frozenset({"properties", "patternProperties", "definitions", "dependencies"})


class SchemaCache:
    """Session store shared by every ``load()`` of one loading session.

    Maps normalized URIs to ``SchemaHandle`` objects (in-progress or
    finished), document URIs to their JSON documents, and lazily indexes the
    ``$id`` values declared inside each document. Not thread-safe.
    """

    def __init__(self) -> None:
        # Storage: {normalized uri: SchemaHandle}
        self._handles: dict[str, SchemaHandle] = {}
        # Storage: {document uri: (document, draft)}
        self._documents: dict[str, tuple[Any, JsonSchemaVersion]] = {}
        # Storage: {document uri: {resolved $id: pointer}}
        self._id_indexes: dict[str, dict[str, JsonPointer]] = {}

    # Handles

    def begin(self, location: SchemaLocation) -> SchemaHandle:
        """Register an unbound handle under every cache key of ``location``.

        Keys already taken (e.g. a duplicated ``$id``) keep their first handle.
        """
        handle = SchemaHandle(location)
        for key in location.cache_keys():
            self._handles.setdefault(key, handle)
        logger.debug(f"Registered handle for {location}")
        return handle

    def complete(self, handle: SchemaHandle, schema: Schema) -> None:
        handle.bind(schema)
        logger.debug(f"Completed schema at {handle.location}")

    def alias(self, uri: str, handle: SchemaHandle) -> None:
        self._handles.setdefault(normalize_uri(uri), handle)

    def lookup(self, uri: str) -> SchemaHandle | None:
        handle = self._handles.get(normalize_uri(uri))
        if handle is None:
            logger.debug(f"Cache miss for {uri}")
        else:
            logger.debug(f"Cache hit for {uri}")
        return handle

    def lookup_location(self, location: SchemaLocation) -> SchemaHandle | None:
        """Handle of a cache-equivalent location, if any."""
        for key in location.cache_keys():
            handle = self._handles.get(key)
            if handle is not None:
                return handle
        return None

    def __len__(self) -> int:
        return len(self._handles)

    # Documents

    def add_document(self, uri: str, document: Any, version: JsonSchemaVersion) -> None:
        """Store a document under its URI (fragment dropped).

        Raises:
            ValueError: If another document is already stored under ``uri``
        """
        uri = without_fragment(uri)
        existing = self._documents.get(uri)
        if existing is not None and existing[0] is not document:
            raise ValueError(f"A different document is already registered for '{uri}'")
        self._documents[uri] = (document, version)
        self._id_indexes.pop(uri, None)

    def has_document(self, uri: str) -> bool:
        return without_fragment(uri) in self._documents

    def get_document(self, uri: str) -> tuple[Any, JsonSchemaVersion] | None:
        return self._documents.get(without_fragment(uri))

    # $id index

    def id_index(self, document_uri: str) -> dict[str, JsonPointer]:
        """Resolved ``$id`` -> pointer for one document, built on first use."""
        index = self._id_indexes.get(document_uri)
        if index is None:
            document, version = self._documents[document_uri]
            index = {}
            _index_ids(document, SchemaLocation.document_root(document_uri), version.id_key, index, False)
            self._id_indexes[document_uri] = index
            logger.debug(f"Indexed {len(index)} identifiers in {document_uri}")
        return index

    def find_by_id(self, uri: str) -> tuple[str, JsonPointer] | None:
        """Locate ``uri`` through the ``$id`` indexes of every known document.

        Matches either a declared identifier (including ``#name`` forms) or
        ``<declared identifier>#<json pointer>``.

        Returns:
            (document URI, pointer from its root), or None
        """
        uri = normalize_uri(uri)
        base, fragment = split_fragment(uri)
        for document_uri in list(self._documents):
            index = self.id_index(document_uri)
            if uri in index:
                return document_uri, index[uri]
            if base in index and (fragment == "" or fragment.startswith("/")):
                return document_uri, index[base] + parse_fragment(fragment)
        return None


def _index_ids(
    node: Any,
    location: SchemaLocation,
    id_key: str,
    index: dict[str, JsonPointer],
    is_schema_map: bool,
) -> None:
    if isinstance(node, Mapping):
        if not is_schema_map and isinstance(node.get(id_key), str) and "$ref" not in node:
            try:
                location = location.with_id(node[id_key])
                index.setdefault(location.declared_id, location.pointer)
            except ValueError:
                # Malformed ids are reported by the loader when the node loads.
                logger.debug(f"Skipping malformed identifier at {location}")
        for key, value in node.items():
            if not is_schema_map and key in _DATA_KEYWORDS:
                continue
            child_is_map = not is_schema_map and key in _SCHEMA_MAP_KEYWORDS
            _index_ids(value, location.child(key), id_key, index, child_is_map)
    elif isinstance(node, list):
        for position, value in enumerate(node):
            _index_ids(value, location.child(position), id_key, index, False)

