"""SchemaLocation: where a schema node lives and how it can be addressed."""

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from schemagraph.model.json_utils import JsonPointer, ROOT_POINTER, to_pointer_text
from schemagraph.model.uris import encode_fragment, normalize_uri, resolve_uri, split_fragment, without_fragment


@dataclass(frozen=True)
class SchemaLocation:
    """Address of a node in the schema graph.

    Attributes:
        document_uri: Absolute URI of the containing document, no fragment
        pointer: JSON Pointer segments from the document root
        resolution_scope: Base URI for resolving ``$ref`` (the ``$id`` chain)
        id_base: URI of the nearest ancestor (or self) that declared a
            non-fragment ``$id``; the document URI when there is none
        id_pointer: Pointer from the ``id_base`` node down to this node
        declared_id: Resolved ``$id`` declared by this node itself, if any
    """

    document_uri: str
    pointer: JsonPointer
    resolution_scope: str
    id_base: str
    id_pointer: JsonPointer
    declared_id: str | None = None

    @classmethod
    def document_root(cls, document_uri: str) -> "SchemaLocation":
        document_uri = without_fragment(document_uri)
        return cls(document_uri, ROOT_POINTER, document_uri, document_uri, ROOT_POINTER)

    @classmethod
    def from_document(
        cls, document_uri: str, document: Any, pointer: JsonPointer, id_key: str
    ) -> "SchemaLocation":
        """Location of the node at ``pointer``, with the scope of its ancestors.

        Walks ``document`` from its root, applying every ancestor's ``$id``.
        The target node's own ``$id`` is not applied; the loader applies it
        when it loads the node.
        """
        location = cls.document_root(document_uri)
        node = document
        for segment in pointer:
            if isinstance(node, Mapping) and isinstance(node.get(id_key), str):
                location = location.with_id(node[id_key])
            node = node[segment] if isinstance(node, Mapping) else node[int(segment)]
            location = location.child(segment)
        return location

    def child(self, *segments: str | int) -> "SchemaLocation":
        """Location of a descendant reached by ``segments``."""
        extra = tuple(str(segment) for segment in segments)
        return replace(
            self,
            pointer=self.pointer + extra,
            id_pointer=self.id_pointer + extra,
            declared_id=None,
        )

    def with_id(self, id_value: str) -> "SchemaLocation":
        """Rebase the resolution scope on an ``$id`` declared at this node.

        Raises:
            ValueError: If ``id_value`` is not a valid URI reference
        """
        scope = resolve_uri(self.resolution_scope, id_value)
        base, fragment = split_fragment(scope)
        if fragment:
            # "#name" ids label the node but keep the enclosing base.
            return replace(self, declared_id=scope)
        return replace(self, resolution_scope=scope, id_base=base, id_pointer=ROOT_POINTER, declared_id=scope)

    @property
    def fragment(self) -> str:
        """Pointer from the document root in ``#/a/b`` form, percent-encoded."""
        return _fragment(self.pointer)

    @property
    def absolute_uri(self) -> str:
        """``document_uri#pointer``; unique within a loading session."""
        return normalize_uri(self.document_uri + self.fragment)

    @property
    def canonical_uri(self) -> str:
        """Identifier-based URI: the declared ``$id``, else ``id_base#id_pointer``."""
        if self.declared_id is not None:
            return self.declared_id
        return normalize_uri(self.id_base + _fragment(self.id_pointer))

    def cache_keys(self) -> tuple[str, ...]:
        """Every URI under which this location may be looked up."""
        keys = [self.absolute_uri]
        for key in (self.canonical_uri, normalize_uri(self.id_base + _fragment(self.id_pointer))):
            if key not in keys:
                keys.append(key)
        return tuple(keys)

    def is_cache_equivalent(self, other: "SchemaLocation") -> bool:
        return self.absolute_uri == other.absolute_uri or self.canonical_uri == other.canonical_uri

    def __str__(self) -> str:
        return self.absolute_uri


def _fragment(pointer: JsonPointer) -> str:
    return "#" + encode_fragment(to_pointer_text(pointer))
