"""SchemaLoader: JSON documents -> immutable schema graph.

The loader walks a schema document depth-first. Before a node's children load,
a ``SchemaHandle`` for the node is registered in the session ``SchemaCache``
under every URI the node can be reached by, so ``$ref`` cycles and repeated
descents into the same node terminate: they bind to the handle instead of
loading the node again.
"""

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any, NoReturn

from schemagraph.keywords.metadata import JsonSchemaVersion, KeywordKind, KeywordMetadata
from schemagraph.keywords.registry import DEFAULT_REGISTRY, KeywordRegistry, Keywords
from schemagraph.loading.cache import SchemaCache
from schemagraph.loading.config import LoaderOptions, get_default_options
from schemagraph.loading.digesters import (
    KeywordValueError,
    check_schema_list,
    digest_leaf,
    digest_limit,
    digest_names,
    digest_property_dependency,
    digest_required,
    digest_type,
)
from schemagraph.loading.documents import DocumentClient, DocumentFetchError, HttpDocumentClient
from schemagraph.loading.report import (
    LoadingIssue,
    LoadingIssueCode,
    LoadingReport,
    SchemaLoadingException,
)
from schemagraph.model.json_utils import JsonPointer, JsonPointerError, parse_fragment, resolve_pointer, shape_of
from schemagraph.model.keyword_values import (
    DependenciesKeyword,
    ReferenceKeyword,
    SchemaListKeyword,
    SchemaMapKeyword,
    SingleSchemaKeyword,
    StringSetKeyword,
)
from schemagraph.model.location import SchemaLocation
from schemagraph.model.schema import (
    TRUE_SCHEMA,
    KeywordConflictError,
    Schema,
    SchemaBuilder,
    SchemaHandle,
    boolean_schema,
)
from schemagraph.model.uris import (
    GENERATED_BASE_PREFIX,
    check_uri,
    generate_base_uri,
    is_absolute,
    resolve_uri,
    split_fragment,
    without_fragment,
)

logger = logging.getLogger(__name__)

# (bound, exclusive companion) pairs merged into one LimitKeyword.
_LIMIT_PAIRS = (
    (Keywords.MINIMUM, Keywords.EXCLUSIVE_MINIMUM),
    (Keywords.MAXIMUM, Keywords.EXCLUSIVE_MAXIMUM),
)

# Keys next to $ref that are expected and not worth a warning.
_QUIET_REF_SIBLINGS = frozenset({"$schema"})


class LoadingContext:
    """State of one loading session: options, cache and report.

    Attributes:
        options: Options of the session
        cache: Handles, documents and $id indexes of the session
        report: Issues recorded so far
    """

    def __init__(
        self,
        options: LoaderOptions | None = None,
        cache: SchemaCache | None = None,
        report: LoadingReport | None = None,
    ) -> None:
        self.options = options or get_default_options()
        self.cache = cache if cache is not None else SchemaCache()
        self.report = report if report is not None else LoadingReport()

    def record(self, issue: LoadingIssue) -> None:
        """Add an issue; in strict mode an ERROR ends the session at once.

        Raises:
            SchemaLoadingException: If the issue is fatal, or an ERROR in
                strict mode
        """
        self.report.add(issue)
        if issue.is_fatal or (issue.is_error and self.options.strict):
            raise SchemaLoadingException(self.report)

    def fail(self, issue: LoadingIssue) -> NoReturn:
        """Add an issue and end the session.

        Raises:
            SchemaLoadingException: Always
        """
        self.report.add(issue)
        raise SchemaLoadingException(self.report)

    def finalize(self) -> LoadingReport:
        """End the session.

        Raises:
            SchemaLoadingException: If any ERROR was recorded
        """
        if self.report.has_errors:
            raise SchemaLoadingException(self.report)
        logger.info(
            f"Schema loading finished: {len(self.cache)} cache entries, "
            f"{len(self.report.warnings)} warning(s)"
        )
        return self.report


class SchemaLoader:
    """Loads schema documents of drafts 3, 4 and 6 into ``Schema`` graphs.

    Example::

        loader = SchemaLoader()
        loader.preload("https://example.com/common.json", common_document)
        schema = loader.read_schema(document, base_uri="https://example.com/root.json")
    """

    def __init__(
        self,
        options: LoaderOptions | None = None,
        registry: KeywordRegistry | None = None,
        document_client: DocumentClient | None = None,
    ) -> None:
        """Initialize schema loader.

        Args:
            options: Session options; defaults to ``get_default_options()``
            registry: Keyword registry; defaults to the built-in keywords
            document_client: Fetcher of documents that were not preloaded;
                defaults to an ``HttpDocumentClient`` built from ``options``
        """
        self.options = options or get_default_options()
        self.registry = registry or DEFAULT_REGISTRY
        self._owns_client = document_client is None
        self.document_client = document_client or HttpDocumentClient(
            timeout_seconds=self.options.fetch_timeout_seconds,
            retries=self.options.fetch_retries,
        )
        # Storage: {document uri: document}
        self._preloaded: dict[str, Any] = {}

    def __enter__(self) -> "SchemaLoader":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Release the document client if the loader created it."""
        if self._owns_client and isinstance(self.document_client, HttpDocumentClient):
            self.document_client.close()

    def preload(self, uri: str, document: Any) -> "SchemaLoader":
        """Register a document so ``$ref`` to ``uri`` never fetches it.

        Raises:
            ValueError: If ``uri`` is not an absolute URI
        """
        check_uri(uri)
        if not is_absolute(uri):
            raise ValueError(f"Preloaded documents need an absolute URI, got '{uri}'")
        self._preloaded[without_fragment(uri)] = document
        logger.debug(f"Preloaded document {without_fragment(uri)}")
        return self

    def new_context(self) -> LoadingContext:
        """Start a loading session seeded with the preloaded documents."""
        context = LoadingContext(self.options)
        for uri, document in self._preloaded.items():
            context.cache.add_document(uri, document, self._detect_version(document))
        return context

    def read_schema(self, document: Any, base_uri: str | None = None) -> Schema:
        """Load a whole document in a fresh session.

        Args:
            document: Schema document (object or boolean)
            base_uri: URI of the document; if unset, an absolute root ``$id``,
                then ``options.default_base_uri``, then a generated URI

        Returns:
            The root schema

        Raises:
            SchemaLoadingException: If any ERROR was recorded
        """
        context = self.new_context()
        document_uri = without_fragment(base_uri or self._document_uri(document))
        version = self._detect_version(document)
        if not context.cache.has_document(document_uri):
            context.cache.add_document(document_uri, document, version)
        logger.info(f"Loading schema document {document_uri} as draft {version.value}")

        schema = self.load(document, SchemaLocation.document_root(document_uri), context)
        context.finalize()
        return schema

    def load(self, json_node: Any, location: SchemaLocation, context: LoadingContext) -> Schema:
        """Load one schema node.

        Args:
            json_node: The node (object or boolean)
            location: Where the node lives; its scope must already include
                every ancestor's ``$id``
            context: The loading session

        Returns:
            The loaded schema; issues go to ``context.report``

        Raises:
            SchemaLoadingException: On fatal issues, or ERRORs in strict mode
        """
        stored = context.cache.get_document(location.document_uri)
        if stored is not None:
            version = stored[1]
        else:
            version = self._detect_version(json_node)
            if not location.pointer:
                context.cache.add_document(location.document_uri, json_node, version)
        return self._load_node(json_node, location, version, context)

    def _document_uri(self, document: Any) -> str:
        if isinstance(document, Mapping):
            value = document.get(self._detect_version(document).id_key)
            if isinstance(value, str) and is_absolute(value):
                return value
        return self.options.default_base_uri or generate_base_uri()

    def _detect_version(self, document: Any) -> JsonSchemaVersion:
        if isinstance(document, Mapping) and isinstance(document.get("$schema"), str):
            detected = JsonSchemaVersion.from_schema_uri(document["$schema"])
            if detected is not None:
                return detected
        return self.options.default_version

    def _load_node(
        self, node: Any, location: SchemaLocation, version: JsonSchemaVersion, context: LoadingContext
    ) -> Schema:
        if isinstance(node, bool):
            return boolean_schema(node)
        if not isinstance(node, Mapping):
            context.record(
                LoadingIssue.error(
                    LoadingIssueCode.SCHEMA_TYPE_MISMATCH,
                    location,
                    "Expected a schema (object or boolean) but got {}",
                    _shape_name(node),
                )
            )
            return TRUE_SCHEMA

        existing = context.cache.lookup_location(location)
        if existing is not None:
            if existing.is_bound:
                return existing.schema
            # Descending into a node that is still loading: point back at it.
            return self._reference_schema(existing.location.canonical_uri, existing, location, version)

        is_reference = "$ref" in node
        id_value = node.get(version.id_key)
        if not is_reference and id_value is not None:
            location = self._apply_id(id_value, location, context)

        handle = context.cache.begin(location)
        builder = SchemaBuilder(location, version)
        if is_reference:
            self._load_reference(node, location, version, context, builder)
        else:
            self._load_keywords(node, location, version, context, builder)
        schema = builder.build()
        context.cache.complete(handle, schema)
        return schema

    def _apply_id(self, id_value: Any, location: SchemaLocation, context: LoadingContext) -> SchemaLocation:
        if not isinstance(id_value, str):
            # Reported as keyword.type.mismatch by the keyword loop.
            return location
        try:
            return location.with_id(id_value)
        except ValueError as e:
            context.record(
                LoadingIssue.error(LoadingIssueCode.URI_MALFORMED, location, "Invalid identifier '{}': {}", id_value, e)
            )
            return location

    def _reference_schema(
        self, ref: str, handle: SchemaHandle, location: SchemaLocation, version: JsonSchemaVersion
    ) -> Schema:
        value = ReferenceKeyword(ref, handle.location.absolute_uri, handle)
        return Schema({Keywords.REF: value}, location, version)

    # $ref

    def _load_reference(
        self,
        node: Mapping[str, Any],
        location: SchemaLocation,
        version: JsonSchemaVersion,
        context: LoadingContext,
        builder: SchemaBuilder,
    ) -> None:
        ref = node["$ref"]
        if not isinstance(ref, str):
            context.record(
                LoadingIssue.error(
                    LoadingIssueCode.KEYWORD_TYPE_MISMATCH,
                    location.child("$ref"),
                    "Keyword '{}' expects {} but got {}",
                    "$ref",
                    "string",
                    _shape_name(ref),
                )
            )
            return

        siblings = sorted(key for key in node if key != "$ref" and key not in _QUIET_REF_SIBLINGS)
        if siblings:
            context.record(
                LoadingIssue.warn(
                    LoadingIssueCode.REF_SIBLINGS_IGNORED,
                    location,
                    "Keywords {} next to $ref are ignored",
                    siblings,
                )
            )

        try:
            target_uri = resolve_uri(location.resolution_scope, ref)
        except ValueError as e:
            context.record(
                LoadingIssue.error(LoadingIssueCode.URI_MALFORMED, location.child("$ref"), "Invalid $ref '{}': {}", ref, e)
            )
            return

        handle = self._resolve_reference(target_uri, location, context)
        builder.keyword(Keywords.REF, ReferenceKeyword(ref, target_uri, handle))

    def _resolve_reference(self, target_uri: str, origin: SchemaLocation, context: LoadingContext) -> SchemaHandle:
        """Handle of the schema at ``target_uri``, loading it if needed.

        Raises:
            SchemaLoadingException: If the target cannot be located
        """
        handle = context.cache.lookup(target_uri)
        if handle is not None:
            return handle

        document_uri, pointer = self._locate(target_uri, origin, context)
        document, version = context.cache.get_document(document_uri)
        try:
            node = resolve_pointer(document, pointer)
            target = SchemaLocation.from_document(document_uri, document, pointer, version.id_key)
        except (JsonPointerError, ValueError, IndexError, KeyError) as e:
            context.fail(
                LoadingIssue.error(
                    LoadingIssueCode.REF_UNRESOLVABLE, origin, "Unable to resolve $ref to '{}': {}", target_uri, e
                )
            )

        handle = context.cache.lookup_location(target)
        if handle is None:
            logger.debug(f"Loading $ref target {target} for {origin}")
            schema = self._load_node(node, target, version, context)
            handle = context.cache.lookup_location(target)
            if handle is None:
                # Boolean and malformed targets are never registered while loading.
                handle = SchemaHandle(target)
                handle.bind(schema)
        context.cache.alias(target_uri, handle)
        return handle

    def _locate(self, uri: str, origin: SchemaLocation, context: LoadingContext) -> tuple[str, JsonPointer]:
        """Find the document and pointer a ``$ref`` URI designates.

        Raises:
            SchemaLoadingException: ``ref.unresolvable`` or ``document.fetch.failed``
        """
        base, fragment = split_fragment(uri)
        if context.cache.has_document(base) and (fragment == "" or fragment.startswith("/")):
            return base, self._parse_fragment(uri, fragment, origin, context)

        found = context.cache.find_by_id(uri)
        if found is not None:
            return found

        if not context.cache.has_document(base):
            self._fetch(base, origin, context)
            found = context.cache.find_by_id(uri)
            if found is not None:
                return found
            if fragment == "" or fragment.startswith("/"):
                return base, self._parse_fragment(uri, fragment, origin, context)

        context.fail(
            LoadingIssue.error(LoadingIssueCode.REF_UNRESOLVABLE, origin, "Unable to resolve $ref to '{}'", uri)
        )

    def _parse_fragment(self, uri: str, fragment: str, origin: SchemaLocation, context: LoadingContext) -> JsonPointer:
        try:
            return parse_fragment(fragment)
        except JsonPointerError as e:
            context.fail(
                LoadingIssue.error(LoadingIssueCode.REF_UNRESOLVABLE, origin, "Unable to resolve $ref to '{}': {}", uri, e)
            )

    def _fetch(self, document_uri: str, origin: SchemaLocation, context: LoadingContext) -> None:
        if not context.options.allow_remote_fetch or document_uri.startswith(GENERATED_BASE_PREFIX):
            context.fail(
                LoadingIssue.error(
                    LoadingIssueCode.REF_UNRESOLVABLE,
                    origin,
                    "Document '{}' was not preloaded and remote fetching is disabled",
                    document_uri,
                )
            )
        try:
            document = self.document_client.fetch(document_uri)
        except DocumentFetchError as e:
            context.fail(
                LoadingIssue.error(LoadingIssueCode.DOCUMENT_FETCH_FAILED, origin, "{}", e.reason)
            )
        context.cache.add_document(document_uri, document, self._detect_version(document))
        logger.info(f"Fetched schema document {document_uri}")

    # Keywords

    def _load_keywords(
        self,
        node: Mapping[str, Any],
        location: SchemaLocation,
        version: JsonSchemaVersion,
        context: LoadingContext,
        builder: SchemaBuilder,
    ) -> None:
        # Keys whose value passed the shape check.
        accepted: dict[str, Any] = {}
        for key, value in node.items():
            metadata = self.registry.find(key, version)
            if metadata is None:
                self._unknown_keyword(key, location, context)
                continue

            kind, expects = self.registry.resolve_variant(metadata, version)
            shape = shape_of(value)
            if shape not in expects:
                context.record(
                    LoadingIssue.error(
                        LoadingIssueCode.KEYWORD_TYPE_MISMATCH,
                        location.child(key),
                        "Keyword '{}' expects {} but got {}",
                        key,
                        sorted(s.value for s in expects),
                        shape.value,
                    )
                )
                continue
            accepted[key] = value

            if metadata.merged_into is not None or kind in (KeywordKind.LIMIT, KeywordKind.ITEMS):
                continue
            with _recording_value_errors(context, location.child(key)):
                self._load_keyword(metadata, kind, value, location, version, context, builder)

        for bound_keyword, exclusive_keyword in _LIMIT_PAIRS:
            present = bound_keyword.key if bound_keyword.key in accepted else exclusive_keyword.key
            with _recording_value_errors(context, location.child(present)):
                self._load_limit(bound_keyword, exclusive_keyword, accepted, version, builder)

        if Keywords.ITEMS.key in accepted or Keywords.ADDITIONAL_ITEMS.key in accepted:
            with _recording_value_errors(context, location.child(Keywords.ITEMS.key)):
                self._load_items(accepted, location, version, context, builder)

    def _unknown_keyword(self, key: str, location: SchemaLocation, context: LoadingContext) -> None:
        if not context.options.report_unknown_keywords:
            return
        factory = LoadingIssue.error if context.options.strict else LoadingIssue.warn
        context.record(factory(LoadingIssueCode.KEYWORD_UNKNOWN, location, "Unknown keyword '{}'", key))

    def _load_keyword(
        self,
        metadata: KeywordMetadata,
        kind: KeywordKind,
        value: Any,
        location: SchemaLocation,
        version: JsonSchemaVersion,
        context: LoadingContext,
        builder: SchemaBuilder,
    ) -> None:
        child = location.child(metadata.key)

        if kind is KeywordKind.SCHEMA:
            builder.keyword(metadata, SingleSchemaKeyword(self._load_node(value, child, version, context)))
        elif kind is KeywordKind.SCHEMA_LIST:
            builder.keyword(metadata, SchemaListKeyword(self._load_list(metadata.key, value, child, version, context)))
        elif kind is KeywordKind.SCHEMA_MAP:
            schemas = {
                name: self._load_node(subschema, child.child(name), version, context)
                for name, subschema in value.items()
            }
            builder.keyword(metadata, SchemaMapKeyword(schemas))
        elif kind is KeywordKind.TYPE:
            builder.keyword(metadata, digest_type(metadata.key, value, version))
        elif metadata == Keywords.REQUIRED:
            builder.keyword(metadata, digest_required(metadata.key, value, version))
        elif kind is KeywordKind.STRING_SET:
            builder.keyword(metadata, StringSetKeyword(digest_names(metadata.key, value)))
        elif kind is KeywordKind.DEPENDENCIES:
            builder.keyword(metadata, self._load_dependencies(metadata.key, value, child, version, context))
        else:
            builder.keyword(metadata, digest_leaf(metadata, kind, value))

    def _load_list(
        self, key: str, value: Any, location: SchemaLocation, version: JsonSchemaVersion, context: LoadingContext
    ) -> tuple[Schema, ...]:
        if isinstance(value, Mapping):
            # Draft 3 "extends" also takes a single schema.
            return (self._load_node(value, location, version, context),)
        check_schema_list(key, value)
        return tuple(
            self._load_node(subschema, location.child(position), version, context)
            for position, subschema in enumerate(value)
        )

    def _load_dependencies(
        self,
        key: str,
        value: Mapping[str, Any],
        location: SchemaLocation,
        version: JsonSchemaVersion,
        context: LoadingContext,
    ) -> DependenciesKeyword:
        property_dependencies: dict[str, tuple[str, ...]] = {}
        schema_dependencies: dict[str, Schema] = {}
        for name, dependency in value.items():
            if isinstance(dependency, (Mapping, bool)):
                schema_dependencies[name] = self._load_node(dependency, location.child(name), version, context)
            else:
                property_dependencies[name] = digest_property_dependency(key, name, dependency, version)
        return DependenciesKeyword(property_dependencies, schema_dependencies)

    def _load_limit(
        self,
        bound_keyword: KeywordMetadata,
        exclusive_keyword: KeywordMetadata,
        accepted: Mapping[str, Any],
        version: JsonSchemaVersion,
        builder: SchemaBuilder,
    ) -> None:
        limit = digest_limit(
            bound_keyword.key,
            exclusive_keyword.key,
            accepted.get(bound_keyword.key),
            accepted.get(exclusive_keyword.key),
            version,
        )
        if limit is not None:
            builder.keyword(bound_keyword, limit)

    def _load_items(
        self,
        accepted: Mapping[str, Any],
        location: SchemaLocation,
        version: JsonSchemaVersion,
        context: LoadingContext,
        builder: SchemaBuilder,
    ) -> None:
        items = accepted.get(Keywords.ITEMS.key)
        items_location = location.child(Keywords.ITEMS.key)
        if isinstance(items, list):
            builder.items(
                index_schemas=[
                    self._load_node(subschema, items_location.child(position), version, context)
                    for position, subschema in enumerate(items)
                ]
            )
        elif items is not None:
            builder.items(all_items=self._load_node(items, items_location, version, context))

        additional = accepted.get(Keywords.ADDITIONAL_ITEMS.key)
        if additional is not None:
            additional_location = location.child(Keywords.ADDITIONAL_ITEMS.key)
            builder.additional_items(self._load_node(additional, additional_location, version, context))


def _shape_name(value: Any) -> str:
    try:
        return shape_of(value).value
    except TypeError:
        return type(value).__name__


@contextmanager
def _recording_value_errors(context: LoadingContext, location: SchemaLocation) -> Iterator[None]:
    """Record value errors raised while loading one keyword as issues."""
    try:
        yield
    except KeywordValueError as e:
        context.record(LoadingIssue.error(e.code, location, "Invalid value for keyword '{}': {}", e.key, e.reason))
    except KeywordConflictError as e:
        context.record(LoadingIssue.error(LoadingIssueCode.KEYWORD_CONFLICTING, location, "{}", e))
    except ValueError as e:
        context.record(LoadingIssue.error(LoadingIssueCode.KEYWORD_INVALID, location, "{}", e))
