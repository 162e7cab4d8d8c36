"""URI resolution and normalization used for ``$id`` scoping and ``$ref`` lookup."""

import uuid
from urllib.parse import quote, unquote, urldefrag, urljoin, urlsplit, uses_relative

# Reserved TLD (RFC 2606): never resolvable, so relative references against a
# generated base can only be served from preloaded documents.
GENERATED_BASE_PREFIX = "https://schemagraph.invalid/"

_FORBIDDEN_CHARACTERS = frozenset(' "<>\\^`{|}\t\r\n')

# RFC 3986 fragment characters left unescaped besides the unreserved set.
_FRAGMENT_SAFE = "/?!$&'()*+,;=:@"


def generate_base_uri() -> str:
    """Unique document URI for a schema loaded without a base URI."""
    return f"{GENERATED_BASE_PREFIX}{uuid.uuid4().hex}.json"


def check_uri(value: str) -> None:
    """Reject URI references that cannot be parsed.

    Raises:
        ValueError: If ``value`` contains forbidden characters or fails to parse
    """
    bad = sorted(_FORBIDDEN_CHARACTERS.intersection(value))
    if bad:
        raise ValueError(f"URI '{value}' contains illegal characters {bad}")
    # urlsplit raises ValueError for e.g. an unterminated IPv6 host
    urlsplit(value)


def is_absolute(uri: str) -> bool:
    return bool(urlsplit(uri).scheme)


def split_fragment(uri: str) -> tuple[str, str]:
    """Split ``uri`` into (base, fragment); the fragment stays percent-encoded."""
    base, fragment = urldefrag(uri)
    return base, fragment


def encode_fragment(text: str) -> str:
    """Percent-encode raw fragment text (e.g. a JSON Pointer) for use in a URI."""
    return quote(text, safe=_FRAGMENT_SAFE)


def without_fragment(uri: str) -> str:
    return urldefrag(uri)[0]


def normalize_uri(uri: str) -> str:
    """Cache key form of a URI: canonical fragment encoding, empty fragment dropped.

    Escapes that carry meaning survive (``#/c%2541`` names the key ``c%41``),
    needless ones are dropped (``#/%41`` becomes ``#/A``).
    """
    base, fragment = split_fragment(uri)
    fragment = encode_fragment(unquote(fragment))
    return f"{base}#{fragment}" if fragment else base


def resolve_uri(base: str, reference: str) -> str:
    """Resolve ``reference`` against ``base`` (RFC 3986), normalized.

    Fragment-only references and non-hierarchical schemes (``urn:``) are
    handled explicitly since ``urljoin`` ignores them.

    Raises:
        ValueError: If ``reference`` is not a parsable URI reference
    """
    check_uri(reference)
    if is_absolute(reference):
        return normalize_uri(reference)
    if reference.startswith("#"):
        return normalize_uri(without_fragment(base) + reference)
    scheme = urlsplit(base).scheme
    if scheme and scheme not in uses_relative:
        raise ValueError(f"Cannot resolve relative reference '{reference}' against '{base}'")
    return normalize_uri(urljoin(base, reference))
