"""Schema loading: documents -> schema graph, with a structured issue report."""

from schemagraph.loading.cache import SchemaCache
from schemagraph.loading.config import LoaderOptions, get_default_options, load_options
from schemagraph.loading.documents import DocumentClient, DocumentFetchError, HttpDocumentClient
from schemagraph.loading.loader import LoadingContext, SchemaLoader
from schemagraph.loading.report import (
    LoadingIssue,
    LoadingIssueCode,
    LoadingIssueLevel,
    LoadingReport,
    SchemaLoadingException,
)

__all__ = [
    "DocumentClient",
    "DocumentFetchError",
    "HttpDocumentClient",
    "LoaderOptions",
    "LoadingContext",
    "LoadingIssue",
    "LoadingIssueCode",
    "LoadingIssueLevel",
    "LoadingReport",
    "SchemaCache",
    "SchemaLoader",
    "SchemaLoadingException",
    "get_default_options",
    "load_options",
]
