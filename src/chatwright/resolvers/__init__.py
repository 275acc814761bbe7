"""Directive resolver back ends."""

from .base import (
    DirectiveResolvers,
    FileResolver,
    KnowledgeBaseResolver,
    ResolvedContent,
    ResolverOutput,
    SimilarityResolver,
    Source,
    UrlResolver,
    as_resolved_content,
)
from .files import LocalFileResolver
from .url import HttpUrlResolver

__all__ = [
    "DirectiveResolvers",
    "FileResolver",
    "HttpUrlResolver",
    "KnowledgeBaseResolver",
    "LocalFileResolver",
    "ResolvedContent",
    "ResolverOutput",
    "SimilarityResolver",
    "Source",
    "UrlResolver",
    "as_resolved_content",
]
