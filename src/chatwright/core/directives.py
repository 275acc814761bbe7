"""Template directive detection."""

from __future__ import annotations

import re
from functools import lru_cache

from chatwright.core.arguments import NUMBER_RE, split_argument_tokens
from chatwright.core.types import (
    DirectiveOccurrence,
    FileQuery,
    FileSourceType,
    KnowledgebaseQuery,
    SimilarToQuery,
    UrlQuery,
)

DIRECTIVE_FAMILIES: tuple[str, ...] = ("url", "knowledgebase", "similar_to", "file")
COMMENT_OPEN = "!--"
COMMENT_CLOSE = "--"
TRAILING_COMMENT_RE = re.compile(r"""\s+comment=(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>\S+))\s*$""")
INLINE_VALUE_RE = re.compile(r"""^=\s*(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>\S+))""")
URL_ARGUMENT_KEYS = ("url", "html")
KNOWLEDGE_LIST_KEYS = ("id", "category1", "category2", "category3")


@lru_cache(maxsize=64)
def _directive_re(name: str) -> re.Pattern[str]:
    return re.compile(
        r"\{\{(?P<open>!--)?#" + re.escape(name) + r"(?=[\s=}]|--\}\})(?P<body>.*?)\}\}",
        re.DOTALL,
    )


def _first_group(match: re.Match[str]) -> str:
    for group in ("dq", "sq", "bare"):
        value = match.group(group)
        if value is not None:
            return value
    return ""


def _split_comment(body: str) -> tuple[str, str | None]:
    match = TRAILING_COMMENT_RE.search(body)
    if match is None:
        return body, None
    return body[: match.start()], _first_group(match)


def scan_directives(template: str, name: str) -> list[DirectiveOccurrence]:
    """Find every `{{#name ...}}` and `{{!--#name ...}}` occurrence in document order."""

    if not template or not name:
        return []

    occurrences: list[DirectiveOccurrence] = []
    for match in _directive_re(name).finditer(template):
        commented = match.group("open") is not None
        body = match.group("body")
        if commented and body.endswith(COMMENT_CLOSE):
            body = body[: -len(COMMENT_CLOSE)]
        raw_args, comment = _split_comment(body)
        occurrences.append(
            DirectiveOccurrence(
                name=name,
                raw_args=raw_args.strip(),
                full_match=match.group(0),
                span=match.span(),
                commented=commented,
                comment=comment,
            )
        )
    return occurrences


def scan_all_directives(
    template: str,
    names: tuple[str, ...] = DIRECTIVE_FAMILIES,
) -> list[DirectiveOccurrence]:
    """Scan several directive families; result is ordered and non-overlapping."""

    found = sorted(
        (occurrence for name in names for occurrence in scan_directives(template, name)),
        key=lambda occurrence: occurrence.span,
    )
    result: list[DirectiveOccurrence] = []
    last_end = -1
    for occurrence in found:
        if occurrence.span[0] < last_end:
            continue
        result.append(occurrence)
        last_end = occurrence.span[1]
    return result


def _raw_values(occurrence: DirectiveOccurrence) -> dict[str, str]:
    return {token.key: token.value for token in split_argument_tokens(occurrence.raw_args)}


def _split_list(value: str | None) -> list[str] | None:
    if value is None:
        return None
    items = [item.strip() for item in value.split(",") if item.strip()]
    return items or None


def _parse_int(value: str | None) -> int | None:
    if value is None or not NUMBER_RE.match(value) or "." in value:
        return None
    return int(value)


def url_of(occurrence: DirectiveOccurrence) -> str | None:
    inline = INLINE_VALUE_RE.match(occurrence.raw_args)
    if inline is not None:
        return _first_group(inline).strip() or None
    values = _raw_values(occurrence)
    for key in URL_ARGUMENT_KEYS:
        if values.get(key):
            return values[key].strip()
    return None


def parse_url_queries(template: str) -> list[UrlQuery]:
    queries: list[UrlQuery] = []
    for occurrence in scan_directives(template, "url"):
        url = url_of(occurrence)
        if url is None:
            continue
        queries.append(UrlQuery(full_match=occurrence.full_match, url=url, comment=occurrence.comment))
    return queries


def knowledgebase_query_of(occurrence: DirectiveOccurrence) -> KnowledgebaseQuery | None:
    values = _raw_values(occurrence)
    lists = {key: _split_list(values.get(key)) for key in KNOWLEDGE_LIST_KEYS}
    names = _split_list(values.get("name") or values.get("names"))
    if names is None and all(value is None for value in lists.values()):
        return None
    return KnowledgebaseQuery(full_match=occurrence.full_match, names=names, **lists)


def parse_knowledgebase_queries(template: str) -> list[KnowledgebaseQuery]:
    queries = (knowledgebase_query_of(occurrence) for occurrence in scan_directives(template, "knowledgebase"))
    return [query for query in queries if query is not None]


def similar_to_query_of(occurrence: DirectiveOccurrence) -> SimilarToQuery | None:
    values = _raw_values(occurrence)
    if not values:
        return None
    return SimilarToQuery(
        full_match=occurrence.full_match,
        search_for=_split_list(values.get("search_for")),
        search_for_variable=values.get("search_for_variable") or None,
        id=_split_list(values.get("id")),
        category1=_split_list(values.get("category1")),
        category2=_split_list(values.get("category2")),
        category3=_split_list(values.get("category3")),
        names=_split_list(values.get("name") or values.get("names")),
        count=_parse_int(values.get("count")),
        before=_parse_int(values.get("before")),
        after=_parse_int(values.get("after")),
    )


def parse_similar_to_queries(template: str) -> list[SimilarToQuery]:
    queries = (similar_to_query_of(occurrence) for occurrence in scan_directives(template, "similar_to"))
    return [query for query in queries if query is not None]


def file_query_of(occurrence: DirectiveOccurrence) -> FileQuery | None:
    values = _raw_values(occurrence)
    file_id = values.get("id")
    if not file_id:
        return None
    source = FileSourceType.LOCAL if values.get("source") == FileSourceType.LOCAL.value else FileSourceType.DB
    return FileQuery(
        full_match=occurrence.full_match,
        id=file_id,
        file_source=source,
        bucket=values.get("bucket") or "default",
    )


def parse_file_queries(template: str) -> list[FileQuery]:
    queries = (file_query_of(occurrence) for occurrence in scan_directives(template, "file"))
    return [query for query in queries if query is not None]
