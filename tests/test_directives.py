from chatwright.core.directives import (
    parse_file_queries,
    parse_knowledgebase_queries,
    parse_similar_to_queries,
    parse_url_queries,
    scan_all_directives,
    scan_directives,
)
from chatwright.core.types import FileSourceType


def test_scan_directives_finds_inline_url() -> None:
    template = 'Some text {{#url="https://a.com"}} more'
    occurrences = scan_directives(template, "url")

    assert len(occurrences) == 1
    occurrence = occurrences[0]
    assert occurrence.full_match == '{{#url="https://a.com"}}'
    assert template[occurrence.span[0] : occurrence.span[1]] == occurrence.full_match
    assert parse_url_queries(template)[0].url == "https://a.com"


def test_scan_directives_preserves_document_order() -> None:
    template = '{{#url="https://one.example"}} and {{#url url="https://two.example"}}'
    urls = [query.url for query in parse_url_queries(template)]
    assert urls == ["https://one.example", "https://two.example"]


def test_scan_directives_returns_empty_on_plain_text() -> None:
    assert scan_directives("Hello {{name}}, nothing to see here.", "url") == []
    assert scan_directives("", "url") == []


def test_scan_directives_requires_name_boundary() -> None:
    assert scan_directives("{{#urlish x=1}}", "url") == []


def test_scan_directives_rejects_hyphenated_names() -> None:
    assert scan_directives("{{#url-list x=1}}", "url") == []
    assert scan_directives("{{!--#url-list x=1--}}", "url") == []

    bare = scan_directives("{{!--#break--}}", "break")
    assert len(bare) == 1
    assert bare[0].commented is True
    assert scan_directives('{{!--#url="https://a.com"--}}', "url")[0].commented is True


def test_scan_directives_reads_commented_form_and_comment() -> None:
    template = '{{!--#url="https://a.com" comment="docs page"--}}'
    occurrence = scan_directives(template, "url")[0]

    assert occurrence.commented is True
    assert occurrence.comment == "docs page"
    assert occurrence.full_match == template
    assert parse_url_queries(template)[0].comment == "docs page"


def test_occurrence_args_are_typed() -> None:
    occurrence = scan_directives("{{#similar_to count=3 search_for='shoes'}}", "similar_to")[0]
    assert occurrence.args == {"count": 3, "searchFor": "shoes"}


def test_knowledgebase_queries_split_lists() -> None:
    template = "{{#knowledgebase id='1,2' category1='faq' name='setup'}} {{#knowledgebase}}"
    queries = parse_knowledgebase_queries(template)

    assert len(queries) == 1
    assert queries[0].id == ["1", "2"]
    assert queries[0].category1 == ["faq"]
    assert queries[0].names == ["setup"]


def test_similar_to_queries_parse_counts() -> None:
    template = "{{#similar_to search_for_variable='question' count=5 before=1 after=x}}"
    query = parse_similar_to_queries(template)[0]

    assert query.search_for_variable == "question"
    assert query.count == 5
    assert query.before == 1
    assert query.after is None


def test_file_queries_default_source_and_bucket() -> None:
    template = "{{#file id='a.txt'}} {{#file id='b.txt' source='local' bucket='docs'}} {{#file}}"
    queries = parse_file_queries(template)

    assert [(query.id, query.file_source, query.bucket) for query in queries] == [
        ("a.txt", FileSourceType.DB, "default"),
        ("b.txt", FileSourceType.LOCAL, "docs"),
    ]


def test_scan_all_directives_merges_families_in_order() -> None:
    template = "{{#file id='a'}} then {{#url=\"https://a.com\"}} then {{#knowledgebase id='k'}}"
    names = [occurrence.name for occurrence in scan_all_directives(template)]
    assert names == ["file", "url", "knowledgebase"]
