from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from casedesk.api.llm_pipeline import SECTION_SEPARATOR, ContextAssembler, ContextStatus, recency_key


@dataclass
class Doc:
    title: str
    content: Any
    last_modified_at: Any = None


def test_no_documents():
    context = ContextAssembler().assemble([])
    assert context.status is ContextStatus.NO_DOCUMENTS
    assert not context.usable
    assert context.sections == []


def test_whitespace_and_non_string_content_is_unreadable():
    docs = [Doc("blank", "   \n\t"), Doc("empty", ""), Doc("none", None), Doc("number", 42)]
    context = ContextAssembler().assemble(docs)
    assert context.status is ContextStatus.NO_READABLE_DOCUMENTS


def test_truncation_leaving_only_whitespace_gives_no_usable_sections():
    docs = [Doc("padded", " " * 50 + "late text")]
    context = ContextAssembler(per_document_chars=10, max_chars=100).assemble(docs)
    assert context.status is ContextStatus.NO_USABLE_SECTIONS


def test_most_recently_modified_first():
    docs = [Doc("A", "alpha", 300), Doc("B", "bravo", 400), Doc("C", "charlie", 200)]
    context = ContextAssembler().assemble(docs)
    assert context.titles == ["B", "A", "C"]


def test_datetimes_and_missing_timestamps_order():
    now = datetime.now(timezone.utc)
    docs = [
        Doc("old", "x", now - timedelta(days=2)),
        Doc("never", "y", None),
        Doc("new", "z", now),
    ]
    assert ContextAssembler().assemble(docs).titles == ["new", "old", "never"]


def test_equal_timestamps_keep_input_order():
    docs = [Doc("first", "1", 5), Doc("second", "2", 5)]
    assert ContextAssembler().assemble(docs).titles == ["first", "second"]


def test_section_format_and_per_document_cap():
    content = "  " + "a" * 3000
    context = ContextAssembler(per_document_chars=2000).assemble([Doc("Long", content, 1)])
    assert context.sections == [f"Title: Long\nContent:\n{'a' * 1998}"]


def test_block_labels_and_separator():
    docs = [Doc("One", "first", 2), Doc("Two", "second", 1)]
    block = ContextAssembler().assemble(docs).block
    assert block == (
        "Document 1:\nTitle: One\nContent:\nfirst"
        + SECTION_SEPARATOR
        + "Document 2:\nTitle: Two\nContent:\nsecond"
    )


def test_budget_stops_before_overflowing_section():
    # each section is len("Title: dN\nContent:\n") + 40 = 59 chars
    docs = [Doc(f"d{i}", "x" * 40, 10 - i) for i in range(5)]
    context = ContextAssembler(per_document_chars=100, max_chars=150).assemble(docs)
    assert context.titles == ["d0", "d1"]
    assert context.total_chars <= 150


def test_first_section_is_kept_even_when_over_budget():
    docs = [Doc("huge", "y" * 500, 2), Doc("small", "tiny", 1)]
    context = ContextAssembler(per_document_chars=1000, max_chars=100).assemble(docs)
    assert context.titles == ["huge"]
    assert context.total_chars > 100


def test_stops_once_budget_is_met_exactly():
    # "Title: a\nContent:\n" is 18 chars
    docs = [Doc("a", "x" * 32, 3), Doc("b", "y", 2)]
    context = ContextAssembler(per_document_chars=100, max_chars=50).assemble(docs)
    assert context.total_chars == 50
    assert context.titles == ["a"]


def test_unusable_documents_are_skipped_among_usable_ones():
    docs = [Doc("blank", "   ", 10), Doc("real", "Hello world", 1)]
    context = ContextAssembler().assemble(docs)
    assert context.usable
    assert context.titles == ["real"]
    assert "Hello world" in context.block


def test_budget_never_exceeded_with_many_documents():
    docs = [Doc(f"doc{i}", "z" * 2500, i) for i in range(20)]
    context = ContextAssembler().assemble(docs)
    assert len(context.sections) > 1
    assert context.total_chars <= 12000
    assert all(len(section.split("Content:\n", 1)[1]) <= 2000 for section in context.sections)


def test_recency_key_accepts_mixed_values():
    assert recency_key(None) == 0.0
    assert recency_key(12) == 12.0
    assert recency_key("not a time") == 0.0
    moment = datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert recency_key(moment) == moment.timestamp()
