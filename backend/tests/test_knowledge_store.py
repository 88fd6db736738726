from casebrain.knowledge.base import FactSource
from casebrain.knowledge.store import (
    INITIAL_SOURCE_ID,
    MANUAL_SOURCE_ID,
    KnowledgeStore,
)


def expected_context(store: KnowledgeStore) -> str:
    return "\n".join(f.text for s in store.sources for f in s.facts)


def counts(store: KnowledgeStore) -> list[int]:
    return [len(s.facts) for s in store.sources]


class TestSeeding:
    def test_two_reserved_sources(self, store, profile):
        ids = [s.id for s in store.sources]
        assert ids == [INITIAL_SOURCE_ID, MANUAL_SOURCE_ID]

        summary_lines = [l.strip() for l in profile.summary.split("\n") if l.strip()]
        initial = store.get_source(INITIAL_SOURCE_ID)
        assert [f.text for f in initial.facts] == summary_lines
        assert [f.id for f in initial.facts][:2] == ["initial-0", "initial-1"]
        assert store.get_source(MANUAL_SOURCE_ID).facts == []

    def test_context_is_summary_lines(self, store, profile):
        summary_lines = [l.strip() for l in profile.summary.split("\n") if l.strip()]
        assert store.case_context == "\n".join(summary_lines)


class TestAddFact:
    def test_appends_to_manual_source_by_default(self, store):
        fact = store.add_fact("Client disclosed new evidence.")

        assert fact is not None
        assert store.get_source(MANUAL_SOURCE_ID).facts == [fact]
        # manual source is last, so the new line ends the context
        assert store.case_context.endswith("\nClient disclosed new evidence.")

    def test_blank_text_is_ignored(self, store):
        before = counts(store)
        assert store.add_fact("") is None
        assert store.add_fact("   ", INITIAL_SOURCE_ID) is None
        assert counts(store) == before

    def test_unknown_source_is_a_noop(self, store):
        before = counts(store)
        assert store.add_fact("orphan", "no-such-source") is None
        assert counts(store) == before
        assert store.get_source("no-such-source") is None

    def test_ids_are_unique(self, store):
        a = store.add_fact("one")
        b = store.add_fact("one")
        assert a.id != b.id


class TestAddFactSource:
    def test_new_source_goes_last_in_order(self, store):
        source = store.add_fact_source("Doc A", ["f1", "f2"])

        assert store.sources[-1] is source
        assert source.name == "Doc A"
        assert [f.text for f in source.facts] == ["f1", "f2"]
        assert source.facts[0].id != source.facts[1].id
        assert store.case_context.endswith("f1\nf2")

    def test_source_ids_are_unique(self, store):
        a = store.add_fact_source("Doc", ["x"])
        b = store.add_fact_source("Doc", ["x"])
        assert a.id != b.id


class TestDeleteFact:
    def test_removes_fact_but_keeps_source(self, store):
        source = store.add_fact_source("Doc A", ["only"])
        assert store.delete_fact(source.facts[0].id, source.id)

        assert store.get_source(source.id) is not None
        assert store.get_source(source.id).facts == []
        assert "only" not in store.case_context.split("\n")

    def test_missing_ids_change_nothing(self, store):
        fact = store.add_fact("keep me")
        before = counts(store)

        assert not store.delete_fact("nope", MANUAL_SOURCE_ID)
        assert not store.delete_fact(fact.id, "no-such-source")
        assert not store.delete_fact(fact.id, INITIAL_SOURCE_ID)
        assert counts(store) == before


def test_context_tracks_every_mutation(store):
    store.add_fact("a")
    doc = store.add_fact_source("Doc", ["b", "c"])
    assert store.case_context == expected_context(store)

    store.delete_fact(doc.facts[0].id, doc.id)
    assert store.case_context == expected_context(store)
    assert store.case_context.endswith("a\nc")

    store.add_fact("d", doc.id)
    assert store.case_context.endswith("a\nc\nd")
    assert store.case_context == expected_context(store)


def test_empty_store():
    store = KnowledgeStore([FactSource(id="s", name="S")])
    assert store.case_context == ""
    assert store.fact_count == 0
