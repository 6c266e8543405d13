"""Tests for the in-memory source and the shared scan() behaviour."""

from docprofiler.sources.base import Document
from docprofiler.sources.memory import InMemorySource


class TestInMemorySource:
    """Tests for InMemorySource."""

    def test_accepts_documents_and_pairs(self):
        source = InMemorySource([Document("a", {"x": 1}), ("b", {"x": 2}), (3, {})])

        assert len(source) == 3
        assert [d.id for d in source.scan()] == ["a", "b", "3"]

    def test_batches(self):
        source = InMemorySource([(str(i), {}) for i in range(5)])

        assert [[d.id for d in batch] for batch in source.iter_batches(2)] == [
            ["0", "1"],
            ["2", "3"],
            ["4"],
        ]


class TestScan:
    """Tests for DocumentSource.scan()."""

    def test_limit(self):
        source = InMemorySource([(str(i), {}) for i in range(10)])

        assert [d.id for d in source.scan(limit=3)] == ["0", "1", "2"]

    def test_limit_larger_than_source(self):
        source = InMemorySource([("a", {})])

        assert len(list(source.scan(limit=100))) == 1

    def test_zero_limit(self):
        source = InMemorySource([("a", {})])

        assert list(source.scan(limit=0)) == []

    def test_limit_caps_page_size(self):
        class RecordingSource(InMemorySource):
            def __init__(self, documents):
                super().__init__(documents)
                self.requested: list[int] = []

            def iter_batches(self, batch_size):
                self.requested.append(batch_size)
                return super().iter_batches(batch_size)

        source = RecordingSource([(str(i), {}) for i in range(10)])
        list(source.scan(limit=4))
        list(source.scan())

        assert source.requested == [4, 500]


class TestSubcollections:
    """Tests for DocumentSource.subcollections()."""

    def test_none_by_default(self):
        assert InMemorySource([("a", {})]).subcollections("a") == {}

    def test_in_memory_subcollections(self):
        source = InMemorySource(
            [("alice", {}), ("bob", {})],
            name="users",
            subcollections={"alice": {"orders": [("o1", {"total": 3}), ("o2", {"total": 5})]}},
        )

        subcollections = source.subcollections("alice")

        assert list(subcollections) == ["orders"]
        assert subcollections["orders"].name == "users/alice/orders"
        assert [d.id for d in subcollections["orders"].scan()] == ["o1", "o2"]
        assert source.subcollections("bob") == {}
