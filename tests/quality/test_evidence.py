"""Tests for pass-1 evidence collection."""

from docprofiler.profiling.kinds import Kind
from docprofiler.quality.config import ProfileConfig
from docprofiler.quality.evidence import EvidenceCollector, iter_field_paths, normalize_field_name


class TestIterFieldPaths:
    """Tests for iter_field_paths()."""

    def test_descends_into_objects(self):
        paths = [path for path, _ in iter_field_paths({"a": {"b": {"c": 1}}, "d": 2})]

        assert paths == ["a", "a.b", "a.b.c", "d"]

    def test_arrays_are_leaves(self):
        paths = [path for path, _ in iter_field_paths({"tags": [{"x": 1}]})]

        assert paths == ["tags"]


def test_normalize_field_name():
    assert normalize_field_name("firstName") == "firstname"
    assert normalize_field_name("first_name") == "firstname"
    assert normalize_field_name("first.name") == "firstname"
    assert normalize_field_name("First_Name") == "firstname"


class TestEvidenceCollector:
    """Tests for EvidenceCollector."""

    def test_kind_examples(self):
        evidence = EvidenceCollector(ProfileConfig())
        evidence.observe("d1", {"age": 30})
        evidence.observe("d2", {"age": "thirty"})
        evidence.observe("d3", {"age": 31})

        assert evidence.kind_examples["age"] == {
            Kind.NUMBER: ["d1", "d3"],
            Kind.STRING: ["d2"],
        }
        assert evidence.presence_examples["age"] == ["d1", "d2", "d3"]

    def test_examples_capped_first_seen_wins(self):
        evidence = EvidenceCollector(ProfileConfig(examples_per_issue=2))
        for i in range(5):
            evidence.observe(f"d{i}", {"a": i})

        assert evidence.presence_examples["a"] == ["d0", "d1"]
        assert evidence.kind_examples["a"][Kind.NUMBER] == ["d0", "d1"]

    def test_regex_violations(self):
        config = ProfileConfig(regex_rules={"status.code": "^[A-Z]{3}$"})
        evidence = EvidenceCollector(config)
        for i, code in enumerate(["ABC", "XYZ", "ab1", "ABCD", "DEF"]):
            evidence.observe(f"d{i}", {"status": {"code": code}})

        violations = evidence.regex_violations["status.code"]
        assert [(v.doc_id, v.value) for v in violations] == [("d2", "ab1"), ("d3", "ABCD")]

    def test_regex_ignores_non_strings(self):
        evidence = EvidenceCollector(ProfileConfig(regex_rules={"code": "^[A-Z]{3}$"}))
        evidence.observe("d1", {"code": 123})
        evidence.observe("d2", {"code": None})

        assert "code" not in evidence.regex_violations

    def test_merge_appends_in_shard_order(self):
        config = ProfileConfig(examples_per_issue=3)
        first = EvidenceCollector(config)
        first.observe("a1", {"x": 1})
        first.observe("a2", {"x": 2})
        second = EvidenceCollector(config)
        second.observe("b1", {"x": "s"})
        second.observe("b2", {"x": 3})

        first.merge(second)

        assert first.presence_examples["x"] == ["a1", "a2", "b1"]
        assert first.kind_examples["x"][Kind.NUMBER] == ["a1", "a2", "b2"]
        assert first.kind_examples["x"][Kind.STRING] == ["b1"]

    def test_dotted_key_and_nested_field_record_document_once(self):
        evidence = EvidenceCollector(ProfileConfig())
        evidence.observe("d1", {"a.b": 1, "a": {"b": 2}})
        evidence.observe("d2", {"a.b": "x", "a": {"b": 3}})

        assert evidence.presence_examples["a.b"] == ["d1", "d2"]
        assert evidence.kind_examples["a.b"] == {Kind.NUMBER: ["d1", "d2"], Kind.STRING: ["d2"]}

    def test_trailing_newline_violates_anchor(self):
        evidence = EvidenceCollector(ProfileConfig(regex_rules={"code": "^[A-Z]{3}$"}))
        evidence.observe("d1", {"code": "ABC\n"})

        assert [v.value for v in evidence.regex_violations["code"]] == ["ABC\n"]
