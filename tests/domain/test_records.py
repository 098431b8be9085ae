"""Tests for domain record merging and payload serialization."""

from __future__ import annotations

import pytest
from ruamel.yaml import YAML

from knadmin.domain.records import (
    InvalidPayload,
    merge_domain,
    parse_payload,
    remove_domain,
    serialize_selector,
)


class TestSerializeSelector:
    def test_empty_selector_is_empty_payload(self) -> None:
        assert serialize_selector({}) == ""

    def test_single_key(self) -> None:
        assert serialize_selector({"app": "test"}) == "selector:\n  app: test\n"

    def test_keys_sorted(self) -> None:
        payload = serialize_selector({"team": "a", "app": "b"})
        assert payload == "selector:\n  app: b\n  team: a\n"

    def test_stable_across_insertion_order(self) -> None:
        a = serialize_selector({"x": "1", "y": "2"})
        b = serialize_selector({"y": "2", "x": "1"})
        assert a == b

    def test_payload_is_plain_yaml(self) -> None:
        doc = YAML(typ="safe").load(serialize_selector({"app": "test"}))
        assert doc == {"selector": {"app": "test"}}


class TestParsePayload:
    def test_empty(self) -> None:
        assert parse_payload("") == {}

    def test_whitespace_only(self) -> None:
        assert parse_payload("  \n") == {}

    def test_roundtrip_preserves_scalar_looking_values(self) -> None:
        selector = {"app": "test", "tier": "1", "enabled": "true", "empty-ish": "null"}
        assert parse_payload(serialize_selector(selector)) == selector

    def test_hand_written_payload(self) -> None:
        assert parse_payload("selector:\n  app: nonprofit\n") == {"app": "nonprofit"}

    def test_mapping_without_selector(self) -> None:
        assert parse_payload("other: 1\n") == {}

    def test_not_a_mapping(self) -> None:
        with pytest.raises(InvalidPayload):
            parse_payload("- a\n- b\n")

    def test_selector_not_a_mapping(self) -> None:
        with pytest.raises(InvalidPayload):
            parse_payload("selector: app\n")

    def test_invalid_yaml(self) -> None:
        with pytest.raises(InvalidPayload):
            parse_payload("selector: [unclosed\n")


class TestMergeDomain:
    def test_insert_into_empty_record(self) -> None:
        result = merge_domain({}, "test.domain", {})
        assert result.changed is True
        assert result.record == {"test.domain": ""}

    def test_identical_payload_is_unchanged(self) -> None:
        record = {"test.domain": ""}
        result = merge_domain(record, "test.domain", {})
        assert result.changed is False
        assert result.record == {"test.domain": ""}

    def test_identical_selector_payload_is_unchanged(self) -> None:
        record = {"test.domain": serialize_selector({"app": "test"})}
        result = merge_domain(record, "test.domain", {"app": "test"})
        assert result.changed is False
        assert result.record == record

    def test_insert_keeps_other_entries(self) -> None:
        other = "selector:\n  app: other\n"
        record = {"foo.bar": "", "other.domain": other}
        result = merge_domain(record, "test.domain", {"app": "test"})
        assert result.changed is True
        assert len(result.record) == 3
        assert result.record["foo.bar"] == ""
        assert result.record["other.domain"] == other
        assert parse_payload(result.record["test.domain"]) == {"app": "test"}

    def test_overwrite_different_payload(self) -> None:
        record = {"test.domain": ""}
        result = merge_domain(record, "test.domain", {"app": "test"})
        assert result.changed is True
        assert result.record["test.domain"] == "selector:\n  app: test\n"

    def test_selector_removed_when_empty(self) -> None:
        record = {"test.domain": "selector:\n  app: test\n"}
        result = merge_domain(record, "test.domain", {})
        assert result.changed is True
        assert result.record == {"test.domain": ""}

    def test_input_record_not_mutated(self) -> None:
        record = {"foo.bar": ""}
        merge_domain(record, "test.domain", {})
        assert record == {"foo.bar": ""}

    def test_semantically_equal_but_differently_formatted_payload_is_rewritten(self) -> None:
        record = {"test.domain": "selector: {app: test}"}
        result = merge_domain(record, "test.domain", {"app": "test"})
        assert result.changed is True
        assert result.record["test.domain"] == "selector:\n  app: test\n"


class TestRemoveDomain:
    def test_remove_present(self) -> None:
        result = remove_domain({"a.com": "", "b.com": ""}, "a.com")
        assert result.changed is True
        assert result.record == {"b.com": ""}

    def test_remove_absent(self) -> None:
        result = remove_domain({"b.com": ""}, "a.com")
        assert result.changed is False
        assert result.record == {"b.com": ""}
