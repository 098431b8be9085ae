"""Tests for the in-memory ConfigMap store and store errors."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from knadmin.infrastructure.store import (
    ConfigMap,
    ConflictError,
    InMemoryConfigMapStore,
    PersistError,
    RecordFetchError,
    RecordNotFound,
    next_resource_version,
)


class TestErrors:
    def test_not_found_is_fetch_error(self) -> None:
        assert issubclass(RecordNotFound, RecordFetchError)

    def test_conflict_is_persist_error(self) -> None:
        assert issubclass(ConflictError, PersistError)

    def test_not_found_message(self) -> None:
        err = RecordNotFound("knative-serving", "config-domain")
        assert "config-domain" in str(err)
        assert "knative-serving" in str(err)


class TestNextResourceVersion:
    def test_increments(self) -> None:
        assert next_resource_version("41") == "42"

    def test_non_numeric_restarts(self) -> None:
        assert next_resource_version("abc") == "1"
        assert next_resource_version("") == "1"


class TestConfigMap:
    def test_with_data_copies(self, config_domain: Callable[..., ConfigMap]) -> None:
        cm = config_domain({"a.com": ""}, resource_version="7")
        data = {"b.com": ""}
        updated = cm.with_data(data)
        data["c.com"] = ""
        assert updated.data == {"b.com": ""}
        assert updated.resource_version == "7"
        assert cm.data == {"a.com": ""}

    def test_frozen(self, config_domain: Callable[..., ConfigMap]) -> None:
        cm = config_domain()
        with pytest.raises(Exception):
            cm.name = "other"  # type: ignore[misc]


class TestInMemoryStore:
    def test_get_missing(self) -> None:
        store = InMemoryConfigMapStore()
        with pytest.raises(RecordNotFound):
            store.get("knative-serving", "config-domain")

    def test_seeded_without_version_gets_one(
        self, config_domain: Callable[..., ConfigMap]
    ) -> None:
        store = InMemoryConfigMapStore(config_domain({"a.com": ""}))
        cm = store.get("knative-serving", "config-domain")
        assert cm.resource_version == "1"
        assert cm.data == {"a.com": ""}

    def test_update_bumps_version(self, config_domain: Callable[..., ConfigMap]) -> None:
        store = InMemoryConfigMapStore(config_domain())
        current = store.get("knative-serving", "config-domain")
        stored = store.update(current.with_data({"a.com": ""}))
        assert stored.resource_version == "2"
        assert store.get("knative-serving", "config-domain").data == {"a.com": ""}
        assert store.update_calls == 1

    def test_stale_update_conflicts(self, config_domain: Callable[..., ConfigMap]) -> None:
        store = InMemoryConfigMapStore(config_domain())
        stale = store.get("knative-serving", "config-domain")
        store.update(stale.with_data({"first.com": ""}))
        with pytest.raises(ConflictError) as excinfo:
            store.update(stale.with_data({"second.com": ""}))
        assert excinfo.value.expected == "1"
        assert excinfo.value.actual == "2"
        assert store.get("knative-serving", "config-domain").data == {"first.com": ""}
        assert store.update_calls == 1

    def test_update_missing(self, config_domain: Callable[..., ConfigMap]) -> None:
        store = InMemoryConfigMapStore()
        with pytest.raises(RecordNotFound):
            store.update(config_domain(resource_version="1"))
