"""ConfigMap storage contract and the in-memory implementation.

The cluster is reached only through :class:`ConfigMapStore`: fetch by
name and conditional update keyed on ``resource_version``. Services
never see a transport, which keeps every mutation testable against
:class:`InMemoryConfigMapStore`.
"""

from __future__ import annotations

import logging
from typing import Protocol

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class StoreError(Exception):
    """Base class for ConfigMap store failures."""


class RecordFetchError(StoreError):
    """The ConfigMap could not be read."""


class RecordNotFound(RecordFetchError):
    """The ConfigMap does not exist."""

    def __init__(self, namespace: str, name: str) -> None:
        self.namespace = namespace
        self.name = name
        super().__init__(f'configmaps "{name}" not found in namespace "{namespace}"')


class PersistError(StoreError):
    """The ConfigMap could not be written."""


class ConflictError(PersistError):
    """The stored ConfigMap changed since it was read."""

    def __init__(self, namespace: str, name: str, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f'operation cannot be fulfilled on configmaps "{name}" in "{namespace}": '
            f"resource version {expected} is stale (current {actual})"
        )


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------


class ConfigMap(BaseModel):
    """A named, versioned string-to-string mapping."""

    model_config = {"frozen": True}

    name: str
    namespace: str
    resource_version: str = ""
    data: dict[str, str] = Field(default_factory=dict)

    def with_data(self, data: dict[str, str]) -> ConfigMap:
        """Return a copy carrying *data*, keeping identity and version."""
        return self.model_copy(update={"data": dict(data)})


def next_resource_version(current: str) -> str:
    """Compute the version stamped on a successful write."""
    try:
        return str(int(current) + 1)
    except ValueError:
        return "1"


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


class ConfigMapStore(Protocol):
    """Fetch-by-name and compare-and-update access to ConfigMaps."""

    def get(self, namespace: str, name: str) -> ConfigMap:
        """Return the current ConfigMap.

        Raises:
            RecordNotFound: no such ConfigMap.
            RecordFetchError: any other read failure.
        """
        ...

    def update(self, config_map: ConfigMap) -> ConfigMap:
        """Replace the stored ConfigMap if its version still matches.

        Returns the stored ConfigMap with its new ``resource_version``.

        Raises:
            RecordNotFound: the ConfigMap disappeared.
            ConflictError: ``config_map.resource_version`` is stale.
            PersistError: any other write failure.
        """
        ...


# ---------------------------------------------------------------------------
# In-memory implementation
# ---------------------------------------------------------------------------


class InMemoryConfigMapStore:
    """Dict-backed :class:`ConfigMapStore`.

    Seed it with ConfigMaps at construction; ``update_calls`` counts
    successful writes so callers can assert that no-op paths stay no-op.
    """

    def __init__(self, *config_maps: ConfigMap) -> None:
        self._items: dict[tuple[str, str], ConfigMap] = {}
        self.update_calls = 0
        for cm in config_maps:
            version = cm.resource_version or "1"
            self._items[(cm.namespace, cm.name)] = cm.model_copy(
                update={"resource_version": version}
            )

    def get(self, namespace: str, name: str) -> ConfigMap:
        try:
            return self._items[(namespace, name)]
        except KeyError:
            raise RecordNotFound(namespace, name) from None

    def update(self, config_map: ConfigMap) -> ConfigMap:
        key = (config_map.namespace, config_map.name)
        current = self._items.get(key)
        if current is None:
            raise RecordNotFound(config_map.namespace, config_map.name)
        if current.resource_version != config_map.resource_version:
            raise ConflictError(
                config_map.namespace,
                config_map.name,
                config_map.resource_version,
                current.resource_version,
            )
        stored = config_map.model_copy(
            update={"resource_version": next_resource_version(current.resource_version)}
        )
        self._items[key] = stored
        self.update_calls += 1
        logger.debug(
            "Updated configmap %s/%s to version %s",
            stored.namespace,
            stored.name,
            stored.resource_version,
        )
        return stored
