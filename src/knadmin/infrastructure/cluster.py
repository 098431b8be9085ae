"""Cluster — the single entry point for cluster-side state.

Wraps the configured :class:`ConfigMapStore` together with the
installation facts services need before they may touch it. The store is
opened lazily so commands that fail validation never reach it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from knadmin.infrastructure.manifests import ManifestConfigMapStore

if TYPE_CHECKING:
    from knadmin.config.models import ClusterConfig
    from knadmin.infrastructure.store import ConfigMapStore

logger = logging.getLogger(__name__)

INSTALLATION_STANDALONE = "standalone"
INSTALLATION_OPERATOR = "operator"


class ClusterNotConfigured(Exception):
    """No cluster store could be resolved from the settings."""


class Cluster:
    """Cluster handle used by services.

    Either pass an explicit *store* (tests, embedding code) or let the
    cluster build a :class:`ManifestConfigMapStore` from
    ``config.manifest_dir`` on first access.
    """

    def __init__(self, config: ClusterConfig, *, store: ConfigMapStore | None = None) -> None:
        self.config = config
        self._store = store

    @property
    def installation_method(self) -> str:
        return self.config.installation_method

    @property
    def namespace(self) -> str:
        return self.config.namespace

    @property
    def store(self) -> ConfigMapStore:
        """The ConfigMap store (created lazily on first access).

        Raises:
            ClusterNotConfigured: no store was injected and no manifest
                directory is configured or it does not exist.
        """
        if self._store is None:
            root = self.config.manifest_dir
            if root is None:
                msg = (
                    "no cluster configuration found: set [cluster] manifest_dir "
                    "in knadmin.toml or KNADMIN_CLUSTER__MANIFEST_DIR"
                )
                raise ClusterNotConfigured(msg)
            if not root.is_dir():
                msg = f"cluster manifest directory does not exist: {root}"
                raise ClusterNotConfigured(msg)
            logger.debug("Opening manifest store at %s", root)
            self._store = ManifestConfigMapStore(root)
        return self._store
