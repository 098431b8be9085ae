"""Shared pytest fixtures and test helpers for knadmin tests."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from knadmin.config.models import ClusterConfig
from knadmin.infrastructure.cluster import Cluster
from knadmin.infrastructure.manifests import ManifestConfigMapStore
from knadmin.infrastructure.store import ConfigMap, InMemoryConfigMapStore

NAMESPACE = "knative-serving"
CONFIG_NAME = "config-domain"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host KNADMIN_* variables from leaking into settings."""
    for key in list(os.environ):
        if key.startswith("KNADMIN_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def manifest_dir(tmp_path: Path) -> Path:
    """Empty manifest directory acting as the cluster."""
    root = tmp_path / "cluster"
    root.mkdir()
    return root


@pytest.fixture
def _standalone_cluster(
    tmp_path: Path, manifest_dir: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Point the CLI at *manifest_dir* as a standalone installation.

    Use via ``@pytest.mark.usefixtures("_standalone_cluster")`` on command
    test classes.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("KNADMIN_CLUSTER__MANIFEST_DIR", str(manifest_dir))
    monkeypatch.setenv("KNADMIN_CLUSTER__INSTALLATION_METHOD", "standalone")


# ---------------------------------------------------------------------------
# Shared test helpers (exposed as fixtures returning factories)
# ---------------------------------------------------------------------------


def _config_domain(data: dict[str, str] | None = None, resource_version: str = "") -> ConfigMap:
    return ConfigMap(
        name=CONFIG_NAME,
        namespace=NAMESPACE,
        resource_version=resource_version,
        data=dict(data or {}),
    )


@pytest.fixture
def config_domain() -> Callable[..., ConfigMap]:
    """Factory for ``config-domain`` ConfigMaps in ``knative-serving``."""
    return _config_domain


@pytest.fixture
def seed_manifest(manifest_dir: Path) -> Callable[..., ManifestConfigMapStore]:
    """Factory writing a ``config-domain`` manifest into *manifest_dir*."""

    def _seed(data: dict[str, str] | None = None) -> ManifestConfigMapStore:
        store = ManifestConfigMapStore(manifest_dir)
        store.write(_config_domain(data, resource_version="1"))
        return store

    return _seed


@pytest.fixture
def memory_cluster() -> Callable[..., tuple[Cluster, InMemoryConfigMapStore]]:
    """Factory for a Cluster over an in-memory store.

    Positional args seed the store; keyword args override ClusterConfig.
    """

    def _build(*config_maps: ConfigMap, **config: Any) -> tuple[Cluster, InMemoryConfigMapStore]:
        store = InMemoryConfigMapStore(*config_maps)
        return Cluster(ClusterConfig(**config), store=store), store

    return _build
