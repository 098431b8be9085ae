"""ConfigMap store backed by a directory of YAML manifests.

Each ConfigMap lives at ``{root}/{namespace}/{name}.yaml`` in the usual
Kubernetes shape::

    apiVersion: v1
    kind: ConfigMap
    metadata:
      name: config-domain
      namespace: knative-serving
      resourceVersion: '3'
    data:
      example.com: ''

Writes land in a temp file beside the target and are moved into place
with ``os.replace`` so readers never observe a partial manifest.
Conditional updates hold an exclusive portalocker lock on a
``{name}.yaml.lock`` sidecar from the re-read until the replace.
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from io import StringIO
from pathlib import Path
from typing import Any

import portalocker
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError
from ruamel.yaml.scalarstring import LiteralScalarString

from knadmin.infrastructure.store import (
    ConfigMap,
    ConflictError,
    PersistError,
    RecordFetchError,
    RecordNotFound,
    next_resource_version,
)

logger = logging.getLogger(__name__)

MANIFEST_SUFFIX = ".yaml"
LOCK_SUFFIX = ".lock"
DEFAULT_LOCK_TIMEOUT = 10.0
_API_VERSION = "v1"
_KIND = "ConfigMap"


def _new_yaml() -> YAML:
    """Create a fresh round-trip YAML parser."""
    y = YAML()
    y.default_flow_style = False
    y.width = 4096
    return y


def manifest_to_config_map(doc: Any, *, source: Path) -> ConfigMap:
    """Validate a loaded manifest document and build a :class:`ConfigMap`."""
    if not isinstance(doc, dict):
        msg = f"{source}: manifest is not a mapping"
        raise RecordFetchError(msg)
    kind = doc.get("kind")
    if kind != _KIND:
        msg = f"{source}: expected kind {_KIND}, found {kind!r}"
        raise RecordFetchError(msg)
    metadata = doc.get("metadata") or {}
    data = doc.get("data") or {}
    if not isinstance(metadata, dict) or not isinstance(data, dict):
        msg = f"{source}: metadata and data must be mappings"
        raise RecordFetchError(msg)
    return ConfigMap(
        name=str(metadata.get("name", "")),
        namespace=str(metadata.get("namespace", "")),
        resource_version=str(metadata.get("resourceVersion", "") or ""),
        data={str(k): "" if v is None else str(v) for k, v in data.items()},
    )


def config_map_to_manifest(config_map: ConfigMap) -> dict[str, Any]:
    """Render a :class:`ConfigMap` as a manifest document.

    Multi-line values are emitted as literal blocks.
    """
    data: dict[str, Any] = {}
    for key, value in config_map.data.items():
        data[key] = LiteralScalarString(value) if "\n" in value else value
    return {
        "apiVersion": _API_VERSION,
        "kind": _KIND,
        "metadata": {
            "name": config_map.name,
            "namespace": config_map.namespace,
            "resourceVersion": config_map.resource_version,
        },
        "data": data,
    }


class ManifestConfigMapStore:
    """:class:`~knadmin.infrastructure.store.ConfigMapStore` over a manifest directory."""

    def __init__(self, root: Path, *, lock_timeout: float = DEFAULT_LOCK_TIMEOUT) -> None:
        self.root = root
        self.lock_timeout = lock_timeout

    def path_for(self, namespace: str, name: str) -> Path:
        return self.root / namespace / f"{name}{MANIFEST_SUFFIX}"

    def get(self, namespace: str, name: str) -> ConfigMap:
        path = self.path_for(namespace, name)
        if not path.is_file():
            raise RecordNotFound(namespace, name)
        try:
            doc = _new_yaml().load(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeError, YAMLError) as exc:
            msg = f"failed to read {path}: {exc}"
            raise RecordFetchError(msg) from exc
        config_map = manifest_to_config_map(doc, source=path)
        if config_map.name != name or config_map.namespace != namespace:
            msg = (
                f"{path}: manifest describes {config_map.namespace}/{config_map.name}, "
                f"expected {namespace}/{name}"
            )
            raise RecordFetchError(msg)
        return config_map

    def lock_path_for(self, namespace: str, name: str) -> Path:
        path = self.path_for(namespace, name)
        return path.with_name(f"{path.name}{LOCK_SUFFIX}")

    @contextmanager
    def _locked(self, namespace: str, name: str) -> Iterator[None]:
        """Hold an exclusive lock on the manifest's sidecar lock file."""
        lock_path = self.lock_path_for(namespace, name)
        lock = portalocker.Lock(
            str(lock_path),
            mode="a",
            timeout=self.lock_timeout,
            fail_when_locked=False,
            flags=portalocker.LOCK_EX | portalocker.LOCK_NB,
        )
        try:
            lock.acquire()
        except portalocker.LockException as exc:
            msg = f"failed to lock {lock_path} within {self.lock_timeout} seconds"
            raise PersistError(msg) from exc
        except OSError as exc:
            msg = f"failed to open lock file {lock_path}: {exc}"
            raise PersistError(msg) from exc
        try:
            yield
        finally:
            lock.release()

    def update(self, config_map: ConfigMap) -> ConfigMap:
        """Compare-and-write under the manifest lock.

        The re-read, the version check and the replace all happen while
        the lock is held, so of two writers holding the same version
        exactly one succeeds.
        """
        if not self.path_for(config_map.namespace, config_map.name).is_file():
            raise RecordNotFound(config_map.namespace, config_map.name)

        with self._locked(config_map.namespace, config_map.name):
            try:
                current = self.get(config_map.namespace, config_map.name)
            except RecordNotFound:
                raise
            except RecordFetchError as exc:
                raise PersistError(str(exc)) from exc

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
            self.write(stored)
        logger.debug(
            "Wrote configmap %s/%s version %s",
            stored.namespace,
            stored.name,
            stored.resource_version,
        )
        return stored

    def write(self, config_map: ConfigMap) -> Path:
        """Unconditionally write *config_map*, creating directories as needed."""
        path = self.path_for(config_map.namespace, config_map.name)
        buf = StringIO()
        _new_yaml().dump(config_map_to_manifest(config_map), buf)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(buf.getvalue())
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            msg = f"failed to write {path}: {exc}"
            raise PersistError(msg) from exc
        return path
