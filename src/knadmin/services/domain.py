"""DomainService — manage route domains in the ``config-domain`` ConfigMap.

Pipeline: VALIDATE → FETCH → MERGE → PERSIST → RESPOND

The merge is pure (:mod:`knadmin.domain.records`). This service owns
everything around it: argument and installation checks, the fetch, the
conditional update, and retrying the whole read-merge-write cycle when
another writer bumps the resource version first.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence

from knadmin.domain.records import (
    InvalidPayload,
    MergeResult,
    merge_domain,
    parse_payload,
    remove_domain,
)
from knadmin.domain.selectors import InvalidSelectorFormat, format_selector, parse_selectors
from knadmin.infrastructure.cluster import (
    INSTALLATION_OPERATOR,
    INSTALLATION_STANDALONE,
    ClusterNotConfigured,
)
from knadmin.infrastructure.store import (
    ConfigMap,
    ConflictError,
    PersistError,
    RecordFetchError,
    RecordNotFound,
    StoreError,
)
from knadmin.services.base import BaseService
from knadmin.services.result import ServiceResult

logger = logging.getLogger(__name__)

Mutation = Callable[[Mapping[str, str]], MergeResult]


class DomainService(BaseService):
    """Set, unset and list Knative route domains."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def set_domain(self, domain: str, selectors: Sequence[str] = ()) -> ServiceResult:
        """Point *domain* at the routes matched by *selectors*.

        An empty selector list registers the domain with no selector.
        Nothing is written when the stored payload already matches.
        """
        op = "set_domain"
        domain = domain.strip()

        # ── VALIDATE ─────────────────────────────────────────
        if not domain:
            return ServiceResult.failure(
                op,
                "MISSING_ARGUMENT",
                "'domain set' requires the route name to run, provide it with --custom-domain",
            )
        if (rejected := self._require_standalone(op)) is not None:
            return rejected
        try:
            selector = parse_selectors(selectors)
        except InvalidSelectorFormat as exc:
            return ServiceResult.failure(op, "INVALID_SELECTOR", str(exc), selector=exc.raw)

        # ── FETCH → MERGE → PERSIST ──────────────────────────
        try:
            config_map, changed = self._apply(lambda record: merge_domain(record, domain, selector))
        except (ClusterNotConfigured, StoreError) as exc:
            return self._store_failure(op, exc)

        # ── RESPOND ──────────────────────────────────────────
        message = f'Set knative route domain "{domain}"'
        if selector:
            message += f" with selector {format_selector(selector)}"
        logger.info("%s (changed=%s)", message, changed)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "message": message,
                "domain": domain,
                "selector": selector,
                "changed": changed,
                "namespace": config_map.namespace,
                "name": config_map.name,
                "resource_version": config_map.resource_version,
            },
        )

    def unset_domain(self, domain: str) -> ServiceResult:
        """Remove *domain* from the ConfigMap.

        Removing a domain that is not configured writes nothing and
        succeeds with a warning.
        """
        op = "unset_domain"
        domain = domain.strip()

        if not domain:
            return ServiceResult.failure(
                op,
                "MISSING_ARGUMENT",
                "'domain unset' requires the route name to run, provide it with --custom-domain",
            )
        if (rejected := self._require_standalone(op)) is not None:
            return rejected

        try:
            config_map, changed = self._apply(lambda record: remove_domain(record, domain))
        except (ClusterNotConfigured, StoreError) as exc:
            return self._store_failure(op, exc)

        warnings: list[str] = []
        if not changed:
            warnings.append(f'Knative route domain "{domain}" is not configured')
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "message": f'Unset knative route domain "{domain}"',
                "domain": domain,
                "changed": changed,
                "namespace": config_map.namespace,
                "name": config_map.name,
                "resource_version": config_map.resource_version,
            },
            warnings=warnings,
        )

    def list_domains(self) -> ServiceResult:
        """List configured domains with their selectors, sorted by domain."""
        op = "list_domains"
        cfg = self._cluster.config
        try:
            config_map = self._cluster.store.get(cfg.namespace, cfg.config_name)
        except (ClusterNotConfigured, StoreError) as exc:
            return self._store_failure(op, exc)

        items: list[dict[str, object]] = []
        warnings: list[str] = []
        for domain in sorted(config_map.data):
            payload = config_map.data[domain]
            try:
                selector = parse_payload(payload)
            except InvalidPayload as exc:
                warnings.append(f"{domain}: {exc}")
                items.append({"domain": domain, "selector": {}, "payload": payload})
                continue
            items.append({"domain": domain, "selector": selector})

        return ServiceResult(
            ok=True,
            op=op,
            data={"count": len(items), "items": items},
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_standalone(self, op: str) -> ServiceResult | None:
        """Reject installations whose ConfigMaps must not be edited directly."""
        method = self._cluster.installation_method
        if method == INSTALLATION_STANDALONE:
            return None
        if method == INSTALLATION_OPERATOR:
            message = "Knative managed by operator is not supported yet"
        else:
            message = f"unsupported Knative installation method: {method!r}"
        return ServiceResult.failure(
            op, "UNSUPPORTED_INSTALLATION", message, installation_method=method
        )

    def _apply(self, mutate: Mutation) -> tuple[ConfigMap, bool]:
        """Run fetch → mutate → conditional update, retrying on conflict.

        Returns the ConfigMap as stored and whether a write happened.
        An unchanged mutation never calls ``update``.
        """
        cfg = self._cluster.config
        store = self._cluster.store
        attempts = cfg.conflict_retries + 1

        attempt = 1
        while True:
            current = store.get(cfg.namespace, cfg.config_name)
            merged = mutate(current.data)
            if not merged.changed:
                logger.debug(
                    "ConfigMap %s/%s unchanged, skipping update", cfg.namespace, cfg.config_name
                )
                return current, False
            try:
                return store.update(current.with_data(merged.record)), True
            except ConflictError:
                if attempt >= attempts:
                    raise
                logger.warning(
                    "Conflict updating %s/%s (attempt %d of %d), retrying",
                    cfg.namespace,
                    cfg.config_name,
                    attempt,
                    attempts,
                )
                attempt += 1

    def _store_failure(self, op: str, exc: Exception) -> ServiceResult:
        """Translate a cluster or store exception into a failed result."""
        cfg = self._cluster.config
        target = {"namespace": cfg.namespace, "name": cfg.config_name}
        if isinstance(exc, ClusterNotConfigured):
            return ServiceResult.failure(op, "NO_CLUSTER_CONFIG", str(exc))
        if isinstance(exc, RecordNotFound):
            message = (
                f"failed to get ConfigMap {cfg.config_name} in namespace {cfg.namespace}: {exc}"
            )
            return ServiceResult.failure(op, "NOT_FOUND", message, **target)
        if isinstance(exc, RecordFetchError):
            message = f"failed to get ConfigMap {cfg.config_name}: {exc}"
            return ServiceResult.failure(op, "FETCH_FAILED", message, **target)
        if isinstance(exc, ConflictError):
            message = f"failed to update ConfigMap {cfg.config_name}: {exc}"
            return ServiceResult.failure(op, "CONFLICT", message, **target)
        if isinstance(exc, PersistError):
            message = f"failed to update ConfigMap {cfg.config_name}: {exc}"
            return ServiceResult.failure(op, "PERSIST_FAILED", message, **target)
        raise exc
