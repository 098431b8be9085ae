"""BaseService — foundation for knadmin services.

Every service receives a :class:`Cluster` at construction time and
reaches ConfigMaps only through ``self._cluster.store``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from knadmin.infrastructure.cluster import Cluster


class BaseService:
    """Base for all service-layer classes.

    Usage::

        class DomainService(BaseService):
            def set_domain(self, domain: str, ...) -> ServiceResult:
                store = self._cluster.store
                ...
    """

    def __init__(self, cluster: Cluster) -> None:
        self._cluster = cluster
