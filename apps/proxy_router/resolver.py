"""Three-step routing table lookup."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from lib.contracts.errors import EndpointNotFound, RoutingNotFound
from lib.contracts.routing import ResolvedRoute
from lib.kv.store import (
    KeyValueStore,
    customer_route_key,
    endpoint_key,
    path_key,
    warehouse_route_key,
)
from lib.telemetry.logger import get_logger

logger = get_logger(__name__)


@dataclass
class RouteResolver:
    """Resolve a customer/warehouse pair and a path to a backend URL.

    Lookups run strictly in order and stop at the first miss that is fatal:

    1. ``route:{customer}:{warehouse}`` when a warehouse is given, then
       ``route:{customer}``.  The first hit is the target key.
    2. ``endpoint:{target}`` gives the base URL.
    3. ``path:{target}:{source_path}`` optionally rewrites the path.
    """

    store: KeyValueStore

    def _lookup(self, key: str) -> Optional[str]:
        value = self.store.get(key)
        logger.debug("kv lookup %s -> %s", key, "hit" if value else "miss")
        return value or None

    def resolve_target(self, customer_id: str, warehouse_id: Optional[str] = None) -> str:
        target = None
        if warehouse_id:
            target = self._lookup(warehouse_route_key(customer_id, warehouse_id))
        if target is None:
            target = self._lookup(customer_route_key(customer_id))
        if target is None:
            raise RoutingNotFound(customer_id, warehouse_id)
        return target

    def resolve_endpoint(self, target_key: str) -> str:
        endpoint = self._lookup(endpoint_key(target_key))
        if endpoint is None:
            raise EndpointNotFound(target_key)
        return endpoint

    def resolve_path(self, target_key: str, source_path: str) -> str:
        return self._lookup(path_key(target_key, source_path)) or source_path

    def resolve(
        self,
        customer_id: str,
        warehouse_id: Optional[str],
        source_path: str,
    ) -> ResolvedRoute:
        target_key = self.resolve_target(customer_id, warehouse_id)
        endpoint = self.resolve_endpoint(target_key)
        return ResolvedRoute(
            target_key=target_key,
            endpoint=endpoint,
            source_path=source_path,
            destination_path=self.resolve_path(target_key, source_path),
        )


__all__ = ["RouteResolver"]
