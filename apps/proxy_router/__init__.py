"""Proxy routing service.

:class:`ProxyRouter` ties the three stages together for a single inbound
request: identifiers are extracted from the query string or the nested
``data`` payload, resolved to a backend through the key-value store, and the
request is forwarded with its response relayed unchanged.

Every failure is turned into a response by
:func:`lib.contracts.errors.error_response`; :meth:`ProxyRouter.handle` never
raises.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import quote

from fastapi import Request, Response

from lib.config.proxy_router_loader import (
    DEFAULT_CONFIG_PATH,
    ProxyRouterConfig,
    load_proxy_router_config,
)
from lib.contracts.errors import RoutingError, error_response
from lib.kv.store import InMemoryKVStore, KeyValueStore, load_kv_seed
from lib.telemetry.logger import get_logger

from .extractor import extract_routing_params
from .forwarder import Forwarder
from .resolver import RouteResolver

logger = get_logger(__name__)


def source_path(request: Request) -> str:
    """Path component of the request as sent, percent-encoding intact."""

    raw = request.scope.get("raw_path")
    if raw:
        return raw.split(b"?", 1)[0].decode("latin-1")
    return quote(request.url.path, safe="/:@!$&'()*+,;=-._~")


@dataclass
class ProxyRouter:
    """Route one request at a time to the backend its identifiers select.

    Parameters
    ----------
    config: optional :class:`ProxyRouterConfig`.  Loaded from ``config_path``
        when omitted.
    store: the key-value store holding the routing tables.  When omitted the
        store is seeded from ``config.kv_seed_path``, or left empty.
    forwarder: the :class:`Forwarder` used for outbound calls.  Built from the
        configuration when omitted.
    """

    config: Optional[ProxyRouterConfig] = None
    config_path: str = DEFAULT_CONFIG_PATH
    store: Optional[KeyValueStore] = None
    forwarder: Optional[Forwarder] = None
    resolver: RouteResolver = field(init=False)

    def __post_init__(self) -> None:
        if self.config is None:
            self.config = load_proxy_router_config(self.config_path)
        if self.store is None:
            if self.config.kv_seed_path:
                self.store = load_kv_seed(self.config.kv_seed_path)
            else:
                self.store = InMemoryKVStore()
        if self.forwarder is None:
            self.forwarder = Forwarder(
                timeout=self.config.forward_timeout,
                stripped_request_headers=self.config.stripped_request_headers,
                stripped_response_headers=self.config.stripped_response_headers,
            )
        self.resolver = RouteResolver(self.store)

    async def _route(self, request: Request) -> Response:
        method = request.method.upper()
        body = await request.body() if method == "POST" else None
        params = extract_routing_params(method, request.query_params, body)

        route = self.resolver.resolve(params.customer_id, params.warehouse_id, source_path(request))
        logger.info(
            "routing %s %s customer=%s warehouse=%s -> %s %s%s",
            method,
            route.source_path,
            params.customer_id,
            params.warehouse_id or "-",
            route.target_key,
            route.endpoint,
            route.destination_path,
        )
        return await self.forwarder.forward(
            route,
            method,
            request.headers.raw,
            request.url.query,
            params.raw_body,
        )

    async def handle(self, request: Request) -> Response:
        """Return the backend's response, or a JSON error response."""

        try:
            return await self._route(request)
        except RoutingError as exc:
            logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)
            return error_response(exc)
        except Exception as exc:
            logger.exception("%s %s failed", request.method, request.url.path)
            return error_response(exc)


__all__ = ["ProxyRouter", "source_path", "RouteResolver", "Forwarder", "extract_routing_params"]
