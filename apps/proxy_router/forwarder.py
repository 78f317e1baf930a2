"""Forward a resolved request to its backend and relay the answer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, Iterable, List, Optional, Tuple

import httpx
from fastapi.responses import StreamingResponse

from lib.config.proxy_router_loader import (
    DEFAULT_STRIPPED_REQUEST_HEADERS,
    DEFAULT_STRIPPED_RESPONSE_HEADERS,
)
from lib.contracts.routing import ResolvedRoute
from lib.telemetry.logger import get_logger
from lib.utils.helpers import compact_json

logger = get_logger(__name__)

UPSTREAM_REASON_HEADER = "x-upstream-reason"

RawHeaders = Iterable[Tuple[bytes, bytes]]


def build_target_url(endpoint: str, destination_path: str, query_string: str = "") -> httpx.URL:
    """Resolve ``destination_path`` and the query string against ``endpoint``.

    Standard reference resolution applies: an absolute destination path
    replaces whatever path the endpoint carries, keeping its scheme, host and
    port.
    """

    reference = destination_path + (f"?{query_string}" if query_string else "")
    return httpx.URL(endpoint).join(reference)


def _filter_headers(raw: RawHeaders, stripped: Iterable[str]) -> List[Tuple[bytes, bytes]]:
    drop = {h.lower().encode("latin-1") for h in stripped}
    return [(k, v) for k, v in raw if k.lower() not in drop]


@dataclass
class Forwarder:
    """Send requests to backends with httpx.

    When ``client`` is given it is shared across requests and never closed
    here.  Otherwise a client is opened per request and closed once the
    relayed body has been fully streamed.
    """

    client: Optional[httpx.AsyncClient] = None
    timeout: Optional[float] = None
    stripped_request_headers: List[str] = field(
        default_factory=lambda: list(DEFAULT_STRIPPED_REQUEST_HEADERS)
    )
    stripped_response_headers: List[str] = field(
        default_factory=lambda: list(DEFAULT_STRIPPED_RESPONSE_HEADERS)
    )

    def _open_client(self) -> Tuple[httpx.AsyncClient, bool]:
        if self.client is not None:
            return self.client, False
        if self.timeout is not None:
            return httpx.AsyncClient(timeout=self.timeout), True
        return httpx.AsyncClient(), True

    def build_request(
        self,
        client: httpx.AsyncClient,
        route: ResolvedRoute,
        method: str,
        headers: RawHeaders,
        query_string: str = "",
        raw_body: Optional[Dict[str, Any]] = None,
    ) -> httpx.Request:
        content = compact_json(raw_body) if method.upper() == "POST" and raw_body is not None else None
        return client.build_request(
            method=method,
            url=build_target_url(route.endpoint, route.destination_path, query_string),
            headers=_filter_headers(headers, self.stripped_request_headers),
            content=content,
        )

    async def forward(
        self,
        route: ResolvedRoute,
        method: str,
        headers: RawHeaders,
        query_string: str = "",
        raw_body: Optional[Dict[str, Any]] = None,
    ) -> StreamingResponse:
        """Send the request and return a response relaying the backend's.

        Transport failures propagate as :class:`httpx.HTTPError`; they are
        not retried.
        """

        client, owned = self._open_client()
        try:
            request = self.build_request(client, route, method, headers, query_string, raw_body)
            logger.debug("forwarding %s %s", request.method, request.url)
            upstream = await client.send(request, stream=True)
        except Exception:
            if owned:
                await client.aclose()
            raise

        async def relay() -> AsyncIterator[bytes]:
            try:
                async for chunk in upstream.aiter_bytes():
                    yield chunk
            finally:
                await upstream.aclose()
                if owned:
                    await client.aclose()

        response = StreamingResponse(relay(), status_code=upstream.status_code)
        relayed = _filter_headers(upstream.headers.raw, self.stripped_response_headers)
        if upstream.reason_phrase:
            relayed.append((UPSTREAM_REASON_HEADER.encode("latin-1"), upstream.reason_phrase.encode("latin-1")))
        response.raw_headers = relayed
        return response


__all__ = ["Forwarder", "build_target_url", "UPSTREAM_REASON_HEADER"]
