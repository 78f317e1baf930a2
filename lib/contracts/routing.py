"""Request-scoped models passed between the proxy router stages."""
from typing import Any, Dict, Optional

from pydantic import BaseModel


class RoutingParams(BaseModel):
    """Business identifiers pulled from an inbound request.

    ``raw_body`` holds the singly-parsed POST body (the object carrying the
    ``data`` string) so it can be re-serialised when forwarding.  It is
    ``None`` for GET requests.
    """

    customer_id: Optional[str] = None
    warehouse_id: Optional[str] = None
    raw_body: Optional[Dict[str, Any]] = None


class ResolvedRoute(BaseModel):
    """Outcome of the three-step store lookup."""

    target_key: str
    endpoint: str
    source_path: str
    destination_path: str

    @property
    def path_mapped(self) -> bool:
        return self.destination_path != self.source_path


class ErrorBody(BaseModel):
    """JSON body returned on every failure path."""

    error: str
    message: Optional[str] = None
