"""Pull routing identifiers out of an inbound request.

POST requests carry a JSON body of the form ``{"data": "<json string>"}``;
the identifiers live inside the decoded ``data`` string.  GET requests carry
them as query parameters.  Nothing else is supported.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional

from lib.contracts.errors import (
    InvalidBody,
    InvalidDataField,
    MissingDataField,
    MissingParameter,
    UnsupportedMethod,
)
from lib.contracts.routing import RoutingParams
from lib.utils.helpers import _as_optional_str, _is_falsy
from lib.utils.validation import ensure

CUSTOMER_PARAM = "customerId"
WAREHOUSE_PARAM = "warehouseId"
DATA_FIELD = "data"


def _parse_post_body(body: bytes) -> RoutingParams:
    try:
        parsed = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise InvalidBody() from None

    ensure(isinstance(parsed, dict) and not _is_falsy(parsed.get(DATA_FIELD)), MissingDataField())
    data = parsed[DATA_FIELD]
    # Scalars decode to themselves and carry no identifiers; containers are not JSON text.
    ensure(not isinstance(data, (list, dict)), InvalidDataField())
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except json.JSONDecodeError:
            raise InvalidDataField() from None

    fields: Dict[str, Any] = data if isinstance(data, dict) else {}
    return RoutingParams(
        customer_id=_as_optional_str(fields.get(CUSTOMER_PARAM)),
        warehouse_id=_as_optional_str(fields.get(WAREHOUSE_PARAM)),
        raw_body=parsed,
    )


def _parse_query(query_params: Mapping[str, str]) -> RoutingParams:
    return RoutingParams(
        customer_id=_as_optional_str(query_params.get(CUSTOMER_PARAM)),
        warehouse_id=_as_optional_str(query_params.get(WAREHOUSE_PARAM)),
    )


def extract_routing_params(
    method: str,
    query_params: Mapping[str, str],
    body: Optional[bytes] = None,
) -> RoutingParams:
    """Return the :class:`RoutingParams` for one request.

    Raises a :class:`~lib.contracts.errors.RoutingError` subclass describing
    the first problem found.  The method is checked before anything is
    parsed, and ``customerId`` is checked last.
    """

    method = method.upper()
    if method == "POST":
        params = _parse_post_body(body or b"")
    elif method == "GET":
        params = _parse_query(query_params)
    else:
        raise UnsupportedMethod(method)

    ensure(params.customer_id is not None, MissingParameter(CUSTOMER_PARAM))
    return params


__all__ = ["extract_routing_params", "CUSTOMER_PARAM", "WAREHOUSE_PARAM"]
