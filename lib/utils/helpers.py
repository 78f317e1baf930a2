"""General helper utilities."""

import json
import math
from typing import Any, Optional


def _is_falsy(v: Any) -> bool:
    """None, empty string, zero, False and NaN; containers are not falsy."""
    if v is None:
        return True
    if isinstance(v, (list, dict)):
        return False
    if isinstance(v, float) and math.isnan(v):
        return True
    return v in ("", 0)


def _as_optional_str(v: Any) -> Optional[str]:
    if _is_falsy(v):
        return None
    if isinstance(v, bool):
        return "true"
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    return v if isinstance(v, str) else str(v)


def compact_json(payload: Any) -> bytes:
    """Serialise ``payload`` without whitespace, keeping non-ASCII as UTF-8."""
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
