"""Key-value store used to hold routing tables.

Request handling only ever reads through :meth:`KeyValueStore.get`.  The
administrative ``put``/``delete`` operations exist for seeding and for
out-of-band updates; nothing on the request path calls them.

Three colon-joined key namespaces are used:

``route:{customer}:{warehouse}`` / ``route:{customer}``
    target key for a customer, optionally narrowed to one warehouse
``endpoint:{target}``
    base URL of the backend behind a target key
``path:{target}:{source_path}``
    destination path override for one source path on one target
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, runtime_checkable

from lib.config.yaml_loader import load_yaml


ROUTE_PREFIX = "route"
ENDPOINT_PREFIX = "endpoint"
PATH_PREFIX = "path"


def warehouse_route_key(customer_id: str, warehouse_id: str) -> str:
    return f"{ROUTE_PREFIX}:{customer_id}:{warehouse_id}"


def customer_route_key(customer_id: str) -> str:
    # No warehouse segment at all, not an empty or placeholder one.
    return f"{ROUTE_PREFIX}:{customer_id}"


def endpoint_key(target_key: str) -> str:
    return f"{ENDPOINT_PREFIX}:{target_key}"


def path_key(target_key: str, source_path: str) -> str:
    return f"{PATH_PREFIX}:{target_key}:{source_path}"


@runtime_checkable
class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...


class InMemoryKVStore:
    """Dictionary backed :class:`KeyValueStore`."""

    def __init__(self, entries: Optional[Dict[str, Any]] = None) -> None:
        self._store: Dict[str, str] = {}
        for key, value in (entries or {}).items():
            self.put(key, value)

    def get(self, key: str) -> Optional[str]:
        return self._store.get(key)

    def put(self, key: str, value: Any) -> None:
        self._store[key] = str(value)

    def delete(self, key: str) -> None:
        self._store.pop(key, None)

    def clear(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: object) -> bool:
        return key in self._store


def entries_from_mapping(raw: Dict[str, Any]) -> Dict[str, str]:
    """Flatten a seed mapping into raw store keys.

    Two layouts are accepted and may be mixed.  ``entries`` holds raw keys
    verbatim.  The structured layout spells each namespace out::

        routes:
          NESTLE:
            default: TARGET_B
            warehouses:
              GDEC-01: TARGET_A
        endpoints:
          TARGET_A: https://backend.example
        paths:
          TARGET_A:
            /api/inventory: /webhook/inventory
    """

    out: Dict[str, str] = {}
    for key, value in (raw.get("entries") or {}).items():
        out[str(key)] = str(value)

    for customer, entry in (raw.get("routes") or {}).items():
        if isinstance(entry, dict):
            if entry.get("default"):
                out[customer_route_key(str(customer))] = str(entry["default"])
            for warehouse, target in (entry.get("warehouses") or {}).items():
                out[warehouse_route_key(str(customer), str(warehouse))] = str(target)
        else:
            out[customer_route_key(str(customer))] = str(entry)

    for target, url in (raw.get("endpoints") or {}).items():
        out[endpoint_key(str(target))] = str(url)

    for target, mapping in (raw.get("paths") or {}).items():
        for source, destination in (mapping or {}).items():
            out[path_key(str(target), str(source))] = str(destination)
    return out


def load_kv_seed(path: str) -> InMemoryKVStore:
    """Build an :class:`InMemoryKVStore` from a YAML seed file."""

    return InMemoryKVStore(entries_from_mapping(load_yaml(path)))


__all__ = [
    "KeyValueStore",
    "InMemoryKVStore",
    "warehouse_route_key",
    "customer_route_key",
    "endpoint_key",
    "path_key",
    "entries_from_mapping",
    "load_kv_seed",
]
