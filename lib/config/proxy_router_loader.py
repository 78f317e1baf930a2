from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .yaml_loader import load_yaml

DEFAULT_CONFIG_PATH = "config/proxy_router.yaml"

# Framing headers that describe the inbound connection rather than the request.
DEFAULT_STRIPPED_REQUEST_HEADERS = ["host", "content-length"]
# The relayed body is decoded by httpx so these no longer describe it.
DEFAULT_STRIPPED_RESPONSE_HEADERS = [
    "content-encoding",
    "content-length",
    "transfer-encoding",
    "connection",
    "keep-alive",
]


@dataclass
class ProxyRouterConfig:
    """Typed view over ``proxy_router.yaml``.

    The raw mapping is retained so that keys not modelled here are still
    reachable by callers that need them.
    """

    raw: Dict[str, Any] = field(default_factory=dict)
    kv_seed_path: Optional[str] = None
    forward_timeout: Optional[float] = None
    log_level: str = "INFO"
    stripped_request_headers: List[str] = field(
        default_factory=lambda: list(DEFAULT_STRIPPED_REQUEST_HEADERS)
    )
    stripped_response_headers: List[str] = field(
        default_factory=lambda: list(DEFAULT_STRIPPED_RESPONSE_HEADERS)
    )


def load_proxy_router_config(path: str = DEFAULT_CONFIG_PATH) -> ProxyRouterConfig:
    """Load ``proxy_router.yaml`` and return a :class:`ProxyRouterConfig`.

    A missing file yields the defaults.  Relative ``kv_seed_path`` values are
    resolved against the directory holding the configuration file.
    """

    if not Path(path).exists():
        return ProxyRouterConfig()
    return config_from_mapping(load_yaml(path), base_dir=Path(path).parent)


def config_from_mapping(raw: Dict[str, Any], base_dir: Optional[Path] = None) -> ProxyRouterConfig:
    section = raw.get("proxy_router", {}) or {}
    kv = section.get("kv", {}) or {}
    forward = section.get("forward", {}) or {}

    seed = kv.get("seed_path")
    if seed and base_dir is not None and not Path(seed).is_absolute():
        seed = str(base_dir / seed)

    timeout = forward.get("timeout")
    return ProxyRouterConfig(
        raw=raw,
        kv_seed_path=seed,
        forward_timeout=float(timeout) if timeout is not None else None,
        log_level=str((section.get("logging", {}) or {}).get("level", "INFO")).upper(),
        stripped_request_headers=[
            h.lower() for h in forward.get("strip_request_headers", DEFAULT_STRIPPED_REQUEST_HEADERS)
        ],
        stripped_response_headers=[
            h.lower() for h in forward.get("strip_response_headers", DEFAULT_STRIPPED_RESPONSE_HEADERS)
        ],
    )
