from pathlib import Path

import pytest

from lib.config.proxy_router_loader import (
    DEFAULT_STRIPPED_REQUEST_HEADERS,
    ProxyRouterConfig,
    load_proxy_router_config,
)
from lib.config.yaml_loader import load_yaml


def test_missing_file_gives_defaults(tmp_path):
    cfg = load_proxy_router_config(str(tmp_path / "absent.yaml"))

    assert cfg == ProxyRouterConfig()
    assert cfg.kv_seed_path is None
    assert cfg.forward_timeout is None
    assert cfg.stripped_request_headers == DEFAULT_STRIPPED_REQUEST_HEADERS


def test_values_are_read_and_seed_path_resolved(tmp_path):
    path = tmp_path / "proxy_router.yaml"
    path.write_text(
        "proxy_router:\n"
        "  kv:\n"
        "    seed_path: routing_kv.yaml\n"
        "  forward:\n"
        "    timeout: 12\n"
        "    strip_request_headers: [Host]\n"
        "  logging:\n"
        "    level: debug\n"
    )

    cfg = load_proxy_router_config(str(path))
    assert Path(cfg.kv_seed_path) == tmp_path / "routing_kv.yaml"
    assert cfg.forward_timeout == 12.0
    assert cfg.stripped_request_headers == ["host"]
    assert cfg.log_level == "DEBUG"
    assert cfg.raw["proxy_router"]["forward"]["timeout"] == 12


def test_yaml_must_be_a_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n")
    with pytest.raises(ValueError):
        load_yaml(path)


def test_bundled_config_seeds_example_routes():
    root = Path(__file__).resolve().parents[2]
    cfg = load_proxy_router_config(str(root / "config" / "proxy_router.yaml"))

    assert cfg.kv_seed_path is not None
    assert Path(cfg.kv_seed_path).exists()
