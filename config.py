"""
Central configuration for netcollect.
Supports defaults, optional config file (YAML), and environment overrides.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from utils import env_bool, env_float, env_int, env_list, env_str, get_logger

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# Defaults
# -----------------------------------------------------------------------------

DEFAULTS: dict[str, Any] = {
    "network": {
        "source_path": "/proc/net/dev",
        "ignore_ips": ["127.", "0.", "169.254."],
        "ignore_eths": ["docker", "lo", "veth"],
        "in_ips": ["10.", "172.", "192.168."],
        "in_eths": [],
        "include_ipv6": False,
    },
    "tcp": {
        "source_path": "/proc/net/snmp",
    },
    "probes": {
        "ethtool_path": "ethtool",
        "ethtool_timeout_sec": 3,
    },
    "collect": {
        "interval_sec": 5,
        "retry_sec": 60,
    },
    "logging": {
        "level": "INFO",
        "file": None,
    },
}

# -----------------------------------------------------------------------------
# Config file loading (optional YAML)
# -----------------------------------------------------------------------------

_config_overrides: dict[str, Any] = {}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for k, v in override.items():
        if k in out and isinstance(out[k], dict) and isinstance(v, dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def load_config_file(path: str | Path | None = None) -> bool:
    """Load optional YAML config. Returns True if loaded."""
    if path is None:
        for p in (
            Path(os.getcwd()) / "netcollect.yaml",
            Path(os.getcwd()) / "netcollect.yml",
            Path.home() / ".netcollect" / "config.yaml",
            Path("/etc/netcollect/config.yaml"),
        ):
            if p.exists():
                path = p
                break
    if path is None:
        return False
    path = Path(path)
    if not path.exists():
        return False
    import yaml
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Failed to load config %s: %s", path, e)
        return False
    if not isinstance(data, dict):
        logger.warning("Ignoring config %s: top level is not a mapping", path)
        return False
    global _config_overrides
    _config_overrides = _deep_merge(_config_overrides, data)
    _apply_env()
    return True


def reset_overrides() -> None:
    """Drop file overrides and re-apply environment overrides."""
    global _config_overrides
    _config_overrides = {}
    _apply_env()


def get(key_path: str, default: Any = None) -> Any:
    """Get config value by dot path, e.g. 'network.ignore_eths'."""
    merged = _deep_merge(DEFAULTS, _config_overrides)
    keys = key_path.split(".")
    for k in keys:
        if isinstance(merged, dict) and k in merged:
            merged = merged[k]
        else:
            return default
    return merged


# -----------------------------------------------------------------------------
# Environment overrides (take precedence over file)
# -----------------------------------------------------------------------------

def _env_overrides() -> dict[str, Any]:
    return {
        "network.source_path": env_str("NETCOLLECT_NET_DEV"),
        "network.ignore_ips": env_list("NETCOLLECT_IGNORE_IPS"),
        "network.ignore_eths": env_list("NETCOLLECT_IGNORE_ETHS"),
        "network.in_ips": env_list("NETCOLLECT_IN_IPS"),
        "network.in_eths": env_list("NETCOLLECT_IN_ETHS"),
        "network.include_ipv6": env_bool("NETCOLLECT_IPV6", False),
        "tcp.source_path": env_str("NETCOLLECT_NET_SNMP"),
        "probes.ethtool_path": env_str("NETCOLLECT_ETHTOOL"),
        "probes.ethtool_timeout_sec": env_float("NETCOLLECT_ETHTOOL_TIMEOUT", 0),
        "collect.interval_sec": env_int("NETCOLLECT_INTERVAL", 0),
        "collect.retry_sec": env_int("NETCOLLECT_RETRY", 0),
        "logging.level": env_str("NETCOLLECT_LOG_LEVEL"),
    }


def _apply_env() -> None:
    e = _env_overrides()
    for path, value in e.items():
        if value is None or value == 0 or value is False or value == "":
            continue
        keys = path.split(".")
        d = _config_overrides
        for k in keys[:-1]:
            if k not in d:
                d[k] = {}
            if not isinstance(d[k], dict):
                break
            d = d[k]
        if isinstance(d, dict) and keys[-1]:
            d[keys[-1]] = value


# Apply env on import
_apply_env()

# -----------------------------------------------------------------------------
# Convenience constants
# -----------------------------------------------------------------------------

NET_DEV_PATH = str(get("network.source_path", "/proc/net/dev"))
NET_SNMP_PATH = str(get("tcp.source_path", "/proc/net/snmp"))
INCLUDE_IPV6 = bool(get("network.include_ipv6", False))

ETHTOOL_PATH = str(get("probes.ethtool_path", "ethtool"))
ETHTOOL_TIMEOUT_SEC = float(get("probes.ethtool_timeout_sec", 3))

COLLECT_INTERVAL_SEC = int(get("collect.interval_sec", 5))
COLLECT_RETRY_SEC = int(get("collect.retry_sec", 60))

LOG_LEVEL = str(get("logging.level", "INFO"))
