"""
External capabilities used by the collectors: link-speed probing via
ethtool and established-connection counting via psutil.
"""
from __future__ import annotations

import subprocess

import psutil

from utils import get_logger

logger = get_logger(__name__)


class SpeedProbeError(RuntimeError):
    """The link-speed probe could not produce output for an interface."""


def ethtool_probe(
    name: str,
    ethtool_path: str = "ethtool",
    timeout_sec: float | None = 3,
) -> str:
    """Return raw `ethtool <name>` output. Raises SpeedProbeError on any failure."""
    try:
        out = subprocess.run(
            [ethtool_path, name],
            capture_output=True,
            text=True,
            timeout=timeout_sec,
        )
    except (subprocess.TimeoutExpired, FileNotFoundError, PermissionError) as e:
        raise SpeedProbeError(f"{ethtool_path} {name}: {e}") from e
    if out.returncode != 0:
        raise SpeedProbeError(f"{ethtool_path} {name}: exit status {out.returncode}")
    return out.stdout or ""


def make_ethtool_probe(ethtool_path: str = "ethtool", timeout_sec: float | None = 3):
    """Bind ethtool settings into a `name -> text` probe."""
    def probe(name: str) -> str:
        return ethtool_probe(name, ethtool_path=ethtool_path, timeout_sec=timeout_sec)
    return probe


def parse_link_speed(text: str) -> float | None:
    """Extract the Mb/s value from the first parsable `Speed:` line.

    Lines that do not split into exactly a label and a value, or whose value
    is not numeric (e.g. ``Speed: Unknown!``), are passed over.
    """
    for line in text.splitlines():
        if "Speed" not in line:
            continue
        parts = line.split(":")
        if len(parts) != 2:
            continue
        value = parts[1].strip().replace("Mb/s", "")
        try:
            return float(value)
        except ValueError:
            continue
    return None


def psutil_conn_count(port: int) -> int:
    """Number of ESTABLISHED TCP connections with `port` on either end."""
    count = 0
    for conn in psutil.net_connections(kind="tcp"):
        if conn.status != psutil.CONN_ESTABLISHED:
            continue
        if (conn.laddr and conn.laddr.port == port) or (conn.raddr and conn.raddr.port == port):
            count += 1
    return count
