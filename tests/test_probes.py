"""Tests for speed probing and connection counting."""
from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from types import SimpleNamespace

import psutil
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from collectors import probes
from collectors.probes import SpeedProbeError, ethtool_probe, parse_link_speed, psutil_conn_count

ETHTOOL_OUTPUT = """Settings for eth0:
\tSupported ports: [ TP ]
\tSupported link modes:   10baseT/Half 10baseT/Full
\tSpeed: 1000Mb/s
\tDuplex: Full
\tLink detected: yes
"""


def test_parse_link_speed() -> None:
    assert parse_link_speed(ETHTOOL_OUTPUT) == 1000.0


def test_parse_link_speed_unknown() -> None:
    assert parse_link_speed("\tSpeed: Unknown!\n\tDuplex: Unknown! (255)\n") is None
    assert parse_link_speed("") is None


def test_parse_link_speed_skips_malformed_lines() -> None:
    text = "\tSpeed: a: b\n\tSpeed: 25000Mb/s\n"
    assert parse_link_speed(text) == 25000.0


def test_ethtool_probe_success(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(cmd, **kwargs):
        assert cmd == ["ethtool", "eth0"]
        assert kwargs["timeout"] == 3
        return SimpleNamespace(returncode=0, stdout=ETHTOOL_OUTPUT, stderr="")

    monkeypatch.setattr(probes.subprocess, "run", fake_run)
    assert "Speed: 1000Mb/s" in ethtool_probe("eth0")


def test_ethtool_probe_nonzero_exit(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        probes.subprocess, "run",
        lambda cmd, **kw: SimpleNamespace(returncode=75, stdout="", stderr="no data"),
    )
    with pytest.raises(SpeedProbeError):
        ethtool_probe("eth0")


def test_ethtool_probe_missing_binary(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(cmd, **kwargs):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(probes.subprocess, "run", fake_run)
    with pytest.raises(SpeedProbeError):
        ethtool_probe("eth0", ethtool_path="/nonexistent/ethtool")


def test_ethtool_probe_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(cmd, **kwargs):
        raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

    monkeypatch.setattr(probes.subprocess, "run", fake_run)
    with pytest.raises(SpeedProbeError):
        ethtool_probe("eth0", timeout_sec=0.1)


def test_psutil_conn_count(monkeypatch: pytest.MonkeyPatch) -> None:
    addr = SimpleNamespace
    conns = [
        SimpleNamespace(status=psutil.CONN_ESTABLISHED, laddr=addr(ip="10.0.0.1", port=80), raddr=addr(ip="1.2.3.4", port=5000)),
        SimpleNamespace(status=psutil.CONN_ESTABLISHED, laddr=addr(ip="10.0.0.1", port=6000), raddr=addr(ip="1.2.3.4", port=80)),
        SimpleNamespace(status=psutil.CONN_LISTEN, laddr=addr(ip="0.0.0.0", port=80), raddr=()),
        SimpleNamespace(status=psutil.CONN_ESTABLISHED, laddr=addr(ip="10.0.0.1", port=22), raddr=addr(ip="1.2.3.4", port=5001)),
    ]
    monkeypatch.setattr(probes.psutil, "net_connections", lambda kind="tcp": conns)
    assert psutil_conn_count(80) == 2
    assert psutil_conn_count(22) == 1
    assert psutil_conn_count(443) == 0
