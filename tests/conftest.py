"""Shared fixtures: fake /proc files, a controllable clock, fake resolvers."""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

NET_DEV_HEADER = (
    "Inter-|   Receive                                                |  Transmit\n"
    " face |bytes    packets errs drop fifo frame compressed multicast"
    "|bytes    packets errs drop fifo colls carrier compressed\n"
)

SNMP_TEMPLATE = (
    "Ip: Forwarding DefaultTTL InReceives InHdrErrors\n"
    "Ip: 1 64 12345 0\n"
    "Tcp: RtoAlgorithm RtoMin RtoMax MaxConn ActiveOpens PassiveOpens AttemptFails "
    "EstabResets CurrEstab InSegs OutSegs RetransSegs InErrs OutRsts InCsumErrors\n"
    "Tcp: 1 200 120000 -1 10 5 0 0 2 500 {out_segs} {retrans_segs} 0 0 0\n"
    "Udp: InDatagrams NoPorts InErrors OutDatagrams\n"
    "Udp: 10 0 0 10\n"
)


def net_dev_line(
    name: str,
    recv_byte: int = 0,
    recv_pkg: int = 0,
    recv_err: int = 0,
    recv_drop: int = 0,
    send_byte: int = 0,
    send_pkg: int = 0,
    send_err: int = 0,
    send_drop: int = 0,
) -> str:
    fields = [recv_byte, recv_pkg, recv_err, recv_drop, 0, 0, 0, 0,
              send_byte, send_pkg, send_err, send_drop, 0, 0, 0, 0]
    return f"{name:>6}: " + " ".join(str(v) for v in fields) + "\n"


class FakeClock:
    def __init__(self, now: int = 1_700_000_000) -> None:
        self.now = now

    def __call__(self) -> float:
        return float(self.now)

    def advance(self, seconds: int) -> None:
        self.now += seconds


class FakeProbe:
    """Speed probe returning canned ethtool text per interface."""

    def __init__(self, speeds: dict[str, str] | None = None, failing: set[str] | None = None) -> None:
        self.speeds = speeds or {}
        self.failing = failing or set()
        self.calls: list[str] = []

    def __call__(self, name: str) -> str:
        from collectors.probes import SpeedProbeError

        self.calls.append(name)
        if name in self.failing:
            raise SpeedProbeError(f"ethtool {name}: exit status 75")
        speed = self.speeds.get(name, "Unknown!")
        return (
            f"Settings for {name}:\n"
            "\tSupported ports: [ TP ]\n"
            f"\tSpeed: {speed}\n"
            "\tDuplex: Full\n"
            "\tLink detected: yes\n"
        )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def net_dev(tmp_path: Path):
    """Return a writer that replaces the fake /proc/net/dev content."""
    path = tmp_path / "net_dev"

    def write(*lines: str) -> Path:
        path.write_text(NET_DEV_HEADER + "".join(lines))
        return path

    write()
    return write


@pytest.fixture()
def snmp(tmp_path: Path):
    path = tmp_path / "snmp"

    def write(out_segs: int, retrans_segs: int) -> Path:
        path.write_text(SNMP_TEMPLATE.format(out_segs=out_segs, retrans_segs=retrans_segs))
        return path

    return write
