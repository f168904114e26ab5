"""
Data models for netcollect: per-interface sample state, per-pass totals,
utilization high-water marks and TCP retransmission state.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass
class Ifi:
    """Sample state for one monitored interface.

    Cumulative counters hold the kernel values from the last sample. The
    ``*_avg`` fields are per-second rates over the last interval and the
    ``*_rate`` fields are per-interval ratios (errored or dropped packets
    over total packets). Derived fields stay at 0 until a second sample.
    """
    name: str = ""
    ip: str = ""
    speed: float = 0.0  # Mb/s, 0 = unknown
    bandwidth_limit: int = 0  # 0 unlimited, 1 limited; set by operator
    last: int = 0  # Unix seconds of last sample, 0 = never sampled

    recv_byte: int = 0
    recv_pkg: int = 0
    recv_err: int = 0
    recv_drop: int = 0
    send_byte: int = 0
    send_pkg: int = 0
    send_err: int = 0
    send_drop: int = 0

    recv_byte_avg: float = 0.0
    recv_pkg_avg: float = 0.0
    recv_err_pkg_avg: float = 0.0
    recv_drop_pkg_avg: float = 0.0
    recv_err_rate: float = 0.0
    recv_drop_rate: float = 0.0

    send_byte_avg: float = 0.0
    send_pkg_avg: float = 0.0
    send_err_pkg_avg: float = 0.0
    send_drop_pkg_avg: float = 0.0
    send_err_rate: float = 0.0
    send_drop_rate: float = 0.0

    def counters(self) -> tuple[int, int, int, int, int, int, int, int]:
        return (
            self.recv_byte, self.recv_pkg, self.recv_err, self.recv_drop,
            self.send_byte, self.send_pkg, self.send_err, self.send_drop,
        )

    def clear_rates(self) -> None:
        for key in _RATE_FIELDS:
            setattr(self, key, 0.0)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


_RATE_FIELDS = (
    "recv_byte_avg", "recv_pkg_avg", "recv_err_pkg_avg", "recv_drop_pkg_avg",
    "recv_err_rate", "recv_drop_rate",
    "send_byte_avg", "send_pkg_avg", "send_err_pkg_avg", "send_drop_pkg_avg",
    "send_err_rate", "send_drop_rate",
)


@dataclass
class DirectionTotals:
    """Sum of per-second rates over the interfaces on one side of the partition."""
    recv_byte_avg: float = 0.0
    send_byte_avg: float = 0.0
    recv_pkg_avg: float = 0.0
    send_pkg_avg: float = 0.0
    recv_err_pkg_avg: float = 0.0
    send_err_pkg_avg: float = 0.0
    recv_drop_pkg_avg: float = 0.0
    send_drop_pkg_avg: float = 0.0

    def add(self, ifi: Ifi) -> None:
        self.recv_byte_avg += ifi.recv_byte_avg
        self.send_byte_avg += ifi.send_byte_avg
        self.recv_pkg_avg += ifi.recv_pkg_avg
        self.send_pkg_avg += ifi.send_pkg_avg
        self.recv_err_pkg_avg += ifi.recv_err_pkg_avg
        self.send_err_pkg_avg += ifi.send_err_pkg_avg
        self.recv_drop_pkg_avg += ifi.recv_drop_pkg_avg
        self.send_drop_pkg_avg += ifi.send_drop_pkg_avg

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class NetworkTotals:
    """Machine-wide totals for a single collection pass.

    A fresh instance is built at the start of every pass, so the values never
    carry over from earlier passes.
    """
    internal: DirectionTotals
    external: DirectionTotals

    @classmethod
    def empty(cls) -> NetworkTotals:
        return cls(internal=DirectionTotals(), external=DirectionTotals())

    def fold(self, ifi: Ifi, internal: bool) -> None:
        (self.internal if internal else self.external).add(ifi)

    def to_dict(self) -> dict[str, Any]:
        return {"internal": self.internal.to_dict(), "external": self.external.to_dict()}


@dataclass
class UtilizationPeaks:
    """High-water marks of link utilization (%) since start or last reset."""
    internal_recv: float = 0.0
    internal_send: float = 0.0
    external_recv: float = 0.0
    external_send: float = 0.0

    def observe(self, internal: bool, recv_pct: float, send_pct: float) -> None:
        if internal:
            self.internal_recv = max(self.internal_recv, recv_pct)
            self.internal_send = max(self.internal_send, send_pct)
        else:
            self.external_recv = max(self.external_recv, recv_pct)
            self.external_send = max(self.external_send, send_pct)

    def reset(self) -> None:
        self.internal_recv = 0.0
        self.internal_send = 0.0
        self.external_recv = 0.0
        self.external_send = 0.0

    @property
    def recv(self) -> float:
        return max(self.internal_recv, self.external_recv)

    @property
    def send(self) -> float:
        return max(self.internal_send, self.external_send)

    @property
    def internal(self) -> float:
        return max(self.internal_recv, self.internal_send)

    @property
    def external(self) -> float:
        return max(self.external_recv, self.external_send)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class TcpStats:
    """Global TCP segment counters and the retransmission rate (%)."""
    out_segs: float = 0.0
    retrans_segs: float = 0.0
    retran_rate: float = 0.0
    last_time: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
