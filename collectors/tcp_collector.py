"""
TCP retransmission collector: machine-wide retransmission rate from the
Tcp block of /proc/net/snmp.
"""
from __future__ import annotations

import time
from collections.abc import Callable
from pathlib import Path

from collectors.base import BaseCollector, CollectorResult
from models import TcpStats
from utils import format_float, get_logger

logger = get_logger(__name__)

TCP_LABEL = "Tcp:"
TCP_HEADER_TOKEN = "RtoAlgorithm"
TCP_OUT_SEGS = 11
TCP_RETRANS_SEGS = 12


def parse_tcp_segments(lines: list[str]) -> tuple[float, float] | None:
    """Return (OutSegs, RetransSegs) from the Tcp data line, or None if absent."""
    for line in lines:
        fields = line.split()
        if not fields or fields[0] != TCP_LABEL or TCP_HEADER_TOKEN in line:
            continue
        if len(fields) <= TCP_RETRANS_SEGS:
            continue
        try:
            return float(fields[TCP_OUT_SEGS]), float(fields[TCP_RETRANS_SEGS])
        except ValueError:
            continue
    return None


class TcpCollector(BaseCollector):
    name = "tcp"

    def __init__(
        self,
        source_path: str | Path = "/proc/net/snmp",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.source_path = Path(source_path)
        self._clock = clock
        self.stats = TcpStats()

    @classmethod
    def from_config(cls, **overrides) -> TcpCollector:
        import config

        kwargs = {"source_path": config.get("tcp.source_path", "/proc/net/snmp")}
        kwargs.update(overrides)
        return cls(**kwargs)

    def collect(self) -> CollectorResult:
        try:
            with open(self.source_path, encoding="utf-8") as f:
                lines = f.readlines()
        except OSError as e:
            logger.warning("Cannot read %s: %s", self.source_path, e)
            return CollectorResult.failed(str(e))

        segments = parse_tcp_segments(lines)
        if segments is None:
            logger.warning("No Tcp counters found in %s", self.source_path)
            return CollectorResult.failed(f"no Tcp counters in {self.source_path}")
        out_segs, retrans_segs = segments

        st = self.stats
        if st.last_time != 0:
            out_delta = out_segs - st.out_segs
            retrans_delta = retrans_segs - st.retrans_segs
            if out_delta <= 0 or retrans_delta < 0:
                if out_delta < 0 or retrans_delta < 0:
                    logger.warning("TCP segment counters went backwards; re-baselining")
                st.retran_rate = 0.0
            else:
                st.retran_rate = format_float(retrans_delta / out_delta * 100)

        st.out_segs = out_segs
        st.retrans_segs = retrans_segs
        st.last_time = int(self._clock())
        return CollectorResult(success=True, data={"tcp": st.to_dict()})

    def get_retran_rate(self) -> float:
        return self.stats.retran_rate
