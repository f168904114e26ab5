"""Tests for the TCP retransmission collector."""
from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from collectors.tcp_collector import TcpCollector, parse_tcp_segments


def test_parse_tcp_segments_skips_header() -> None:
    lines = [
        "Tcp: RtoAlgorithm RtoMin RtoMax MaxConn ActiveOpens PassiveOpens AttemptFails "
        "EstabResets CurrEstab InSegs OutSegs RetransSegs InErrs OutRsts InCsumErrors\n",
        "Tcp: 1 200 120000 -1 10 5 0 0 2 500 100 5 0 0 0\n",
    ]
    assert parse_tcp_segments(lines) == (100.0, 5.0)


def test_parse_tcp_segments_missing() -> None:
    assert parse_tcp_segments(["Udp: 1 2 3\n"]) is None
    assert parse_tcp_segments(["Tcp: 1 2 3\n"]) is None


def test_first_sample_stores_only(snmp, clock) -> None:
    t = TcpCollector(source_path=snmp(100, 5), clock=clock)
    res = t.collect()
    assert res.success
    assert t.stats.out_segs == 100.0
    assert t.stats.retrans_segs == 5.0
    assert t.stats.retran_rate == 0.0
    assert t.stats.last_time == clock.now


def test_retransmission_rate(snmp, clock) -> None:
    t = TcpCollector(source_path=snmp(100, 5), clock=clock)
    t.collect()
    clock.advance(5)
    snmp(200, 15)
    res = t.collect()
    assert res.success
    assert t.get_retran_rate() == 10.0
    assert res.data["tcp"]["retran_rate"] == 10.0


def test_rate_rounded_to_two_decimals(snmp, clock) -> None:
    t = TcpCollector(source_path=snmp(0, 0), clock=clock)
    t.collect()
    snmp(3, 1)
    t.collect()
    assert t.get_retran_rate() == 33.33


def test_no_outbound_segments_gives_zero(snmp, clock) -> None:
    t = TcpCollector(source_path=snmp(100, 5), clock=clock)
    t.collect()
    snmp(100, 6)
    t.collect()
    assert t.get_retran_rate() == 0.0


def test_counter_reset_gives_zero(snmp, clock) -> None:
    t = TcpCollector(source_path=snmp(1000, 50), clock=clock)
    t.collect()
    snmp(10, 1)
    t.collect()
    assert t.get_retran_rate() == 0.0
    snmp(110, 11)
    t.collect()
    assert t.get_retran_rate() == 10.0


def test_missing_source(tmp_path: Path, clock) -> None:
    t = TcpCollector(source_path=tmp_path / "nope", clock=clock)
    res = t.collect()
    assert not res.success
    assert t.stats.last_time == 0


def test_source_without_tcp_block(tmp_path: Path, clock) -> None:
    path = tmp_path / "snmp"
    path.write_text("Ip: Forwarding\nIp: 1\n")
    res = TcpCollector(source_path=path, clock=clock).collect()
    assert not res.success
    assert "Tcp" in res.error
