"""Tests for the collector base class."""
from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from collectors import BaseCollector, CollectorResult, NetworkCollector, TcpCollector


class _Boom(BaseCollector):
    name = "boom"

    def collect(self) -> CollectorResult:
        raise RuntimeError("kaboom")


class _Ok(BaseCollector):
    name = "ok"

    def collect(self) -> CollectorResult:
        return CollectorResult(data={"x": 1})


def test_collector_result_defaults() -> None:
    r = CollectorResult()
    assert r.success
    assert r.error is None
    assert r.data == {}


def test_collector_result_failed() -> None:
    r = CollectorResult.failed("no source")
    assert not r.success
    assert r.error == "no source"


def test_collect_safe_wraps_exceptions() -> None:
    r = _Boom().collect_safe()
    assert not r.success
    assert r.error == "kaboom"


def test_collect_safe_passes_through() -> None:
    r = _Ok().collect_safe()
    assert r.success
    assert r.data == {"x": 1}


def test_collectors_are_named() -> None:
    assert NetworkCollector.name == "network"
    assert TcpCollector.name == "tcp"
