"""
Network interface collector: per-interface rates from /proc/net/dev,
internal/external totals and peak link utilization.
"""
from __future__ import annotations

import socket
import time
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

import psutil

from collectors.base import BaseCollector, CollectorResult
from collectors.classifier import InterfaceClassifier
from collectors.probes import make_ethtool_probe, parse_link_speed
from models import Ifi, NetworkTotals, UtilizationPeaks
from utils import get_logger, safe_ratio

logger = get_logger(__name__)

NET_DEV_NUM_STATS = 16
NET_DEV_RX_BYTES = 0
NET_DEV_RX_PACKETS = 1
NET_DEV_RX_ERRS = 2
NET_DEV_RX_DROP = 3
NET_DEV_TX_BYTES = 8
NET_DEV_TX_PACKETS = 9
NET_DEV_TX_ERRS = 10
NET_DEV_TX_DROP = 11

AddressResolver = Callable[[], dict[str, list[str]]]
SpeedProbe = Callable[[str], str]


class InterfaceNotFoundError(LookupError):
    """No interface is registered under the requested index handle."""


def psutil_addresses() -> dict[str, list[str]]:
    """Map interface name to its IPv4/IPv6 addresses, in OS order."""
    result: dict[str, list[str]] = {}
    for name, addrs in psutil.net_if_addrs().items():
        ips = []
        for addr in addrs:
            if addr.family not in (socket.AF_INET, socket.AF_INET6):
                continue
            # Drop the zone suffix on link-local IPv6 (fe80::1%eth0)
            ips.append(addr.address.split("%", 1)[0])
        result[name] = ips
    return result


def parse_net_dev_line(line: str) -> tuple[str, tuple[int, ...]] | None:
    """Split a /proc/net/dev row into (name, 8 counters), or None to skip it.

    Counters are rx bytes/packets/errs/drop then tx bytes/packets/errs/drop.
    """
    if ":" not in line:
        return None
    name, _, body = line.partition(":")
    name = name.strip()
    fields = body.split()
    if not name or len(fields) != NET_DEV_NUM_STATS:
        return None
    try:
        values = tuple(
            int(fields[i])
            for i in (
                NET_DEV_RX_BYTES, NET_DEV_RX_PACKETS, NET_DEV_RX_ERRS, NET_DEV_RX_DROP,
                NET_DEV_TX_BYTES, NET_DEV_TX_PACKETS, NET_DEV_TX_ERRS, NET_DEV_TX_DROP,
            )
        )
    except ValueError:
        return None
    return name, values


class NetworkCollector(BaseCollector):
    """Stateful per-interface rate engine.

    Keeps one `Ifi` per interface seen, addressed by name and by an index
    handle assigned in discovery order. Totals are rebuilt on every pass;
    utilization peaks and the two detail strings live for the lifetime of
    the collector.
    """

    name = "network"

    def __init__(
        self,
        ignore_ips: Iterable[str] | None = None,
        ignore_eths: Iterable[str] | None = None,
        in_ips: Iterable[str] | None = None,
        in_eths: Iterable[str] | None = None,
        include_ipv6: bool = False,
        source_path: str | Path = "/proc/net/dev",
        addresses: AddressResolver = psutil_addresses,
        speed_probe: SpeedProbe | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.classifier = InterfaceClassifier(
            ignore_ips=ignore_ips,
            ignore_eths=ignore_eths,
            in_ips=in_ips,
            in_eths=in_eths,
            include_ipv6=include_ipv6,
        )
        self.source_path = Path(source_path)
        self._addresses = addresses
        self._speed_probe = speed_probe or make_ethtool_probe()
        self._clock = clock

        self.ifi_map: dict[str, Ifi] = {}
        self.interface_names: list[str] = []
        self.totals = NetworkTotals.empty()
        self.peaks = UtilizationPeaks()
        self.recv_send_detail = ""
        self.model_detail = ""

    @classmethod
    def from_config(cls, **overrides: Any) -> NetworkCollector:
        """Build a collector from config.py settings; keyword args win."""
        import config

        kwargs: dict[str, Any] = {
            "ignore_ips": config.get("network.ignore_ips", []),
            "ignore_eths": config.get("network.ignore_eths", []),
            "in_ips": config.get("network.in_ips", []),
            "in_eths": config.get("network.in_eths", []),
            "include_ipv6": bool(config.get("network.include_ipv6", False)),
            "source_path": config.get("network.source_path", "/proc/net/dev"),
            "speed_probe": make_ethtool_probe(
                ethtool_path=str(config.get("probes.ethtool_path", "ethtool")),
                timeout_sec=float(config.get("probes.ethtool_timeout_sec", 3)),
            ),
        }
        kwargs.update(overrides)
        return cls(**kwargs)

    # ------------------------------------------------------------------
    # Collection
    # ------------------------------------------------------------------

    def collect(self) -> CollectorResult:
        try:
            with open(self.source_path, encoding="utf-8") as f:
                lines = f.readlines()
        except OSError as e:
            logger.warning("Cannot read %s: %s", self.source_path, e)
            return CollectorResult.failed(str(e))

        addresses = self._addresses()
        self.totals = NetworkTotals.empty()
        seen: list[str] = []

        for line in lines:
            parsed = parse_net_dev_line(line)
            if parsed is None:
                continue
            name, counters = parsed
            addrs = addresses.get(name)
            if not addrs:
                logger.debug("Skipping %s: no addresses", name)
                continue
            if self.classifier.is_ignore(name, addrs):
                logger.debug("Skipping ignored interface %s", name)
                continue

            ifi = self._get_or_create(name)
            ifi.ip = addrs[0]
            self._update(ifi, counters, int(self._clock()))

            internal = self.classifier.is_internal(ifi.ip)
            self.totals.fold(ifi, internal)
            self.recv_send_detail += (
                f"{ifi.ip}={ifi.name}=({ifi.recv_byte_avg:.0f}|{ifi.send_byte_avg:.0f})$"
            )
            seen.append(name)

            if not self._probe_speed(ifi, internal):
                continue
            self.model_detail += f"{ifi.name}|{ifi.ip}|{ifi.speed:g}$"

        return CollectorResult(success=True, data={
            "interfaces": seen,
            "totals": self.totals.to_dict(),
            "peaks": self.peaks.to_dict(),
        })

    def _get_or_create(self, name: str) -> Ifi:
        ifi = self.ifi_map.get(name)
        if ifi is None:
            ifi = Ifi(name=name)
            self.ifi_map[name] = ifi
            self.interface_names.append(name)
            logger.info("Monitoring interface %s as index %d", name, len(self.interface_names) - 1)
        return ifi

    def _update(self, ifi: Ifi, counters: tuple[int, ...], now: int) -> None:
        (recv_byte, recv_pkg, recv_err, recv_drop,
         send_byte, send_pkg, send_err, send_drop) = counters
        previous = ifi.counters()
        interval = now - ifi.last

        if ifi.last == 0:
            # First sample: nothing to diff against yet.
            pass
        elif any(cur < prev for cur, prev in zip(counters, previous)):
            logger.warning(
                "Counters for %s went backwards (reset or interface replaced); re-baselining",
                ifi.name,
            )
            ifi.clear_rates()
        elif interval > 0:
            d_recv_pkg = recv_pkg - ifi.recv_pkg
            d_send_pkg = send_pkg - ifi.send_pkg

            ifi.recv_byte_avg = (recv_byte - ifi.recv_byte) / interval
            ifi.recv_pkg_avg = d_recv_pkg / interval
            ifi.recv_err_pkg_avg = (recv_err - ifi.recv_err) / interval
            ifi.recv_drop_pkg_avg = (recv_drop - ifi.recv_drop) / interval
            ifi.recv_err_rate = safe_ratio(recv_err - ifi.recv_err, d_recv_pkg)
            ifi.recv_drop_rate = safe_ratio(recv_drop - ifi.recv_drop, d_recv_pkg)

            ifi.send_byte_avg = (send_byte - ifi.send_byte) / interval
            ifi.send_pkg_avg = d_send_pkg / interval
            ifi.send_err_pkg_avg = (send_err - ifi.send_err) / interval
            ifi.send_drop_pkg_avg = (send_drop - ifi.send_drop) / interval
            ifi.send_err_rate = safe_ratio(send_err - ifi.send_err, d_send_pkg)
            ifi.send_drop_rate = safe_ratio(send_drop - ifi.send_drop, d_send_pkg)
        else:
            # Sampled twice within the same second: no usable interval.
            ifi.clear_rates()

        ifi.recv_byte, ifi.recv_pkg, ifi.recv_err, ifi.recv_drop = recv_byte, recv_pkg, recv_err, recv_drop
        ifi.send_byte, ifi.send_pkg, ifi.send_err, ifi.send_drop = send_byte, send_pkg, send_err, send_drop
        ifi.last = now

    def _probe_speed(self, ifi: Ifi, internal: bool) -> bool:
        """Refresh link speed and utilization peaks. False if the probe failed."""
        try:
            output = self._speed_probe(ifi.name)
        except Exception as e:
            logger.debug("Speed probe failed for %s: %s", ifi.name, e)
            return False

        speed = parse_link_speed(output)
        if speed is None:
            return True
        ifi.speed = speed
        if speed > 0:
            capacity = speed * 1024 * 1024
            self.peaks.observe(
                internal,
                recv_pct=ifi.recv_byte_avg * 8 * 100 / capacity,
                send_pct=ifi.send_byte_avg * 8 * 100 / capacity,
            )
        return True

    # ------------------------------------------------------------------
    # State queries
    # ------------------------------------------------------------------

    def get_ifi_by_index(self, index: str | int) -> Ifi:
        """Resolve an index handle (as assigned at first sight) to its Ifi."""
        if isinstance(index, str) and not index.isdigit():
            raise InterfaceNotFoundError(f"invalid index {index!r}")
        try:
            i = int(index)
        except (TypeError, ValueError):
            raise InterfaceNotFoundError(f"invalid index {index!r}") from None
        if i < 0 or i >= len(self.interface_names):
            raise InterfaceNotFoundError(f"invalid index {index!r}")
        key = self.interface_names[i]
        ifi = self.ifi_map.get(key)
        if ifi is None:
            raise InterfaceNotFoundError(f"key not found: {key}")
        return ifi

    def interfaces(self) -> list[tuple[int, str]]:
        return list(enumerate(self.interface_names))

    def set_bandwidth_limit(self, name: str, limited: bool) -> None:
        try:
            ifi = self.ifi_map[name]
        except KeyError:
            raise InterfaceNotFoundError(f"unknown interface {name!r}") from None
        ifi.bandwidth_limit = 1 if limited else 0

    def bandwidth_limit_by_ip(self, ip: str) -> int:
        for ifi in self.ifi_map.values():
            if ifi.ip == ip:
                return ifi.bandwidth_limit
        return 0

    def reset_peaks(self) -> None:
        self.peaks.reset()
