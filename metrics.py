"""
Metric accessors over collector state, keyed by metric name for the
reporting layer. Every numeric metric is rounded to 2 decimals and never
raises: unknown interfaces and empty denominators read as 0.
"""
from __future__ import annotations

import sys
from collections.abc import Callable
from typing import Any

import psutil

from collectors.network_collector import InterfaceNotFoundError, NetworkCollector
from collectors.probes import psutil_conn_count
from collectors.tcp_collector import TcpCollector
from utils import format_float, get_logger, safe_percent

logger = get_logger(__name__)

# Metrics that take no argument, in report order.
AGGREGATE_METRICS: tuple[str, ...] = (
    "in_recv_byte_avg",
    "in_send_byte_avg",
    "in_recv_pkg_avg",
    "in_send_pkg_avg",
    "in_recv_err_rate",
    "in_send_err_rate",
    "in_recv_drop_rate",
    "in_send_drop_rate",
    "out_recv_byte_avg",
    "out_send_byte_avg",
    "out_recv_pkg_avg",
    "out_send_pkg_avg",
    "out_recv_err_avg",
    "out_send_err_avg",
    "out_recv_drop_avg",
    "out_send_drop_avg",
    "out_recv_err_rate",
    "out_send_err_rate",
    "out_recv_drop_rate",
    "out_send_drop_rate",
    "eth_in_max_use_rate",
    "eth_out_max_use_rate",
    "in_eth_max_use_rate",
    "out_eth_max_use_rate",
    "tcp_retran_rate",
)

# Metrics addressed by interface index handle.
INTERFACE_METRICS: tuple[str, ...] = (
    "eth_recv_pkg_avg",
    "eth_send_pkg_avg",
    "eth_recv_byte_avg",
    "eth_send_byte_avg",
    "eth_recv_err_rate",
    "eth_recv_drop_rate",
    "eth_send_err_rate",
    "eth_send_drop_rate",
    "eth_speed",
)

TEXT_METRICS: tuple[str, ...] = ("eth_model", "eth_byte_set", "conn_num_by_port")

METRIC_NAMES: tuple[str, ...] = AGGREGATE_METRICS + INTERFACE_METRICS + TEXT_METRICS


class NetworkMetrics:
    """Read-only metric surface over a network and a TCP collector."""

    def __init__(
        self,
        network: NetworkCollector,
        tcp: TcpCollector | None = None,
        conn_counter: Callable[[int], int] = psutil_conn_count,
    ) -> None:
        self.network = network
        self.tcp = tcp
        self._conn_counter = conn_counter

    # ------------------------------------------------------------------
    # Internal (intranet) totals
    # ------------------------------------------------------------------

    def in_recv_byte_avg(self) -> float:
        return format_float(self.network.totals.internal.recv_byte_avg)

    def in_send_byte_avg(self) -> float:
        return format_float(self.network.totals.internal.send_byte_avg)

    def in_recv_pkg_avg(self) -> float:
        return format_float(self.network.totals.internal.recv_pkg_avg)

    def in_send_pkg_avg(self) -> float:
        return format_float(self.network.totals.internal.send_pkg_avg)

    def in_recv_err_rate(self) -> float:
        t = self.network.totals.internal
        return format_float(safe_percent(t.recv_err_pkg_avg, t.recv_pkg_avg))

    def in_send_err_rate(self) -> float:
        t = self.network.totals.internal
        return format_float(safe_percent(t.send_err_pkg_avg, t.send_pkg_avg))

    def in_recv_drop_rate(self) -> float:
        t = self.network.totals.internal
        return format_float(safe_percent(t.recv_drop_pkg_avg, t.recv_pkg_avg))

    def in_send_drop_rate(self) -> float:
        t = self.network.totals.internal
        return format_float(safe_percent(t.send_drop_pkg_avg, t.send_pkg_avg))

    # ------------------------------------------------------------------
    # External (internet-facing) totals
    # ------------------------------------------------------------------

    def out_recv_byte_avg(self) -> float:
        return format_float(self.network.totals.external.recv_byte_avg)

    def out_send_byte_avg(self) -> float:
        return format_float(self.network.totals.external.send_byte_avg)

    def out_recv_pkg_avg(self) -> float:
        return format_float(self.network.totals.external.recv_pkg_avg)

    def out_send_pkg_avg(self) -> float:
        return format_float(self.network.totals.external.send_pkg_avg)

    def out_recv_err_avg(self) -> float:
        return format_float(self.network.totals.external.recv_err_pkg_avg)

    def out_send_err_avg(self) -> float:
        return format_float(self.network.totals.external.send_err_pkg_avg)

    def out_recv_drop_avg(self) -> float:
        return format_float(self.network.totals.external.recv_drop_pkg_avg)

    def out_send_drop_avg(self) -> float:
        return format_float(self.network.totals.external.send_drop_pkg_avg)

    def out_recv_err_rate(self) -> float:
        t = self.network.totals.external
        return format_float(safe_percent(t.recv_err_pkg_avg, t.recv_pkg_avg))

    def out_send_err_rate(self) -> float:
        t = self.network.totals.external
        return format_float(safe_percent(t.send_err_pkg_avg, t.send_pkg_avg))

    def out_recv_drop_rate(self) -> float:
        t = self.network.totals.external
        return format_float(safe_percent(t.recv_drop_pkg_avg, t.recv_pkg_avg))

    def out_send_drop_rate(self) -> float:
        t = self.network.totals.external
        return format_float(safe_percent(t.send_drop_pkg_avg, t.send_pkg_avg))

    # ------------------------------------------------------------------
    # Peak utilization and TCP
    # ------------------------------------------------------------------

    def eth_in_max_use_rate(self) -> float:
        """Peak receive-side utilization (%) over all interfaces."""
        return format_float(self.network.peaks.recv)

    def eth_out_max_use_rate(self) -> float:
        """Peak send-side utilization (%) over all interfaces."""
        return format_float(self.network.peaks.send)

    def in_eth_max_use_rate(self) -> float:
        """Peak utilization (%) of internal interfaces, either direction."""
        return format_float(self.network.peaks.internal)

    def out_eth_max_use_rate(self) -> float:
        """Peak utilization (%) of external interfaces, either direction."""
        return format_float(self.network.peaks.external)

    def reset_peaks(self) -> None:
        self.network.reset_peaks()

    def tcp_retran_rate(self) -> float:
        if self.tcp is None:
            return 0.0
        return format_float(self.tcp.get_retran_rate())

    # ------------------------------------------------------------------
    # Single interface, by index handle
    # ------------------------------------------------------------------

    def _ifi_value(self, index: str, attr: str) -> float:
        try:
            ifi = self.network.get_ifi_by_index(index)
        except InterfaceNotFoundError:
            return 0.0
        return format_float(getattr(ifi, attr))

    def eth_recv_pkg_avg(self, index: str) -> float:
        return self._ifi_value(index, "recv_pkg_avg")

    def eth_send_pkg_avg(self, index: str) -> float:
        return self._ifi_value(index, "send_pkg_avg")

    def eth_recv_byte_avg(self, index: str) -> float:
        return self._ifi_value(index, "recv_byte_avg")

    def eth_send_byte_avg(self, index: str) -> float:
        return self._ifi_value(index, "send_byte_avg")

    def eth_recv_err_rate(self, index: str) -> float:
        return self._ifi_value(index, "recv_err_rate")

    def eth_recv_drop_rate(self, index: str) -> float:
        return self._ifi_value(index, "recv_drop_rate")

    def eth_send_err_rate(self, index: str) -> float:
        return self._ifi_value(index, "send_err_rate")

    def eth_send_drop_rate(self, index: str) -> float:
        return self._ifi_value(index, "send_drop_rate")

    def eth_speed(self, index: str) -> float:
        return self._ifi_value(index, "speed")

    def interfaces(self) -> list[tuple[int, str]]:
        """Valid (index, name) handles for the per-interface metrics."""
        return self.network.interfaces()

    def bandwidth_limit_by_ip(self, ip: str) -> int:
        return self.network.bandwidth_limit_by_ip(ip)

    # ------------------------------------------------------------------
    # Text dumps
    # ------------------------------------------------------------------

    def eth_model(self, args: str = "") -> str:
        return self.network.model_detail

    def eth_byte_set(self, args: str = "") -> str:
        return self.network.recv_send_detail

    def conn_num_by_port(self, port: str) -> str:
        """Established connections on `port` as text; empty string on failure."""
        try:
            return str(self._conn_counter(int(port)))
        except (ValueError, psutil.Error, OSError) as e:
            logger.debug("Connection count for port %r failed: %s", port, e)
            return ""

    # ------------------------------------------------------------------
    # Name-keyed access
    # ------------------------------------------------------------------

    def get(self, name: str, arg: str | None = None) -> float | str:
        """Resolve a metric by name. Unknown names raise KeyError."""
        if name not in METRIC_NAMES:
            raise KeyError(name)
        fn = getattr(self, name)
        if name in INTERFACE_METRICS or name == "conn_num_by_port":
            return fn(arg if arg is not None else "")
        return fn()

    def snapshot(self) -> dict[str, Any]:
        """All aggregate metrics plus per-interface rates, for JSON export."""
        data: dict[str, Any] = {name: getattr(self, name)() for name in AGGREGATE_METRICS}
        per_if: list[dict[str, Any]] = []
        for index, name in self.interfaces():
            ifi = self.network.ifi_map[name]
            row: dict[str, Any] = {"index": index, "name": name, "ip": ifi.ip}
            for metric in INTERFACE_METRICS:
                row[metric] = getattr(self, metric)(str(index))
            per_if.append(row)
        data["interfaces"] = per_if
        return data


def build_from_config() -> NetworkMetrics:
    return NetworkMetrics(NetworkCollector.from_config(), TcpCollector.from_config())


def collect(m: NetworkMetrics) -> list[str]:
    """Run one pass of every collector. Returns the errors, if any."""
    errors: list[str] = []
    for collector in (m.network, m.tcp):
        if collector is None:
            continue
        res = collector.collect_safe()
        if not res.success:
            errors.append(f"{collector.name}: {res.error}")
    return errors


def print_snapshot(m: NetworkMetrics) -> None:
    """Print aggregate and per-interface metrics using rich."""
    from rich.console import Console
    from rich.panel import Panel
    from rich.table import Table

    console = Console()
    snap = m.snapshot()

    table = Table(title="Host network metrics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    for name in AGGREGATE_METRICS:
        table.add_row(name, f"{snap[name]:.2f}")
    console.print(Panel(table, title="Overview"))

    if snap["interfaces"]:
        i_table = Table(title="Interfaces")
        i_table.add_column("#", style="cyan")
        i_table.add_column("Name", style="cyan")
        i_table.add_column("IP")
        for metric in INTERFACE_METRICS:
            i_table.add_column(metric.removeprefix("eth_"), style="yellow")
        for row in snap["interfaces"]:
            i_table.add_row(
                str(row["index"]), row["name"], row["ip"],
                *(f"{row[metric]:.2f}" for metric in INTERFACE_METRICS),
            )
        console.print(Panel(i_table))


def main() -> None:
    """Sample twice and print the result once."""
    import time

    import config

    m = build_from_config()
    collect(m)
    time.sleep(config.COLLECT_INTERVAL_SEC)
    errors = collect(m)
    if errors:
        print("; ".join(errors), file=sys.stderr)
        sys.exit(1)
    print_snapshot(m)


if __name__ == "__main__":
    main()
