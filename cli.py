"""
Command-line interface for netcollect: sample, watch, inspect a single metric.
"""
from __future__ import annotations

import argparse
import json
import sys
import time

from utils import get_logger, setup_logging

logger = get_logger("netcollect")


def _sample(m, samples: int, interval: float) -> list[str]:
    from metrics import collect
    errors: list[str] = []
    for i in range(samples):
        if i:
            time.sleep(interval)
        errors = collect(m)
    return errors


def cmd_collect(args: argparse.Namespace) -> int:
    import config
    from metrics import build_from_config, collect, print_snapshot

    m = build_from_config()
    interval = args.interval if args.interval is not None else float(config.get("collect.interval_sec", 5))

    if args.watch:
        try:
            while True:
                errors = collect(m)
                if errors:
                    logger.warning("Collect failed: %s", "; ".join(errors))
                    time.sleep(float(config.get("collect.retry_sec", 60)))
                    continue
                if args.json:
                    print(json.dumps(m.snapshot()), flush=True)
                else:
                    logger.info("Monitor interfaces: %s", m.network.interface_names)
                time.sleep(interval)
        except KeyboardInterrupt:
            pass
        return 0

    errors = _sample(m, args.samples, interval)
    if errors:
        print("; ".join(errors), file=sys.stderr)
        return 1
    if args.json:
        print(json.dumps(m.snapshot(), indent=2 if args.pretty else None))
        return 0
    print_snapshot(m)
    return 0


def cmd_interfaces(args: argparse.Namespace) -> int:
    from metrics import build_from_config, collect

    m = build_from_config()
    errors = collect(m)
    if errors:
        print("; ".join(errors), file=sys.stderr)
        return 1
    for index, name in m.interfaces():
        ifi = m.network.ifi_map[name]
        print(f"{index}\t{name}\t{ifi.ip}")
    return 0


def cmd_metric(args: argparse.Namespace) -> int:
    import config
    from metrics import METRIC_NAMES, build_from_config

    if args.name not in METRIC_NAMES:
        print(f"Unknown metric {args.name!r}. Known: {', '.join(METRIC_NAMES)}", file=sys.stderr)
        return 2
    m = build_from_config()
    interval = args.interval if args.interval is not None else float(config.get("collect.interval_sec", 5))
    errors = _sample(m, 2, interval)
    if errors:
        print("; ".join(errors), file=sys.stderr)
        return 1
    print(m.get(args.name, args.arg))
    return 0


def cmd_validate_config(args: argparse.Namespace) -> int:
    from config import get, load_config_file
    loaded = load_config_file(args.config) if args.config else load_config_file()
    print("Config file loaded:", loaded)
    for key in [
        "network.source_path",
        "network.ignore_ips",
        "network.ignore_eths",
        "network.in_ips",
        "network.include_ipv6",
        "tcp.source_path",
        "probes.ethtool_path",
        "collect.interval_sec",
    ]:
        print(f"  {key}: {get(key)}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(prog="netcollect", description="Host network counter sampler")
    parser.add_argument("--config", default=None, help="YAML config file")
    parser.add_argument("--log-level", default=None, help="Logging level (default from config)")
    sub = parser.add_subparsers(dest="command", required=True)

    p_collect = sub.add_parser("collect", help="Sample counters and print metrics")
    p_collect.add_argument("--samples", type=int, default=2, help="Passes before printing (rates need 2)")
    p_collect.add_argument("--interval", type=float, default=None, help="Seconds between passes")
    p_collect.add_argument("--json", action="store_true", help="Output JSON")
    p_collect.add_argument("--pretty", action="store_true", help="Pretty-print JSON")
    p_collect.add_argument("--watch", action="store_true", help="Collect forever on a fixed interval")
    p_collect.set_defaults(run=cmd_collect)

    p_ifaces = sub.add_parser("interfaces", help="List monitored interfaces and their index handles")
    p_ifaces.set_defaults(run=cmd_interfaces)

    p_metric = sub.add_parser("metric", help="Print one named metric")
    p_metric.add_argument("name", help="Metric name, e.g. out_recv_byte_avg")
    p_metric.add_argument("arg", nargs="?", default=None, help="Interface index or port")
    p_metric.add_argument("--interval", type=float, default=None, help="Seconds between the two passes")
    p_metric.set_defaults(run=cmd_metric)

    p_validate = sub.add_parser("validate-config", help="Validate and show config")
    p_validate.set_defaults(run=cmd_validate_config)

    args = parser.parse_args()

    import config
    if args.config and args.command != "validate-config":
        config.load_config_file(args.config)
    setup_logging(args.log_level or config.get("logging.level", "INFO"), config.get("logging.file"))
    return args.run(args)


if __name__ == "__main__":
    sys.exit(main())
