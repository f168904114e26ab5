"""
Shared utilities: logging, float rounding, env helpers, safe ratios.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path

# -----------------------------------------------------------------------------
# Logging
# -----------------------------------------------------------------------------

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: str | int = "INFO",
    log_file: str | Path | None = None,
    format_string: str = LOG_FORMAT,
    date_format: str = LOG_DATE_FORMAT,
) -> None:
    """Configure root logger and optional file handler."""
    log_level = getattr(logging, level.upper(), logging.INFO) if isinstance(level, str) else level
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))
    logging.basicConfig(
        level=log_level,
        format=format_string,
        datefmt=date_format,
        handlers=handlers,
        force=True,
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


# -----------------------------------------------------------------------------
# Formatting
# -----------------------------------------------------------------------------

def format_float(value: float) -> float:
    """Round to 2 decimals the way metric values are reported."""
    return float(f"{value:.2f}")


# -----------------------------------------------------------------------------
# Config / env helpers
# -----------------------------------------------------------------------------

def env_bool(key: str, default: bool = False) -> bool:
    v = os.environ.get(key, "").strip().lower()
    if v in ("1", "true", "yes", "on"):
        return True
    if v in ("0", "false", "no", "off"):
        return False
    return default


def env_int(key: str, default: int = 0) -> int:
    try:
        return int(os.environ.get(key, default))
    except ValueError:
        return default


def env_float(key: str, default: float = 0.0) -> float:
    try:
        return float(os.environ.get(key, default))
    except ValueError:
        return default


def env_str(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def env_list(key: str, default: list[str] | None = None) -> list[str] | None:
    """Comma-separated env value as a list; `default` when unset or blank."""
    raw = env_str(key)
    if not raw:
        return default
    return [item.strip() for item in raw.split(",") if item.strip()]


def trim_prefixes(prefixes: list[str] | tuple[str, ...] | None) -> tuple[str, ...]:
    """Strip whitespace/newlines from configured prefixes and drop empties."""
    if not prefixes:
        return ()
    out = []
    for p in prefixes:
        p = p.strip().replace("\n", "")
        if p:
            out.append(p)
    return tuple(out)


# -----------------------------------------------------------------------------
# Safe math
# -----------------------------------------------------------------------------

def safe_ratio(part: float, total: float) -> float:
    """Return part/total, or 0 if total <= 0. Not clamped."""
    if total <= 0:
        return 0.0
    return part / total


def safe_percent(part: float, total: float) -> float:
    """Return (part/total)*100, or 0 when both are zero or total is zero."""
    if total == 0:
        return 0.0
    return (part / total) * 100.0
