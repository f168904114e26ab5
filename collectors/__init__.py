"""
Collectors package: stateful kernel-counter engines.
"""
from __future__ import annotations

from collectors.base import BaseCollector, CollectorResult
from collectors.classifier import InterfaceClassifier
from collectors.network_collector import InterfaceNotFoundError, NetworkCollector
from collectors.probes import SpeedProbeError
from collectors.tcp_collector import TcpCollector

__all__ = [
    "BaseCollector",
    "CollectorResult",
    "InterfaceClassifier",
    "InterfaceNotFoundError",
    "NetworkCollector",
    "SpeedProbeError",
    "TcpCollector",
]
