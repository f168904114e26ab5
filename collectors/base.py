"""
Base collector interface: every counter collector implements this.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from utils import get_logger

logger = get_logger(__name__)


@dataclass
class CollectorResult:
    """Outcome of one collection pass: success flag, optional error, and data dict."""
    success: bool = True
    error: str | None = None
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def failed(cls, error: str) -> CollectorResult:
        return cls(success=False, error=error, data={})


class BaseCollector(ABC):
    """Abstract base for stateful counter collectors.

    Implementations keep their previous sample between calls, so a single
    instance must be reused across passes and must not be collected from
    two threads at once.
    """

    name: str = "base"

    @abstractmethod
    def collect(self) -> CollectorResult:
        """Run one pass. Source read failures come back as CollectorResult(success=False)."""
        ...

    def collect_safe(self) -> CollectorResult:
        """Wrapper that turns unexpected exceptions into a failed result."""
        try:
            return self.collect()
        except Exception as e:
            logger.exception("%s collector pass failed", self.name)
            return CollectorResult.failed(str(e))
