"""
Interface classification: which interfaces to ignore, and which kept
interfaces count as internal (intranet) rather than external.
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence

from utils import trim_prefixes


def is_ipv6(address: str) -> bool:
    return ":" in address


class InterfaceClassifier:
    """Prefix-based ignore and internal/external policy."""

    def __init__(
        self,
        ignore_ips: Iterable[str] | None = None,
        ignore_eths: Iterable[str] | None = None,
        in_ips: Iterable[str] | None = None,
        in_eths: Iterable[str] | None = None,
        include_ipv6: bool = False,
    ) -> None:
        self.ignore_ips = trim_prefixes(list(ignore_ips or ()))
        self.ignore_eths = trim_prefixes(list(ignore_eths or ()))
        self.in_ips = trim_prefixes(list(in_ips or ()))
        # Accepted for configuration compatibility; classification is by IP only.
        self.in_eths = trim_prefixes(list(in_eths or ()))
        self.include_ipv6 = include_ipv6

    def _is_ignored_address(self, address: str) -> bool:
        if is_ipv6(address) and not self.include_ipv6:
            return True
        return address.startswith(self.ignore_ips) if self.ignore_ips else False

    def is_ignore(self, name: str, addresses: Sequence[str]) -> bool:
        """True if the interface should be skipped entirely.

        A name-prefix match wins over everything else. Otherwise the
        interface is kept as long as at least one of its addresses is
        worth monitoring.
        """
        if self.ignore_eths and name.startswith(self.ignore_eths):
            return True
        if not addresses:
            return True
        return all(self._is_ignored_address(a) for a in addresses)

    def is_internal(self, ip: str) -> bool:
        if not ip or not self.in_ips:
            return False
        return ip.startswith(self.in_ips)
