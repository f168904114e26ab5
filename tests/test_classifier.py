"""Tests for interface ignore/internal classification."""
from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from collectors.classifier import InterfaceClassifier, is_ipv6


def make() -> InterfaceClassifier:
    return InterfaceClassifier(
        ignore_ips=["127.", " 0.\n"],
        ignore_eths=["docker", "lo"],
        in_ips=["10.", "192.168."],
        in_eths=["bond"],
    )


def test_prefixes_are_trimmed() -> None:
    c = make()
    assert c.ignore_ips == ("127.", "0.")
    assert c.in_eths == ("bond",)


def test_is_ipv6() -> None:
    assert is_ipv6("fe80::1")
    assert not is_ipv6("10.0.0.1")


def test_name_prefix_ignored() -> None:
    c = make()
    assert c.is_ignore("docker0", ["8.8.8.8"])
    assert c.is_ignore("lo", ["127.0.0.1"])
    assert not c.is_ignore("eth0", ["8.8.8.8"])


def test_single_address_rules() -> None:
    c = make()
    assert c.is_ignore("eth0", ["127.0.1.1"])
    assert c.is_ignore("eth0", ["fe80::1"])
    assert not c.is_ignore("eth0", ["10.1.1.1"])


def test_multiple_addresses_kept_if_any_qualifies() -> None:
    c = make()
    assert not c.is_ignore("eth0", ["fe80::1", "10.0.0.2"])
    assert not c.is_ignore("eth0", ["127.0.0.2", "8.8.8.8"])
    assert c.is_ignore("eth0", ["fe80::1", "127.0.0.2"])


def test_ipv6_enabled() -> None:
    c = InterfaceClassifier(ignore_ips=["fe80"], include_ipv6=True)
    assert not c.is_ignore("eth0", ["2001:db8::1"])
    assert c.is_ignore("eth0", ["fe80::1"])


def test_no_addresses_ignored() -> None:
    assert make().is_ignore("eth0", [])


def test_is_internal() -> None:
    c = make()
    assert c.is_internal("10.2.3.4")
    assert c.is_internal("192.168.1.1")
    assert not c.is_internal("8.8.8.8")
    assert not c.is_internal("")


def test_interface_prefix_does_not_make_internal() -> None:
    c = make()
    assert not c.is_internal("8.8.8.8")
    assert InterfaceClassifier().is_internal("10.0.0.1") is False
