from __future__ import annotations

import pytest

from shopwatch.security.addresses import address_matches, in_cidr, is_valid_address_spec, matches


def test_cidr_containment_examples() -> None:
    assert matches("192.168.1.5", ["192.168.1.0/24"])
    assert not matches("192.168.2.5", ["192.168.1.0/24"])
    assert matches("10.0.0.1", ["10.0.0.1"])


def test_prefix_zero_matches_every_address_of_the_family() -> None:
    assert in_cidr("8.8.8.8", "0.0.0.0/0")
    assert in_cidr("255.255.255.255", "10.0.0.0/0")
    assert in_cidr("2001:db8::1", "::/0")
    assert not in_cidr("2001:db8::1", "0.0.0.0/0")


def test_full_prefix_matches_only_the_exact_address() -> None:
    assert in_cidr("10.0.0.1", "10.0.0.1/32")
    assert not in_cidr("10.0.0.2", "10.0.0.1/32")
    assert in_cidr("2001:db8::1", "2001:db8::1/128")
    assert not in_cidr("2001:db8::2", "2001:db8::1/128")


@pytest.mark.parametrize(
    ("address", "cidr", "expected"),
    [
        ("2001:db8:abcd:12::1", "2001:db8:abcd::/48", True),
        ("2001:db8:abce::1", "2001:db8:abcd::/48", False),
        # Partial final byte: /52 keeps the high nibble of the 7th byte.
        ("2001:db8:abcd:0fff::1", "2001:db8:abcd::/52", True),
        ("2001:db8:abcd:1000::1", "2001:db8:abcd::/52", False),
        ("fe80::1", "fe80::/10", True),
        ("fec0::1", "fe80::/10", False),
        ("172.16.31.255", "172.16.0.0/20", False),
        ("172.16.15.255", "172.16.0.0/20", True),
    ],
)
def test_cidr_containment_with_partial_bytes(address: str, cidr: str, expected: bool) -> None:
    assert in_cidr(address, cidr) is expected


def test_family_mismatch_is_never_a_match() -> None:
    assert not in_cidr("::ffff:192.168.1.5", "192.168.1.0/24")
    assert not in_cidr("192.168.1.5", "::/0")


@pytest.mark.parametrize(
    ("address", "cidr"),
    [
        ("not-an-ip", "10.0.0.0/8"),
        ("10.0.0.1", "10.0.0.0/33"),
        ("10.0.0.1", "10.0.0.0/-1"),
        ("10.0.0.1", "10.0.0.0/abc"),
        ("10.0.0.1", "garbage/8"),
        ("::1", "::/129"),
    ],
)
def test_malformed_input_is_non_containment(address: str, cidr: str) -> None:
    assert in_cidr(address, cidr) is False


def test_exact_entry_without_prefix_does_not_match_neighbours() -> None:
    assert address_matches("10.0.0.1", "10.0.0.1")
    assert not address_matches("10.0.0.10", "10.0.0.1")


def test_matches_any_of_several_entries() -> None:
    allowed = ["127.0.0.1", "10.0.0.0/8", "2001:db8::/32"]

    assert matches("10.200.3.4", allowed)
    assert matches("2001:db8:1::5", allowed)
    assert not matches("192.0.2.1", allowed)
    assert not matches("192.0.2.1", [])


@pytest.mark.parametrize("spec", ["10.0.0.1", "10.0.0.0/8", "0.0.0.0/0", "::1", "2001:db8::/32", "::/128"])
def test_valid_address_specs(spec: str) -> None:
    assert is_valid_address_spec(spec)


@pytest.mark.parametrize("spec", ["", "localhost", "10.0.0.0/33", "::/129", "10.0.0.0/", "10.0.0.0/8/8", "300.1.1.1"])
def test_invalid_address_specs(spec: str) -> None:
    assert not is_valid_address_spec(spec)
