"""
Source-address matching against exact literals and CIDR blocks.

IPv4 containment is tested on 32-bit integers. IPv6 containment walks the 16
packed bytes and masks the final partial byte. An address never matches a block
of the other family, and unparsable input is treated as non-containment.
"""

from __future__ import annotations

import ipaddress
from typing import Iterable, Optional, Tuple, Union

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]

_MAX_PREFIX = {4: 32, 6: 128}


def _parse_address(value: str) -> Optional[IPAddress]:
    if not isinstance(value, str):
        return None
    try:
        return ipaddress.ip_address(value.strip())
    except ValueError:
        return None


def _split_cidr(spec: str) -> Optional[Tuple[IPAddress, int]]:
    network_literal, _, prefix_literal = spec.partition("/")
    network = _parse_address(network_literal)
    if network is None or not (prefix_literal.isascii() and prefix_literal.isdigit()):
        return None
    prefix = int(prefix_literal)
    if prefix > _MAX_PREFIX[network.version]:
        return None
    return network, prefix


def _ipv4_in_block(candidate: ipaddress.IPv4Address, network: ipaddress.IPv4Address, prefix: int) -> bool:
    mask = (0xFFFFFFFF << (32 - prefix)) & 0xFFFFFFFF
    return (int(candidate) & mask) == (int(network) & mask)


def _ipv6_in_block(candidate: ipaddress.IPv6Address, network: ipaddress.IPv6Address, prefix: int) -> bool:
    remaining = prefix
    for candidate_byte, network_byte in zip(candidate.packed, network.packed):
        if remaining <= 0:
            break
        bits = min(8, remaining)
        mask = (0xFF << (8 - bits)) & 0xFF
        if (candidate_byte & mask) != (network_byte & mask):
            return False
        remaining -= 8
    return True


def in_cidr(address: str, cidr: str) -> bool:
    """
    Test whether `address` lies inside the `network/prefix` block `cidr`.

    Returns False for malformed input or a family mismatch.
    """
    candidate = _parse_address(address)
    block = _split_cidr(cidr)
    if candidate is None or block is None:
        return False
    network, prefix = block
    if candidate.version != network.version:
        return False
    if candidate.version == 4:
        return _ipv4_in_block(candidate, network, prefix)  # type: ignore[arg-type]
    return _ipv6_in_block(candidate, network, prefix)  # type: ignore[arg-type]


def address_matches(address: str, allowed: str) -> bool:
    """Exact string match first, CIDR containment when `allowed` has a prefix."""
    if address == allowed:
        return True
    if "/" in allowed:
        return in_cidr(address, allowed)
    return False


def matches(address: str, allowed: Iterable[str]) -> bool:
    """True if `address` matches any of the allowed literals or CIDR blocks."""
    return any(address_matches(address, spec) for spec in allowed)


def is_valid_address_spec(spec: str) -> bool:
    """
    Check an allow-list address: an IPv4/IPv6 literal or `literal/prefix`.

    The prefix must lie in [0, 32] for IPv4 and [0, 128] for IPv6.
    """
    if "/" in spec:
        return _split_cidr(spec) is not None
    return _parse_address(spec) is not None


__all__ = ["in_cidr", "address_matches", "matches", "is_valid_address_spec"]
