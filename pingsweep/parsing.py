"""
Handles parsing of CIDR input and expansion into host address ranges.
"""
from __future__ import annotations
import ipaddress
import re
from typing import List, Tuple

from .errors import ParseError, RangeTooSmall, UnsupportedAddressFamily
from .network.utils import int_to_ip, ip_to_int

CHUNK_PREFIX = 24
CHUNK_SIZE = 1 << (32 - CHUNK_PREFIX)

_SEPARATORS = re.compile(r"[,\s]+")


def split_cidrs(text: str) -> List[str]:
    """Splits a comma and/or whitespace separated CIDR list, keeping order."""
    return [part.strip() for part in _SEPARATORS.split(text or "") if part.strip()]


def parse_cidr(cidr: str) -> Tuple[int, int]:
    """
    Parses an IPv4 CIDR block into (network address as int, prefix length).

    Host bits in the address part are allowed and masked off, so
    '10.0.0.7/24' describes the same block as '10.0.0.0/24'.
    """
    text = cidr.strip()
    address, sep, prefix_str = text.partition("/")
    if not sep or not address:
        raise ParseError(f"'{cidr}' is not in CIDR notation (expected address/prefix).")

    try:
        ip = ipaddress.ip_address(address)
    except ValueError:
        raise ParseError(f"'{address}' is not a valid IP address.") from None
    if ip.version != 4:
        raise UnsupportedAddressFamily(f"IPv6 is not supported, please use an IPv4 CIDR instead of '{cidr}'.")

    if not prefix_str.isdigit() or not 0 <= int(prefix_str) <= 32:
        raise ParseError(f"Invalid prefix length in '{cidr}'. Use a number between 0 and 32.")
    prefix = int(prefix_str)

    mask = (0xFFFFFFFF << (32 - prefix)) & 0xFFFFFFFF
    return ip_to_int(str(ip)) & mask, prefix


def _bounds(network: int, prefix: int) -> Tuple[int, int]:
    """Returns the first (network) and last (broadcast) address of a block."""
    return network, network + (1 << (32 - prefix)) - 1


def expand(cidr: str) -> List[str]:
    """
    Returns the usable host addresses of a CIDR block in ascending order.

    The network and broadcast addresses are excluded, which leaves nothing to
    scan for /31 and /32 blocks; those raise RangeTooSmall.
    """
    network, prefix = parse_cidr(cidr)
    first, last = _bounds(network, prefix)
    if last - first + 1 < 4:
        raise RangeTooSmall(f"Network {cidr} is too small for scanning (no usable host addresses).")
    return [int_to_ip(value) for value in range(first + 1, last)]


def subdivide(cidr: str) -> List[str]:
    """
    Splits a block wider than a /24 into contiguous, aligned /24 chunks.

    Blocks that are already /24 or narrower are returned unchanged as a
    single-element list.
    """
    network, prefix = parse_cidr(cidr)
    if prefix >= CHUNK_PREFIX:
        return [cidr]

    first, last = _bounds(network, prefix)
    chunks = []
    current = first
    while first <= current <= last:
        chunks.append(f"{int_to_ip(current)}/{CHUNK_PREFIX}")
        current += CHUNK_SIZE
    return chunks
