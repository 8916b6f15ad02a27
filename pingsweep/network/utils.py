"""
Core IPv4 address helpers.

Addresses are handled as 32-bit unsigned integers internally and only turned
into dotted-decimal strings at the formatting boundary.
"""
import socket
from functools import lru_cache

IPV4_MAX = 0xFFFFFFFF


@lru_cache(maxsize=128)
def is_ipv4_literal(host: str) -> bool:
    """Checks if a string is a valid dotted-quad IPv4 literal."""
    try:
        socket.inet_pton(socket.AF_INET, host)
        return True
    except (OSError, ValueError):
        return False


def ip_to_int(address: str) -> int:
    """Converts a dotted-quad string into its 32-bit integer value."""
    return int.from_bytes(socket.inet_aton(address), "big")


def int_to_ip(value: int) -> str:
    """Converts a 32-bit integer into dotted-quad notation."""
    if not 0 <= value <= IPV4_MAX:
        raise ValueError(f"{value} is outside the IPv4 address space")
    return socket.inet_ntoa(value.to_bytes(4, "big"))


def last_octet(address: str) -> int:
    """Returns the numeric value of the last dotted-decimal octet."""
    tail = address.rsplit(".", 1)[-1]
    try:
        return int(tail)
    except ValueError:
        return 0
