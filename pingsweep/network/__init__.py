"""
Network-related utilities for pingsweep.
"""

from .discovery import get_local_network, get_network_info
from .ping import ICMPPinger, get_pinger, probe, PROBE_METHODS
from .utils import int_to_ip, ip_to_int, is_ipv4_literal, last_octet

__all__ = [
    "get_local_network",
    "get_network_info",
    "ICMPPinger",
    "get_pinger",
    "probe",
    "PROBE_METHODS",
    "int_to_ip",
    "ip_to_int",
    "is_ipv4_literal",
    "last_octet",
]
