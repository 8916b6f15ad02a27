"""
Handles discovery of the local IPv4 network, used to sweep "the LAN I am on".
"""
import ipaddress
import logging
import socket
from typing import Dict, List, Optional

import psutil

from ..routing import get_default_gateway, score_interface


def _ipv4_networks(addrs) -> List[ipaddress.IPv4Network]:
    networks = []
    for addr in addrs:
        if addr.family == socket.AF_INET and addr.netmask:
            try:
                networks.append(ipaddress.ip_network(f"{addr.address}/{addr.netmask}", strict=False))
            except ValueError:
                continue
    return networks


def get_network_info() -> Dict[str, Optional[str]]:
    """
    Returns the primary interface's IPv4 address, netmask and network.

    The primary interface is the one whose network contains the default
    gateway; failing that, the best-scored interface that is up.
    """
    info: Dict[str, Optional[str]] = {
        "interface": None,
        "primary_ipv4": None,
        "subnet_mask": None,
        "network": None,
        "gateway": None,
    }

    try:
        gateway = get_default_gateway()
        info["gateway"] = gateway
        addrs = psutil.net_if_addrs()
        stats = psutil.net_if_stats()

        candidates = [
            iface for iface in addrs
            if iface in stats and stats[iface].isup and not iface.startswith('lo') and _ipv4_networks(addrs[iface])
        ]

        best_iface = None
        if gateway:
            for iface in candidates:
                if any(ipaddress.ip_address(gateway) in net for net in _ipv4_networks(addrs[iface])):
                    best_iface = iface
                    break
        if best_iface is None and candidates:
            logging.warning("Could not find a gateway-associated interface. Scoring all interfaces.")
            best_iface = max(candidates, key=score_interface)

        if best_iface:
            for addr in addrs[best_iface]:
                if addr.family == socket.AF_INET and addr.netmask:
                    info["interface"] = best_iface
                    info["primary_ipv4"] = addr.address
                    info["subnet_mask"] = addr.netmask
                    info["network"] = str(ipaddress.ip_network(f"{addr.address}/{addr.netmask}", strict=False))
                    break
    except (OSError, ValueError) as e:
        logging.error(f"An error occurred while retrieving network info with psutil: {e}")

    if not info["network"]:
        logging.error("Failed to determine the local IPv4 network.")
    return info


def get_local_network() -> Optional[str]:
    """Returns the CIDR of the primary local IPv4 network, or None."""
    return get_network_info()["network"]
