"""
IPv4 default gateway lookup for local network discovery.

netifaces answers directly on most systems; the routing table printed by the
OS is parsed only when it cannot.
"""
import logging
import platform
import subprocess
from typing import List, Optional, Tuple

import netifaces
import psutil

VIRTUAL_HINTS = ('virtual', 'vmware', 'vbox', 'tailscale', 'vpn', 'loopback', 'docker', 'veth')
PHYSICAL_HINTS = ('ethernet', 'wi-fi', 'wlan', 'eth', 'en0')


def score_interface(iface_name: str) -> int:
    """Ranks an interface by how likely it is to be the LAN-facing one; down interfaces rank last."""
    stats = psutil.net_if_stats()
    if iface_name not in stats or not stats[iface_name].isup:
        return -1
    name = iface_name.lower()
    score = 100
    score -= 50 * sum(hint in name for hint in VIRTUAL_HINTS)
    score += 20 * sum(hint in name for hint in PHYSICAL_HINTS)
    return score


def _default_routes() -> List[Tuple[str, Optional[str]]]:
    """Returns (gateway, interface) pairs from the OS routing table."""
    if platform.system() == "Windows":
        command = ["route", "print", "-4"]
    else:
        command = ["ip", "-4", "route", "show", "default"]
    try:
        output = subprocess.run(command, capture_output=True, text=True, check=True).stdout
    except (FileNotFoundError, subprocess.CalledProcessError) as e:
        logging.error(f"Could not read the routing table with '{command[0]}': {e}")
        return []

    routes = []
    for line in output.splitlines():
        fields = line.split()
        if len(fields) >= 3 and fields[0] == "0.0.0.0":
            # Windows: destination, netmask, gateway, interface address, metric
            routes.append((fields[2], None))
        elif len(fields) >= 3 and fields[0] == "default" and fields[1] == "via":
            iface = fields[fields.index("dev") + 1] if "dev" in fields[:-1] else None
            routes.append((fields[2], iface))
    return routes


def get_default_gateway() -> Optional[str]:
    """Returns the IPv4 default gateway, or None if there is none."""
    try:
        default = netifaces.gateways().get('default', {})
        if netifaces.AF_INET in default:
            gateway = default[netifaces.AF_INET][0]
            logging.info(f"Found default gateway {gateway} via netifaces.")
            return gateway
    except (OSError, ValueError, KeyError) as e:
        logging.warning(f"netifaces could not report the default gateway: {e}")

    routes = _default_routes()
    logging.debug(f"Default routes from the system routing table: {routes}")
    if not routes:
        return None
    gateway, _ = max(routes, key=lambda route: score_interface(route[1]) if route[1] else 0)
    logging.info(f"Selected default gateway {gateway} from the routing table.")
    return gateway
