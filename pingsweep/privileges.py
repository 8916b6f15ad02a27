"""
Handles privilege checking for the ICMP transports.
"""
import os
import platform

try:
    import ctypes
except ImportError:
    ctypes = None


def is_admin() -> bool:
    """
    Checks if the application is running with administrator or root privileges.

    Raw ICMP sockets need these; without them the pinger falls back to
    unprivileged datagram sockets or the system ping command.
    """
    try:
        if platform.system() == "Windows":
            return ctypes is not None and ctypes.windll.shell32.IsUserAnAdmin() != 0
        elif hasattr(os, 'geteuid'):
            # On POSIX systems, UID 0 is root.
            return os.geteuid() == 0  # type: ignore[attr-defined]  # pylint: disable=no-member
        return False
    except AttributeError:
        return False


def elevation_hint() -> str:
    """Returns a platform specific hint for running with raw socket access."""
    if platform.system() == "Windows":
        return "Run the terminal as Administrator to use raw ICMP sockets."
    return "Run with 'sudo' to use raw ICMP sockets."
