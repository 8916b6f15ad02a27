"""
pingsweep - bounded-concurrency ICMP sweeps over IPv4 CIDR blocks.
"""

__version__ = "1.0.0"
