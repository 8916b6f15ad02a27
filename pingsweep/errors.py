"""
Exceptions raised by the sweep engine.
"""


class PingSweepError(Exception):
    """Base class for all pingsweep errors."""


class ParseError(PingSweepError, ValueError):
    """The input is not a well-formed IPv4 CIDR block."""


class UnsupportedAddressFamily(PingSweepError, ValueError):
    """The input is a valid network, but not IPv4."""


class RangeTooSmall(PingSweepError, ValueError):
    """The block has no usable host addresses (/31 and /32)."""


class LogFileError(PingSweepError):
    """The result log could not be created or opened."""


class ConfigError(PingSweepError):
    """The configuration file exists but could not be read or parsed."""
