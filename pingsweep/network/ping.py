"""
Handles the ICMP echo probe used by the sweep.

Every transport answers a single question, "did this IPv4 address reply to
one echo request within the timeout?", and folds every failure (unreachable,
timeout, socket or command errors) into False.
"""
import itertools
import logging
import math
import os
import platform
import random
import select
import socket
import struct
import subprocess
import threading
import time
from dataclasses import dataclass
from typing import Optional

from ..privileges import is_admin
from .utils import is_ipv4_literal

ICMP_ECHO_REQUEST = 8
ICMP_ECHO_REPLY = 0

PROBE_METHODS = ("auto", "raw", "dgram", "system")


@dataclass
class ICMPPacket:
    type: int
    code: int
    checksum: int
    identifier: int
    sequence: int
    payload: bytes

    def pack(self) -> bytes:
        header = struct.pack('!BBHHH', self.type, self.code, 0, self.identifier, self.sequence)
        checksum = self._calculate_checksum(header + self.payload)
        header = struct.pack('!BBHHH', self.type, self.code, checksum, self.identifier, self.sequence)
        return header + self.payload

    @classmethod
    def unpack(cls, data: bytes) -> Optional["ICMPPacket"]:
        """Parses an ICMP message, skipping a leading IPv4 header if present."""
        if len(data) >= 20 and data[0] >> 4 == 4:
            data = data[(data[0] & 0x0F) * 4:]
        if len(data) < 8:
            return None
        type_, code, checksum, identifier, sequence = struct.unpack('!BBHHH', data[:8])
        return cls(type_, code, checksum, identifier, sequence, data[8:])

    @staticmethod
    def _calculate_checksum(data: bytes) -> int:
        if len(data) % 2:
            data += b'\x00'
        res = sum(struct.unpack('!%dH' % (len(data) // 2), data))
        res = (res >> 16) + (res & 0xffff)
        res += res >> 16
        return ~res & 0xffff


class ICMPPinger:
    """Sends one ICMP echo request per call, over IPv4 only."""

    def __init__(self, method: str = "auto"):
        if method not in PROBE_METHODS:
            raise ValueError(f"Unknown probe method '{method}'. Choose one of: {', '.join(PROBE_METHODS)}.")
        self.method = method
        self.identifier = random.randint(0, 0xffff)
        self._sequence = itertools.count(random.randint(0, 0xffff))
        self._lock = threading.Lock()
        self._resolved_method: Optional[str] = None if method == "auto" else method

    def _next_sequence(self) -> int:
        with self._lock:
            return next(self._sequence) & 0xffff

    def _transport(self) -> str:
        if self._resolved_method is None:
            self._resolved_method = "raw" if is_admin() else "dgram"
            logging.debug(f"Using '{self._resolved_method}' ICMP transport.")
        return self._resolved_method

    def ping(self, host: str, timeout_ms: int) -> bool:
        """Returns True if host answered an echo request within timeout_ms."""
        if not is_ipv4_literal(host):
            logging.debug(f"Refusing to probe non-IPv4 target '{host}'.")
            return False

        transport = self._transport()
        if transport == "system":
            return self._ping_command(host, timeout_ms)

        sock_type = socket.SOCK_RAW if transport == "raw" else socket.SOCK_DGRAM
        try:
            sock = socket.socket(socket.AF_INET, sock_type, socket.IPPROTO_ICMP)
        except OSError as e:
            if self.method != "auto":
                logging.debug(f"Could not open {transport} ICMP socket: {e}")
                return False
            logging.warning(f"Could not open {transport} ICMP socket ({e}); falling back to the system ping command.")
            self._resolved_method = "system"
            return self._ping_command(host, timeout_ms)

        with sock:
            return self._ping_socket(sock, host, timeout_ms, match_identifier=transport == "raw")

    def _ping_socket(self, sock: socket.socket, host: str, timeout_ms: int, match_identifier: bool) -> bool:
        sequence = self._next_sequence()
        packet = ICMPPacket(
            type=ICMP_ECHO_REQUEST,
            code=0,
            checksum=0,
            identifier=self.identifier,
            sequence=sequence,
            payload=struct.pack('!d', time.time())
        )
        deadline = time.monotonic() + timeout_ms / 1000.0
        try:
            sock.sendto(packet.pack(), (host, 0))
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                ready, _, _ = select.select([sock], [], [], remaining)
                if not ready:
                    return False
                data, addr = sock.recvfrom(1024)
                if addr[0] != host:
                    continue
                reply = ICMPPacket.unpack(data)
                if reply is None or reply.type != ICMP_ECHO_REPLY or reply.sequence != sequence:
                    continue
                # datagram sockets get their identifier rewritten by the kernel
                if match_identifier and reply.identifier != self.identifier:
                    continue
                return True
        except (socket.timeout, OSError) as e:
            logging.debug(f"ICMP probe to {host} failed: {e}")
            return False

    def _ping_command(self, host: str, timeout_ms: int) -> bool:
        system = platform.system()
        if system == "Windows":
            command = ["ping", "-4", "-n", "1", "-w", str(timeout_ms), host]
        elif system == "Darwin":
            command = ["ping", "-c", "1", "-W", str(timeout_ms), host]
        else:
            command = ["ping", "-c", "1", "-W", str(max(1, math.ceil(timeout_ms / 1000))), host]

        creationflags = getattr(subprocess, "CREATE_NO_WINDOW", 0)
        try:
            result = subprocess.run(
                command,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                timeout=timeout_ms / 1000.0 + 2,
                creationflags=creationflags,
                env={**os.environ, "LC_ALL": "C"},
            )
        except (subprocess.TimeoutExpired, FileNotFoundError, OSError) as e:
            logging.debug(f"System ping to {host} failed: {e}")
            return False
        return result.returncode == 0


_default_pinger: Optional[ICMPPinger] = None


def get_pinger(method: str = "auto") -> ICMPPinger:
    """Returns the shared pinger, recreating it if a different method is requested."""
    global _default_pinger
    if _default_pinger is None or _default_pinger.method != method:
        _default_pinger = ICMPPinger(method)
    return _default_pinger


def probe(address: str, timeout_ms: int) -> bool:
    """Reachability check for one IPv4 address; never raises for unreachable hosts."""
    return get_pinger().ping(address, timeout_ms)
