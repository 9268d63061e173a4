"""
UDP transport used by the sender.

Owns a single datagram socket for its whole lifetime. The socket is opened in
the constructor and released by close() or by leaving a ``with`` block;
nothing relies on garbage collection to free it.
"""

import ipaddress
import socket
import struct
import sys
from typing import Union

from .errors import AddressFamilyError, TransmissionError

InterfaceSpec = Union[str, int, ipaddress.IPv4Address, ipaddress.IPv6Address]


class UdpTransport:
    """Thin wrapper around a UDP socket with multicast interface options."""

    def __init__(self, family: int = socket.AF_INET):
        if family not in (socket.AF_INET, socket.AF_INET6):
            raise AddressFamilyError(f"Unsupported address family: {family}")
        self.family = family
        self._sock = socket.socket(family, socket.SOCK_DGRAM)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self):
        if self._closed:
            raise TransmissionError("Transport is closed")

    def send_to(self, data: bytes, address: str, port: int) -> int:
        """Send one datagram to an already resolved address."""
        self._check_open()
        try:
            return self._sock.sendto(data, (address, port))
        except (OSError, OverflowError) as e:
            raise TransmissionError(f"Send to {address}:{port} failed: {e}") from e

    def resolve(self, host: str) -> str:
        """Resolve a hostname (or literal address) to an address of this transport's family."""
        try:
            infos = socket.getaddrinfo(host, None, self.family, socket.SOCK_DGRAM)
        except (socket.gaierror, UnicodeError, TypeError) as e:
            raise TransmissionError(f"Could not resolve {host}: {e}") from e
        if not infos:
            raise TransmissionError(f"Could not resolve {host}: no addresses")
        return infos[0][4][0]

    def send_to_host(self, data: bytes, host: str, port: int) -> int:
        return self.send_to(data, self.resolve(host), port)

    def set_multicast_interface(self, interface: InterfaceSpec):
        """
        Pin the interface used for outgoing multicast.

        Args:
            interface: Local address of the interface (IPv4 or IPv6, as a
                string or ipaddress object) or the OS interface index

        Raises:
            AddressFamilyError: if the value is not an address or index, or its
                family does not match this transport's socket
            TransmissionError: if the OS rejects the socket option
        """
        self._check_open()
        if isinstance(interface, bool):
            raise AddressFamilyError("Interface must be an address or an index, not a bool")
        if isinstance(interface, int):
            level, option, value = self._index_option(interface)
        else:
            level, option, value = self._address_option(interface)
        try:
            self._sock.setsockopt(level, option, value)
        except OSError as e:
            raise TransmissionError(f"Unable to set the multicast interface: {e}") from e

    def _address_option(self, interface):
        try:
            address = ipaddress.ip_address(interface)
        except ValueError as e:
            raise AddressFamilyError(f"Unsupported interface address: {interface!r}") from e

        if address.version == 4:
            if self.family != socket.AF_INET:
                raise AddressFamilyError("IPv4 interface on an IPv6 transport")
            return socket.IPPROTO_IP, socket.IP_MULTICAST_IF, address.packed

        if self.family != socket.AF_INET6:
            raise AddressFamilyError("IPv6 interface on an IPv4 transport")
        scope = address.scope_id
        if not scope:
            index = 0
        elif scope.isdigit():
            index = int(scope)
        else:
            try:
                index = socket.if_nametoindex(scope)
            except OSError as e:
                raise AddressFamilyError(f"Unknown IPv6 scope: {scope}") from e
        return socket.IPPROTO_IPV6, socket.IPV6_MULTICAST_IF, struct.pack("@I", index)

    def _index_option(self, index: int):
        if index < 0:
            raise AddressFamilyError(f"Interface index must not be negative: {index}")
        if self.family == socket.AF_INET6:
            return socket.IPPROTO_IPV6, socket.IPV6_MULTICAST_IF, struct.pack("@I", index)
        if sys.platform == "win32":
            # Windows takes the index in network order in place of an address.
            return socket.IPPROTO_IP, socket.IP_MULTICAST_IF, struct.pack("!I", index)
        # struct ip_mreqn: multiaddr, address, ifindex
        return socket.IPPROTO_IP, socket.IP_MULTICAST_IF, struct.pack("@4s4si", b"\x00" * 4, b"\x00" * 4, index)

    def set_multicast_ttl(self, ttl: int):
        self._check_open()
        try:
            if self.family == socket.AF_INET6:
                self._sock.setsockopt(socket.IPPROTO_IPV6, socket.IPV6_MULTICAST_HOPS, ttl)
            else:
                self._sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, ttl)
        except OSError as e:
            raise TransmissionError(f"Unable to set multicast TTL: {e}") from e

    def set_multicast_loopback(self, enabled: bool):
        self._check_open()
        try:
            if self.family == socket.AF_INET6:
                self._sock.setsockopt(socket.IPPROTO_IPV6, socket.IPV6_MULTICAST_LOOP, int(enabled))
            else:
                self._sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_LOOP, int(enabled))
        except OSError as e:
            raise TransmissionError(f"Unable to set multicast loopback: {e}") from e

    def close(self):
        if self._closed:
            return
        self._closed = True
        self._sock.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
