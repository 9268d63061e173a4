"""
Destination addressing for sACN.

Multicast universes map onto 239.255.0.0/16: the universe's high byte is the
third octet and its low byte the fourth, so every sender and receiver
computes the same group for the same universe.
"""

import ipaddress
import socket
from typing import Tuple

import psutil

from .errors import AddressFamilyError
from .packet_builder import SACN_PORT, validate_universe

MULTICAST_BASE = ipaddress.IPv4Address("239.255.0.0")
MULTICAST_NETWORK = ipaddress.IPv4Network("239.255.0.0/16")


def multicast_address(universe: int) -> ipaddress.IPv4Address:
    """Return the multicast group for a universe (239.255.<hi>.<lo>)."""
    validate_universe(universe)
    # Adding the 16 bit universe puts its high byte in octet 3, low byte in octet 4.
    return MULTICAST_BASE + universe


def multicast_endpoint(universe: int, port: int = SACN_PORT) -> Tuple[str, int]:
    return str(multicast_address(universe)), port


def interface_address(name: str) -> str:
    """
    Look up the first IPv4 address assigned to a network interface.

    Args:
        name: Interface name as the OS reports it (e.g. "eth0", "en0")

    Returns:
        str: Dotted-quad IPv4 address

    Raises:
        AddressFamilyError: if the interface is unknown or has no IPv4 address
    """
    interfaces = psutil.net_if_addrs()
    if name not in interfaces:
        raise AddressFamilyError(f"Unknown network interface: {name}")
    for addr in interfaces[name]:
        if addr.family == socket.AF_INET:
            return addr.address
    raise AddressFamilyError(f"Interface {name} has no IPv4 address")
