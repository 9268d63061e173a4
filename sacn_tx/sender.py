"""
sACN Sender - per-universe sequencing and dispatch

The sender owns the sequence counters for every universe it transmits on,
builds a fresh packet for each send and hands it to its UDP transport, either
to the universe's multicast group or to an explicit unicast host.

Sequence policy: once a send's inputs validate, its sequence number is
consumed even if the transport then fails. Receivers see a gap after a
failed send, never a repeated number.

Author: Interaction Framework Team
License: MIT
"""

from dataclasses import dataclass
from typing import Optional

from .addressing import multicast_address
from .errors import EncodingError, TransmissionError
from .packet_builder import (
    DEFAULT_PRIORITY,
    SACN_PORT,
    Payload,
    SourceIdentity,
    build_packet,
    validate_payload,
    validate_priority,
    validate_universe,
)
from .sequence import SequenceTracker
from .transport import InterfaceSpec, UdpTransport


def validate_port(port: int) -> int:
    if isinstance(port, bool) or not isinstance(port, int):
        raise EncodingError(f"Port must be an integer, got {type(port).__name__}")
    if not 0 < port <= 65535:
        raise EncodingError(f"Port {port} outside 1-65535")
    return port


@dataclass(frozen=True)
class Destination:
    """Where a packet goes: the universe's multicast group or a unicast host."""
    host: Optional[str] = None

    @classmethod
    def multicast(cls) -> 'Destination':
        return cls()

    @classmethod
    def unicast(cls, host: str) -> 'Destination':
        if not isinstance(host, str) or not host:
            raise EncodingError(f"Unicast destination needs a host name, got {host!r}")
        return cls(host=host)

    @property
    def is_multicast(self) -> bool:
        return self.host is None


class SACNSender:
    """
    Sends DMX universes as E1.31 data packets.

    Safe to share between threads: sends on the same universe serialize only
    their sequence number fetch, sends on different universes do not contend.
    Configure the multicast interface before steady-state sending starts.
    """

    def __init__(self, source: SourceIdentity, port: int = SACN_PORT,
                 transport: Optional[UdpTransport] = None,
                 default_priority: int = DEFAULT_PRIORITY,
                 unicast_host: Optional[str] = None,
                 multicast_interface: Optional[InterfaceSpec] = None):
        """
        Args:
            source: CID and name stamped on every packet
            port: Destination UDP port (default 5568)
            transport: Transport to send through; one is created and owned
                by the sender when omitted
            default_priority: Priority used when a send does not give one
            unicast_host: When set, send() without a destination goes here
                instead of to the multicast group
            multicast_interface: Optional outgoing multicast interface
        """
        if not isinstance(source, SourceIdentity):
            raise EncodingError("A SourceIdentity is required")
        if unicast_host is not None and (not isinstance(unicast_host, str) or not unicast_host):
            raise EncodingError(f"Unicast host must be a host name, got {unicast_host!r}")
        self.source = source
        self.port = validate_port(port)
        self.default_priority = validate_priority(default_priority)
        self.unicast_host = unicast_host
        self.sequences = SequenceTracker()
        self._owns_transport = transport is None
        self.transport = transport if transport is not None else UdpTransport()
        self._closed = False
        if multicast_interface is not None:
            self.set_multicast_interface(multicast_interface)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def default_destination(self) -> Destination:
        if self.unicast_host:
            return Destination.unicast(self.unicast_host)
        return Destination.multicast()

    def send(self, universe: int, payload: Payload,
             destination: Optional[Destination] = None,
             priority: Optional[int] = None) -> int:
        """
        Send one frame of slot data on a universe.

        Args:
            universe: Universe number, 1-63999
            payload: 1-512 slot values
            destination: Multicast or unicast target; defaults to the
                sender's configured default
            priority: 0-200; defaults to the sender's default priority

        Returns:
            int: The sequence number the packet carried

        Raises:
            EncodingError: on invalid input; no sequence number is consumed
            TransmissionError: if resolution or the send fails; the
                sequence number stays consumed
        """
        if self._closed:
            raise TransmissionError("Sender is closed")
        if destination is None:
            destination = self.default_destination
        if priority is None:
            priority = self.default_priority

        validate_universe(universe)
        validate_priority(priority)
        data = validate_payload(payload)

        sequence = self.sequences.next(universe)
        packet = build_packet(universe, self.source, sequence, data, priority)

        if destination.is_multicast:
            self.transport.send_to(packet, str(multicast_address(universe)), self.port)
        else:
            self.transport.send_to_host(packet, destination.host, self.port)
        return sequence

    def send_multicast(self, universe: int, payload: Payload, priority: Optional[int] = None) -> int:
        """Send to the universe's multicast group (239.255.<hi>.<lo>)."""
        return self.send(universe, payload, Destination.multicast(), priority)

    def send_unicast(self, host: str, universe: int, payload: Payload, priority: Optional[int] = None) -> int:
        """Send to a single host, resolving its name through the transport."""
        return self.send(universe, payload, Destination.unicast(host), priority)

    def set_multicast_interface(self, interface: InterfaceSpec):
        """Pin outgoing multicast to an interface, by local address or OS index."""
        self.transport.set_multicast_interface(interface)

    def sequence_for(self, universe: int) -> int:
        """Sequence number the next packet on a universe will carry."""
        return self.sequences.peek(universe)

    def close(self):
        if self._closed:
            return
        self._closed = True
        if self._owns_transport:
            self.transport.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
