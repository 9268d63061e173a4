"""
sacn_tx - streaming ACN (E1.31) sender

Encodes DMX universes as E1.31 data packets and sends them over UDP to the
universe's multicast group or to a unicast host, keeping an independent
sequence number per universe.

Key Components:
- build_packet / DataPacket: Byte-exact E1.31 data packet encoding
- SACNSender: Per-universe sequencing, destination resolution and dispatch
- UdpTransport: Owned UDP socket with multicast interface selection
- ConfigManager: JSON configuration with a persistent source CID
- FramePlayer: CSV chase playback at a fixed frame rate

Usage:
    from sacn_tx import SACNSender, SourceIdentity

    with SACNSender(SourceIdentity.generate("Lighting Desk")) as sender:
        sender.send_multicast(1, [255, 0, 128])
        sender.send_unicast("10.0.0.50", 2, bytes(512), priority=150)

Author: Interaction Framework Team
License: MIT
"""

from .errors import (
    SACNError,
    EncodingError,
    AddressFamilyError,
    TransmissionError
)

from .packet_builder import (
    SACN_PORT,
    DEFAULT_PRIORITY,
    MAX_SLOTS,
    SourceIdentity,
    DataPacket,
    build_packet,
    encode_source_name
)

from .addressing import (
    multicast_address,
    multicast_endpoint,
    interface_address
)

from .sequence import SequenceTracker

from .transport import UdpTransport

from .sender import (
    Destination,
    SACNSender
)

from .config import (
    SenderConfig,
    ConfigManager,
    build_sender
)

from .frame_player import (
    FramePlayer,
    load_frames_csv
)

__all__ = [
    # Errors
    'SACNError',
    'EncodingError',
    'AddressFamilyError',
    'TransmissionError',

    # Packet Builder
    'SACN_PORT',
    'DEFAULT_PRIORITY',
    'MAX_SLOTS',
    'SourceIdentity',
    'DataPacket',
    'build_packet',
    'encode_source_name',

    # Addressing
    'multicast_address',
    'multicast_endpoint',
    'interface_address',

    # Sender
    'SequenceTracker',
    'UdpTransport',
    'Destination',
    'SACNSender',

    # Configuration
    'SenderConfig',
    'ConfigManager',
    'build_sender',

    # Playback
    'FramePlayer',
    'load_frames_csv'
]

# Version info
__version__ = "1.0.0"
__author__ = "Interaction Framework Team"
