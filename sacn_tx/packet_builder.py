"""
Packet Builder - E1.31 (streaming ACN) data packet encoding

Turns a universe number, source identity, sequence number, slot payload and
priority into the exact datagram a conformant sACN receiver expects. The
packet is three nested PDUs, each starting with a flags-and-length word
(high nibble 0x7, low 12 bits = bytes from the start of that word to the end
of the packet):

    Root layer    (bytes   0-37)  preamble, postamble, ACN packet id,
                                  flags/length, vector 0x00000004, CID
    Framing layer (bytes  38-114) flags/length, vector 0x00000002,
                                  source name (64), priority, sync address,
                                  sequence number, options, universe
    DMP layer     (bytes 115-)    flags/length, vector 0x02, address/data
                                  type 0xA1, first property address,
                                  address increment, property value count,
                                  start code, slot data

All multi-byte fields are big-endian. Building is pure: the same inputs
always produce the same bytes.

Author: Interaction Framework Team
License: MIT
"""

import struct
import uuid
from dataclasses import dataclass
from typing import Iterable, Union

from .errors import EncodingError

SACN_PORT = 5568

ACN_PACKET_IDENTIFIER = b"ASC-E1.17\x00\x00\x00"
PREAMBLE_SIZE = 0x0010
POSTAMBLE_SIZE = 0x0000

VECTOR_ROOT_E131_DATA = 0x00000004
VECTOR_E131_DATA_PACKET = 0x00000002
VECTOR_DMP_SET_PROPERTY = 0x02
DMP_ADDRESS_TYPE_DATA_TYPE = 0xA1
DMP_FIRST_PROPERTY_ADDRESS = 0x0000
DMP_ADDRESS_INCREMENT = 0x0001

FLAGS = 0x7000
LENGTH_MASK = 0x0FFF

SOURCE_NAME_LENGTH = 64
CID_LENGTH = 16
DMX_START_CODE = 0x00
MIN_SLOTS = 1
MAX_SLOTS = 512

MIN_UNIVERSE = 1
MAX_UNIVERSE = 63999
DEFAULT_PRIORITY = 100
MAX_PRIORITY = 200
SEQUENCE_MODULO = 256

# Options byte bits; preview and stream-terminate are never set by this sender.
OPTION_NONE = 0x00
SYNC_ADDRESS_NONE = 0x0000

# Everything up to and including the start code.
HEADER_FORMAT = struct.Struct(
    ">"
    "HH12sHI16s"   # root layer
    "HI64sBHBBH"   # framing layer
    "HBBHHHB"      # DMP layer + start code
)
HEADER_SIZE = HEADER_FORMAT.size  # 126

ROOT_LAYER_OFFSET = 16
FRAMING_LAYER_OFFSET = 38
DMP_LAYER_OFFSET = 115
SLOT_DATA_OFFSET = HEADER_SIZE

Payload = Union[bytes, bytearray, memoryview, Iterable[int]]


def validate_universe(universe: int) -> int:
    if isinstance(universe, bool) or not isinstance(universe, int):
        raise EncodingError(f"Universe must be an integer, got {type(universe).__name__}")
    if not MIN_UNIVERSE <= universe <= MAX_UNIVERSE:
        raise EncodingError(f"Universe {universe} outside {MIN_UNIVERSE}-{MAX_UNIVERSE}")
    return universe


def validate_priority(priority: int) -> int:
    if isinstance(priority, bool) or not isinstance(priority, int):
        raise EncodingError(f"Priority must be an integer, got {type(priority).__name__}")
    if not 0 <= priority <= MAX_PRIORITY:
        raise EncodingError(f"Priority {priority} outside 0-{MAX_PRIORITY}")
    return priority


def validate_sequence(sequence: int) -> int:
    if isinstance(sequence, bool) or not isinstance(sequence, int):
        raise EncodingError(f"Sequence number must be an integer, got {type(sequence).__name__}")
    if not 0 <= sequence < SEQUENCE_MODULO:
        raise EncodingError(f"Sequence number {sequence} outside 0-{SEQUENCE_MODULO - 1}")
    return sequence


def validate_payload(payload: Payload) -> bytes:
    """
    Normalise slot data to bytes and check its length.

    Accepts any bytes-like object or an iterable of ints in 0-255.

    Raises:
        EncodingError: if the payload is empty, longer than 512 slots,
            or holds values that are not bytes
    """
    if payload is None:
        raise EncodingError("Payload is required")
    if isinstance(payload, (str, int)):
        raise EncodingError(f"Payload must be bytes or a sequence of ints, got {type(payload).__name__}")
    try:
        data = bytes(payload)
    except (TypeError, ValueError) as e:
        raise EncodingError(f"Invalid payload: {e}") from e
    if not MIN_SLOTS <= len(data) <= MAX_SLOTS:
        raise EncodingError(f"Payload length {len(data)} outside {MIN_SLOTS}-{MAX_SLOTS}")
    return data


def encode_source_name(name: str) -> bytes:
    """UTF-8 encode a source name into the fixed 64 byte, null-padded field."""
    if not isinstance(name, str):
        raise EncodingError("Source name must be a string")
    encoded = name.encode("utf-8")[:SOURCE_NAME_LENGTH]
    return encoded.ljust(SOURCE_NAME_LENGTH, b"\x00")


def _cid_bytes(cid: Union[uuid.UUID, bytes, bytearray]) -> bytes:
    if isinstance(cid, uuid.UUID):
        return cid.bytes
    if isinstance(cid, (bytes, bytearray)) and len(cid) == CID_LENGTH:
        return bytes(cid)
    raise EncodingError("CID must be a UUID or exactly 16 bytes")


@dataclass(frozen=True)
class SourceIdentity:
    """
    The transmitting source: a 16 byte CID plus a human-readable name.

    The same identity is stamped on every packet a sender emits, for every
    universe.
    """
    cid: bytes
    name: str

    def __post_init__(self):
        if self.cid is None:
            raise EncodingError("CID is required")
        if self.name is None:
            raise EncodingError("Source name is required")
        if not isinstance(self.name, str):
            raise EncodingError("Source name must be a string")
        object.__setattr__(self, 'cid', _cid_bytes(self.cid))

    @classmethod
    def generate(cls, name: str) -> 'SourceIdentity':
        """Create an identity with a fresh random CID."""
        return cls(cid=uuid.uuid4().bytes, name=name)

    @property
    def cid_uuid(self) -> uuid.UUID:
        return uuid.UUID(bytes=self.cid)

    @property
    def encoded_name(self) -> bytes:
        return encode_source_name(self.name)


def flags_and_length(length: int) -> int:
    """Pack a PDU length into the 16 bit flags-and-length field."""
    if not 0 <= length <= LENGTH_MASK:
        raise EncodingError(f"PDU length {length} does not fit in 12 bits")
    return FLAGS | length


@dataclass(frozen=True)
class DataPacket:
    """One E1.31 data packet, built fresh for every send."""
    universe: int
    source: SourceIdentity
    sequence: int
    payload: bytes
    priority: int = DEFAULT_PRIORITY

    def validate(self) -> None:
        if not isinstance(self.source, SourceIdentity):
            raise EncodingError("Source identity is required")
        validate_universe(self.universe)
        validate_priority(self.priority)
        validate_sequence(self.sequence)
        validate_payload(self.payload)

    @property
    def size(self) -> int:
        return HEADER_SIZE + len(self.payload)

    def to_bytes(self) -> bytes:
        """Serialize the packet to its wire form."""
        self.validate()
        payload = validate_payload(self.payload)
        total = HEADER_SIZE + len(payload)

        header = HEADER_FORMAT.pack(
            # Root layer
            PREAMBLE_SIZE,
            POSTAMBLE_SIZE,
            ACN_PACKET_IDENTIFIER,
            flags_and_length(total - ROOT_LAYER_OFFSET),
            VECTOR_ROOT_E131_DATA,
            self.source.cid,
            # Framing layer
            flags_and_length(total - FRAMING_LAYER_OFFSET),
            VECTOR_E131_DATA_PACKET,
            self.source.encoded_name,
            self.priority,
            SYNC_ADDRESS_NONE,
            self.sequence,
            OPTION_NONE,
            self.universe,
            # DMP layer
            flags_and_length(total - DMP_LAYER_OFFSET),
            VECTOR_DMP_SET_PROPERTY,
            DMP_ADDRESS_TYPE_DATA_TYPE,
            DMP_FIRST_PROPERTY_ADDRESS,
            DMP_ADDRESS_INCREMENT,
            len(payload) + 1,  # slot 0 is the start code
            DMX_START_CODE,
        )
        return header + payload


def build_packet(universe: int, source: SourceIdentity, sequence: int,
                 payload: Payload, priority: int = DEFAULT_PRIORITY) -> bytes:
    """
    Build the wire bytes for a single data packet.

    Args:
        universe: Universe number, 1-63999
        source: Identity of the transmitting source
        sequence: Sequence number for this universe, 0-255
        payload: 1-512 slot values
        priority: 0-200, defaults to 100

    Returns:
        bytes: The complete datagram (126 + len(payload) bytes)

    Raises:
        EncodingError: if any field is out of range or missing
    """
    if source is None:
        raise EncodingError("Source identity is required")
    packet = DataPacket(
        universe=universe,
        source=source,
        sequence=sequence,
        payload=validate_payload(payload),
        priority=priority,
    )
    return packet.to_bytes()
