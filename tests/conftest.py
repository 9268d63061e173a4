"""
pytest configuration file for sacn_tx tests.
Contains fixtures, a recording transport and a reference decoder for the
E1.31 data packet layout.
"""

import struct
import sys
import threading
import uuid
from pathlib import Path

import pytest

# Add the project root to the Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sacn_tx.errors import TransmissionError
from sacn_tx.packet_builder import SourceIdentity
from sacn_tx.sender import SACNSender

TEST_CID = uuid.UUID("12345678-9abc-def0-1234-56789abcdef0")

HEADER = struct.Struct(">HH12sHI16sHI64sBHBBHHBBHHHB")


def decode_packet(data: bytes) -> dict:
    """Decode a data packet field by field following the documented layout."""
    (preamble, postamble, acn_id, root_fl, root_vector, cid,
     framing_fl, framing_vector, name, priority, sync_address, sequence, options, universe,
     dmp_fl, dmp_vector, address_type, first_address, increment, value_count,
     start_code) = HEADER.unpack_from(data)
    return {
        'preamble': preamble,
        'postamble': postamble,
        'acn_id': acn_id,
        'root_flags': root_fl >> 12,
        'root_length': root_fl & 0x0FFF,
        'root_vector': root_vector,
        'cid': cid,
        'framing_flags': framing_fl >> 12,
        'framing_length': framing_fl & 0x0FFF,
        'framing_vector': framing_vector,
        'source_name': name.rstrip(b"\x00").decode("utf-8", errors="ignore"),
        'priority': priority,
        'sync_address': sync_address,
        'sequence': sequence,
        'options': options,
        'universe': universe,
        'dmp_flags': dmp_fl >> 12,
        'dmp_length': dmp_fl & 0x0FFF,
        'dmp_vector': dmp_vector,
        'address_type': address_type,
        'first_address': first_address,
        'increment': increment,
        'value_count': value_count,
        'start_code': start_code,
        'payload': data[HEADER.size:],
    }


class RecordingTransport:
    """Transport double that records datagrams instead of sending them."""

    def __init__(self, fail_with=None):
        self.sent = []
        self.interfaces = []
        self.resolved = []
        self.fail_with = fail_with
        self.closed = False
        self._lock = threading.Lock()

    def send_to(self, data, address, port):
        if self.fail_with is not None:
            raise self.fail_with
        with self._lock:
            self.sent.append((data, address, port))
        return len(data)

    def resolve(self, host):
        if host == "unresolvable.invalid":
            raise TransmissionError(f"Could not resolve {host}")
        with self._lock:
            self.resolved.append(host)
        return "10.0.0.50" if host == "fixture.local" else host

    def send_to_host(self, data, host, port):
        return self.send_to(data, self.resolve(host), port)

    def set_multicast_interface(self, interface):
        self.interfaces.append(interface)

    def close(self):
        self.closed = True

    def sequences(self, universe=None):
        return [decode_packet(d)['sequence'] for d, _, _ in self.sent
                if universe is None or decode_packet(d)['universe'] == universe]


@pytest.fixture
def source():
    return SourceIdentity(cid=TEST_CID, name="Test")


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def sender(source, transport):
    with SACNSender(source, transport=transport) as s:
        yield s
