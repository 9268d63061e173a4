"""
Test suite for the UDP transport.
Uses real sockets on the loopback interface.
"""

import socket
import sys
from unittest.mock import patch

import pytest

from sacn_tx.errors import AddressFamilyError, TransmissionError
from sacn_tx.transport import UdpTransport


@pytest.fixture
def receiver():
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(2.0)
    yield sock
    sock.close()


class TestUdpTransport:
    """Test sending, resolution and socket lifecycle."""

    def test_send_to_delivers_datagram(self, receiver):
        port = receiver.getsockname()[1]
        with UdpTransport() as transport:
            sent = transport.send_to(b"hello", "127.0.0.1", port)
        data, _ = receiver.recvfrom(1024)
        assert sent == 5
        assert data == b"hello"

    def test_send_to_host_resolves(self, receiver):
        port = receiver.getsockname()[1]
        with UdpTransport() as transport:
            transport.send_to_host(b"abc", "127.0.0.1", port)
        assert receiver.recvfrom(1024)[0] == b"abc"

    def test_resolution_failure(self):
        with UdpTransport() as transport:
            with patch('sacn_tx.transport.socket.getaddrinfo', side_effect=socket.gaierror(-2, "Name or service not known")):
                with pytest.raises(TransmissionError) as excinfo:
                    transport.resolve("no-such-host.invalid")
        assert isinstance(excinfo.value.__cause__, socket.gaierror)

    def test_send_failure_is_transmission_error(self):
        transport = UdpTransport()
        try:
            with patch.object(transport, '_sock') as fake_sock:
                fake_sock.sendto.side_effect = OSError(101, "Network is unreachable")
                with pytest.raises(TransmissionError):
                    transport.send_to(b"x", "10.0.0.1", 5568)
        finally:
            transport.close()

    def test_port_out_of_range_is_transmission_error(self):
        with UdpTransport() as transport:
            with pytest.raises(TransmissionError) as excinfo:
                transport.send_to(b"x", "127.0.0.1", 70000)
        assert isinstance(excinfo.value.__cause__, OverflowError)

    @pytest.mark.parametrize("host", [12345, 1.5])
    def test_non_string_host_is_transmission_error(self, host):
        with UdpTransport() as transport:
            with pytest.raises(TransmissionError):
                transport.resolve(host)

    def test_close_is_idempotent_and_blocks_sends(self):
        transport = UdpTransport()
        transport.close()
        transport.close()
        assert transport.closed
        with pytest.raises(TransmissionError):
            transport.send_to(b"x", "127.0.0.1", 5568)

    def test_context_manager_closes(self):
        with UdpTransport() as transport:
            pass
        assert transport.closed

    def test_unsupported_family(self):
        with pytest.raises(AddressFamilyError):
            UdpTransport(family=socket.AF_UNIX if hasattr(socket, 'AF_UNIX') else 999)


class TestMulticastInterface:
    """Test outgoing multicast interface selection."""

    def test_ipv4_address(self):
        with UdpTransport() as transport:
            transport.set_multicast_interface("127.0.0.1")
            raw = transport._sock.getsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_IF, 4)
        assert socket.inet_ntoa(raw) == "127.0.0.1"

    @pytest.mark.skipif(not sys.platform.startswith("linux"), reason="ip_mreqn layout is Linux specific")
    def test_interface_index(self):
        with UdpTransport() as transport:
            transport.set_multicast_interface(socket.if_nametoindex("lo"))

    @pytest.mark.parametrize("value", ["not-an-address", "eth0", 1.5, None, True, -1])
    def test_unsupported_values(self, value):
        with UdpTransport() as transport:
            with pytest.raises(AddressFamilyError):
                transport.set_multicast_interface(value)

    def test_ipv6_address_on_ipv4_transport(self):
        with UdpTransport() as transport:
            with pytest.raises(AddressFamilyError):
                transport.set_multicast_interface("::1")

    def test_nothing_set_on_family_error(self):
        with UdpTransport() as transport:
            with patch.object(transport, '_sock') as fake_sock:
                with pytest.raises(AddressFamilyError):
                    transport.set_multicast_interface("::1")
            fake_sock.setsockopt.assert_not_called()

    def test_os_rejection_is_transmission_error(self):
        with UdpTransport() as transport:
            with patch.object(transport, '_sock') as fake_sock:
                fake_sock.setsockopt.side_effect = OSError(99, "Cannot assign requested address")
                with pytest.raises(TransmissionError):
                    transport.set_multicast_interface("192.0.2.1")
