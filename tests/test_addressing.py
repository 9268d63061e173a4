"""
Test suite for multicast address derivation and interface lookup.
"""

import ipaddress
import socket
from collections import namedtuple
from unittest.mock import patch

import pytest

from sacn_tx.addressing import (
    MULTICAST_NETWORK,
    interface_address,
    multicast_address,
    multicast_endpoint,
)
from sacn_tx.errors import AddressFamilyError, EncodingError

snicaddr = namedtuple('snicaddr', ['family', 'address', 'netmask', 'broadcast', 'ptp'])


class TestMulticastAddress:
    """Test universe to multicast group mapping."""

    @pytest.mark.parametrize("universe, expected", [
        (1, "239.255.0.1"),
        (255, "239.255.0.255"),
        (256, "239.255.1.0"),
        (999, "239.255.3.231"),
        (63999, "239.255.249.255"),
    ])
    def test_known_universes(self, universe, expected):
        assert str(multicast_address(universe)) == expected

    def test_is_pure(self):
        assert multicast_address(4242) == multicast_address(4242)

    def test_distinct_universes_distinct_groups(self):
        groups = {multicast_address(u) for u in range(1, 64000)}
        assert len(groups) == 63999
        assert all(g in MULTICAST_NETWORK for g in groups)
        assert all(g.is_multicast for g in (multicast_address(1), multicast_address(63999)))

    @pytest.mark.parametrize("universe", [0, 64000, -5])
    def test_out_of_range_rejected(self, universe):
        with pytest.raises(EncodingError):
            multicast_address(universe)

    def test_endpoint_uses_default_port(self):
        assert multicast_endpoint(1) == ("239.255.0.1", 5568)
        assert multicast_endpoint(2, 6000) == ("239.255.0.2", 6000)


class TestInterfaceAddress:
    """Test interface name lookup through psutil."""

    def test_first_ipv4_address_returned(self):
        addrs = {
            'eth0': [
                snicaddr(socket.AF_INET6, 'fe80::1', None, None, None),
                snicaddr(socket.AF_INET, '192.168.1.20', '255.255.255.0', None, None),
            ]
        }
        with patch('sacn_tx.addressing.psutil.net_if_addrs', return_value=addrs):
            assert interface_address('eth0') == '192.168.1.20'

    def test_unknown_interface(self):
        with patch('sacn_tx.addressing.psutil.net_if_addrs', return_value={}):
            with pytest.raises(AddressFamilyError):
                interface_address('nope0')

    def test_interface_without_ipv4(self):
        addrs = {'eth1': [snicaddr(socket.AF_INET6, 'fe80::2', None, None, None)]}
        with patch('sacn_tx.addressing.psutil.net_if_addrs', return_value=addrs):
            with pytest.raises(AddressFamilyError):
                interface_address('eth1')

    def test_real_loopback_has_ipv4(self):
        """The loopback interface reported by psutil resolves to 127.x.x.x."""
        import psutil
        loopbacks = [name for name, addrs in psutil.net_if_addrs().items()
                     if any(a.family == socket.AF_INET and a.address.startswith('127.') for a in addrs)]
        if not loopbacks:
            pytest.skip("no IPv4 loopback interface")
        assert ipaddress.ip_address(interface_address(loopbacks[0])).is_loopback
