"""
Error types raised by the sACN sender.

Encoding problems are detected before any network activity, address family
problems before any socket option is touched, and transmission problems are
raised per send attempt. Nothing here is retried or logged internally.
"""


class SACNError(Exception):
    """Base class for every error raised by sacn_tx."""


class EncodingError(SACNError, ValueError):
    """A packet could not be built from the supplied values."""


class AddressFamilyError(SACNError, ValueError):
    """An outgoing multicast interface was given in an unsupported form."""


class TransmissionError(SACNError, OSError):
    """Name resolution or the UDP send itself failed."""
