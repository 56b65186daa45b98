"""Custom exceptions for the btcsignal service.

The indicator and scoring layers never raise for short or flat data; these
exceptions cover the collaborator boundaries (exchange, access store).
"""


class BtcSignalError(Exception):
    """Base exception for all btcsignal errors."""


class MarketDataUnavailable(BtcSignalError):
    """Raised when the exchange cannot provide the requested market data."""


class AccessStoreUnavailable(BtcSignalError):
    """Raised when the remote access-record store cannot be read."""
