"""
Error taxonomy for the customer ledger.
"""


class LedgerError(Exception):
    """Base class for all ledger errors."""


class ValidationError(LedgerError):
    """User input rejected before it reaches the store."""


class StorageError(LedgerError):
    """The persistence layer failed on insert or fetch."""


class EncodingError(LedgerError):
    """An export encoder was given malformed input or failed to build its buffer."""
