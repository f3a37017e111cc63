"""Domain errors."""


class LedgerError(Exception):
    """Base error for the caja ledger."""


class ValidationError(LedgerError, ValueError):
    """Transaction input rejected before any balance moves."""
