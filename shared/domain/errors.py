"""Errors raised by the shared value objects."""


class DomainError(Exception):
    """Base class for every error raised by domain code."""


class InvalidRangeError(DomainError, ValueError):
    """A date range whose end is not strictly after its start."""

    def __init__(self, start, end):
        self.start = start
        self.end = end
        super().__init__(f"Start date ({start}) must be before end date ({end})")


class CurrencyMismatchError(DomainError, ValueError):
    """Arithmetic between amounts in different currencies."""
