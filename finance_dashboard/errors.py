"""Exceptions raised by the dashboard services."""


class FinanceDashboardError(Exception):
    """Base class for dashboard errors."""


class TransactionValidationError(FinanceDashboardError, ValueError):
    """Form input that cannot become a transaction.

    The message is shown to the user as-is.
    """


class StoreError(FinanceDashboardError, RuntimeError):
    """The record store could not complete a call."""
