"""Commission calculation and distribution ledger."""

__version__ = "1.0.0"
