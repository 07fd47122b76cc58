"""Pay-as-you-go plan ledger for chat assistant billing."""

__version__ = "1.0.0"
