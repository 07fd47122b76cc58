"""
Custom exceptions for the plan ledger.
"""

from typing import Optional, Dict, Any


class PlanLedgerError(Exception):
    """Base exception for plan ledger errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class PlanNotProvisionedError(PlanLedgerError):
    """
    Raised when an operation requires a plan but the entry has none.

    Expenses never raise this; they return None instead.
    """

    def __init__(self, entry_id: str, location: str):
        self.entry_id = entry_id
        self.location = location

        owner = "The server doesn't" if location == "guild" else "You don't"
        super().__init__(
            message=f"{owner} have a pay-as-you-go plan yet",
            details={"entry_id": entry_id, "location": location},
        )

    def to_response_dict(self) -> Dict[str, Any]:
        """Convert to an error response body."""
        return {
            "error": "plan_not_provisioned",
            "entry_id": self.entry_id,
            "location": self.location,
            "message": self.message,
        }


class PlanAccessDeniedError(PlanLedgerError):
    """Raised when a member without the manage permission views a guild plan."""

    def __init__(self, guild_id: str):
        self.guild_id = guild_id
        super().__init__(
            message="You must have the `Manage Server` permission to view & manage the server's plan",
            details={"guild_id": guild_id},
        )


class PersistenceError(PlanLedgerError):
    """Raised when a database operation on an entry collection fails."""

    def __init__(self, collection: str, message: str):
        self.collection = collection
        super().__init__(
            message=(
                f"Failed to perform database operation on collection '{collection}' "
                f"with error message \"{message}\""
            ),
            details={"collection": collection},
        )


class InvalidGenerationRequestError(PlanLedgerError):
    """Raised when a generation request is rejected before reaching the provider."""


class GenerationFailedError(PlanLedgerError):
    """Raised when the upstream generation provider fails."""

    def __init__(self, category: str, message: str):
        self.category = category
        super().__init__(
            message=message,
            details={"category": category},
        )


__all__ = [
    "PlanLedgerError",
    "PlanNotProvisionedError",
    "PlanAccessDeniedError",
    "PersistenceError",
    "InvalidGenerationRequestError",
    "GenerationFailedError",
]
