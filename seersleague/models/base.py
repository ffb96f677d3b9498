"""
Base model classes for ledger data with Pydantic v2.

Provides foundational classes that handle:
- camelCase JSON output matching the contract's field names
- Immutable event records with their position in the ledger
- JSON-serializable conversion utilities
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


class LedgerModel(BaseModel):
    """
    Base model for everything read from or derived from the ledger.

    Fields are declared in snake_case and serialized in camelCase, so
    ``to_json_dict()`` yields the record shape the HTTP layer exposes.
    """

    model_config = ConfigDict(
        # Allow population by field name or alias
        populate_by_name=True,
        alias_generator=to_camel,
        # Use enum values for serialization
        use_enum_values=True,
        str_strip_whitespace=True,
    )

    def to_json_dict(self, exclude_none: bool = False) -> dict[str, Any]:
        """
        Convert model to a JSON-serializable dictionary with camelCase keys.

        Args:
            exclude_none: Whether to exclude None values

        Returns:
            JSON-serializable dictionary
        """
        return self.model_dump(
            exclude_none=exclude_none,
            by_alias=True,
            mode="json",
        )


class EventModel(LedgerModel):
    """
    Base model for decoded contract events.

    Events are append-only: instances are frozen, and the pair
    (block_number, log_index) gives their order in the ledger.
    """

    model_config = ConfigDict(frozen=True)

    block_number: int = Field(..., ge=0, description="Block the event was emitted in")
    log_index: int = Field(default=0, ge=0, description="Index of the log within the block")
    transaction_hash: str | None = Field(default=None, description="Emitting transaction")

    @property
    def ledger_position(self) -> tuple[int, int]:
        """Sort key reproducing ledger append order."""
        return (self.block_number, self.log_index)
