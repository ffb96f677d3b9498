"""
Custom validators and types for ledger data.

This module provides the address type shared by the models and the
validation entry point used before any upstream call.
"""

from seersleague.validators.custom_types import (
    Address,
    InvalidAddressError,
    LedgerAddress,
    is_valid_address,
    validate_address,
)

__all__ = [
    "Address",
    "LedgerAddress",
    "InvalidAddressError",
    "validate_address",
    "is_valid_address",
]
