"""
Custom Pydantic types and validators for ledger identifiers.

Provides the Address type used by every model that carries an account or
contract address, plus the standalone validator used by the services before
any upstream call is made.
"""

import re
from typing import Annotated, Any

from pydantic import GetCoreSchemaHandler, GetJsonSchemaHandler
from pydantic.json_schema import JsonSchemaValue
from pydantic_core import CoreSchema, PydanticCustomError, core_schema

ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")


class InvalidAddressError(ValueError):
    """Raised when an account identifier is not a 0x-prefixed 40-hex string."""

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(f"Invalid address format: {value!r}")


def validate_address(value: Any) -> str:
    """
    Validate and normalize an account address.

    Accepts any casing (including EIP-55 checksummed input) and returns
    the lowercase form.

    Raises:
        InvalidAddressError: If the value is not a 0x-prefixed 40-hex string
    """
    if not isinstance(value, str):
        raise InvalidAddressError(value)

    candidate = value.strip()
    if not ADDRESS_PATTERN.match(candidate):
        raise InvalidAddressError(value)

    return candidate.lower()


def is_valid_address(value: Any) -> bool:
    """Check an address without raising."""
    try:
        validate_address(value)
    except InvalidAddressError:
        return False
    return True


class LedgerAddress(str):
    """
    Lowercase account address type for Pydantic v2 models.

    Usage:
        class MyModel(BaseModel):
            user: LedgerAddress
    """

    @classmethod
    def __get_pydantic_core_schema__(
        cls,
        _source_type: Any,
        _handler: GetCoreSchemaHandler,
    ) -> CoreSchema:
        """Define how Pydantic should validate this type."""
        return core_schema.no_info_plain_validator_function(
            cls.validate,
            serialization=core_schema.plain_serializer_function_ser_schema(
                str,
                info_arg=False,
                return_schema=core_schema.str_schema(),
            ),
        )

    @classmethod
    def __get_pydantic_json_schema__(
        cls,
        _core_schema: CoreSchema,
        handler: GetJsonSchemaHandler,
    ) -> JsonSchemaValue:
        """Define JSON schema representation."""
        return {
            "type": "string",
            "pattern": "^0x[0-9a-f]{40}$",
            "description": "Account address, lowercase hex",
            "example": "0x6b0720d001f65967358a31e319f63d3833217632",
        }

    @classmethod
    def validate(cls, value: Any) -> str:
        """Validate and normalize value to a lowercase address."""
        try:
            return validate_address(value)
        except InvalidAddressError as e:
            raise PydanticCustomError(
                "address_invalid",
                "Invalid address format: {value}",
                {"value": str(value)},
            ) from e


# Type aliases for common use cases
Address = Annotated[LedgerAddress, "Lowercase 0x-prefixed account address"]
