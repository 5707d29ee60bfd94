"""
tld_resolver.runtime.context — call context and address helpers.

Every mutating entrypoint receives the acting account explicitly; there is no
ambient "msg.sender". A ``CallContext`` is also how the metadata renderer
learns which TLD contract is calling it.

Addresses
---------
- Canonical form is lowercase ``0x`` + 40 hex digits.
- Raw 20-byte values and mixed-case (checksummed) strings are accepted and
  normalized.
- ``ZERO_ADDRESS`` is the "not found" sentinel returned by lookups.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from eth_utils import is_hex_address, to_checksum_address, to_normalized_address

from tld_resolver.errors import AddressError

AddressLike = Union[str, bytes, bytearray, memoryview]

ADDRESS_BYTES = 20
ZERO_ADDRESS = "0x" + "00" * ADDRESS_BYTES


def normalize_address(value: AddressLike) -> str:
    """Coerce ``value`` into the canonical lowercase hex form."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        raw = bytes(value)
        if len(raw) != ADDRESS_BYTES:
            raise AddressError(
                f"address must be {ADDRESS_BYTES} bytes, got {len(raw)}",
                context={"len": len(raw)},
            )
        return "0x" + raw.hex()
    if not isinstance(value, str):
        raise AddressError(f"cannot convert {type(value).__name__} to an address")
    s = value.strip()
    if not is_hex_address(s):
        raise AddressError(f"invalid address: {value!r}", context={"value": value})
    return to_normalized_address(s)


def address_bytes(value: AddressLike) -> bytes:
    return bytes.fromhex(normalize_address(value)[2:])


def is_zero(value: AddressLike) -> bool:
    return normalize_address(value) == ZERO_ADDRESS


def checksum(value: AddressLike) -> str:
    """EIP-55 form, for display only."""
    return to_checksum_address(normalize_address(value))


@dataclass(frozen=True)
class CallContext:
    """The account on whose behalf a call executes."""

    sender: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "sender", normalize_address(self.sender))

    @classmethod
    def of(cls, sender: Union["CallContext", AddressLike]) -> "CallContext":
        if isinstance(sender, CallContext):
            return sender
        return cls(sender=sender)  # type: ignore[arg-type]


__all__ = [
    "AddressLike",
    "ADDRESS_BYTES",
    "ZERO_ADDRESS",
    "normalize_address",
    "address_bytes",
    "is_zero",
    "checksum",
    "CallContext",
]
