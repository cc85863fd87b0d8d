"""
Schemas & Ledger Models
File: ledger.py

Purpose: Typed account records for the migration ledger.

The authorization kind is decided once, at load time, as a tagged
variant (RegularAuth | MultisigAuth). Downstream stages dispatch on the
variant and never re-derive it from optional fields.
"""

from __future__ import annotations

from decimal import ROUND_FLOOR, Decimal
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator


# 1 LSK = 10^8 beddows
BEDDOWS_PER_LSK: int = 10**8
UINT64_MAX: int = 2**64 - 1
ED25519_KEY_LENGTH: int = 32


def to_beddows(balance: Decimal) -> int:
    """
    Convert a decimal LSK balance to integer beddows: floor(balance * 10^8).

    Exact decimal arithmetic; never rounds up.

    Example:
        >>> to_beddows(Decimal("0.00000001"))
        1
    """
    return int((balance * BEDDOWS_PER_LSK).to_integral_value(rounding=ROUND_FLOOR))


class RegularAuth(BaseModel):
    """A single-key account; its owner is the key behind the source address."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["regular"] = "regular"


class MultisigAuth(BaseModel):
    """
    A threshold multisig account.

    Key order is declaration order and is part of the encoded payload.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["multisig"] = "multisig"
    threshold: int = Field(..., ge=1)
    mandatory_keys: tuple[bytes, ...] = Field(..., min_length=1)
    optional_keys: tuple[bytes, ...] = Field(default=())

    @field_validator("mandatory_keys", "optional_keys")
    @classmethod
    def _check_key_lengths(cls, keys: tuple[bytes, ...]) -> tuple[bytes, ...]:
        for key in keys:
            if len(key) != ED25519_KEY_LENGTH:
                raise ValueError(
                    f"Public keys must be {ED25519_KEY_LENGTH} bytes, got {len(key)}"
                )
        return keys

    @model_validator(mode="after")
    def _check_threshold(self) -> "MultisigAuth":
        total = len(self.mandatory_keys) + len(self.optional_keys)
        if self.threshold > total:
            raise ValueError(
                f"threshold {self.threshold} exceeds number of keys {total}"
            )
        return self

    @property
    def all_keys(self) -> tuple[bytes, ...]:
        """Mandatory keys followed by optional keys, in declared order."""
        return self.mandatory_keys + self.optional_keys


AuthKind = Annotated[Union[RegularAuth, MultisigAuth], Field(discriminator="kind")]


class AccountRecord(BaseModel):
    """One migrated account. Immutable once loaded."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    source_address: str = Field(..., min_length=1, description="Lisk32 address")
    target_address: bytes = Field(..., description="20-byte derived address")
    balance: Decimal = Field(..., ge=0, description="Balance in LSK")
    auth: AuthKind = Field(default_factory=RegularAuth)

    @field_validator("target_address")
    @classmethod
    def _check_target_length(cls, value: bytes) -> bytes:
        if len(value) != 20:
            raise ValueError(f"target_address must be 20 bytes, got {len(value)}")
        return value

    @model_validator(mode="after")
    def _check_units_fit(self) -> "AccountRecord":
        if self.balance_units > UINT64_MAX:
            raise ValueError(f"balance {self.balance} does not fit in uint64 beddows")
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def balance_units(self) -> int:
        return to_beddows(self.balance)

    @property
    def is_multisig(self) -> bool:
        return isinstance(self.auth, MultisigAuth)

    @property
    def threshold(self) -> int:
        """Signature threshold; 0 for regular accounts (the encoded value)."""
        return self.auth.threshold if isinstance(self.auth, MultisigAuth) else 0


class KeyMaterial(BaseModel):
    """A signing key from the key-material source."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    address: str = Field(..., description="Lisk32 address of the key")
    public_key: bytes
    private_key: bytes = Field(..., repr=False, description="32-byte Ed25519 seed")

    @field_validator("public_key", "private_key")
    @classmethod
    def _check_length(cls, value: bytes) -> bytes:
        if len(value) != ED25519_KEY_LENGTH:
            raise ValueError(f"Keys must be {ED25519_KEY_LENGTH} bytes, got {len(value)}")
        return value


class MultisigArchetype(BaseModel):
    """Shape of a fixture multisig account."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    threshold: int = Field(..., ge=1)
    num_mandatory: int = Field(..., ge=1)
    num_optional: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _check_threshold(self) -> "MultisigArchetype":
        if self.threshold > self.num_mandatory + self.num_optional:
            raise ValueError("threshold exceeds number of keys")
        return self

    @property
    def num_keys(self) -> int:
        return self.num_mandatory + self.num_optional


# Archetypes used by the example dataset
DEFAULT_ARCHETYPES: tuple[MultisigArchetype, ...] = (
    MultisigArchetype(threshold=3, num_mandatory=3, num_optional=0),
    MultisigArchetype(threshold=2, num_mandatory=1, num_optional=2),
    MultisigArchetype(threshold=5, num_mandatory=3, num_optional=3),
    MultisigArchetype(threshold=64, num_mandatory=64, num_optional=0),
)


__all__ = [
    "BEDDOWS_PER_LSK",
    "UINT64_MAX",
    "to_beddows",
    "RegularAuth",
    "MultisigAuth",
    "AuthKind",
    "AccountRecord",
    "KeyMaterial",
    "MultisigArchetype",
    "DEFAULT_ARCHETYPES",
]
