"""
Ledger Loader

Reads the migration ledger and the key-material file into typed records.

Ledger entries are JSON objects:

    {"address": "lsk...", "balance": 12.5}                       regular
    {"address": "lsk...", "balance": 3, "threshold": 2,
     "mandatoryKeys": ["<hex>"], "optionalKeys": ["<hex>", ...]}  multisig

"lskAddress" and "numberOfSignatures" are accepted as aliases. The auth
variant is decided here and nowhere else.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from core.crypto.hashing import parse_hex
from core.crypto.lisk32 import decode_lisk32, lisk32_from_public_key
from core.crypto.signatures import public_key_from_seed
from core.schemas.canonical import loads_exact
from core.schemas.errors import (
    InvalidAddressError,
    MalformedKeyMaterialError,
    MalformedLedgerError,
)
from core.schemas.ledger import (
    AccountRecord,
    KeyMaterial,
    MultisigAuth,
    RegularAuth,
)


logger = logging.getLogger(__name__)


class LedgerEntry(BaseModel):
    """Raw ledger entry as found in the input file."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    address: str = Field(..., validation_alias=AliasChoices("address", "lskAddress"))
    balance: Decimal = Field(..., ge=0)
    threshold: int | None = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("threshold", "numberOfSignatures"),
    )
    mandatory_keys: list[str] | None = Field(
        default=None, validation_alias=AliasChoices("mandatoryKeys", "mandatory_keys")
    )
    optional_keys: list[str] | None = Field(
        default=None, validation_alias=AliasChoices("optionalKeys", "optional_keys")
    )


class KeyFileEntry(BaseModel):
    """One entry of a dev-validators style key file."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    address: str | None = None
    public_key: str = Field(..., validation_alias=AliasChoices("publicKey", "public_key"))
    private_key: str = Field(..., validation_alias=AliasChoices("privateKey", "private_key"))


def _read_json(path: Path, what: str) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return loads_exact(f.read())
    except FileNotFoundError as e:
        raise MalformedLedgerError(f"{what} file not found: {path}") from e
    except ValueError as e:
        raise MalformedLedgerError(f"{what} file is not valid JSON: {path}: {e}") from e


def _parse_keys(keys: list[str] | None, index: int, field: str) -> tuple[bytes, ...]:
    try:
        return tuple(parse_hex(k, 32) for k in keys or [])
    except ValueError as e:
        raise MalformedLedgerError(f"Invalid key in {field}: {e}", entry_index=index) from e


def record_from_entry(entry: LedgerEntry, index: int = 0) -> AccountRecord:
    """
    Turn a raw ledger entry into an AccountRecord.

    threshold absent/0 with no keys -> regular; threshold > 0 -> multisig.
    Keys without a threshold are rejected rather than guessed at.
    """
    try:
        target = decode_lisk32(entry.address)
    except InvalidAddressError as e:
        raise MalformedLedgerError(
            f"Invalid address {entry.address!r}: {e.message}", entry_index=index
        ) from e

    mandatory = _parse_keys(entry.mandatory_keys, index, "mandatoryKeys")
    optional = _parse_keys(entry.optional_keys, index, "optionalKeys")

    if not entry.threshold:
        if mandatory or optional:
            raise MalformedLedgerError(
                f"Entry {entry.address} declares keys but no threshold",
                entry_index=index,
            )
        auth: RegularAuth | MultisigAuth = RegularAuth()
    else:
        try:
            auth = MultisigAuth(
                threshold=entry.threshold,
                mandatory_keys=mandatory,
                optional_keys=optional,
            )
        except ValidationError as e:
            raise MalformedLedgerError(
                f"Invalid multisig entry {entry.address}: {e.errors()[0]['msg']}",
                entry_index=index,
            ) from e

    try:
        return AccountRecord(
            source_address=entry.address,
            target_address=target,
            balance=entry.balance,
            auth=auth,
        )
    except ValidationError as e:
        raise MalformedLedgerError(
            f"Invalid entry {entry.address}: {e.errors()[0]['msg']}",
            entry_index=index,
        ) from e


def parse_ledger(data: Any) -> list[AccountRecord]:
    """Parse already-decoded ledger JSON into records, preserving order."""
    if not isinstance(data, list):
        raise MalformedLedgerError("Ledger must be a JSON array of account entries")

    records: list[AccountRecord] = []
    for index, raw in enumerate(data):
        try:
            entry = LedgerEntry.model_validate(raw)
        except ValidationError as e:
            raise MalformedLedgerError(
                f"Ledger entry {index} is malformed: {e.errors()[0]['msg']}",
                entry_index=index,
                details={"errors": [err["msg"] for err in e.errors()]},
            ) from e
        records.append(record_from_entry(entry, index))
    return records


def load_ledger(path: str | Path) -> list[AccountRecord]:
    """
    Load the ledger file.

    Raises:
        MalformedLedgerError: Missing file, bad JSON, or any invalid entry.
    """
    path = Path(path)
    records = parse_ledger(_read_json(path, "Ledger"))
    multisig = sum(1 for r in records if r.is_multisig)
    logger.info(
        "Loaded %d accounts (%d regular, %d multisig) from %s",
        len(records), len(records) - multisig, multisig, path,
    )
    return records


def key_from_entry(entry: KeyFileEntry, index: int = 0) -> KeyMaterial:
    """
    Validate one key entry.

    Private keys may be the 32-byte seed or the 64-byte seed||public form
    written by NaCl tooling. The seed must derive the declared public key
    and, when an address is given, the address must belong to that key.
    """
    try:
        public_key = parse_hex(entry.public_key, 32)
        private_raw = parse_hex(entry.private_key)
    except ValueError as e:
        raise MalformedKeyMaterialError(f"Invalid key encoding: {e}", entry_index=index) from e

    if len(private_raw) == 64:
        seed, embedded_public = private_raw[:32], private_raw[32:]
        if embedded_public != public_key:
            raise MalformedKeyMaterialError(
                "Private key does not embed the declared public key", entry_index=index
            )
    elif len(private_raw) == 32:
        seed = private_raw
    else:
        raise MalformedKeyMaterialError(
            f"Private key must be 32 or 64 bytes, got {len(private_raw)}",
            entry_index=index,
        )

    if public_key_from_seed(seed) != public_key:
        raise MalformedKeyMaterialError(
            "Private key does not derive the declared public key", entry_index=index
        )

    address = lisk32_from_public_key(public_key)
    if entry.address is not None and entry.address != address:
        raise MalformedKeyMaterialError(
            f"Address {entry.address} does not belong to public key 0x{public_key.hex()}",
            entry_index=index,
        )

    return KeyMaterial(address=address, public_key=public_key, private_key=seed)


def parse_key_material(data: Any) -> list[KeyMaterial]:
    """Parse a {"keys": [...]} document (or a bare list of key entries)."""
    entries = data.get("keys") if isinstance(data, dict) else data
    if not isinstance(entries, list):
        raise MalformedKeyMaterialError("Key material must contain a 'keys' array")

    keys: list[KeyMaterial] = []
    for index, raw in enumerate(entries):
        try:
            entry = KeyFileEntry.model_validate(raw)
        except ValidationError as e:
            raise MalformedKeyMaterialError(
                f"Key entry {index} is malformed: {e.errors()[0]['msg']}",
                entry_index=index,
            ) from e
        keys.append(key_from_entry(entry, index))
    return keys


def load_key_material(path: str | Path) -> list[KeyMaterial]:
    """Load and validate the key-material file."""
    path = Path(path)
    keys = parse_key_material(_read_json(path, "Key material"))
    logger.info("Loaded %d keys from %s", len(keys), path)
    return keys


def dump_ledger(records: list[AccountRecord]) -> list[dict[str, Any]]:
    """Ledger JSON for a list of records (inverse of parse_ledger)."""
    out: list[dict[str, Any]] = []
    for record in records:
        entry: dict[str, Any] = {"address": record.source_address, "balance": record.balance}
        if isinstance(record.auth, MultisigAuth):
            entry["threshold"] = record.auth.threshold
            entry["mandatoryKeys"] = [k.hex() for k in record.auth.mandatory_keys]
            entry["optionalKeys"] = [k.hex() for k in record.auth.optional_keys]
        out.append(entry)
    return out


def dump_key_material(keys: list[KeyMaterial]) -> dict[str, Any]:
    """Key file document; private keys in the 64-byte seed||public form."""
    return {
        "keys": [
            {
                "address": key.address,
                "publicKey": key.public_key.hex(),
                "privateKey": (key.private_key + key.public_key).hex(),
            }
            for key in keys
        ]
    }


__all__ = [
    "LedgerEntry",
    "KeyFileEntry",
    "record_from_entry",
    "parse_ledger",
    "load_ledger",
    "key_from_entry",
    "parse_key_material",
    "load_key_material",
    "dump_ledger",
    "dump_key_material",
]
