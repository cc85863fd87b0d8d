from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519

from core.schemas.errors import MissingKeyError
from core.schemas.ledger import KeyMaterial


logger = logging.getLogger(__name__)

SIGNATURE_LENGTH = 64


@dataclass(frozen=True)
class Signature:
    """Detached Ed25519 signature split into its two 32-byte halves."""
    public_key: bytes
    r: bytes
    s: bytes
    scheme: str = "ed25519"

    @property
    def raw(self) -> bytes:
        return self.r + self.s


def public_key_from_seed(seed: bytes) -> bytes:
    """Derive the raw 32-byte Ed25519 public key for a 32-byte seed."""
    private = ed25519.Ed25519PrivateKey.from_private_bytes(seed)
    return private.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )


def sign(payload: bytes, key: KeyMaterial) -> Signature:
    """Sign payload with the key's Ed25519 seed."""
    private = ed25519.Ed25519PrivateKey.from_private_bytes(key.private_key)
    raw = private.sign(payload)
    return Signature(public_key=key.public_key, r=raw[:32], s=raw[32:])


def verify(payload: bytes, signature: Signature, public_key: bytes | None = None) -> bool:
    """True if the signature is valid over payload for public_key (default: the signer's)."""
    pub = ed25519.Ed25519PublicKey.from_public_bytes(public_key or signature.public_key)
    try:
        pub.verify(signature.raw, payload)
    except InvalidSignature:
        return False
    return True


def verify_signature(public_key: bytes, r: bytes, s: bytes, message: bytes) -> bool:
    """Check an (r, s) pair as exported in the result file."""
    if len(public_key) != 32 or len(r) + len(s) != SIGNATURE_LENGTH:
        return False
    return verify(message, Signature(public_key=public_key, r=r, s=s))


class Keyring:
    """
    Lookup of signing keys, built once before signing starts.

    Keys are indexed both by raw public key (multisig members) and by
    Lisk32 address (the implicit owner of a regular account).
    """

    def __init__(self, keys: Iterable[KeyMaterial]) -> None:
        self._by_public_key: dict[bytes, KeyMaterial] = {}
        self._by_address: dict[str, KeyMaterial] = {}
        for key in keys:
            self._by_public_key.setdefault(key.public_key, key)
            self._by_address.setdefault(key.address, key)

    def __len__(self) -> int:
        return len(self._by_public_key)

    def by_public_key(self, public_key: bytes) -> KeyMaterial | None:
        return self._by_public_key.get(public_key)

    def by_address(self, address: str) -> KeyMaterial | None:
        return self._by_address.get(address)

    def require(
        self,
        public_keys: Iterable[bytes] = (),
        addresses: Iterable[str] = (),
    ) -> None:
        """
        Check that every listed signer has a key.

        Raises:
            MissingKeyError: Naming every missing public key and address.
        """
        missing = [f"0x{pk.hex()}" for pk in dict.fromkeys(public_keys) if pk not in self._by_public_key]
        missing += [a for a in dict.fromkeys(addresses) if a not in self._by_address]
        if missing:
            logger.error("Missing private keys for %d signer(s)", len(missing))
            raise MissingKeyError(
                f"No private key available for {len(missing)} declared signer(s): "
                + ", ".join(missing[:5])
                + (" ..." if len(missing) > 5 else ""),
                missing=missing,
            )
