"""
Authorization Signatures

Builds the redemption commitment for each leaf and collects signatures
from every key holder of the account.

    commitment = keccak256(leaf_hash(32) | recipient(20)) | 9 zero bytes

The 9-byte zero suffix is part of the message the receiving contract
reconstructs before checking signatures; it must be reproduced exactly.
"""
from __future__ import annotations

import logging
from typing import Iterable

from core.crypto.hashing import keccak256
from core.crypto.signatures import Keyring, Signature, sign, verify
from core.encoding.payload import encode_commitment_preimage
from core.schemas.commitments import AuthorizationBundle, LeafNode, SignaturePair
from core.schemas.errors import MissingKeyError
from core.schemas.ledger import MultisigAuth


logger = logging.getLogger(__name__)

COMMITMENT_SUFFIX = bytes(9)
COMMITMENT_LENGTH = 32 + len(COMMITMENT_SUFFIX)


def build_commitment(leaf_hash: bytes, recipient: bytes) -> bytes:
    """Commitment binding a leaf to the recipient allowed to redeem it."""
    return keccak256(encode_commitment_preimage(leaf_hash, recipient)) + COMMITMENT_SUFFIX


def require_signers(leaves: Iterable[LeafNode], keyring: Keyring) -> None:
    """
    Check up front that every signer of every leaf has a key.

    Raises:
        MissingKeyError: Before any signature has been produced.
    """
    public_keys: list[bytes] = []
    addresses: list[str] = []
    for leaf in leaves:
        auth = leaf.record.auth
        if isinstance(auth, MultisigAuth):
            public_keys.extend(auth.all_keys)
        else:
            addresses.append(leaf.record.source_address)
    keyring.require(public_keys=public_keys, addresses=addresses)


def _pair(signature: Signature) -> SignaturePair:
    return SignaturePair(public_key=signature.public_key, r=signature.r, s=signature.s)


def authorize_leaf(leaf: LeafNode, keyring: Keyring, recipient: bytes) -> AuthorizationBundle:
    """
    Sign one leaf's commitment.

    Regular accounts get exactly one signature from the key behind the
    source address. Multisig accounts get one signature per mandatory key
    followed by one per optional key, regardless of the threshold.
    """
    commitment = build_commitment(leaf.hash, recipient)
    auth = leaf.record.auth

    if isinstance(auth, MultisigAuth):
        signers = []
        for public_key in auth.all_keys:
            key = keyring.by_public_key(public_key)
            if key is None:
                raise MissingKeyError(
                    f"No private key for 0x{public_key.hex()}",
                    missing=[f"0x{public_key.hex()}"],
                )
            signers.append(key)
    else:
        key = keyring.by_address(leaf.record.source_address)
        if key is None:
            raise MissingKeyError(
                f"No private key for {leaf.record.source_address}",
                missing=[leaf.record.source_address],
            )
        signers = [key]

    signatures = tuple(_pair(sign(commitment, key)) for key in signers)
    logger.debug(
        "Signed leaf 0x%s with %d signature(s)", leaf.hash.hex(), len(signatures)
    )
    return AuthorizationBundle(
        leaf_hash=leaf.hash,
        commitment=commitment,
        signatures=signatures,
    )


def collect_signatures(
    leaves: Iterable[LeafNode],
    keyring: Keyring,
    recipient: bytes,
) -> dict[bytes, AuthorizationBundle]:
    """
    Authorization bundles for all leaves, keyed by leaf hash.

    Raises:
        MissingKeyError: If any signer lacks a key; nothing is signed then.
    """
    leaves = list(leaves)
    require_signers(leaves, keyring)
    return {leaf.hash: authorize_leaf(leaf, keyring, recipient) for leaf in leaves}


def verify_bundle(bundle: AuthorizationBundle) -> bool:
    """True if every signature in the bundle verifies against its commitment."""
    return all(
        verify(
            bundle.commitment,
            Signature(public_key=pair.public_key, r=pair.r, s=pair.s),
        )
        for pair in bundle.signatures
    )


__all__ = [
    "COMMITMENT_SUFFIX",
    "COMMITMENT_LENGTH",
    "build_commitment",
    "require_signers",
    "authorize_leaf",
    "collect_signatures",
    "verify_bundle",
]
