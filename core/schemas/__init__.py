"""
Schemas & Canonicalization
File: __init__.py

Purpose: Export the public API for the schemas module.
This is the main entry point for other modules to import schema definitions.
"""

# Version constants
from .versioning import (
    FORMAT_VERSION,
    SUPPORTED_FORMAT_MAJORS,
    is_compatible_format_version,
    parse_format_version,
)

# Canonical serialization API
from .canonical import (
    CANONICAL_JSON_SEPARATORS,
    CanonicalizationError,
    canonicalize_value,
    dumps_canonical,
    loads_exact,
)

# Error models and exceptions
from .errors import (
    ArtifactIOError,
    ClaimTreeError,
    ClaimTreeException,
    DuplicateLeafError,
    EncodingMismatchError,
    ErrorCodes,
    InvalidAddressError,
    MalformedKeyMaterialError,
    MalformedLedgerError,
    MissingKeyError,
    NotFoundError,
)

# Ledger schemas
from .ledger import (
    BEDDOWS_PER_LSK,
    DEFAULT_ARCHETYPES,
    UINT64_MAX,
    AccountRecord,
    AuthKind,
    KeyMaterial,
    MultisigArchetype,
    MultisigAuth,
    RegularAuth,
    to_beddows,
)

# Pipeline values
from .commitments import (
    AuthorizationBundle,
    LeafNode,
    SignaturePair,
)

# Artifact schemas
from .artifacts import (
    ArtifactManifest,
    ManifestFileEntry,
    SignatureBundleArtifact,
    SignaturePairArtifact,
    SimpleNodeArtifact,
    SimpleTreeResultArtifact,
    TreeNodeArtifact,
    TreeResultArtifact,
)

# Verification schemas
from .verification import (
    CheckResult,
    VerificationResult,
)


__all__ = [
    # Versioning
    "FORMAT_VERSION",
    "SUPPORTED_FORMAT_MAJORS",
    "is_compatible_format_version",
    "parse_format_version",
    # Canonical
    "CANONICAL_JSON_SEPARATORS",
    "CanonicalizationError",
    "canonicalize_value",
    "dumps_canonical",
    "loads_exact",
    # Errors
    "ArtifactIOError",
    "ClaimTreeError",
    "ClaimTreeException",
    "DuplicateLeafError",
    "EncodingMismatchError",
    "ErrorCodes",
    "InvalidAddressError",
    "MalformedKeyMaterialError",
    "MalformedLedgerError",
    "MissingKeyError",
    "NotFoundError",
    # Ledger
    "BEDDOWS_PER_LSK",
    "DEFAULT_ARCHETYPES",
    "UINT64_MAX",
    "AccountRecord",
    "AuthKind",
    "KeyMaterial",
    "MultisigArchetype",
    "MultisigAuth",
    "RegularAuth",
    "to_beddows",
    # Pipeline values
    "AuthorizationBundle",
    "LeafNode",
    "SignaturePair",
    # Artifacts
    "ArtifactManifest",
    "ManifestFileEntry",
    "SignatureBundleArtifact",
    "SignaturePairArtifact",
    "SimpleNodeArtifact",
    "SimpleTreeResultArtifact",
    "TreeNodeArtifact",
    "TreeResultArtifact",
    # Verification
    "CheckResult",
    "VerificationResult",
]
