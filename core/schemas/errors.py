"""
Schemas & Errors
File: errors.py

Purpose: Standard error taxonomy across the claimtree pipeline.
Defines both Pydantic models for structured error communication
and Python exceptions for control flow.

Every failure in this package is fatal to the run: the computation is
pure and offline, so nothing is retryable.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes used across the pipeline."""

    # Input errors
    MALFORMED_LEDGER = "MALFORMED_LEDGER"
    MALFORMED_KEY_MATERIAL = "MALFORMED_KEY_MATERIAL"
    INVALID_ADDRESS = "INVALID_ADDRESS"

    # Signing errors
    MISSING_KEY = "MISSING_KEY"

    # Encoding & commitment errors
    ENCODING_MISMATCH = "ENCODING_MISMATCH"
    LEAF_NOT_FOUND = "LEAF_NOT_FOUND"
    DUPLICATE_LEAF = "DUPLICATE_LEAF"

    # Artifact errors
    ARTIFACT_IO_ERROR = "ARTIFACT_IO_ERROR"


# =============================================================================
# Pydantic Error Model (Structured Communication)
# =============================================================================

class ClaimTreeError(BaseModel):
    """
    Error model for structured error reporting (CLI --json output).
    """

    model_config = ConfigDict(extra="forbid")

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.MALFORMED_LEDGER],
    )
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(default=False)


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class ClaimTreeException(Exception):
    """
    Base exception for all claimtree errors.

    Carries structured error information and converts to a ClaimTreeError
    model for reporting.
    """

    def __init__(
        self,
        message: str,
        code: str = "CLAIMTREE_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> ClaimTreeError:
        """Convert this exception to a ClaimTreeError model."""
        return ClaimTreeError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class MalformedLedgerError(ClaimTreeException):
    """Ledger input is missing required fields or key material is too short."""

    def __init__(
        self,
        message: str,
        entry_index: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if entry_index is not None:
            full_details["entry_index"] = entry_index
        super().__init__(
            message=message,
            code=ErrorCodes.MALFORMED_LEDGER,
            details=full_details,
        )


class MalformedKeyMaterialError(MalformedLedgerError):
    """A key-material entry is inconsistent (bad length, key/address mismatch)."""

    def __init__(
        self,
        message: str,
        entry_index: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, entry_index=entry_index, details=details)
        self.code = ErrorCodes.MALFORMED_KEY_MATERIAL


class InvalidAddressError(ClaimTreeException):
    """A Lisk32 or hex address failed validation."""

    def __init__(self, message: str, address: str | None = None) -> None:
        details = {"address": address} if address is not None else {}
        super().__init__(
            message=message,
            code=ErrorCodes.INVALID_ADDRESS,
            details=details,
        )


class MissingKeyError(ClaimTreeException):
    """One or more declared signers have no private key available."""

    def __init__(self, message: str, missing: list[str] | None = None) -> None:
        self.missing = list(missing or [])
        super().__init__(
            message=message,
            code=ErrorCodes.MISSING_KEY,
            details={"missing": self.missing},
        )


class EncodingMismatchError(ClaimTreeException):
    """A payload does not decode the way the verifier would decode it."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.ENCODING_MISMATCH,
            details=details,
        )


class NotFoundError(ClaimTreeException):
    """A proof was requested for a leaf hash that is not in the tree."""

    def __init__(self, leaf_hash: bytes) -> None:
        self.leaf_hash = leaf_hash
        super().__init__(
            message=f"Leaf not found in tree: 0x{leaf_hash.hex()}",
            code=ErrorCodes.LEAF_NOT_FOUND,
            details={"leaf_hash": "0x" + leaf_hash.hex()},
        )


class DuplicateLeafError(MalformedLedgerError):
    """Two ledger entries encode to the same payload."""

    def __init__(self, leaf_hash: bytes, addresses: list[str]) -> None:
        super().__init__(
            f"Ledger entries {addresses} produce the same leaf 0x{leaf_hash.hex()}",
            details={"leaf_hash": "0x" + leaf_hash.hex(), "addresses": addresses},
        )
        self.code = ErrorCodes.DUPLICATE_LEAF


class ArtifactIOError(ClaimTreeException):
    """Error while reading or writing artifact files."""

    def __init__(self, message: str, path: str | None = None) -> None:
        details = {"path": path} if path is not None else {}
        super().__init__(
            message=message,
            code=ErrorCodes.ARTIFACT_IO_ERROR,
            details=details,
        )
