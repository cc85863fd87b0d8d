"""
Schemas & Verification Results
File: verification.py

Purpose: Standard result format for artifact validation.
Used by the artifact validator and the CLI verify command to report
outcomes without raising.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .errors import ClaimTreeError


# Severity levels for checks
CheckSeverity = Literal["info", "warn", "error"]


class CheckResult(BaseModel):
    """
    Result of a single verification check.

    Checks are atomic verification steps that can pass or fail.
    """

    model_config = ConfigDict(extra="forbid")

    check_id: str = Field(..., description="Unique identifier for this check", min_length=1)
    ok: bool = Field(..., description="Whether the check passed")
    severity: CheckSeverity = Field(..., description="Severity level of this check")
    message: str = Field(..., description="Human-readable message describing the result")
    details: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        """Check if this is an error-level failure."""
        return not self.ok and self.severity == "error"

    @property
    def is_warning(self) -> bool:
        return self.severity == "warn"

    @classmethod
    def passed(
        cls,
        check_id: str,
        message: str = "Check passed",
        details: dict[str, Any] | None = None,
    ) -> "CheckResult":
        """Create a passed check result."""
        return cls(
            check_id=check_id,
            ok=True,
            severity="info",
            message=message,
            details=details or {},
        )

    @classmethod
    def warning(
        cls,
        check_id: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> "CheckResult":
        """Create a warning check result."""
        return cls(
            check_id=check_id,
            ok=True,  # Warnings don't fail the check
            severity="warn",
            message=message,
            details=details or {},
        )

    @classmethod
    def failed(
        cls,
        check_id: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> "CheckResult":
        """Create a failed check result."""
        return cls(
            check_id=check_id,
            ok=False,
            severity="error",
            message=message,
            details=details or {},
        )


class VerificationResult(BaseModel):
    """
    Complete result of a verification process.

    This is the standard format for communicating verification outcomes
    between modules without using exceptions.
    """

    model_config = ConfigDict(extra="forbid")

    ok: bool = Field(..., description="Overall verification success")
    checks: list[CheckResult] = Field(default_factory=list)
    error: ClaimTreeError | None = Field(
        default=None,
        description="Error details if verification encountered an exception",
    )

    @property
    def error_count(self) -> int:
        """Count of error-level failures."""
        return sum(1 for check in self.checks if check.is_error)

    @property
    def passed_count(self) -> int:
        """Count of passed checks."""
        return sum(1 for check in self.checks if check.ok)

    def get_error_messages(self) -> list[str]:
        return [check.message for check in self.checks if check.is_error]

    @classmethod
    def from_checks(cls, checks: list[CheckResult]) -> "VerificationResult":
        """Build a result whose ok flag is the conjunction of its checks."""
        return cls(ok=all(check.ok for check in checks), checks=checks)
