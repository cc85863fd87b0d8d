"""
Schemas & Versioning
File: versioning.py

Purpose: Centralize artifact format version constants.
No imports from other schema files to avoid circular dependencies.
"""

# Format version written into every artifact manifest
FORMAT_VERSION: str = "1.0"

# Major versions this package can read back
SUPPORTED_FORMAT_MAJORS: frozenset[int] = frozenset({1})


def parse_format_version(version: str) -> tuple[int, int]:
    """Parse "MAJOR.MINOR" into integers."""
    major, _, minor = version.partition(".")
    try:
        return int(major), int(minor or 0)
    except ValueError as e:
        raise ValueError(f"Invalid format version: {version!r}") from e


def is_compatible_format_version(version: str) -> bool:
    """True if an artifact written with `version` can be read."""
    try:
        major, _ = parse_format_version(version)
    except ValueError:
        return False
    return major in SUPPORTED_FORMAT_MAJORS
