"""Version parsing helpers for vSphere compatibility checks."""

import re

_VERSION_RE = re.compile(r"^(\d+(?:\.\d+)*)")
_HW_VERSION_RE = re.compile(r"^vmx-(\d+)$")


def parse_version(version: str) -> tuple[int, ...]:
    """Parse a dotted version into a comparable tuple.

    Trailing build suffixes are ignored ("7.0.2-u3" -> (7, 0, 2)) and short
    versions are padded to three parts ("7.0" -> (7, 0, 0)).

    Args:
        version: Version string

    Returns:
        Tuple of integer version parts

    Raises:
        ValueError: If no numeric version can be found
    """
    match = _VERSION_RE.match(version.strip())
    if not match:
        raise ValueError(f"Invalid version: {version!r}")

    parts = tuple(int(part) for part in match.group(1).split("."))
    return parts + (0,) * (3 - len(parts))


def is_version_older(version: str, minimum: str) -> bool:
    """Check whether a dotted version is older than a minimum version."""
    return parse_version(version) < parse_version(minimum)


def parse_hardware_version(hw_version: str) -> int:
    """Parse a VM virtual hardware version ("vmx-15") into its revision.

    Args:
        hw_version: Hardware version string

    Returns:
        Integer hardware revision

    Raises:
        ValueError: If the string is not a vmx-NN hardware version
    """
    match = _HW_VERSION_RE.match(hw_version.strip())
    if not match:
        raise ValueError(f"Invalid hardware version: {hw_version!r}")
    return int(match.group(1))
