# common/version_utils.py
# -*- coding: utf-8 -*-
"""
Version parsing and comparison for yba-ctl bundles.

Versions look like ``2.18.1.0`` optionally followed by a build suffix,
``2.18.1.0-b42`` or ``2.18.1.0_b42``. The dotted part and the build number
are compared numerically. Anything that cannot be compared unambiguously
raises VersionError.
"""

import json
import logging
import re
from pathlib import Path
from typing import Optional, Tuple

from common.exceptions import VersionError

module_logger = logging.getLogger(__name__)

_BUILD_SEPARATOR = re.compile(r"[-_]")
_NUMBER = re.compile(r"\d+", re.ASCII)


def parse_version(version: str) -> Tuple[Tuple[int, ...], Optional[int]]:
    """
    Splits a version string into its numeric dotted parts and build number.

    Args:
        version: The version string, e.g. "2.18.1.0-b42".

    Returns:
        A (parts, build) tuple; build is None when the version has no suffix.

    Raises:
        VersionError: If any segment is empty or not numeric.
    """
    if not version or not version.strip():
        raise VersionError("empty version string")

    pieces = _BUILD_SEPARATOR.split(version.strip(), maxsplit=1)
    dotted = pieces[0]
    build: Optional[int] = None

    parts = []
    for segment in dotted.split("."):
        if not _NUMBER.fullmatch(segment):
            raise VersionError(f"invalid segment '{segment}' in version '{version}'")
        parts.append(int(segment))

    if len(pieces) == 2:
        build_str = pieces[1]
        if build_str[:1] == "b":
            build_str = build_str[1:]
        if not _NUMBER.fullmatch(build_str):
            raise VersionError(f"invalid build number '{pieces[1]}' in version '{version}'")
        build = int(build_str)

    return tuple(parts), build


def compare_versions(version_a: str, version_b: str) -> int:
    """
    Compares two versions.

    Returns:
        -1 if version_a < version_b, 0 if equal, 1 if version_a > version_b.

    Raises:
        VersionError: If either version is malformed, the dotted parts differ
            in length, or only one of them carries a build number.
    """
    parts_a, build_a = parse_version(version_a)
    parts_b, build_b = parse_version(version_b)

    if len(parts_a) != len(parts_b):
        raise VersionError(
            f"cannot compare versions with different segment counts: '{version_a}' and '{version_b}'"
        )
    if (build_a is None) != (build_b is None):
        raise VersionError(
            f"cannot compare a version with a build number to one without: '{version_a}' and '{version_b}'"
        )

    key_a = parts_a + ((build_a,) if build_a is not None else ())
    key_b = parts_b + ((build_b,) if build_b is not None else ())
    if key_a < key_b:
        return -1
    if key_a > key_b:
        return 1
    return 0


def less_versions(version_a: str, version_b: str) -> bool:
    """True if version_a is strictly older than version_b."""
    return compare_versions(version_a, version_b) < 0


def read_version_metadata(metadata_file: Path) -> str:
    """
    Reads the bundle version from a version_metadata.json file.

    The file holds "version_number" and optionally "build_number"; the result
    is "<version_number>-<build_number>" when a build number is present.

    Raises:
        VersionError: If the file is missing, unreadable or lacks a version.
    """
    try:
        with open(metadata_file, "r", encoding="utf-8") as f:
            metadata = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise VersionError(f"could not read version metadata {metadata_file}: {e}") from e

    if not isinstance(metadata, dict):
        raise VersionError(f"{metadata_file} does not hold a JSON object")

    version_number = metadata.get("version_number")
    if not version_number:
        raise VersionError(f"{metadata_file} has no version_number")
    build_number = metadata.get("build_number")
    version = f"{version_number}-{build_number}" if build_number else str(version_number)
    # Validates the format before anyone compares against it.
    parse_version(version)
    module_logger.debug(f"Bundle version from {metadata_file}: {version}")
    return version
