# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
lambdagc Retention Policy - Pick the versions to delete.

Pure functions, no I/O. The most recent ``keep`` versions survive by
recency; everything older survives only if it is in use.
"""

import re
from typing import AbstractSet, Iterable, List

from lambdagc.errors import explain_invalid_version
from lambdagc.exceptions import ConfigurationError, VersionParseError


_VERSION_PATTERN = re.compile(r"[1-9][0-9]*", re.ASCII)


def parse_version(value: object) -> int:
    """
    Parse a Lambda version identifier.

    Only positive integers are accepted: ints, or strings of ASCII
    digits with no sign, padding, separators or leading zero.

    Raises:
        VersionParseError: If the value is not a positive integer
    """
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value
    if isinstance(value, str) and _VERSION_PATTERN.fullmatch(value):
        return int(value)
    raise VersionParseError(
        explain_invalid_version(value),
        details={"version": value},
    )


def deletion_candidates(
    all_versions: Iterable[str],
    in_use: AbstractSet[str],
    keep: int,
) -> List[str]:
    """
    Versions to delete, newest first.

    Args:
        all_versions: Every published version of the function or layer
        in_use: Versions referenced by aliases or attachments
        keep: How many of the newest versions to retain unconditionally

    Returns:
        Versions sorted by number descending, minus the newest ``keep``,
        minus anything in use

    Raises:
        ConfigurationError: If keep is negative
        VersionParseError: If any version is not an integer
    """
    if keep < 0:
        raise ConfigurationError(
            f"keep-count must be >= 0, got {keep}",
            details={"keep": keep},
        )

    # Parse everything up front so bad data fails before any deletion.
    ordered = sorted(
        unique_versions(all_versions),
        key=lambda pair: pair[0],
        reverse=True,
    )
    return [version for _, version in ordered[keep:] if version not in in_use]


def unique_versions(all_versions: Iterable[str]) -> List[tuple]:
    """(number, identifier) pairs, one per distinct version."""
    seen = {}
    for version in all_versions:
        seen.setdefault(version, parse_version(version))
    return [(number, version) for version, number in seen.items()]
