"""Version parsing and transition utilities.

Versions are semver.Version objects. A release cycle moves a version
through four transitions:

- prerelease: "0.1.2" → "0.1.3-0"  (start work on the next patch)
- patch:      "0.1.2" → "0.1.3", but "0.1.3-0" → "0.1.3"
- minor:      "0.1.3-0" → "0.2.0"
- major:      "0.2.0" → "1.0.0"
"""

from __future__ import annotations

from enum import Enum

import semver

from .errors import InvalidVersion, InvalidVersionType

# Marker appended to versions that are under development
PRERELEASE_MARKER = "0"


class VersionTransition(str, Enum):
    """The kinds of version bump a release can perform."""

    PRERELEASE = "prerelease"
    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"

    @classmethod
    def from_str(cls, value: str) -> VersionTransition:
        """Map a transition name to a VersionTransition, ignoring case.

        Raises:
            InvalidVersionType: If the name is not a known transition.
        """
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ", ".join(t.value for t in cls)
            raise InvalidVersionType(
                f"Invalid version type {value!r} (expected one of: {choices})"
            ) from None


def parse_version(version_str: str) -> semver.Version:
    """Parse a version string into a semver.Version object.

    The string must be a full semantic version: three dot-separated
    non-negative integers with an optional "-<prerelease>" suffix.

    Raises:
        InvalidVersion: If the string is not a semantic version.
    """
    try:
        return semver.Version.parse(version_str.strip())
    except (TypeError, ValueError, AttributeError) as exc:
        raise InvalidVersion(f"Invalid version: {version_str!r}") from exc


def transition(current: semver.Version, kind: VersionTransition) -> semver.Version:
    """Return the version that follows ``current`` for the given transition.

    A version carrying a prerelease marker already stands for its patch
    release, so a patch transition only drops the marker. Minor and major
    transitions ignore the marker entirely. Build metadata is never kept.
    """
    if kind is VersionTransition.PRERELEASE:
        return current.replace(
            patch=current.patch + 1, prerelease=PRERELEASE_MARKER, build=None
        )
    if kind is VersionTransition.PATCH:
        if current.prerelease:
            return current.replace(prerelease=None, build=None)
        return current.bump_patch()
    if kind is VersionTransition.MINOR:
        return current.bump_minor()
    if kind is VersionTransition.MAJOR:
        return current.bump_major()
    raise InvalidVersionType(f"Unknown version transition: {kind!r}")


def bump(version_str: str, kind: VersionTransition | str) -> str:
    """Parse, transition and format a version in one call.

    Examples:
        bump("0.1.2", "prerelease") → "0.1.3-0"
        bump("0.1.2-0", "patch") → "0.1.2"
        bump("0.1.2", "major") → "1.0.0"
    """
    if not isinstance(kind, VersionTransition):
        kind = VersionTransition.from_str(kind)
    return str(transition(parse_version(version_str), kind))
