"""Error types raised by git-releaser.

Every failure the core can report derives from ReleaseError so the CLI can
turn it into a clean error message. Callers that need to tell failures
apart catch the specific subclass.
"""

from __future__ import annotations


class ReleaseError(Exception):
    """Base class for all git-releaser errors."""


class InvalidVersion(ReleaseError):
    """A version string is not a valid semantic version."""


class InvalidVersionType(ReleaseError):
    """A transition name is not one of prerelease, patch, minor or major."""


class UnsupportedFileType(ReleaseError):
    """The version file extension is not a supported format."""


class MissingVersionField(ReleaseError):
    """The version file has no string version field."""


class VersionFileError(ReleaseError):
    """The version file or changelog could not be read, decoded or written."""


class LockSyncFailed(ReleaseError):
    """Refreshing the lockfile after a version change failed.

    The version file itself has already been written when this is raised.
    """


class DuplicateVersionEntry(ReleaseError):
    """The changelog already has a section for the version."""


class MalformedChangelog(ReleaseError):
    """The changelog does not start with the required header."""


class ReleasePublishFailed(ReleaseError):
    """The hosted release could not be created."""
