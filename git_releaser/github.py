"""Publishing releases on GitHub.

The pipeline only depends on the ReleasePublisher protocol. The default
implementation drives the gh CLI, which handles authentication and the
REST call; tests substitute a fake.
"""

from __future__ import annotations

import subprocess
from typing import Protocol

from .errors import ReleaseError, ReleasePublishFailed
from .shell import gh


class ReleasePublisher(Protocol):
    def create_release(self, tag: str, target: str, body: str) -> None: ...


def parse_repo_slug(repo: str) -> tuple[str, str]:
    """Split an "owner/name" repository string.

    Raises:
        ReleaseError: If the string is not of the form owner/name.
    """
    owner, sep, name = repo.strip().partition("/")
    if not sep or not owner or not name or "/" in name:
        raise ReleaseError(f"Invalid repository {repo!r}: expected OWNER/NAME")
    return owner, name


class GhReleasePublisher:
    """Creates published (non-draft, non-prerelease) releases via ``gh``."""

    def __init__(self, repo: str, token: str | None = None) -> None:
        owner, name = parse_repo_slug(repo)
        self.repo = f"{owner}/{name}"
        self.token = token

    def create_release(self, tag: str, target: str, body: str) -> None:
        """Create release ``tag`` pointing at ``target`` with ``body`` as notes.

        Raises:
            ReleasePublishFailed: If gh is missing or the API call fails.
        """
        try:
            gh(
                "release",
                "create",
                tag,
                "--repo",
                self.repo,
                "--target",
                target,
                "--title",
                tag,
                "--notes",
                body,
                token=self.token,
            )
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or "").strip() or f"exit code {exc.returncode}"
            raise ReleasePublishFailed(f"Failed to create release {tag}: {detail}") from exc
        except FileNotFoundError as exc:
            raise ReleasePublishFailed("gh CLI not found; install it to publish releases") from exc
