"""Data models for git-releaser.

These Pydantic models represent the records read from git and the
configuration that drives a release run.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """Author or committer of a commit.

    Attributes:
        name: Display name.
        email: Email address.
        date: Date string exactly as git formatted it (RFC 2822).
    """

    model_config = ConfigDict(frozen=True)

    name: str = ""
    email: str = ""
    date: str = ""


class Commit(BaseModel):
    """A single commit read from ``git log``.

    Field aliases match the keys written by GIT_LOG_FORMAT, so a log record
    validates straight into a Commit. Every field has an empty default: a
    bare ``Commit()`` is the placeholder used for records that fail to decode.

    Attributes:
        id: Full commit hash.
        short_id: Abbreviated commit hash.
        refs: Ref names pointing at the commit (e.g. "HEAD -> main").
        subject: First line of the commit message.
        slug: Filename-safe form of the subject.
        notes: Attached git notes, if any.
        author: Who wrote the change.
        committer: Who committed the change.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(default="", alias="commit")
    short_id: str = Field(default="", alias="abbreviated_commit")
    refs: str = ""
    subject: str = ""
    slug: str = Field(default="", alias="sanitized_subject_line")
    notes: str = Field(default="", alias="commit_notes")
    author: User = Field(default_factory=User)
    committer: User = Field(default_factory=User)

    def compact(self) -> str:
        """One-line description used in changelogs."""
        return self.subject


class ReleaseConfig(BaseModel):
    """Everything a release run needs to know.

    Built once by the CLI and passed down to the pipeline, so nothing in
    the package depends on module-level paths or the working directory.

    Attributes:
        repo: GitHub repository as "owner/name".
        version_type: Transition to apply (prerelease, patch, minor, major).
        version_file: Path to package.json / Cargo.toml holding the version.
        token: GitHub token used to create the release.
        branch: Branch the release is cut from and pushed to.
        remote: Git remote to push to.
        changelog_path: Markdown changelog to update.
        tag_prefix: Prefix for release tags ("v" gives "v1.2.3").
        allow_dirty: Skip the clean working tree check.
    """

    repo: str = ""
    version_type: str = "minor"
    version_file: Path
    token: str = ""
    branch: str = "main"
    remote: str = "origin"
    changelog_path: Path = Path("CHANGELOG.md")
    tag_prefix: str = "v"
    allow_dirty: bool = False

    def tag_for(self, version: object) -> str:
        """Tag name for a version, e.g. "v1.2.3"."""
        return f"{self.tag_prefix}{version}"
