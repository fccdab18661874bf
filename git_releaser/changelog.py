"""Markdown changelog generation.

CHANGELOG.md starts with a "# CHANGELOG" header followed by one section
per release, newest first:

    # CHANGELOG

    ## v1.1.0 (2020-10-14)

    - feat: add the thing

    ## v1.0.0 (2020-10-01)

    - fix: the first thing

New sections are always inserted directly below the header.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import date
from pathlib import Path

import semver

from .errors import DuplicateVersionEntry, MalformedChangelog, VersionFileError
from .models import Commit

CHANGELOG_HEADER_LINE = "# CHANGELOG"
CHANGELOG_HEADER = f"{CHANGELOG_HEADER_LINE}\n\n"
NO_COMMITS = "No commits since last version"


def render_markdown(
    commits: Sequence[Commit],
    version: semver.Version | None = None,
    today: date | None = None,
) -> str:
    """Render a changelog section for the given commits.

    The section title is "## v<version> (<date>)", or just "## <date>"
    when no version is given.
    """
    day = (today or date.today()).isoformat()
    title = f"## v{version} ({day})" if version is not None else f"## {day}"

    if commits:
        changes = "".join(f"- {c.compact()}\n" for c in commits)
    else:
        changes = f"{NO_COMMITS}\n"
    return f"{title}\n\n{changes}"


def render_compact(commits: Sequence[Commit]) -> str:
    """Render commits for printing in the terminal."""
    if not commits:
        return NO_COMMITS
    return "".join(f" - {c.compact()}\n" for c in commits)


def has_entry(contents: str, version: semver.Version) -> bool:
    """True if the changelog already has a section for ``version``."""
    pattern = rf"^## v{re.escape(str(version))}(?:\s|$)"
    return re.search(pattern, contents, re.MULTILINE) is not None


def insert_entry(contents: str, version: semver.Version, entry: str) -> str:
    """Insert a rendered section right below the changelog header.

    Raises:
        DuplicateVersionEntry: If ``version`` already has a section.
        MalformedChangelog: If the document does not start with "# CHANGELOG".
    """
    if has_entry(contents, version):
        raise DuplicateVersionEntry(f"Version entry v{version} already in changelog")

    first_line, _, body = contents.partition("\n")
    if first_line.rstrip() != CHANGELOG_HEADER_LINE:
        raise MalformedChangelog(f"Changelog must start with {CHANGELOG_HEADER_LINE!r}")

    return f"{CHANGELOG_HEADER}{entry}\n" + body.removeprefix("\n")


def read_changelog(path: Path) -> str:
    """Return the changelog contents, creating it with just the header if needed."""
    try:
        if not path.exists() or not path.read_text(encoding="utf-8"):
            path.write_text(CHANGELOG_HEADER, encoding="utf-8")
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise VersionFileError(f"Could not read {path}: {exc}") from exc


def write_changelog(path: Path, version: semver.Version, entry: str) -> None:
    """Add ``entry`` for ``version`` to the changelog file at ``path``."""
    updated = insert_entry(read_changelog(path), version, entry)
    try:
        path.write_text(updated, encoding="utf-8")
    except OSError as exc:
        raise VersionFileError(f"Could not write {path}: {exc}") from exc


def update_changelog(
    path: Path,
    commits: Sequence[Commit],
    version: semver.Version,
    today: date | None = None,
) -> str:
    """Render a section for ``version`` and add it to the changelog.

    Returns:
        The rendered section, which doubles as the release notes.
    """
    entry = render_markdown(commits, version, today)
    write_changelog(path, version, entry)
    return entry


def check_changelog(path: Path, version: semver.Version) -> None:
    """Fail early if the changelog at ``path`` cannot take a section for ``version``.

    A missing or empty file is fine; it is created on write.
    """
    try:
        contents = path.read_text(encoding="utf-8") if path.exists() else ""
    except OSError as exc:
        raise VersionFileError(f"Could not read {path}: {exc}") from exc
    if contents:
        insert_entry(contents, version, "")
