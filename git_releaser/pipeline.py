"""Release pipeline: bump → tag → changelog → publish → next prerelease.

This module orchestrates a git-releaser run:
1. Check we are in a clean git repository
2. Read the current version and work out the release version
3. Collect the commits made since the last release tag
4. Write the release version, commit, tag and push it
5. Add a section to CHANGELOG.md, commit and push it
6. Publish a GitHub release with the new section as notes
7. Move the version file on to the next prerelease for development

Each phase fails fast: an error stops the run before the next phase starts.
The changelog is checked up front so a duplicate entry is caught before
anything is committed.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from pathlib import Path

import semver

from .changelog import check_changelog, render_compact, update_changelog
from .commits import GIT_LOG_FORMAT, parse_commits
from .errors import LockSyncFailed
from .github import GhReleasePublisher, ReleasePublisher
from .models import Commit, ReleaseConfig
from .shell import cargo_lock_sync, fatal, git, step, warn
from .version_file import LockSync, VersionFile, load_version_file
from .versions import VersionTransition, transition


def ensure_git_repository() -> None:
    """Abort unless the working directory is inside a git work tree."""
    if git("rev-parse", "--is-inside-work-tree", check=False) != "true":
        fatal("Not a git repository. Run from the repo root.")


def ensure_clean_worktree() -> None:
    """Abort if there are uncommitted changes that would end up in a release."""
    if git("status", "--porcelain", check=False):
        fatal(
            "Repository has uncommitted changes.\n"
            "Commit or stash them, or pass --allow-dirty."
        )


def find_last_tag(prefix: str = "v") -> str | None:
    """Find the most recent release tag.

    Tags are sorted by version, so v1.10.0 comes after v1.9.0.
    Returns None if no release tags exist yet.
    """
    step("Finding last release tag")
    tags = git("tag", "--list", f"{prefix}*", "--sort=-v:refname", check=False)
    tag = tags.splitlines()[0] if tags else None
    print(f"  {tag or '<none, using the full history>'}")
    return tag


def collect_commits(last_tag: str | None, ref: str = "HEAD") -> list[Commit]:
    """Return the commits reachable from ``ref`` but not from ``last_tag``."""
    step("Collecting commits")
    rev_range = f"{last_tag}..{ref}" if last_tag else ref
    raw = git("log", f"--pretty=format:{GIT_LOG_FORMAT}", rev_range)
    commits = parse_commits(raw)
    print(f"  {len(commits)} commits in {rev_range}")
    return commits


def commit_files(paths: Iterable[Path], message: str) -> None:
    """Stage ``paths`` and commit them with ``message``."""
    git("add", *(str(p) for p in paths))
    git("commit", "-m", message)


def save_version(
    version_file: VersionFile, version: semver.Version, lock_sync: LockSync | None
) -> None:
    """Write ``version`` to the version file.

    A failed lockfile refresh is reported but does not stop the release;
    the version file is the source of truth.
    """
    old = version_file.version
    try:
        version_file.save(version, lock_sync=lock_sync)
    except LockSyncFailed as exc:
        warn(str(exc))
    print(f"  {version_file.path}: {old} → {version}")


def release_version(
    config: ReleaseConfig,
    version_file: VersionFile,
    version: semver.Version,
    lock_sync: LockSync | None,
) -> str:
    """Commit, tag and push the release version. Returns the tag."""
    tag = config.tag_for(version)
    step(f"Releasing {tag}")
    save_version(version_file, version, lock_sync)
    commit_files(version_file.tracked_files(), f"chore: releasing {tag}")
    git("tag", tag)
    git("push", config.remote, config.branch)
    git("push", config.remote, tag)
    print(f"  Tagged and pushed {tag}")
    return tag


def publish_changelog(
    config: ReleaseConfig,
    commits: list[Commit],
    version: semver.Version,
    today: date | None = None,
) -> str:
    """Add the release section to the changelog, commit and push it.

    Returns:
        The rendered section, used as the release notes.
    """
    step(f"Updating {config.changelog_path}")
    entry = update_changelog(config.changelog_path, commits, version, today)
    commit_files([config.changelog_path], "docs: updating changelog [ci skip]")
    git("push", config.remote, config.branch)
    print(f"  Added v{version} to {config.changelog_path}")
    return entry


def start_next_development(
    config: ReleaseConfig, version_file: VersionFile, lock_sync: LockSync | None
) -> semver.Version:
    """Move the version file to the next prerelease and push it."""
    dev_version = transition(version_file.version, VersionTransition.PRERELEASE)
    tag = config.tag_for(dev_version)
    step(f"Beginning development on {tag}")
    save_version(version_file, dev_version, lock_sync)
    commit_files(
        version_file.tracked_files(), f"chore: beginning development on {tag} [ci skip]"
    )
    git("push", config.remote, config.branch)
    return dev_version


def plan_release(
    config: ReleaseConfig,
) -> tuple[VersionFile, semver.Version, list[Commit]]:
    """Work out the release version and the commits that go into it."""
    kind = VersionTransition.from_str(config.version_type)
    version_file = load_version_file(config.version_file)
    new_version = transition(version_file.version, kind)
    print(f"\n  Current version is {version_file.version}, releasing {new_version}")

    last_tag = find_last_tag(config.tag_prefix)
    commits = collect_commits(last_tag)
    return version_file, new_version, commits


def preview_release(config: ReleaseConfig) -> None:
    """Show what a release would do without changing anything."""
    ensure_git_repository()
    _, new_version, commits = plan_release(config)
    print(f"\nChanges for {config.tag_for(new_version)}:\n{render_compact(commits)}")


def run_release(
    config: ReleaseConfig,
    *,
    publisher: ReleasePublisher | None = None,
    lock_sync: LockSync | None = cargo_lock_sync,
    today: date | None = None,
) -> semver.Version:
    """Execute the full release pipeline.

    Args:
        config: Release settings.
        publisher: Where to create the hosted release. Defaults to GitHub
                   through the gh CLI.
        lock_sync: Lockfile refresh for formats that have one.
        today: Date used in the changelog heading (defaults to today).

    Returns:
        The released version.
    """
    ensure_git_repository()
    if not config.allow_dirty:
        ensure_clean_worktree()

    if publisher is None:
        publisher = GhReleasePublisher(config.repo, config.token)

    version_file, new_version, commits = plan_release(config)
    check_changelog(config.changelog_path, new_version)

    tag = release_version(config, version_file, new_version, lock_sync)
    entry = publish_changelog(config, commits, new_version, today)

    step("Creating GitHub release")
    publisher.create_release(tag, config.branch, entry)
    print(f"  {tag}")

    start_next_development(config, version_file, lock_sync)

    print(f"\nHere are the changes for {tag}:\n{render_compact(commits)}")
    print(f"\n{'=' * 60}\n{tag} has shipped!\n{'=' * 60}")
    return new_version
