"""CLI entry point for git-releaser.

Example:
    git-releaser release -r owner/repo -v minor -f package.json -t $GITHUB_TOKEN
"""

from __future__ import annotations

import subprocess
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

import click

from git_releaser.errors import ReleaseError
from git_releaser.models import ReleaseConfig
from git_releaser.pipeline import preview_release, run_release

VERSION_TYPES = ["prerelease", "patch", "minor", "major"]


@contextmanager
def _reported_errors() -> Iterator[None]:
    """Turn release and subprocess failures into click errors (exit 1)."""
    try:
        yield
    except ReleaseError as exc:
        raise click.ClickException(str(exc)) from exc
    except subprocess.CalledProcessError as exc:
        cmd = " ".join(str(a) for a in exc.cmd) if isinstance(exc.cmd, list) else str(exc.cmd)
        detail = (exc.stderr or "").strip()
        raise click.ClickException(f"Command failed: {cmd}\n{detail}".rstrip()) from exc


def _shared_options(func: Callable) -> Callable:
    func = click.option(
        "--changelog",
        type=click.Path(dir_okay=False, path_type=Path),
        default="CHANGELOG.md",
        show_default=True,
        help="Changelog file to update.",
    )(func)
    func = click.option(
        "-f",
        "--file",
        "version_file",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        required=True,
        help="File holding the version (package.json or Cargo.toml).",
    )(func)
    func = click.option(
        "-v",
        "--type",
        "version_type",
        type=click.Choice(VERSION_TYPES, case_sensitive=False),
        default="minor",
        show_default=True,
        help="Which part of the version to bump.",
    )(func)
    return func


@click.group()
@click.version_option(package_name="git-releaser")
def cli() -> None:
    """Bump the version, update the changelog, tag and publish a release."""


@cli.command()
@click.option("-r", "--repo", required=True, help="GitHub repository as OWNER/NAME.")
@_shared_options
@click.option(
    "-t",
    "--token",
    envvar="GITHUB_TOKEN",
    required=True,
    help="GitHub personal access token. [env: GITHUB_TOKEN]",
)
@click.option(
    "-b", "--branch", default="main", show_default=True, help="Branch to release from."
)
@click.option("--remote", default="origin", show_default=True, help="Git remote to push to.")
@click.option("--allow-dirty", is_flag=True, help="Release even with uncommitted changes.")
def release(
    repo: str,
    version_type: str,
    version_file: Path,
    changelog: Path,
    token: str,
    branch: str,
    remote: str,
    allow_dirty: bool,
) -> None:
    """Cut a release: bump, tag, update the changelog and publish on GitHub."""
    config = ReleaseConfig(
        repo=repo,
        version_type=version_type,
        version_file=version_file,
        token=token,
        branch=branch,
        remote=remote,
        changelog_path=changelog,
        allow_dirty=allow_dirty,
    )
    with _reported_errors():
        run_release(config)


@cli.command()
@_shared_options
def preview(version_type: str, version_file: Path, changelog: Path) -> None:
    """Show the next version and its changes without touching anything."""
    config = ReleaseConfig(
        version_type=version_type,
        version_file=version_file,
        changelog_path=changelog,
    )
    with _reported_errors():
        preview_release(config)


if __name__ == "__main__":
    cli()
