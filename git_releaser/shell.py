"""Shell, git and gh utilities.

Provides simple wrappers around subprocess calls for the external tools the
release pipeline talks to, plus output formatting helpers.
"""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path


def git(*args: str, check: bool = True) -> str:
    """Run a git command and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "status", "--porcelain").
        check: If True (default), raise on non-zero exit. Set to False
               for commands that may legitimately fail (e.g., tag lookup).

    Returns:
        Stripped stdout from the git command.
    """
    result = subprocess.run(["git", *args], capture_output=True, text=True, check=check)
    return result.stdout.strip()


def gh(*args: str, token: str | None = None, check: bool = True) -> str:
    """Run a GitHub CLI command and return stdout.

    Args:
        *args: Arguments to pass to gh (e.g., "release", "create", "v1.0.0").
        token: Token exported as GH_TOKEN for this call only.
        check: If True (default), raise on non-zero exit.
    """
    env = None
    if token:
        env = {**os.environ, "GH_TOKEN": token}
    result = subprocess.run(
        ["gh", *args], capture_output=True, text=True, check=check, env=env
    )
    return result.stdout.strip()


def run(
    *args: str, cwd: Path | None = None, check: bool = True
) -> subprocess.CompletedProcess[bytes]:
    """Run an arbitrary command.

    Unlike git(), this doesn't capture output - it streams directly to
    the terminal so users can see build progress, etc.
    """
    return subprocess.run(args, cwd=cwd, check=check)


def cargo_lock_sync(project_dir: Path) -> None:
    """Bring Cargo.lock in line with a freshly bumped Cargo.toml.

    ``cargo check`` rewrites the lockfile entry for the workspace crate.

    Raises:
        subprocess.CalledProcessError: If cargo exits non-zero.
        FileNotFoundError: If cargo is not installed.
    """
    run("cargo", "check", "--quiet", cwd=project_dir)


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate major phases of the release pipeline in terminal output.
    """
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def warn(msg: str) -> None:
    """Print a non-fatal warning to stderr."""
    print(f"Warning: {msg}", file=sys.stderr)


def fatal(msg: str) -> None:
    """Print an error message and exit with code 1.

    Use for unrecoverable errors that should halt the pipeline.
    """
    print(f"ERROR: {msg}", file=sys.stderr)
    sys.exit(1)
