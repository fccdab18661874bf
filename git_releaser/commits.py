"""Turning ``git log`` output into Commit records.

git renders each commit as a small JSON object using GIT_LOG_FORMAT and
appends COMMIT_SENTINEL after it. The raw output is split on the sentinel
and every fragment is validated into a Commit.

Commit subjects are not escaped by git, so a quote or backslash in a
message produces a record that is not valid JSON. Such records become an
empty Commit and a warning instead of failing the whole changelog.
"""

from __future__ import annotations

from pydantic import ValidationError

from .models import Commit
from .shell import warn

COMMIT_SENTINEL = "---git-releaser-commit-end---"

# One JSON object per commit; keys match the Commit field aliases
GIT_LOG_FORMAT = (
    '{"commit": "%H", "abbreviated_commit": "%h", "refs": "%D", '
    '"subject": "%s", "sanitized_subject_line": "%f", "commit_notes": "%N", '
    '"author": {"name": "%aN", "email": "%aE", "date": "%aD"}, '
    '"committer": {"name": "%cN", "email": "%cE", "date": "%cD"}}'
    + COMMIT_SENTINEL
)

# Shorter fragments are leftovers around the sentinel, not records
MIN_RECORD_LENGTH = 2

# Subjects of the commits git-releaser makes itself
RELEASE_COMMIT_PREFIXES = (
    "chore: releasing",
    "chore: beginning development on",
    "docs: updating changelog",
)


def decode_commit(record: str) -> Commit:
    """Decode one JSON log record, falling back to an empty Commit."""
    try:
        return Commit.model_validate_json(record)
    except ValidationError as exc:
        warn(f"Could not decode commit record: {exc.errors()[0]['msg']}")
        return Commit()


def is_release_commit(commit: Commit) -> bool:
    """True for commits created by a previous git-releaser run."""
    return commit.subject.startswith(RELEASE_COMMIT_PREFIXES)


def parse_commits(raw_log: str) -> list[Commit]:
    """Parse sentinel-delimited ``git log`` output into commits.

    Release bookkeeping commits are dropped; everything else is returned
    in log order (newest first for a plain ``git log``).
    """
    commits: list[Commit] = []
    for fragment in raw_log.split(COMMIT_SENTINEL):
        fragment = fragment.strip()
        if len(fragment) < MIN_RECORD_LENGTH:
            continue
        commits.append(decode_commit(fragment))
    return [c for c in commits if not is_release_commit(c)]
