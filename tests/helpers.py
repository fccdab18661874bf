"""Builders for git log output used across tests."""

from __future__ import annotations

import json

from git_releaser.commits import COMMIT_SENTINEL


def commit_record(subject: str, sha: str = "d41902f4ac0efbfbabcf25742d959c320e685cf2") -> dict:
    """A log record shaped like GIT_LOG_FORMAT output."""
    return {
        "commit": sha,
        "abbreviated_commit": sha[:7],
        "refs": "HEAD -> main, origin/main",
        "subject": subject,
        "sanitized_subject_line": subject.replace(" ", "-").replace(":", ""),
        "commit_notes": "",
        "author": {
            "name": "Egill Sveinbjörnsson",
            "email": "egilsster@users.noreply.github.com",
            "date": "Thu, 1 Oct 2020 12:53:15 +0200",
        },
        "committer": {
            "name": "GitHub",
            "email": "noreply@github.com",
            "date": "Thu, 1 Oct 2020 12:53:15 +0200",
        },
    }


def raw_log(*subjects: str) -> str:
    """Build git log output for the given subjects, newest first."""
    return "\n".join(json.dumps(commit_record(s)) + COMMIT_SENTINEL for s in subjects)
