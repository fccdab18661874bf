"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture
def package_json(tmp_path: Path) -> Path:
    """Create a temporary package.json file."""
    content = """\
{
    "name": "testing",
    "version": "0.2.5",
    "author": "me",
    "scripts": {"test": "jest"}
}
"""
    path = tmp_path / "package.json"
    path.write_text(content)
    return path


@pytest.fixture
def cargo_toml(tmp_path: Path) -> Path:
    """Create a temporary Cargo.toml file."""
    content = """\
# crate manifest
[package]
name = "demo"  # crate name
version = "0.2.5"
edition = "2021"

[dependencies]
serde = { version = "1.0", features = ["derive"] }
"""
    path = tmp_path / "Cargo.toml"
    path.write_text(content)
    return path
