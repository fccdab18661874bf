"""Reading and writing the version in a project descriptor file.

Two descriptor formats are supported:

- JSON (package.json style): top-level "version" string.
- TOML (Cargo.toml style): [package].version string, with Cargo.lock as
  its companion lockfile.

Only the version value is changed on save. JSON documents keep their key
order; TOML documents go through tomlkit so comments and formatting survive.
"""

from __future__ import annotations

import json
import subprocess
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Any

import semver
import tomlkit
from pydantic import BaseModel, ConfigDict
from tomlkit.exceptions import TOMLKitError

from .errors import (
    LockSyncFailed,
    MissingVersionField,
    UnsupportedFileType,
    VersionFileError,
)
from .versions import parse_version

# Called with the descriptor's directory after a version change
LockSync = Callable[[Path], None]


class VersionFiletype(Enum):
    """Supported descriptor formats, keyed by file extension."""

    JSON = "json"
    TOML = "toml"

    @classmethod
    def from_path(cls, path: Path | str) -> VersionFiletype:
        """Pick the format from the file extension (case-insensitive).

        Raises:
            UnsupportedFileType: For any extension other than .json or .toml.
        """
        suffix = Path(path).suffix.lower().lstrip(".")
        try:
            return cls(suffix)
        except ValueError:
            raise UnsupportedFileType(
                f"Unsupported version file {str(path)!r}: expected a .json or .toml file"
            ) from None

    @property
    def lockfile_name(self) -> str | None:
        """Name of the companion lockfile, or None if the format has none."""
        return _LOCKFILES.get(self)

    def read_version(self, text: str) -> Any:
        """Return the raw version value from a document (None if absent)."""
        return _READERS[self](text)

    def write_version(self, text: str, version: str) -> str:
        """Return the document with its version replaced."""
        return _WRITERS[self](text, version)


def _load_json(text: str) -> dict[str, Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise VersionFileError(f"Could not parse JSON version file: {exc}") from exc
    if not isinstance(data, dict):
        raise VersionFileError("JSON version file must contain an object")
    return data


def _read_json_version(text: str) -> Any:
    return _load_json(text).get("version")


def _write_json_version(text: str, version: str) -> str:
    data = _load_json(text)
    if not isinstance(data.get("version"), str):
        raise MissingVersionField('JSON version file has no "version" string')
    data["version"] = version
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def _load_toml(text: str) -> tomlkit.TOMLDocument:
    try:
        return tomlkit.parse(text)
    except TOMLKitError as exc:
        raise VersionFileError(f"Could not parse TOML version file: {exc}") from exc


def _toml_package(doc: tomlkit.TOMLDocument) -> dict[str, Any] | None:
    package = doc.get("package")
    return package if isinstance(package, dict) else None


def _read_toml_version(text: str) -> Any:
    package = _toml_package(_load_toml(text))
    if package is None:
        return None
    return package.get("version")


def _write_toml_version(text: str, version: str) -> str:
    doc = _load_toml(text)
    package = _toml_package(doc)
    if package is None or not isinstance(package.get("version"), str):
        raise MissingVersionField("TOML version file has no [package].version string")
    package["version"] = version
    return tomlkit.dumps(doc).rstrip("\n") + "\n"


_READERS: dict[VersionFiletype, Callable[[str], Any]] = {
    VersionFiletype.JSON: _read_json_version,
    VersionFiletype.TOML: _read_toml_version,
}
_WRITERS: dict[VersionFiletype, Callable[[str, str], str]] = {
    VersionFiletype.JSON: _write_json_version,
    VersionFiletype.TOML: _write_toml_version,
}
_LOCKFILES: dict[VersionFiletype, str] = {
    VersionFiletype.TOML: "Cargo.lock",
}


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise VersionFileError(f"Could not read {path}: {exc}") from exc


def _write_text(path: Path, content: str) -> None:
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise VersionFileError(f"Could not write {path}: {exc}") from exc


class VersionFile(BaseModel):
    """A loaded descriptor file and the version it declares.

    Attributes:
        path: Location of the descriptor file.
        filetype: Format of the descriptor.
        version: Version currently written in the file.
        lockfile: Companion lockfile path, if the format has one.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    path: Path
    filetype: VersionFiletype
    version: semver.Version
    lockfile: Path | None = None

    def save(self, new_version: semver.Version, lock_sync: LockSync | None = None) -> None:
        """Write ``new_version`` to the file and remember it."""
        try:
            save_version_file(self.path, self.filetype, new_version, lock_sync=lock_sync)
        except LockSyncFailed:
            # The file already holds new_version
            self.version = new_version
            raise
        self.version = new_version

    def tracked_files(self) -> list[Path]:
        """Files that must be staged together after a version change.

        The lockfile is only included when it exists on disk; projects are
        free not to commit it.
        """
        return get_tracked_files(self.path)


def get_tracked_files(path: Path | str) -> list[Path]:
    """Descriptor path plus its lockfile, when the format has one and it exists.

    Raises:
        UnsupportedFileType: If the extension is not .json or .toml.
    """
    path = Path(path)
    lockfile_name = VersionFiletype.from_path(path).lockfile_name
    files = [path]
    if lockfile_name and (path.parent / lockfile_name).exists():
        files.append(path.parent / lockfile_name)
    return files

def load_version_file(path: Path | str) -> VersionFile:
    """Read the version declared in a descriptor file.

    Raises:
        UnsupportedFileType: If the extension is not .json or .toml.
        VersionFileError: If the file cannot be read or decoded.
        MissingVersionField: If the version field is absent or not a string.
        InvalidVersion: If the version field is not a semantic version.
    """
    path = Path(path)
    filetype = VersionFiletype.from_path(path)
    raw = filetype.read_version(_read_text(path))
    if not isinstance(raw, str):
        raise MissingVersionField(f"No version string found in {path}")

    lockfile = path.parent / filetype.lockfile_name if filetype.lockfile_name else None
    return VersionFile(
        path=path,
        filetype=filetype,
        version=parse_version(str(raw)),
        lockfile=lockfile,
    )


def save_version_file(
    path: Path | str,
    filetype: VersionFiletype,
    version: semver.Version,
    lock_sync: LockSync | None = None,
) -> None:
    """Replace the version in a descriptor file, leaving everything else alone.

    For formats with a lockfile, ``lock_sync`` is then called with the
    descriptor's directory to refresh it.

    Raises:
        MissingVersionField: If the document has no version field to replace.
        VersionFileError: If the file cannot be read, decoded or written.
        LockSyncFailed: If the lockfile refresh fails. The descriptor has
            already been written at that point and is left as is.
    """
    path = Path(path)
    _write_text(path, filetype.write_version(_read_text(path), str(version)))

    if filetype.lockfile_name is None or lock_sync is None:
        return
    try:
        lock_sync(path.parent)
    except (subprocess.CalledProcessError, OSError) as exc:
        raise LockSyncFailed(
            f"Updated {path} but could not refresh {filetype.lockfile_name}: {exc}"
        ) from exc
