"""Tests for git_releaser.version_file."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path

import pytest
import tomlkit

from git_releaser.errors import (
    InvalidVersion,
    LockSyncFailed,
    MissingVersionField,
    UnsupportedFileType,
    VersionFileError,
)
from git_releaser.version_file import (
    VersionFiletype,
    get_tracked_files,
    load_version_file,
    save_version_file,
)
from git_releaser.versions import parse_version


class TestVersionFiletype:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("package.json", VersionFiletype.JSON),
            ("version.JSON", VersionFiletype.JSON),
            ("Cargo.toml", VersionFiletype.TOML),
            ("Cargo_test.toml", VersionFiletype.TOML),
        ],
    )
    def test_from_path(self, name: str, expected: VersionFiletype) -> None:
        assert VersionFiletype.from_path(name) is expected

    @pytest.mark.parametrize("name", ["version.txt", "foo", "setup.cfg"])
    def test_unsupported(self, name: str) -> None:
        with pytest.raises(UnsupportedFileType):
            VersionFiletype.from_path(name)

    def test_lockfile_names(self) -> None:
        assert VersionFiletype.TOML.lockfile_name == "Cargo.lock"
        assert VersionFiletype.JSON.lockfile_name is None


class TestLoadVersionFile:
    def test_json(self, package_json: Path) -> None:
        vf = load_version_file(package_json)
        assert str(vf.version) == "0.2.5"
        assert vf.filetype is VersionFiletype.JSON
        assert vf.lockfile is None

    def test_toml(self, cargo_toml: Path) -> None:
        vf = load_version_file(cargo_toml)
        assert str(vf.version) == "0.2.5"
        assert vf.filetype is VersionFiletype.TOML
        assert vf.lockfile == cargo_toml.parent / "Cargo.lock"

    def test_missing_field(self, tmp_path: Path) -> None:
        path = tmp_path / "package.json"
        path.write_text('{"name": "x"}')
        with pytest.raises(MissingVersionField):
            load_version_file(path)

    def test_non_string_field(self, tmp_path: Path) -> None:
        path = tmp_path / "package.json"
        path.write_text('{"version": 1}')
        with pytest.raises(MissingVersionField):
            load_version_file(path)

    def test_toml_without_package(self, tmp_path: Path) -> None:
        path = tmp_path / "Cargo.toml"
        path.write_text('[workspace]\nmembers = ["a"]\n')
        with pytest.raises(MissingVersionField):
            load_version_file(path)

    def test_invalid_version(self, tmp_path: Path) -> None:
        path = tmp_path / "package.json"
        path.write_text('{"version": "1.2"}')
        with pytest.raises(InvalidVersion):
            load_version_file(path)

    def test_unsupported_extension(self, tmp_path: Path) -> None:
        path = tmp_path / "VERSION.txt"
        path.write_text("1.0.0")
        with pytest.raises(UnsupportedFileType):
            load_version_file(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(VersionFileError):
            load_version_file(tmp_path / "package.json")

    def test_undecodable_json(self, tmp_path: Path) -> None:
        path = tmp_path / "package.json"
        path.write_text("{not json")
        with pytest.raises(VersionFileError):
            load_version_file(path)

    def test_json_array(self, tmp_path: Path) -> None:
        path = tmp_path / "package.json"
        path.write_text('["1.0.0"]')
        with pytest.raises(VersionFileError):
            load_version_file(path)


class TestSaveVersionFile:
    def test_json_rewrites_only_version(self, package_json: Path) -> None:
        save_version_file(package_json, VersionFiletype.JSON, parse_version("0.2.6"))

        assert package_json.read_text() == (
            "{\n"
            '  "name": "testing",\n'
            '  "version": "0.2.6",\n'
            '  "author": "me",\n'
            '  "scripts": {\n'
            '    "test": "jest"\n'
            "  }\n"
            "}\n"
        )

    def test_json_keeps_unicode(self, tmp_path: Path) -> None:
        path = tmp_path / "package.json"
        path.write_text('{"author": "Egill Sveinbjörnsson", "version": "1.0.0"}')
        save_version_file(path, VersionFiletype.JSON, parse_version("1.0.1"))
        assert "Sveinbjörnsson" in path.read_text(encoding="utf-8")

    def test_toml_preserves_formatting(self, cargo_toml: Path) -> None:
        original = cargo_toml.read_text()
        save_version_file(cargo_toml, VersionFiletype.TOML, parse_version("0.3.0"))

        assert cargo_toml.read_text() == original.replace('"0.2.5"', '"0.3.0"')

    def test_toml_single_trailing_newline(self, tmp_path: Path) -> None:
        path = tmp_path / "Cargo.toml"
        path.write_text('[package]\nname = "demo"\nversion = "1.0.0"\n\n\n')
        save_version_file(path, VersionFiletype.TOML, parse_version("1.0.1"))
        assert path.read_text() == '[package]\nname = "demo"\nversion = "1.0.1"\n'

    def test_round_trip_json(self, package_json: Path) -> None:
        before = json.loads(package_json.read_text())
        vf = load_version_file(package_json)
        vf.save(parse_version("1.4.0-0"))

        reloaded = load_version_file(package_json)
        after = json.loads(package_json.read_text())
        assert reloaded.version == parse_version("1.4.0-0")
        assert vf.version == reloaded.version
        assert {k: v for k, v in after.items() if k != "version"} == {
            k: v for k, v in before.items() if k != "version"
        }

    def test_round_trip_toml(self, cargo_toml: Path) -> None:
        before = tomlkit.parse(cargo_toml.read_text()).unwrap()
        load_version_file(cargo_toml).save(parse_version("2.0.0"))

        after = tomlkit.parse(cargo_toml.read_text()).unwrap()
        assert load_version_file(cargo_toml).version == parse_version("2.0.0")
        assert after["dependencies"] == before["dependencies"]
        assert after["package"]["name"] == before["package"]["name"]

    def test_missing_field_on_save(self, tmp_path: Path) -> None:
        path = tmp_path / "package.json"
        path.write_text('{"name": "x"}')
        with pytest.raises(MissingVersionField):
            save_version_file(path, VersionFiletype.JSON, parse_version("1.0.0"))


class TestLockSync:
    def test_called_for_toml(self, cargo_toml: Path) -> None:
        calls: list[Path] = []
        save_version_file(
            cargo_toml, VersionFiletype.TOML, parse_version("0.2.6"), lock_sync=calls.append
        )
        assert calls == [cargo_toml.parent]

    def test_not_called_for_json(self, package_json: Path) -> None:
        calls: list[Path] = []
        save_version_file(
            package_json, VersionFiletype.JSON, parse_version("0.2.6"), lock_sync=calls.append
        )
        assert calls == []

    def test_failure_keeps_written_file(self, cargo_toml: Path) -> None:
        def failing_sync(project_dir: Path) -> None:
            raise subprocess.CalledProcessError(101, ["cargo", "check"])

        with pytest.raises(LockSyncFailed, match="Cargo.lock"):
            save_version_file(
                cargo_toml, VersionFiletype.TOML, parse_version("0.2.6"), lock_sync=failing_sync
            )

        assert load_version_file(cargo_toml).version == parse_version("0.2.6")

    def test_missing_tool(self, cargo_toml: Path) -> None:
        def missing_cargo(project_dir: Path) -> None:
            raise FileNotFoundError("cargo")

        with pytest.raises(LockSyncFailed):
            save_version_file(
                cargo_toml, VersionFiletype.TOML, parse_version("0.2.6"), lock_sync=missing_cargo
            )


class TestTrackedFiles:
    def test_json(self, package_json: Path) -> None:
        assert load_version_file(package_json).tracked_files() == [package_json]

    def test_toml_with_lockfile(self, cargo_toml: Path) -> None:
        lock = cargo_toml.parent / "Cargo.lock"
        lock.write_text("# lock\n")
        assert load_version_file(cargo_toml).tracked_files() == [cargo_toml, lock]

    def test_toml_without_lockfile(self, cargo_toml: Path) -> None:
        assert load_version_file(cargo_toml).tracked_files() == [cargo_toml]

    def test_lockfile_for_descriptor_path(self, cargo_toml: Path) -> None:
        lock = cargo_toml.parent / "Cargo.lock"
        lock.write_text("# lock\n")
        assert get_tracked_files(cargo_toml) == [cargo_toml, lock]
        assert get_tracked_files(str(cargo_toml)) == [cargo_toml, lock]

    def test_json_path_has_no_lockfile(self, package_json: Path) -> None:
        (package_json.parent / "Cargo.lock").write_text("# lock\n")
        assert get_tracked_files(package_json) == [package_json]

    def test_unsupported_path(self, tmp_path: Path) -> None:
        with pytest.raises(UnsupportedFileType):
            get_tracked_files(tmp_path / "setup.cfg")


class TestVersionFileSave:
    def test_updates_version(self, cargo_toml: Path) -> None:
        version_file = load_version_file(cargo_toml)
        version_file.save(parse_version("0.3.0"))
        assert version_file.version == parse_version("0.3.0")

    def test_updates_version_when_lock_sync_fails(self, cargo_toml: Path) -> None:
        def failing_sync(project_dir: Path) -> None:
            raise subprocess.CalledProcessError(101, ["cargo", "check"])

        version_file = load_version_file(cargo_toml)
        with pytest.raises(LockSyncFailed):
            version_file.save(parse_version("0.3.0"), lock_sync=failing_sync)

        assert version_file.version == parse_version("0.3.0")
        assert load_version_file(cargo_toml).version == parse_version("0.3.0")
