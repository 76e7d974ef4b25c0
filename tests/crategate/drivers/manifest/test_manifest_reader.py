"""Tests for the Cargo manifest reader."""

from __future__ import annotations

from pathlib import Path

import pytest

from crategate.drivers.manifest import ManifestReader, read_manifest
from crategate.kernel.domain.version import Version
from crategate.kernel.exceptions import ManifestMalformedError, ManifestNotFoundError


class TestRead:
    """Successful reads."""

    def test_full_manifest(self, write_manifest) -> None:
        metadata = read_manifest(write_manifest())
        assert metadata.name == "foo"
        assert metadata.version == Version.parse("1.2.0")
        assert metadata.edition == "2021"
        assert metadata.license == "MIT"
        assert metadata.repository == "https://github.com/example/foo"
        assert metadata.publish is None

    def test_directory_path_resolves_cargo_toml(self, write_manifest, tmp_path: Path) -> None:
        write_manifest()
        reader = ManifestReader(tmp_path)
        assert reader.path == tmp_path / "Cargo.toml"
        assert reader.project_root == tmp_path
        assert reader.read().name == "foo"

    def test_optional_fields_default_to_empty(self, write_manifest) -> None:
        metadata = read_manifest(write_manifest('[package]\nname = "bar"\nversion = "0.1.0"\n'))
        assert metadata.description == ""
        assert metadata.license == ""
        assert metadata.edition == ""
        assert not metadata.has_license

    def test_workspace_inheritance(self, write_manifest) -> None:
        manifest = write_manifest(
            """
[workspace.package]
version = "2.0.0"
license = "Apache-2.0"

[package]
name = "member"
version.workspace = true
license.workspace = true
"""
        )
        metadata = read_manifest(manifest)
        assert str(metadata.version) == "2.0.0"
        assert metadata.license == "Apache-2.0"

    @pytest.mark.parametrize(
        ("line", "expected"),
        [
            ("publish = false", False),
            ('publish = ["crates-io", "internal"]', ("crates-io", "internal")),
        ],
    )
    def test_publish_key(self, write_manifest, line: str, expected) -> None:
        manifest = write_manifest(f'[package]\nname = "foo"\nversion = "1.0.0"\n{line}\n')
        assert read_manifest(manifest).publish == expected


class TestErrors:
    """Missing and malformed manifests."""

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ManifestNotFoundError):
            ManifestReader(tmp_path).read()

    def test_invalid_toml(self, write_manifest) -> None:
        with pytest.raises(ManifestMalformedError, match="invalid TOML"):
            read_manifest(write_manifest("[package\nname = 1"))

    def test_missing_package_table(self, write_manifest) -> None:
        with pytest.raises(ManifestMalformedError, match=r"missing \[package\] table"):
            read_manifest(write_manifest('[workspace]\nmembers = ["a"]\n'))

    @pytest.mark.parametrize(
        ("content", "message"),
        [
            ('[package]\nversion = "1.0.0"\n', "package.name"),
            ('[package]\nname = ""\nversion = "1.0.0"\n', "package.name"),
            ('[package]\nname = "foo"\n', "package.version"),
            ('[package]\nname = "foo"\nversion = "1.0"\n', "Invalid semantic version"),
        ],
    )
    def test_required_fields(self, write_manifest, content: str, message: str) -> None:
        with pytest.raises(ManifestMalformedError, match=message):
            read_manifest(write_manifest(content))

    def test_inherited_field_absent_from_workspace(self, write_manifest) -> None:
        manifest = write_manifest('[package]\nname = "foo"\nversion.workspace = true\n')
        with pytest.raises(ManifestMalformedError, match="inherits from the workspace"):
            read_manifest(manifest)

    def test_bad_publish_value(self, write_manifest) -> None:
        manifest = write_manifest('[package]\nname = "foo"\nversion = "1.0.0"\npublish = "yes"\n')
        with pytest.raises(ManifestMalformedError, match="package.publish"):
            read_manifest(manifest)
