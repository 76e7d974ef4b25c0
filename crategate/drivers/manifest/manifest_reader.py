"""Cargo manifest reader.

Reads ``Cargo.toml`` and extracts the fields the validation gate needs.
Only ``package.name`` and ``package.version`` are required; every other
field may be absent and is surfaced later as a finding, never as an error.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from crategate.kernel.domain.models import PackageMetadata
from crategate.kernel.domain.version import Version
from crategate.kernel.exceptions import ManifestMalformedError, ManifestNotFoundError
from crategate.kernel.logging import get_logger

logger = get_logger(__name__)

MANIFEST_NAME = "Cargo.toml"


class ManifestReader:
    """Reads package metadata from a Cargo manifest.

    Parameters
    ----------
    path : str | Path | None
        Manifest file, or a directory containing ``Cargo.toml``.
        Defaults to the current working directory.

    Examples
    --------
    Example usage::

        metadata = ManifestReader("path/to/crate").read()
        print(metadata.name, metadata.version)
    """

    def __init__(self, path: str | Path | None = None) -> None:
        location = Path(path) if path else Path.cwd()
        self._path = location / MANIFEST_NAME if location.is_dir() else location

    @property
    def path(self) -> Path:
        return self._path

    @property
    def project_root(self) -> Path:
        return self._path.parent

    def read(self) -> PackageMetadata:
        """Read and parse the manifest.

        Returns
        -------
        PackageMetadata
            Parsed identity and descriptive fields

        Raises
        ------
        ManifestNotFoundError
            If the manifest file does not exist
        ManifestMalformedError
            If the file is not valid TOML or required fields are unusable
        """
        if not self._path.is_file():
            raise ManifestNotFoundError(self._path)

        logger.debug("Reading manifest {path}", path=self._path)
        try:
            with self._path.open("rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ManifestMalformedError(self._path, f"invalid TOML: {e}") from e
        except OSError as e:
            raise ManifestMalformedError(self._path, f"cannot read file: {e}") from e

        metadata = self._parse(data)
        logger.debug(
            "Parsed manifest for {name} {version}", name=metadata.name, version=metadata.version
        )
        return metadata

    def _parse(self, data: dict[str, Any]) -> PackageMetadata:
        package = data.get("package")
        if not isinstance(package, dict):
            raise ManifestMalformedError(self._path, "missing [package] table")

        workspace = data.get("workspace")
        inherited = workspace.get("package", {}) if isinstance(workspace, dict) else {}
        if not isinstance(inherited, dict):
            inherited = {}

        name = self._field(package, inherited, "name")
        if not isinstance(name, str) or not name.strip():
            raise ManifestMalformedError(self._path, "package.name is missing or empty")

        raw_version = self._field(package, inherited, "version")
        if not isinstance(raw_version, str) or not raw_version.strip():
            raise ManifestMalformedError(self._path, "package.version is missing or empty")
        try:
            version = Version.parse(raw_version)
        except ValueError as e:
            raise ManifestMalformedError(self._path, str(e)) from e

        return PackageMetadata(
            name=name.strip(),
            version=version,
            description=self._optional_str(package, inherited, "description"),
            license=self._optional_str(package, inherited, "license"),
            license_file=self._optional_str(package, inherited, "license-file"),
            repository=self._optional_str(package, inherited, "repository"),
            edition=self._optional_str(package, inherited, "edition"),
            publish=self._publish(self._field(package, inherited, "publish")),
        )

    def _field(self, package: dict[str, Any], inherited: dict[str, Any], key: str) -> Any:
        """Return ``package[key]``, resolving ``key.workspace = true`` inheritance."""
        value = package.get(key)
        if isinstance(value, dict) and value.get("workspace") is True:
            if key not in inherited:
                raise ManifestMalformedError(
                    self._path,
                    f"package.{key} inherits from the workspace but [workspace.package] "
                    f"does not define it",
                )
            return inherited[key]
        return value

    def _optional_str(self, package: dict[str, Any], inherited: dict[str, Any], key: str) -> str:
        value = self._field(package, inherited, key)
        if value is None:
            return ""
        if not isinstance(value, str):
            logger.debug("Ignoring non-string package.{key}: {value!r}", key=key, value=value)
            return ""
        return value

    def _publish(self, value: Any) -> bool | tuple[str, ...] | None:
        if value is None or isinstance(value, bool):
            return value
        if isinstance(value, list) and all(isinstance(item, str) for item in value):
            return tuple(value)
        raise ManifestMalformedError(
            self._path, "package.publish must be a boolean or a list of registry names"
        )


def read_manifest(path: str | Path | None = None) -> PackageMetadata:
    """Read package metadata from ``path`` (file or directory)."""
    return ManifestReader(path).read()
