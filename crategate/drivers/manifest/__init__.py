"""Cargo manifest reader."""

from crategate.drivers.manifest.manifest_reader import ManifestReader, read_manifest

__all__ = ["ManifestReader", "read_manifest"]
