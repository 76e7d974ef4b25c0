"""Configuration file for pytest containing shared fixtures.

- isolated_env: strips CRATEGATE_* variables and points CARGO_HOME at a temp dir
- write_manifest: writes a Cargo.toml into a temp project directory
"""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path

import pytest

DEFAULT_MANIFEST = """\
[package]
name = "foo"
version = "1.2.0"
edition = "2021"
description = "A test crate"
license = "MIT"
repository = "https://github.com/example/foo"
"""


@pytest.fixture(autouse=True)
def isolated_env(
    monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory
) -> None:
    """Keep the developer's environment and ~/.cargo/username out of tests."""
    for key in list(os.environ):
        if key.startswith("CRATEGATE_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("CARGO_HOME", str(tmp_path_factory.mktemp("cargo_home")))


@pytest.fixture
def write_manifest(tmp_path: Path) -> Callable[[str], Path]:
    """Return a helper writing ``Cargo.toml`` into ``tmp_path``."""

    def _write(content: str = DEFAULT_MANIFEST) -> Path:
        manifest = tmp_path / "Cargo.toml"
        manifest.write_text(content, encoding="utf-8")
        return manifest

    return _write
