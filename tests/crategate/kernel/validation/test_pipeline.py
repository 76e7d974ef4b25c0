"""Tests for the validation pipeline with injected drivers."""

from __future__ import annotations

import asyncio

import pytest

from crategate.drivers.manifest import ManifestReader
from crategate.kernel.config.models import CrateGateConfig, RegistryConfig
from crategate.kernel.domain.models import RegistryInfo, RegistryResult, RepoStatus
from crategate.kernel.domain.version import Version
from crategate.kernel.exceptions import ManifestNotFoundError
from crategate.kernel.validation.models import Category, Verdict
from crategate.kernel.validation.pipeline import ValidationPipeline


class FakeGit:
    def __init__(self, status: RepoStatus, delay: float = 0.0) -> None:
        self.status = status
        self.delay = delay
        self.calls = 0

    async def acheck(self) -> RepoStatus:
        self.calls += 1
        await asyncio.sleep(self.delay)
        return self.status


class FakeRegistry:
    def __init__(self, result: RegistryResult, delay: float = 0.0) -> None:
        self.result = result
        self.delay = delay
        self.queries: list[tuple[str, str | None]] = []
        self.closed = False

    async def aquery(self, name: str, username: str | None) -> RegistryResult:
        self.queries.append((name, username))
        await asyncio.sleep(self.delay)
        return self.result

    async def aclose(self) -> None:
        self.closed = True


OWNED = RegistryInfo(
    exists=True,
    published_versions=(Version.parse("1.1.0"),),
    current_user_is_owner=True,
    owners=("ferris",),
)


@pytest.mark.asyncio
async def test_proceed_on_clean_owned_new_version(write_manifest) -> None:
    registry = FakeRegistry(OWNED)
    pipeline = ValidationPipeline(
        ManifestReader(write_manifest()),
        FakeGit(RepoStatus.clean()),
        registry,
        CrateGateConfig(registry=RegistryConfig(username="ferris")),
    )
    outcome = await pipeline.arun()
    assert outcome.report.verdict is Verdict.PROCEED
    assert outcome.metadata.name == "foo"
    assert registry.queries == [("foo", "ferris")]


@pytest.mark.parametrize(("git_delay", "registry_delay"), [(0.02, 0.0), (0.0, 0.02)])
@pytest.mark.asyncio
async def test_report_order_does_not_depend_on_completion_order(
    write_manifest, git_delay: float, registry_delay: float
) -> None:
    pipeline = ValidationPipeline(
        ManifestReader(write_manifest()),
        FakeGit(RepoStatus.dirty(["src/lib.rs"]), delay=git_delay),
        FakeRegistry(RegistryInfo(exists=False), delay=registry_delay),
    )
    outcome = await pipeline.arun()
    categories = [f.category for f in outcome.report.findings]
    assert categories == [Category.GIT, Category.OWNERSHIP, Category.VERSION_COLLISION]
    assert outcome.report.verdict is Verdict.PROCEED_WITH_WARNINGS


@pytest.mark.asyncio
async def test_manifest_error_stops_before_other_checks(tmp_path) -> None:
    git = FakeGit(RepoStatus.clean())
    registry = FakeRegistry(OWNED)
    pipeline = ValidationPipeline(ManifestReader(tmp_path), git, registry)
    with pytest.raises(ManifestNotFoundError):
        await pipeline.arun()
    assert git.calls == 0
    assert registry.queries == []


@pytest.mark.asyncio
async def test_aclose_closes_registry(write_manifest) -> None:
    registry = FakeRegistry(OWNED)
    pipeline = ValidationPipeline(
        ManifestReader(write_manifest()), FakeGit(RepoStatus.clean()), registry
    )
    await pipeline.aclose()
    assert registry.closed


def test_from_config_wires_real_drivers(write_manifest, tmp_path) -> None:
    write_manifest()
    pipeline = ValidationPipeline.from_config(CrateGateConfig(), tmp_path)
    assert isinstance(pipeline._manifest, ManifestReader)
    assert pipeline._manifest.project_root == tmp_path
