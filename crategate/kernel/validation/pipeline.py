"""Validation pipeline: collect state from the drivers and build the report.

The manifest is read first (its errors are fatal and propagate). The git
status query and the registry query do not depend on each other and run
concurrently. The collected state then goes through the pure rules in
:mod:`crategate.kernel.validation.rules`.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from crategate.drivers.git.git_status import GitStatusChecker
from crategate.drivers.manifest.manifest_reader import ManifestReader
from crategate.drivers.registry.registry_client import RegistryClient
from crategate.kernel.config.models import CrateGateConfig
from crategate.kernel.domain.models import PackageMetadata, RegistryResult, RepoStatus
from crategate.kernel.logging import get_logger
from crategate.kernel.validation.models import Report
from crategate.kernel.validation.rules import CRATES_IO, ValidationInputs, collect_findings

logger = get_logger(__name__)


class MetadataSource(Protocol):
    def read(self) -> PackageMetadata: ...


class RepoStatusSource(Protocol):
    async def acheck(self) -> RepoStatus: ...


class RegistrySource(Protocol):
    async def aquery(self, name: str, username: str | None) -> RegistryResult: ...


@dataclass(frozen=True, slots=True)
class ValidationOutcome:
    """Collected state plus the report built from it."""

    metadata: PackageMetadata
    repo_status: RepoStatus
    registry: RegistryResult
    report: Report


class ValidationPipeline:
    """Runs the three leaf checks and merges their findings into one report.

    Drivers are injected so tests can substitute fakes.

    Parameters
    ----------
    manifest : MetadataSource
        Reads the package manifest
    git : RepoStatusSource
        Classifies the working tree
    registry : RegistrySource
        Queries existence, versions and ownership
    config : CrateGateConfig
        Rule settings (ownership policy, path listing limit, expected edition)
    target_registry : str | None
        Registry the publish command targets, checked against ``package.publish``
    """

    def __init__(
        self,
        manifest: MetadataSource,
        git: RepoStatusSource,
        registry: RegistrySource,
        config: CrateGateConfig | None = None,
        target_registry: str | None = CRATES_IO,
    ) -> None:
        self._manifest = manifest
        self._git = git
        self._registry = registry
        self._config = config or CrateGateConfig()
        self._target_registry = target_registry

    @classmethod
    def from_config(
        cls,
        config: CrateGateConfig,
        manifest_path: str | Path | None = None,
        target_registry: str | None = CRATES_IO,
    ) -> ValidationPipeline:
        """Build a pipeline wired to the real drivers."""
        reader = ManifestReader(manifest_path)
        return cls(
            manifest=reader,
            git=GitStatusChecker(reader.project_root, timeout=config.git.timeout),
            registry=RegistryClient.from_config(config.registry),
            config=config,
            target_registry=target_registry,
        )

    async def arun(self) -> ValidationOutcome:
        """Collect findings and build the report.

        Raises
        ------
        ManifestNotFoundError, ManifestMalformedError
            Before any other check runs
        """
        metadata = self._manifest.read()
        logger.info("Validating {name} {version}", name=metadata.name, version=metadata.version)

        repo_status, registry = await asyncio.gather(
            self._git.acheck(),
            self._registry.aquery(metadata.name, self._config.registry.username),
        )

        report = collect_findings(
            ValidationInputs(
                metadata=metadata,
                repo_status=repo_status,
                registry=registry,
                registry_config=self._config.registry,
                git_config=self._config.git,
                metadata_config=self._config.metadata,
                target_registry=self._target_registry,
            )
        )
        logger.info("Verdict: {verdict}", verdict=report.verdict.value)
        return ValidationOutcome(metadata, repo_status, registry, report)

    async def aclose(self) -> None:
        """Release the registry client's connection pool, if it has one."""
        aclose = getattr(self._registry, "aclose", None)
        if aclose is not None:
            await aclose()
