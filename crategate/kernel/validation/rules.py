"""Validation rules turning collected state into findings.

Every rule is a pure function of :class:`ValidationInputs`; all I/O
happens in the drivers before the rules run. ``run_rules`` merges the
findings of every rule into one :class:`Report`, whose ordering does not
depend on the order the rules ran in.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

from crategate.kernel.config.models import GitConfig, MetadataConfig, RegistryConfig
from crategate.kernel.domain.models import (
    PackageMetadata,
    RegistryInfo,
    RegistryResult,
    RegistryUnreachable,
    RepoStatus,
    RepoStatusKind,
)
from crategate.kernel.validation.models import Category, Finding, Report, Severity

# Registry name cargo uses for crates.io in ``package.publish`` lists
CRATES_IO = "crates-io"


@dataclass(frozen=True, slots=True)
class ValidationInputs:
    """Everything the rules look at for one invocation."""

    metadata: PackageMetadata
    repo_status: RepoStatus
    registry: RegistryResult
    registry_config: RegistryConfig = field(default_factory=RegistryConfig)
    git_config: GitConfig = field(default_factory=GitConfig)
    metadata_config: MetadataConfig = field(default_factory=MetadataConfig)
    # Registry the publish command targets; None when it is addressed by index URL
    target_registry: str | None = CRATES_IO


class ValidationRule(Protocol):
    """Protocol for a single validation rule."""

    category: Category

    def check(self, inputs: ValidationInputs) -> list[Finding]:
        """Run this rule and return its findings."""
        ...


def _format_paths(paths: tuple[str, ...], limit: int) -> str:
    shown = ", ".join(paths[:limit])
    if len(paths) > limit:
        shown += f" ... and {len(paths) - limit} more"
    return shown


# ---------------------------------------------------------------------------
# Git
# ---------------------------------------------------------------------------


class WorkingTreeRule:
    """Report uncommitted changes. Never blocks: the operator may publish anyway."""

    category = Category.GIT

    def check(self, inputs: ValidationInputs) -> list[Finding]:
        status = inputs.repo_status
        if status.kind is RepoStatusKind.CLEAN:
            return [Finding(self.category, Severity.INFO, "No uncommitted git changes")]
        if status.kind is RepoStatusKind.UNAVAILABLE:
            return [
                Finding(self.category, Severity.WARNING, f"git status unknown: {status.reason}")
            ]
        count = len(status.changed_paths)
        listed = _format_paths(status.changed_paths, inputs.git_config.max_listed_paths)
        noun = "path" if count == 1 else "paths"
        return [
            Finding(
                self.category,
                Severity.WARNING,
                f"Uncommitted git changes ({count} {noun}): {listed}",
            )
        ]


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------


class MetadataCompletenessRule:
    """Warn about descriptive fields crates.io users expect to see."""

    category = Category.METADATA

    def check(self, inputs: ValidationInputs) -> list[Finding]:
        metadata = inputs.metadata
        missing = []
        if not metadata.description.strip():
            missing.append("description")
        if not metadata.has_license:
            missing.append("license")
        if inputs.metadata_config.require_repository and not metadata.repository.strip():
            missing.append("repository")
        return [
            Finding(self.category, Severity.WARNING, f"Package is missing: {name}")
            for name in missing
        ]


class EditionRule:
    """Hint when the edition differs from the one the project expects."""

    category = Category.METADATA

    def check(self, inputs: ValidationInputs) -> list[Finding]:
        expected = inputs.metadata_config.expected_edition
        edition = inputs.metadata.edition
        if not expected or edition == expected:
            return []
        if not edition:
            message = f"No edition set (cargo defaults to 2015; did you mean {expected}?)"
        else:
            message = f"Edition {edition} (did you mean {expected}?)"
        return [Finding(self.category, Severity.INFO, message)]


class PublishAllowedRule:
    """Block when the manifest forbids publishing to the target registry."""

    category = Category.METADATA

    def check(self, inputs: ValidationInputs) -> list[Finding]:
        publish = inputs.metadata.publish
        target = inputs.target_registry
        if publish is None or publish is True:
            return []
        if publish is False:
            return [self._forbidden("package.publish = false")]

        allowed = ", ".join(publish) or "no registries"
        if target is None:
            return [
                Finding(
                    self.category,
                    Severity.WARNING,
                    f"package.publish only allows: {allowed} (not checked against --index)",
                )
            ]
        if target in publish:
            return []
        return [self._forbidden(f"package.publish only allows: {allowed}, not {target}")]

    def _forbidden(self, reason: str) -> Finding:
        return Finding(self.category, Severity.BLOCKING, f"Manifest forbids publishing ({reason})")


# ---------------------------------------------------------------------------
# Ownership
# ---------------------------------------------------------------------------


class OwnershipRule:
    """Advisory ownership check; the registry enforces ownership on upload.

    Under the ``strict`` ownership policy, "not an owner" and "ownership
    unknown" become blocking.
    """

    category = Category.OWNERSHIP

    def check(self, inputs: ValidationInputs) -> list[Finding]:
        registry = inputs.registry
        if isinstance(registry, RegistryUnreachable):
            return []
        name = inputs.metadata.name
        if not registry.exists:
            return [Finding(self.category, Severity.INFO, f"'{name}' is a new crate")]

        escalated = (
            Severity.BLOCKING
            if inputs.registry_config.ownership_policy == "strict"
            else Severity.WARNING
        )
        username = inputs.registry_config.username
        if registry.current_user_is_owner is None:
            reason = registry.ownership_error or "not determined"
            return [Finding(self.category, escalated, f"Ownership of '{name}' unknown: {reason}")]
        if registry.current_user_is_owner:
            return [Finding(self.category, Severity.INFO, f"{username} owns '{name}'")]

        owners = ", ".join(registry.owners) or "none listed"
        return [
            Finding(
                self.category,
                escalated,
                f"'{name}' already exists and {username} is not an owner (owners: {owners})",
            )
        ]


# ---------------------------------------------------------------------------
# Version collision
# ---------------------------------------------------------------------------


class VersionCollisionRule:
    """Block re-publishing an existing version or publishing on an unknown registry state."""

    category = Category.VERSION_COLLISION

    def check(self, inputs: ValidationInputs) -> list[Finding]:
        registry = inputs.registry
        if isinstance(registry, RegistryUnreachable):
            return [
                Finding(
                    self.category, Severity.BLOCKING, f"registry unreachable: {registry.reason}"
                )
            ]
        version = inputs.metadata.version
        if version in registry.published_versions:
            return [
                Finding(
                    self.category,
                    Severity.BLOCKING,
                    f"Version {version} of '{inputs.metadata.name}' is already published",
                )
            ]
        return [self._ordering_finding(registry, inputs.metadata)]

    def _ordering_finding(self, registry: RegistryInfo, metadata: PackageMetadata) -> Finding:
        latest = registry.latest_release
        if latest is not None and metadata.version < latest:
            return Finding(
                self.category,
                Severity.WARNING,
                f"Version {metadata.version} is older than the latest published release {latest}",
            )
        if latest is None:
            return Finding(
                self.category, Severity.INFO, f"Version {metadata.version} is not yet published"
            )
        return Finding(
            self.category,
            Severity.INFO,
            f"Version {metadata.version} is not yet published (latest: {latest})",
        )


ALL_RULES: tuple[ValidationRule, ...] = (
    WorkingTreeRule(),
    MetadataCompletenessRule(),
    EditionRule(),
    PublishAllowedRule(),
    OwnershipRule(),
    VersionCollisionRule(),
)


def run_rules(rules: Sequence[ValidationRule], inputs: ValidationInputs) -> Report:
    """Run ``rules`` against ``inputs`` and return the ordered report."""
    findings: list[Finding] = []
    for rule in rules:
        findings.extend(rule.check(inputs))
    return Report.from_findings(findings)


def collect_findings(inputs: ValidationInputs) -> Report:
    """Run every built-in rule against ``inputs``."""
    return run_rules(ALL_RULES, inputs)
