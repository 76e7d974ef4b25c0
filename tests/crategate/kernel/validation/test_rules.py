"""Tests for the validation rules."""

from __future__ import annotations

from dataclasses import replace

import pytest

from crategate.kernel.config.models import GitConfig, MetadataConfig, RegistryConfig
from crategate.kernel.domain.models import (
    PackageMetadata,
    RegistryInfo,
    RegistryUnreachable,
    RepoStatus,
)
from crategate.kernel.domain.version import Version
from crategate.kernel.validation.models import Category, Severity, Verdict
from crategate.kernel.validation.rules import (
    EditionRule,
    MetadataCompletenessRule,
    OwnershipRule,
    PublishAllowedRule,
    ValidationInputs,
    VersionCollisionRule,
    WorkingTreeRule,
    collect_findings,
)


def _versions(*texts: str) -> tuple[Version, ...]:
    return tuple(Version.parse(t) for t in texts)


@pytest.fixture
def metadata() -> PackageMetadata:
    return PackageMetadata(
        name="foo",
        version=Version.parse("1.2.0"),
        description="A test crate",
        license="MIT",
        repository="https://github.com/example/foo",
        edition="2021",
    )


@pytest.fixture
def owned_registry() -> RegistryInfo:
    return RegistryInfo(
        exists=True,
        published_versions=_versions("1.0.0", "1.1.0"),
        current_user_is_owner=True,
        owners=("ferris",),
    )


def _inputs(
    metadata: PackageMetadata,
    registry: RegistryInfo | RegistryUnreachable,
    repo_status: RepoStatus | None = None,
    ownership_policy: str = "advisory",
) -> ValidationInputs:
    return ValidationInputs(
        metadata=metadata,
        repo_status=repo_status or RepoStatus.clean(),
        registry=registry,
        registry_config=RegistryConfig(
            username="ferris", ownership_policy=ownership_policy  # type: ignore[arg-type]
        ),
    )


class TestScenarios:
    """End-to-end rule evaluation over realistic states."""

    def test_clean_owner_new_version_proceeds(self, metadata, owned_registry) -> None:
        report = collect_findings(_inputs(metadata, owned_registry))
        assert report.verdict is Verdict.PROCEED
        assert report.warnings == []
        assert report.blocking == []

    def test_duplicate_version_blocks(self, metadata, owned_registry) -> None:
        registry = replace(owned_registry, published_versions=_versions("1.0.0", "1.2.0"))
        report = collect_findings(_inputs(metadata, registry))
        assert report.verdict is Verdict.BLOCKED
        assert [f.category for f in report.blocking] == [Category.VERSION_COLLISION]

    def test_dirty_new_crate_warns_once(self, metadata) -> None:
        report = collect_findings(
            _inputs(metadata, RegistryInfo(exists=False), RepoStatus.dirty(["src/a.rs"]))
        )
        assert report.verdict is Verdict.PROCEED_WITH_WARNINGS
        assert len(report.warnings) == 1
        assert report.warnings[0].category is Category.GIT
        assert "src/a.rs" in report.warnings[0].message

    def test_unreachable_registry_blocks(self, metadata) -> None:
        report = collect_findings(_inputs(metadata, RegistryUnreachable("timed out")))
        assert report.verdict is Verdict.BLOCKED
        assert report.blocking[0].message == "registry unreachable: timed out"
        assert report.by_category(Category.OWNERSHIP) == []

    @pytest.mark.parametrize(
        "status", [RepoStatus.dirty(["a", "b"]), RepoStatus.unavailable("not a git repository")]
    )
    def test_git_alone_never_blocks(self, metadata, owned_registry, status) -> None:
        report = collect_findings(_inputs(metadata, owned_registry, status))
        assert report.verdict is Verdict.PROCEED_WITH_WARNINGS


class TestWorkingTreeRule:
    """Git findings."""

    def test_clean_is_info(self, metadata, owned_registry) -> None:
        [finding] = WorkingTreeRule().check(_inputs(metadata, owned_registry))
        assert finding.severity is Severity.INFO

    def test_unavailable_message(self, metadata, owned_registry) -> None:
        inputs = _inputs(metadata, owned_registry, RepoStatus.unavailable("no repo"))
        [finding] = WorkingTreeRule().check(inputs)
        assert finding.severity is Severity.WARNING
        assert finding.message.startswith("git status unknown")

    def test_long_path_lists_are_truncated(self, metadata, owned_registry) -> None:
        paths = [f"src/file{i}.rs" for i in range(5)]
        inputs = replace(
            _inputs(metadata, owned_registry, RepoStatus.dirty(paths)),
            git_config=GitConfig(max_listed_paths=2),
        )
        [finding] = WorkingTreeRule().check(inputs)
        assert "src/file0.rs, src/file1.rs ... and 3 more" in finding.message
        assert "(5 paths)" in finding.message


class TestMetadataRules:
    """Metadata completeness, edition and publish restrictions."""

    def test_missing_optional_fields_warn(self, metadata, owned_registry) -> None:
        bare = replace(metadata, description="", license="", repository="")
        findings = MetadataCompletenessRule().check(_inputs(bare, owned_registry))
        assert [f.message for f in findings] == [
            "Package is missing: description",
            "Package is missing: license",
        ]
        assert all(f.severity is Severity.WARNING for f in findings)

    def test_license_file_satisfies_license(self, metadata, owned_registry) -> None:
        with_file = replace(metadata, license="", license_file="LICENSE.txt")
        assert MetadataCompletenessRule().check(_inputs(with_file, owned_registry)) == []

    def test_repository_only_checked_when_required(self, metadata, owned_registry) -> None:
        no_repo = replace(metadata, repository="")
        assert MetadataCompletenessRule().check(_inputs(no_repo, owned_registry)) == []

        inputs = replace(
            _inputs(no_repo, owned_registry),
            metadata_config=MetadataConfig(require_repository=True),
        )
        [finding] = MetadataCompletenessRule().check(inputs)
        assert finding.message == "Package is missing: repository"

    def test_edition_hint_is_info(self, metadata, owned_registry) -> None:
        [finding] = EditionRule().check(_inputs(replace(metadata, edition="2018"), owned_registry))
        assert finding.severity is Severity.INFO
        assert "did you mean 2021?" in finding.message

    def test_edition_hint_disabled(self, metadata, owned_registry) -> None:
        inputs = replace(
            _inputs(replace(metadata, edition="2018"), owned_registry),
            metadata_config=MetadataConfig(expected_edition=None),
        )
        assert EditionRule().check(inputs) == []

    @pytest.mark.parametrize(
        ("publish", "blocked"),
        [
            (None, False),
            (True, False),
            (False, True),
            (("crates-io",), False),
            (("internal",), True),
        ],
    )
    def test_publish_key(self, metadata, owned_registry, publish, blocked) -> None:
        findings = PublishAllowedRule().check(
            _inputs(replace(metadata, publish=publish), owned_registry)
        )
        assert bool(findings) is blocked
        assert all(f.severity is Severity.BLOCKING for f in findings)

    @pytest.mark.parametrize(
        ("target", "blocked"), [("my-reg", False), ("crates-io", True), ("other", True)]
    )
    def test_publish_list_checked_against_target_registry(
        self, metadata, owned_registry, target: str, blocked: bool
    ) -> None:
        inputs = replace(
            _inputs(replace(metadata, publish=("my-reg",)), owned_registry),
            target_registry=target,
        )
        findings = PublishAllowedRule().check(inputs)
        assert bool(findings) is blocked
        if blocked:
            assert findings[0].message.endswith(f"not {target})")

    def test_index_url_target_only_warns(self, metadata, owned_registry) -> None:
        inputs = replace(
            _inputs(replace(metadata, publish=("my-reg",)), owned_registry),
            target_registry=None,
        )
        [finding] = PublishAllowedRule().check(inputs)
        assert finding.severity is Severity.WARNING
        assert "--index" in finding.message

    def test_publish_false_blocks_any_target(self, metadata, owned_registry) -> None:
        inputs = replace(
            _inputs(replace(metadata, publish=False), owned_registry), target_registry=None
        )
        [finding] = PublishAllowedRule().check(inputs)
        assert finding.severity is Severity.BLOCKING


class TestOwnershipRule:
    """Ownership is advisory unless the strict policy is configured."""

    def test_new_crate_is_info(self, metadata) -> None:
        [finding] = OwnershipRule().check(_inputs(metadata, RegistryInfo(exists=False)))
        assert finding.severity is Severity.INFO

    def test_not_owner_warns(self, metadata, owned_registry) -> None:
        registry = replace(owned_registry, current_user_is_owner=False, owners=("someone",))
        [finding] = OwnershipRule().check(_inputs(metadata, registry))
        assert finding.severity is Severity.WARNING
        assert "someone" in finding.message

    def test_unknown_warns(self, metadata, owned_registry) -> None:
        registry = replace(owned_registry, current_user_is_owner=None, ownership_error="HTTP 500")
        [finding] = OwnershipRule().check(_inputs(metadata, registry))
        assert finding.severity is Severity.WARNING
        assert "HTTP 500" in finding.message

    @pytest.mark.parametrize("owner", [False, None])
    def test_strict_policy_escalates(self, metadata, owned_registry, owner) -> None:
        registry = replace(owned_registry, current_user_is_owner=owner)
        inputs = _inputs(metadata, registry, ownership_policy="strict")
        [finding] = OwnershipRule().check(inputs)
        assert finding.severity is Severity.BLOCKING

    def test_strict_policy_keeps_owner_info(self, metadata, owned_registry) -> None:
        inputs = _inputs(metadata, owned_registry, ownership_policy="strict")
        [finding] = OwnershipRule().check(inputs)
        assert finding.severity is Severity.INFO


class TestVersionCollisionRule:
    """Duplicate and out-of-order versions."""

    def test_older_than_latest_warns(self, metadata, owned_registry) -> None:
        registry = replace(owned_registry, published_versions=_versions("1.0.0", "2.0.0"))
        [finding] = VersionCollisionRule().check(_inputs(metadata, registry))
        assert finding.severity is Severity.WARNING
        assert "2.0.0" in finding.message

    def test_prerelease_of_published_release_is_not_a_collision(self, metadata, owned_registry):
        pre = replace(metadata, version=Version.parse("1.2.0-rc.1"))
        registry = replace(owned_registry, published_versions=_versions("1.1.0", "1.2.0"))
        [finding] = VersionCollisionRule().check(_inputs(pre, registry))
        assert finding.severity is Severity.WARNING

    def test_latest_ignores_prereleases(self, metadata, owned_registry) -> None:
        registry = replace(owned_registry, published_versions=_versions("1.1.0", "1.3.0-beta.1"))
        [finding] = VersionCollisionRule().check(_inputs(metadata, registry))
        assert finding.severity is Severity.INFO
        assert "latest: 1.1.0" in finding.message
