"""Domain models describing the state the validation gate inspects.

Each model is produced by one leaf driver per invocation and is never
persisted: PackageMetadata by the manifest reader, RepoStatus by the git
status checker, and RegistryInfo / RegistryUnreachable by the registry
client.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from crategate.kernel.domain.version import Version


@dataclass(frozen=True, slots=True)
class PackageMetadata:
    """Identity and descriptive fields read from the package manifest.

    Optional fields that the manifest omits are empty strings. ``publish``
    mirrors cargo's ``package.publish`` key: None when absent, False for
    ``publish = false``, or the tuple of allowed registry names.
    """

    name: str
    version: Version
    description: str = ""
    license: str = ""
    license_file: str = ""
    repository: str = ""
    edition: str = ""
    publish: bool | tuple[str, ...] | None = None

    @property
    def has_license(self) -> bool:
        return bool(self.license.strip() or self.license_file.strip())


class RepoStatusKind(StrEnum):
    """Classification of the working tree."""

    CLEAN = "clean"
    DIRTY = "dirty"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True, slots=True)
class RepoStatus:
    """Result of the version-control status query.

    Use the ``clean``/``dirty``/``unavailable`` constructors rather than
    building instances directly.
    """

    kind: RepoStatusKind
    changed_paths: tuple[str, ...] = ()
    reason: str = ""

    @classmethod
    def clean(cls) -> RepoStatus:
        return cls(RepoStatusKind.CLEAN)

    @classmethod
    def dirty(cls, paths: list[str] | tuple[str, ...]) -> RepoStatus:
        return cls(RepoStatusKind.DIRTY, changed_paths=tuple(paths))

    @classmethod
    def unavailable(cls, reason: str) -> RepoStatus:
        return cls(RepoStatusKind.UNAVAILABLE, reason=reason)


@dataclass(frozen=True, slots=True)
class RegistryInfo:
    """What the registry knows about a package.

    Attributes
    ----------
    exists : bool
        False only when the registry explicitly answered "not found"
    published_versions : tuple[Version, ...]
        Every published version, ascending
    current_user_is_owner : bool | None
        None when ownership could not be determined
    owners : tuple[str, ...]
        Owner logins, when the ownership query succeeded
    ownership_error : str | None
        Why ``current_user_is_owner`` is None, if the crate exists
    """

    exists: bool
    published_versions: tuple[Version, ...] = ()
    current_user_is_owner: bool | None = None
    owners: tuple[str, ...] = field(default=())
    ownership_error: str | None = None

    @property
    def latest_release(self) -> Version | None:
        """Highest published non-pre-release version, if any."""
        releases = [v for v in self.published_versions if not v.is_prerelease]
        return max(releases) if releases else None


@dataclass(frozen=True, slots=True)
class RegistryUnreachable:
    """The existence query failed for a reason other than "not found"."""

    reason: str


RegistryResult = RegistryInfo | RegistryUnreachable
