"""Domain layer exports for crategate."""

from crategate.kernel.domain.models import (
    PackageMetadata,
    RegistryInfo,
    RegistryResult,
    RegistryUnreachable,
    RepoStatus,
    RepoStatusKind,
)
from crategate.kernel.domain.version import Version

__all__ = [
    "PackageMetadata",
    "RegistryInfo",
    "RegistryResult",
    "RegistryUnreachable",
    "RepoStatus",
    "RepoStatusKind",
    "Version",
]
