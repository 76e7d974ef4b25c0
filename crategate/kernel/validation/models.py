"""Core models for the pre-publish validation report."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class Category(StrEnum):
    """What a finding is about. Declaration order is the report order."""

    GIT = "git"
    METADATA = "metadata"
    OWNERSHIP = "ownership"
    VERSION_COLLISION = "version_collision"


class Severity(StrEnum):
    """How a finding affects the verdict."""

    INFO = "info"
    WARNING = "warning"
    BLOCKING = "blocking"


class Verdict(StrEnum):
    """Aggregate decision derived from every finding's severity."""

    PROCEED = "proceed"
    PROCEED_WITH_WARNINGS = "proceed_with_warnings"
    BLOCKED = "blocked"


_CATEGORY_RANK = {category: rank for rank, category in enumerate(Category)}


@dataclass(frozen=True, slots=True)
class Finding:
    """A single validation result."""

    category: Category
    severity: Severity
    message: str

    def to_dict(self) -> dict[str, str]:
        return {
            "category": self.category.value,
            "severity": self.severity.value,
            "message": self.message,
        }


def compute_verdict(severities: Iterable[Severity]) -> Verdict:
    """Derive the verdict from a collection of severities.

    BLOCKED iff any severity is BLOCKING; PROCEED_WITH_WARNINGS iff none is
    BLOCKING but at least one is WARNING; PROCEED otherwise.
    """
    seen = set(severities)
    if Severity.BLOCKING in seen:
        return Verdict.BLOCKED
    if Severity.WARNING in seen:
        return Verdict.PROCEED_WITH_WARNINGS
    return Verdict.PROCEED


class Report:
    """Ordered findings from one validation run.

    Findings are kept in category order (git, metadata, ownership, version
    collision); within a category the insertion order is preserved.
    """

    __slots__ = ("_findings",)

    def __init__(self, findings: Iterable[Finding] = ()) -> None:
        """Initialize a report, ordering ``findings`` by category."""
        self._findings: tuple[Finding, ...] = tuple(
            sorted(findings, key=lambda f: _CATEGORY_RANK[f.category])
        )

    @classmethod
    def from_findings(cls, findings: Iterable[Finding]) -> Report:
        return cls(findings)

    @property
    def findings(self) -> tuple[Finding, ...]:
        """All findings, in report order."""
        return self._findings

    @property
    def verdict(self) -> Verdict:
        return compute_verdict(f.severity for f in self._findings)

    @property
    def blocking(self) -> list[Finding]:
        """Findings with severity BLOCKING."""
        return [f for f in self._findings if f.severity is Severity.BLOCKING]

    @property
    def warnings(self) -> list[Finding]:
        """Findings with severity WARNING."""
        return [f for f in self._findings if f.severity is Severity.WARNING]

    @property
    def info(self) -> list[Finding]:
        """Findings with severity INFO."""
        return [f for f in self._findings if f.severity is Severity.INFO]

    @property
    def is_blocked(self) -> bool:
        return self.verdict is Verdict.BLOCKED

    def by_category(self, category: Category) -> list[Finding]:
        return [f for f in self._findings if f.category is category]

    def to_dict(self) -> dict[str, Any]:
        return {
            "verdict": self.verdict.value,
            "findings": [f.to_dict() for f in self._findings],
        }

    def __len__(self) -> int:
        return len(self._findings)

    def __repr__(self) -> str:
        return f"Report(verdict={self.verdict.value!r}, findings={len(self._findings)})"
