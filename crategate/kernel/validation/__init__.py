"""Findings, verdicts and the rules that produce them."""

from crategate.kernel.validation.models import (
    Category,
    Finding,
    Report,
    Severity,
    Verdict,
    compute_verdict,
)
from crategate.kernel.validation.rules import (
    ALL_RULES,
    ValidationInputs,
    collect_findings,
    run_rules,
)

__all__ = [
    "ALL_RULES",
    "Category",
    "Finding",
    "Report",
    "Severity",
    "ValidationInputs",
    "Verdict",
    "collect_findings",
    "compute_verdict",
    "run_rules",
]
