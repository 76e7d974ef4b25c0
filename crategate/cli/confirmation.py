"""Confirmation gate: render the report and ask for an explicit go/no-go.

The gate reads standard input at most once. A blocked report is rendered
but never prompts, since no answer can override a blocking finding.
"""

from __future__ import annotations

from enum import StrEnum

from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt
from rich.table import Table

from crategate.kernel.domain.models import PackageMetadata, RepoStatus, RepoStatusKind
from crategate.kernel.validation.models import Report, Severity, Verdict

_AFFIRMATIVE = frozenset({"y", "yes"})

_SEVERITY_STYLE = {
    Severity.INFO: "dim",
    Severity.WARNING: "yellow",
    Severity.BLOCKING: "red",
}

_SEVERITY_MARK = {
    Severity.INFO: "[green]✔[/green]",
    Severity.WARNING: "[yellow]⚠[/yellow]",
    Severity.BLOCKING: "[red]✖[/red]",
}


class GateDecision(StrEnum):
    """Terminal decision of the confirmation gate."""

    CONFIRMED = "confirmed"
    DECLINED = "declined"
    BLOCKED = "blocked"


def is_affirmative(answer: str) -> bool:
    """True only for ``y`` / ``yes`` (any case, surrounding whitespace ignored)."""
    return answer.strip().lower() in _AFFIRMATIVE


class ConfirmationGate:
    """Renders a report to the operator and requests confirmation.

    Parameters
    ----------
    console : Console | None
        Console used for output and for the single input read
    """

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()

    def render(self, report: Report, metadata: PackageMetadata | None = None) -> None:
        """Print the package summary and every finding in report order."""
        console = self._console
        if metadata is not None:
            console.print()
            console.print(self._summary_table(metadata))

        console.print()
        console.print("[bold magenta]Findings:[/bold magenta]")
        for finding in report.findings:
            style = _SEVERITY_STYLE[finding.severity]
            console.print(
                f"  {_SEVERITY_MARK[finding.severity]} "
                f"[{style}]{finding.category.value}[/{style}]: {escape(finding.message)}",
                highlight=False,
            )

        n_block = len(report.blocking)
        n_warn = len(report.warnings)
        console.print()
        console.print(
            f"[bold]Verdict:[/bold] {self._verdict_text(report.verdict)}  "
            f"[red]{n_block} blocking[/red]  [yellow]{n_warn} warning(s)[/yellow]"
        )

    def decide(
        self,
        report: Report,
        metadata: PackageMetadata | None = None,
        repo_status: RepoStatus | None = None,
    ) -> GateDecision:
        """Render ``report`` and, unless it is blocked, prompt exactly once."""
        self.render(report, metadata)

        if report.is_blocked:
            self._console.print()
            self._console.print("[bold red]Publish cancelled:[/bold red]")
            for finding in report.blocking:
                self._console.print(f"  [red]✖[/red] {escape(finding.message)}", highlight=False)
            return GateDecision.BLOCKED

        question = self._question(repo_status)
        self._console.print()
        try:
            answer = Prompt.ask(
                f"[bold bright_blue]{question}[/bold bright_blue] [bright_cyan](y/n)[/bright_cyan]",
                console=self._console,
                default="",
                show_default=False,
            )
        except (EOFError, KeyboardInterrupt):
            self._console.print()
            self._console.print("[red]Publish cancelled.[/red]")
            return GateDecision.DECLINED

        if not is_affirmative(answer):
            self._console.print("[red]Publish cancelled.[/red]")
            return GateDecision.DECLINED
        return GateDecision.CONFIRMED

    @staticmethod
    def _question(repo_status: RepoStatus | None) -> str:
        if repo_status is not None and repo_status.kind is RepoStatusKind.DIRTY:
            return "Are you sure you want to publish with dirty directory?"
        return "Are you sure you want to publish?"

    @staticmethod
    def _verdict_text(verdict: Verdict) -> str:
        if verdict is Verdict.BLOCKED:
            return "[bold red]blocked[/bold red]"
        if verdict is Verdict.PROCEED_WITH_WARNINGS:
            return "[bold yellow]proceed with warnings[/bold yellow]"
        return "[bold green]proceed[/bold green]"

    @staticmethod
    def _summary_table(metadata: PackageMetadata) -> Table:
        table = Table(title="Package Information", show_header=False, border_style="magenta")
        table.add_column("Field", style="bright_magenta")
        table.add_column("Value")
        table.add_row("Name", metadata.name)
        table.add_row("Version", str(metadata.version))
        table.add_row("Edition", metadata.edition or "-")
        table.add_row("License", metadata.license or metadata.license_file or "-")
        table.add_row("Repository", metadata.repository or "-")
        table.add_row("Description", metadata.description or "-")
        return table
