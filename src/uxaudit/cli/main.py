"""
uxaudit CLI
===========

Thin entry point over the audit core.

Usage:
    uxaudit audit <path>                 # Audit a CLI tool, write JSON report
    uxaudit audit <path> --no-validation # Skip the validation cycles
    uxaudit history <path>               # List saved validation artifacts
    uxaudit version                      # Show version information
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from uxaudit import __version__
from uxaudit.audit.application.audit_orchestrator import AuditOrchestrator
from uxaudit.audit.application.config_loader import load_audit_config
from uxaudit.audit.domain.enums import Severity
from uxaudit.audit.domain.models import AuditConfig
from uxaudit.audit.domain.session import AuditSession
from uxaudit.shared.domain.exceptions import (
    AuditNotPermittedError,
    AuditPathNotFoundError,
    ConfigurationError,
)
from uxaudit.shared.infrastructure.logging import configure_logging
from uxaudit.validation.infrastructure.artifact_store import load_validation_results

app = typer.Typer(
    name="uxaudit",
    help="Audit a command-line tool the way a first-time user would meet it",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()

_SEVERITY_STYLES = {
    Severity.CRITICAL: "bold red",
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "dim",
}


def _render_summary(session: AuditSession) -> None:
    table = Table(title="Phase Results")
    table.add_column("Phase", style="cyan")
    table.add_column("Status")
    table.add_column("Score", justify="right")
    table.add_column("Duration", justify="right")

    for name, result in session.phase_results.items():
        status = "[green]ok[/green]" if result.success else "[red]failed[/red]"
        score = f"{result.score:.1f}" if result.score is not None else "-"
        table.add_row(name, status, score, f"{result.duration:.1f}s")
    console.print(table)

    if session.red_flags:
        flags = Table(title=f"Red Flags ({len(session.red_flags)})")
        flags.add_column("Severity")
        flags.add_column("Category", style="cyan")
        flags.add_column("Title")
        for flag in sorted(session.red_flags, key=lambda f: f.severity.rank):
            style = _SEVERITY_STYLES[flag.severity]
            flags.add_row(f"[{style}]{flag.severity.value}[/{style}]", flag.category, flag.title)
        console.print(flags)

    validation = session.validation
    if validation is not None and not validation.skipped:
        console.print(
            f"Validation: [bold]{validation.status.value}[/bold] "
            f"(score {validation.score:.1f}, confidence {validation.confidence:.0%})"
        )

    console.print(
        Panel.fit(
            f"[bold]Score:[/bold] {session.score:.1f}/10   [bold]Grade:[/bold] {session.grade}",
            title="Overall",
            border_style="cyan",
        )
    )


@app.command()
def audit(
    path: Path = typer.Argument(..., help="Directory of the tool to audit"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Where to write the JSON report"),
    no_validation: bool = typer.Option(False, "--no-validation", help="Skip the validation cycles"),
    tier: Optional[str] = typer.Option(None, "--tier", help="Plan label recorded in the report"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
    context: Optional[str] = typer.Option(None, "--context", help="Extra context about the tool"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML audit config"),
):
    """Audit a CLI tool and write a JSON report."""
    configure_logging(verbose=verbose)

    overrides = {
        "output": str(output) if output else None,
        "validation": False if no_validation else None,
        "tier": tier,
        "verbose": True if verbose else None,
        "context": context,
    }
    try:
        if config_file:
            config = load_audit_config(config_file, **overrides)
        else:
            config = AuditConfig(**{k: v for k, v in overrides.items() if v is not None})
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(code=1)

    console.print(f"[cyan]Auditing[/cyan] {path}")
    orchestrator = AuditOrchestrator()

    try:
        session = asyncio.run(orchestrator.run_audit_async(path, config))
    except AuditPathNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)
    except AuditNotPermittedError as e:
        console.print(f"[yellow]{e}[/yellow]")
        raise typer.Exit(code=2)

    report_path = Path(config.output)
    report_path.write_text(json.dumps(session.to_json(), indent=2), encoding="utf-8")

    _render_summary(session)
    console.print(f"[dim]Report written to {report_path}[/dim]")


@app.command()
def history(path: Path = typer.Argument(..., help="Audited directory")):
    """List saved validation artifacts, newest first."""
    results = load_validation_results(path)
    if not results:
        console.print("[yellow]No validation artifacts found[/yellow]")
        return

    table = Table(title="Validation History")
    table.add_column("Validated At")
    table.add_column("Status")
    table.add_column("Score", justify="right")
    table.add_column("Confidence", justify="right")
    for result in results:
        table.add_row(
            result.validated_at.isoformat(timespec="seconds"),
            result.status.value,
            f"{result.score:.1f}",
            f"{result.confidence:.0%}",
        )
    console.print(table)


@app.command()
def version():
    """Show uxaudit version information"""
    table = Table(show_header=False, box=None)
    table.add_row("uxaudit Core", f"[bold green]v{__version__}[/bold green]")
    table.add_row("Python", sys.version.split()[0])
    table.add_row("Platform", sys.platform)
    console.print(Panel(table, title="[bold blue]uxaudit[/bold blue]", expand=False))


def main():
    """Entry point for setuptools."""
    app()


if __name__ == "__main__":
    app()
