"""Command-line interface for the site auditor."""

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .config import settings
from .errors import SiteAuditorError
from .models import AnalysisSummary
from .pipeline import AnalysisPipeline
from .storage import MARKET_INSIGHTS, JsonStorage
from .utils import hostname_of, normalize_seed_url, setup_logging

app = typer.Typer(
    name="site-auditor",
    help="Crawl websites, score their quality, and extract market insights.",
    no_args_is_help=True,
)
console = Console()


async def _create_and_run(url: str, name: str | None, data_dir: Path | None) -> tuple[str, AnalysisSummary, list]:
    storage = JsonStorage(data_dir)
    project = await storage.create_project(name or hostname_of(url) or url, url)
    summary = await AnalysisPipeline(storage).run(project.id)
    insights = await storage.query(project.id, MARKET_INSIGHTS)
    return project.id, summary, insights


@app.command()
def analyze(
    url: str = typer.Argument(..., help="The URL to analyze"),
    name: str = typer.Option(None, "--name", "-n", help="Project name (defaults to the hostname)"),
    data_dir: Path = typer.Option(None, "--data-dir", "-o", help="Directory for the JSON project store"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Create a project for a website and analyze it."""
    setup_logging(verbose)
    url = normalize_seed_url(url)

    console.print(Panel.fit(
        f"[bold blue]Site Auditor[/bold blue]\n"
        f"Analyzing: [green]{url}[/green]\n"
        f"Max Pages: {settings.max_pages} | Links per page: {settings.links_per_page}",
        title="Starting Analysis",
    ))

    try:
        project_id, summary, insights = asyncio.run(_create_and_run(url, name, data_dir))
    except KeyboardInterrupt:
        console.print("\n[yellow]Analysis cancelled by user[/yellow]")
        raise typer.Exit(1)
    except SiteAuditorError as e:
        console.print(f"\n[red]Error: {e}[/red]")
        raise typer.Exit(1)

    _display_results(summary, insights)
    store_dir = Path(data_dir or settings.data_dir) / project_id
    console.print(Panel.fit(f"Project: [cyan]{project_id}[/cyan]\nData: [cyan]{store_dir}[/cyan]", title="Output"))


def _score_style(score: int) -> str:
    if score >= 80:
        return "green"
    if score >= 60:
        return "yellow"
    return "red"


def _display_results(summary: AnalysisSummary, insights: list[dict]) -> None:
    """Display the analysis summary in formatted tables."""
    console.print()

    if summary.degraded:
        console.print("[yellow]The site could not be crawled; results are based on limited analysis.[/yellow]")

    table = Table(title="Analysis Summary", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Pages Analyzed", str(summary.pages_analyzed))
    table.add_row("Overall Score", str(summary.overall_score))
    table.add_row("Total Issues", str(summary.total_issues))
    table.add_row("High Severity Issues", str(summary.high_severity_issues))
    table.add_row("Passed / Warnings / Failed", f"{summary.passed} / {summary.warnings} / {summary.failed}")
    console.print(table)

    scores = Table(title="Category Scores", show_header=True)
    scores.add_column("Category", style="cyan")
    scores.add_column("Score")
    for category, score in summary.category_scores.items():
        style = _score_style(score)
        scores.add_row(category, f"[{style}]{score}[/{style}]")
    console.print(scores)

    if insights:
        console.print("\n[bold magenta]Market Insights:[/bold magenta]")
        for insight in insights:
            console.print(
                f"  • {insight['analysis_type']} "
                f"(confidence {insight['confidence_score']:.0%})"
            )


@app.command()
def serve(
    host: str = typer.Option(None, "--host", help="Interface to bind"),
    port: int = typer.Option(None, "--port", "-p", help="Port to listen on"),
    data_dir: Path = typer.Option(None, "--data-dir", "-o", help="Directory for the JSON project store"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Run the analyze API backed by the JSON project store."""
    import uvicorn

    from .api import create_app

    setup_logging(verbose)
    uvicorn.run(
        create_app(JsonStorage(data_dir)),
        host=host or settings.api_host,
        port=port or settings.api_port,
    )


@app.command()
def create(
    url: str = typer.Argument(..., help="The URL of the website"),
    name: str = typer.Option(None, "--name", "-n", help="Project name (defaults to the hostname)"),
    description: str = typer.Option(None, "--description", "-d", help="Project description"),
    data_dir: Path = typer.Option(None, "--data-dir", "-o", help="Directory for the JSON project store"),
) -> None:
    """Register a project without analyzing it, for use with the API."""
    setup_logging()
    url = normalize_seed_url(url)
    storage = JsonStorage(data_dir)
    project = asyncio.run(storage.create_project(name or hostname_of(url) or url, url, description))
    console.print(project.id)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"Site Auditor v{__version__}")


if __name__ == "__main__":
    app()
