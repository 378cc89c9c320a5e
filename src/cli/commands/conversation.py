"""Analyze narrated text and stage what it describes."""

import click
from rich.console import Console
from rich.table import Table

from cli.utils import get_components

console = Console()

ACTION_TYPES = ["skill", "company", "education", "objective", "key_result"]


def _print_actions(actions) -> None:
    if not actions:
        console.print("[yellow]Nothing extracted.[/]")
        return
    table = Table(show_header=True, title="Extracted")
    table.add_column("Type", style="cyan")
    table.add_column("Entity", style="bold")
    table.add_column("Details", style="dim")
    for a in actions:
        details = ", ".join(f"{k}={v}" for k, v in a.details.populated().items())
        table.add_row(a.type.value, a.entity, details)
    console.print(table)


@click.command()
@click.argument("text")
@click.option(
    "--mode",
    type=click.Choice(["auto", "manual"]),
    default=None,
    help="auto stages commits immediately; manual only shows the analysis",
)
@click.option("--batch", "batch_id", default=None, help="Existing batch to add commits to")
@click.option("--title", default=None, help="Title for a new batch")
@click.option("--only", "only", multiple=True, type=click.Choice(ACTION_TYPES), help="Stage only these types")
def analyze(text, mode, batch_id, title, only):
    """Analyze TEXT for profile facts and commitments."""
    from insights.aggregator import compose_reply

    c = get_components()
    mode = mode or c["config_model"].extraction.default_mode
    outcome = c["service"].analyze(
        c["user_id"], text, mode=mode, batch_id=batch_id, batch_title=title, target_types=only or None
    )
    analysis = outcome.analysis

    _print_actions(analysis.actions)

    if analysis.commitment_insights:
        table = Table(show_header=True, title="Commitments")
        table.add_column("Type", style="magenta")
        table.add_column("Intensity")
        table.add_column("Timeframe", style="dim")
        table.add_column("Entity")
        for i in analysis.commitment_insights:
            table.add_row(i.type.value, i.intensity.value, i.timeframe.value, i.entity)
        console.print(table)

    console.print(
        f"\n[bold]Commitment score:[/] {analysis.commitment_score}  "
        f"[bold]Dominant:[/] {analysis.dominant_commitment_type}"
    )
    console.print(compose_reply(analysis, c["config_model"].response.seed))

    if outcome.batch:
        console.print(
            f"\n[green]Staged {len(outcome.commits)} commit(s)[/] in batch [cyan]{outcome.batch.id}[/]"
        )
    elif mode == "manual" and analysis.actions:
        console.print("\n[dim]Manual mode: run [cyan]pcommit confirm[/] to stage these.[/]")


@click.command()
@click.argument("text")
@click.option("--batch", "batch_id", default=None, help="Existing batch to add commits to")
@click.option("--title", default=None, help="Title for a new batch")
@click.option("--only", "only", multiple=True, type=click.Choice(ACTION_TYPES), help="Stage only these types")
def confirm(text, batch_id, title, only):
    """Extract TEXT and stage the results as pending commits."""
    c = get_components()
    batch, staged = c["service"].confirm(
        c["user_id"], text, batch_id=batch_id, batch_title=title, target_types=only or None
    )
    if not staged:
        console.print("[yellow]Nothing extracted.[/]")
        return
    console.print(f"[green]Staged {len(staged)} commit(s)[/] in batch [cyan]{batch.id}[/]")
