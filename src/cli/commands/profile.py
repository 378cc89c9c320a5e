"""Show the committed profile."""

import click
from rich.console import Console
from rich.table import Table

from cli.utils import get_components

console = Console()


@click.command()
def profile():
    """Show skills, experience, education and goals committed so far."""
    c = get_components()
    p = c["profile_store"].get_profile(c["user_id"])

    if not any(p.values()):
        console.print("[yellow]Profile is empty. Analyze some text and process approved commits.[/]")
        return

    if p["skills"]:
        table = Table(title="Skills", show_header=True)
        table.add_column("Skill")
        table.add_column("Category", style="dim")
        table.add_column("Proficiency")
        table.add_column("Years", justify="right")
        for s in p["skills"]:
            table.add_row(s["name"], s["category"], s["proficiency"], str(s["years_experience"]))
        console.print(table)

    for w in p["work_experiences"]:
        current = " [green](current)[/]" if w["is_current"] else ""
        console.print(f"[bold]{w['title']}[/] at {w['company']}{current} [dim]{w['start_date'] or ''}[/]")

    for e in p["educations"]:
        console.print(f"[bold]{e['degree']}[/], {e['field_of_study']} - {e['institution']}")

    if p["objectives"]:
        console.print("\n[bold]Objectives[/]")
        for o in p["objectives"]:
            console.print(f"  - {o['title']} [dim]({o['category']}, {o['priority']})[/]")
            for k in p["key_results"]:
                if k["objective_id"] == o["id"]:
                    target = f" -> {k['target_value']:g} {k['unit'] or ''}" if k["target_value"] is not None else ""
                    console.print(f"      * {k['title']}{target}")
