"""CLI for reviewing profile commits extracted from conversations."""

import sys
from pathlib import Path

import click
from rich.console import Console

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from cli.commands import analyze, batches, commits, confirm, profile
from cli.config import get_paths, load_config_model
from cli.logging_config import setup_logging

console = Console()


@click.group()
@click.version_option(version="0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """Extract profile facts from conversation text and commit them after review."""
    try:
        config = load_config_model()
    except ValueError as e:
        console.print(f"[red]Config error:[/] {e}")
        sys.exit(1)
    setup_logging(
        json_mode=config.logging.json_mode,
        level="DEBUG" if verbose else config.logging.level,
        log_file=get_paths(config.to_dict())["log_file"] if verbose else None,
    )


cli.add_command(analyze)
cli.add_command(confirm)
cli.add_command(commits)
cli.add_command(batches)
cli.add_command(profile)


if __name__ == "__main__":
    cli()
