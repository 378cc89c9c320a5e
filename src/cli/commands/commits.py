"""Review commands: list, approve, reject and process commits."""

import click
from rich.console import Console
from rich.table import Table

from cli.utils import get_components, styled_status

console = Console()


@click.group()
def commits():
    """Review staged commits."""
    pass


@commits.command("list")
@click.option(
    "--status",
    type=click.Choice(["pending", "approved", "rejected", "committed", "all"]),
    default="pending",
)
@click.option("--batch", "batch_id", default=None)
@click.option("--limit", "-n", default=50)
def commits_list(status, batch_id, limit):
    """List commits."""
    c = get_components()
    rows = c["commit_store"].list_commits(
        c["user_id"],
        status=None if status == "all" else status,
        batch_id=batch_id,
        limit=limit,
    )
    if not rows:
        console.print("[yellow]No commits found.[/]")
        return

    table = Table(show_header=True, title="Commits")
    table.add_column("ID", style="cyan")
    table.add_column("Type", style="green")
    table.add_column("Summary", max_width=60)
    table.add_column("Conf", justify="right")
    table.add_column("Status")
    for r in rows:
        table.add_row(
            r.id, r.extraction_type.value, r.ai_summary, f"{r.confidence:.0%}", styled_status(r.status.value)
        )
    console.print(table)


def _review(commit_id: str, status: str, notes: str | None, message: str | None) -> None:
    from commits import CommitNotFoundError, InvalidTransitionError

    c = get_components()
    try:
        commit = c["service"].set_status(
            c["user_id"], commit_id, status, review_notes=notes, commit_message=message
        )
    except CommitNotFoundError:
        console.print(f"[red]Commit not found:[/] {commit_id}")
        raise SystemExit(1)
    except InvalidTransitionError as e:
        console.print(f"[red]{e}[/]")
        raise SystemExit(1)
    console.print(f"{commit.ai_summary} -> {styled_status(commit.status.value)}")


@commits.command("approve")
@click.argument("commit_id")
@click.option("--notes", default=None)
@click.option("-m", "--message", default=None, help="Commit message")
def commits_approve(commit_id, notes, message):
    """Approve a pending commit."""
    _review(commit_id, "approved", notes, message)


@commits.command("reject")
@click.argument("commit_id")
@click.option("--notes", default=None)
def commits_reject(commit_id, notes):
    """Reject a pending commit."""
    _review(commit_id, "rejected", notes, None)


@commits.command("process")
@click.argument("commit_ids", nargs=-1)
@click.option("--batch", "batch_id", default=None, help="Process every approved commit in a batch")
def commits_process(commit_ids, batch_id):
    """Write approved commits to the profile."""
    c = get_components()
    report = c["service"].process_approved(
        c["user_id"], commit_ids=list(commit_ids) or None, batch_id=batch_id
    )
    for r in report.results:
        outcome = r["outcome"]
        colour = {
            "created": "green", "recovered": "green", "duplicate": "yellow", "uncommitted": "yellow",
        }.get(outcome, "red")
        detail = r.get("message") or r.get("error") or ""
        console.print(f"[{colour}]{outcome}[/] {r.get('entity', r['commit_id'])} [dim]{detail}[/]")
    console.print(
        f"\nCommitted {len(report.committed)}, duplicates {len(report.duplicates)}, "
        f"failed {len(report.failed)}, uncommitted {len(report.uncommitted)}, "
        f"skipped {len(report.skipped)}"
    )


@click.group()
def batches():
    """Manage conversation batches."""
    pass


@batches.command("list")
@click.option("--status", type=click.Choice(["active", "completed", "archived"]), default=None)
@click.option("--limit", "-n", default=20)
def batches_list(status, limit):
    """List batches with their commit counts."""
    c = get_components()
    rows = c["commit_store"].list_batches(c["user_id"], status=status, limit=limit)
    if not rows:
        console.print("[yellow]No batches yet.[/]")
        return

    table = Table(show_header=True, title="Batches")
    table.add_column("ID", style="cyan")
    table.add_column("Title")
    table.add_column("Status")
    table.add_column("Total", justify="right")
    table.add_column("Pending", justify="right", style="yellow")
    table.add_column("Approved", justify="right", style="cyan")
    table.add_column("Rejected", justify="right", style="red")
    table.add_column("Committed", justify="right", style="green")
    for b in rows:
        table.add_row(
            b.id, b.batch_title, b.batch_status.value,
            str(b.total_commits), str(b.pending_commits), str(b.approved_commits),
            str(b.rejected_commits), str(b.committed_commits),
        )
    console.print(table)


@batches.command("create")
@click.argument("title")
@click.option(
    "--type",
    "batch_type",
    type=click.Choice(["live_conversation", "voice_session", "chat_session", "document_upload", "manual"]),
    default="manual",
)
@click.option("--summary", default=None)
def batches_create(title, batch_type, summary):
    """Open a new batch."""
    c = get_components()
    batch = c["commit_store"].create_batch(c["user_id"], title, batch_type, summary)
    console.print(f"[green]Created batch[/] [cyan]{batch.id}[/]: {batch.batch_title}")


@batches.command("update")
@click.argument("batch_id")
@click.option("--status", type=click.Choice(["active", "completed", "archived"]), default=None)
@click.option("--summary", default=None)
def batches_update(batch_id, status, summary):
    """Change a batch's status or summary."""
    from commits import BatchNotFoundError, InvalidTransitionError

    c = get_components()
    try:
        batch = c["commit_store"].update_batch(c["user_id"], batch_id, status, summary)
    except BatchNotFoundError:
        console.print(f"[red]Batch not found:[/] {batch_id}")
        raise SystemExit(1)
    except InvalidTransitionError as e:
        console.print(f"[red]{e}[/]")
        raise SystemExit(1)
    console.print(f"[cyan]{batch.id}[/] {batch.batch_title}: {batch.batch_status.value}")
