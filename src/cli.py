"""CLI interface for paravault."""

import asyncio
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from paravault.capture.services import LLMCollaborators
from paravault.config import ParaVaultConfig, load_config, merge_cli_overrides
from paravault.vault import operations as ops
from paravault.vault.models import (
    ArchivedProjectEntry,
    Category,
    Entry,
    Project,
    ProjectTerm,
    ProjectUpdate,
)
from paravault.vault.progress import active_projects, is_complete, progress
from paravault.vault.service import Collaborators, VaultService
from paravault.vault.store import VaultStore

app = typer.Typer(
    name="paravault",
    help="Sort notes, tasks and links into PARA and track projects to done.",
    no_args_is_help=True,
)
project_app = typer.Typer(help="Manage projects and their tasks.", no_args_is_help=True)
app.add_typer(project_app, name="project")

console = Console()

_CATEGORY_STYLES = {
    Category.PROJECTS: "orange3",
    Category.AREAS: "blue",
    Category.RESOURCES: "green",
    Category.ARCHIVES: "grey50",
}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from paravault import __version__

        console.print(f"paravault {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", help="Path to a .paravault.toml file."),
    ] = None,
    directory: Annotated[
        Optional[Path],
        typer.Option("--dir", "-d", help="Vault directory (overrides config)."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log debug output."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """paravault - a PARA vault for the terminal."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    config = load_config(config_path)
    ctx.obj = merge_cli_overrides(
        config, store_directory=str(directory) if directory else None
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def build_collaborators(config: ParaVaultConfig) -> Collaborators:
    """Wire the LLM-backed collaborators from config."""
    llm = LLMCollaborators(model=config.llm.model, timeout=config.llm.timeout)
    return Collaborators(
        classify_text=llm.classify_text,
        summarize_link=llm.summarize_link,
        generate_slug=llm.generate_slug,
        decompose_project=llm.decompose_project,
    )


def _service(ctx: typer.Context) -> VaultService:
    config: ParaVaultConfig = ctx.obj or load_config()
    return VaultService(
        VaultStore(config.store.path),
        build_collaborators(config),
        archive_policy=config.archive.policy,
        fallback_category=config.capture.fallback_category,
        favicon_template=config.capture.favicon_template,
    )


def _parse_date(value: str | None, *, default: date | None = None) -> date | None:
    if value is None:
        return default
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        console.print(f"[red]Error:[/red] Invalid date format: {value}")
        console.print("Use YYYY-MM-DD format (e.g., 2024-01-15)")
        raise typer.Exit(1)


def _deadline_change(deadline: str | None, clear: bool) -> date | None:
    if deadline is not None and clear:
        console.print("[red]Error:[/red] Use either --deadline or --no-deadline, not both.")
        raise typer.Exit(1)
    return _parse_date(deadline)


def _require_project(service: VaultService, project_id: str) -> Project:
    project = ops.find_project(service.state, project_id)
    if project is None:
        console.print(f"[yellow]No active project {project_id}[/yellow]")
        raise typer.Exit(1)
    return project


def _entry_label(entry: Entry) -> str:
    if isinstance(entry, ArchivedProjectEntry):
        return f"{escape(entry.title)} [dim]({len(entry.archived_items)} tasks archived)[/dim]"
    if entry.link_metadata is not None:
        meta = entry.link_metadata
        return f"{escape(meta.display_title)} [dim]{meta.domain}[/dim]"
    return escape(entry.title)


def _check(done: bool) -> str:
    return "[green]✓[/green]" if done else "○"


def _entry_mark(entry: Entry) -> str:
    # Resources are reference material, not tasks
    if entry.category == Category.RESOURCES:
        return " "
    return _check(entry.completed)


def _print_project(project: Project) -> None:
    deadline = f"Due: {project.deadline}" if project.deadline else "No deadline"
    console.print(
        f"[bold]{escape(project.title)}[/bold] [dim]{project.slug}[/dim]  "
        f"{progress(project)}%  [orange3]{deadline}[/orange3]"
    )
    if project.description:
        console.print(f"  {escape(project.description)}")
    for item in project.items:
        due = f" [blue]{item.deadline}[/blue]" if item.deadline else ""
        console.print(f"  {_check(item.completed)} {escape(item.title)}{due} [dim]{item.id}[/dim]")


# ---------------------------------------------------------------------------
# Entry commands
# ---------------------------------------------------------------------------


@app.command()
def add(
    ctx: typer.Context,
    text: Annotated[str, typer.Argument(help="A note, task or URL.")],
    category: Annotated[
        Optional[Category],
        typer.Option(
            "--category",
            "-c",
            case_sensitive=False,
            help="File under this category instead of auto.",
        ),
    ] = None,
    on: Annotated[
        Optional[str],
        typer.Option("--date", help="Day to file the entry under (YYYY-MM-DD)."),
    ] = None,
) -> None:
    """Classify an input and add it to the vault."""
    on_date = _parse_date(on, default=date.today())
    service = _service(ctx)
    with console.status("Classifying..."):
        entry = asyncio.run(
            service.capture(text, on_date=on_date, manual_category=category)
        )
    if entry is None:
        console.print("[yellow]Nothing to add.[/yellow]")
        raise typer.Exit(0)
    style = _CATEGORY_STYLES[entry.category]
    console.print(f"[{style}]{entry.category}[/{style}] {_entry_label(entry)} [dim]{entry.id}[/dim]")


@app.command()
def entries(
    ctx: typer.Context,
    on: Annotated[
        Optional[str],
        typer.Option("--date", help="Day to show (YYYY-MM-DD, default today)."),
    ] = None,
    show_all: Annotated[
        bool,
        typer.Option("--all", help="Show entries from every day."),
    ] = False,
) -> None:
    """List entries grouped by PARA category."""
    service = _service(ctx)
    if show_all:
        selected = list(service.state.entries)
    else:
        selected = ops.entries_on(service.state, _parse_date(on, default=date.today()))

    table = Table(show_header=True, header_style="bold")
    table.add_column("Category")
    table.add_column("", width=3)
    table.add_column("Entry")
    table.add_column("Date")
    table.add_column("ID", style="dim")
    for category, group in ops.entries_by_category(selected).items():
        style = _CATEGORY_STYLES[category]
        for entry in group:
            table.add_row(
                f"[{style}]{category}[/{style}]",
                _entry_mark(entry),
                _entry_label(entry),
                entry.date.isoformat(),
                entry.id,
            )
    if not selected:
        console.print("[dim]No entries.[/dim]")
        return
    console.print(table)


@app.command()
def toggle(
    ctx: typer.Context,
    entry_id: Annotated[str, typer.Argument(help="Entry ID.")],
) -> None:
    """Mark an entry done or not done (Resources and archives are skipped)."""
    service = _service(ctx)
    before = service.state
    service.toggle_entry(entry_id)
    if service.state is before:
        console.print("[yellow]Entry unchanged.[/yellow]")
        return
    entry = ops.find_entry(service.state, entry_id)
    console.print(f"{_entry_mark(entry)} {_entry_label(entry)}")


@app.command()
def delete(
    ctx: typer.Context,
    entry_id: Annotated[str, typer.Argument(help="Entry ID.")],
) -> None:
    """Delete an entry."""
    service = _service(ctx)
    service.delete_entry(entry_id)
    console.print(f"Deleted {entry_id}")


# ---------------------------------------------------------------------------
# Project commands
# ---------------------------------------------------------------------------


@project_app.command("new")
def project_new(
    ctx: typer.Context,
    title: Annotated[str, typer.Argument(help="Project title.")],
    description: Annotated[str, typer.Option("--description", help="What the project is about.")] = "",
    term: Annotated[ProjectTerm, typer.Option("--term", help="Planning horizon.")] = ProjectTerm.MID,
    deadline: Annotated[
        Optional[str], typer.Option("--deadline", help="Due date (YYYY-MM-DD).")
    ] = None,
    items: Annotated[
        str, typer.Option("--items", help="Initial tasks, comma-separated.")
    ] = "",
) -> None:
    """Start a new project."""
    due = _parse_date(deadline)
    service = _service(ctx)
    project = asyncio.run(
        service.create_project(
            title, description=description, term=term, deadline=due, seed_items=items
        )
    )
    if project is None:
        console.print("[red]Error:[/red] A project needs a title.")
        raise typer.Exit(1)
    console.print(f"[green]Created[/green] {escape(project.title)} [dim]{project.id}[/dim]")


@project_app.command("list")
def project_list(
    ctx: typer.Context,
    show_all: Annotated[
        bool,
        typer.Option("--all", help="Also show completed projects awaiting archive."),
    ] = False,
) -> None:
    """List projects that are still in progress."""
    service = _service(ctx)
    all_projects = service.state.projects
    projects = list(all_projects) if show_all else active_projects(all_projects)
    waiting = 0 if show_all else len(all_projects) - len(projects)

    if not projects:
        console.print("[dim]No projects in progress.[/dim]")
    else:
        table = Table(show_header=True, header_style="bold")
        table.add_column("Project")
        table.add_column("Term")
        table.add_column("Due")
        table.add_column("Progress", justify="right")
        table.add_column("Status")
        table.add_column("ID", style="dim")
        for project in projects:
            done = is_complete(project)
            table.add_row(
                escape(project.title),
                str(project.term),
                project.deadline.isoformat() if project.deadline else "",
                f"{progress(project)}%",
                "[green]awaiting archive[/green]" if done else str(project.status),
                project.id,
            )
        console.print(table)
    if waiting:
        console.print(
            f"[dim]{waiting} completed project(s) awaiting archive; "
            "use --all to list them.[/dim]"
        )


@project_app.command("show")
def project_show(
    ctx: typer.Context,
    project_id: Annotated[str, typer.Argument(help="Project ID.")],
) -> None:
    """Show a project with its tasks."""
    _print_project(_require_project(_service(ctx), project_id))


@project_app.command("add-item")
def project_add_item(
    ctx: typer.Context,
    project_id: Annotated[str, typer.Argument(help="Project ID.")],
    title: Annotated[str, typer.Argument(help="Task title.")],
    deadline: Annotated[
        Optional[str], typer.Option("--deadline", help="Due date (YYYY-MM-DD).")
    ] = None,
) -> None:
    """Add a task to a project."""
    due = _parse_date(deadline)
    service = _service(ctx)
    _require_project(service, project_id)
    item = service.add_item(project_id, title, deadline=due)
    if item is None:
        console.print("[yellow]Nothing to add.[/yellow]")
        return
    console.print(f"Added {escape(item.title)} [dim]{item.id}[/dim]")


@project_app.command("check")
def project_check(
    ctx: typer.Context,
    project_id: Annotated[str, typer.Argument(help="Project ID.")],
    item_id: Annotated[str, typer.Argument(help="Task ID.")],
) -> None:
    """Toggle a task's completion."""
    service = _service(ctx)
    _require_project(service, project_id)
    service.toggle_item(project_id, item_id)
    project = ops.find_project(service.state, project_id)
    if project is None:
        console.print("[green]Project complete and archived.[/green]")
        return
    console.print(f"{escape(project.title)}: {progress(project)}%")


@project_app.command("remove-item")
def project_remove_item(
    ctx: typer.Context,
    project_id: Annotated[str, typer.Argument(help="Project ID.")],
    item_id: Annotated[str, typer.Argument(help="Task ID.")],
) -> None:
    """Remove a task from a project."""
    service = _service(ctx)
    service.remove_item(project_id, item_id)
    console.print(f"Removed {item_id}")


@project_app.command("edit")
def project_edit(
    ctx: typer.Context,
    project_id: Annotated[str, typer.Argument(help="Project ID.")],
    title: Annotated[Optional[str], typer.Option("--title", help="New title.")] = None,
    description: Annotated[
        Optional[str], typer.Option("--description", help="New description.")
    ] = None,
    deadline: Annotated[
        Optional[str], typer.Option("--deadline", help="New due date (YYYY-MM-DD).")
    ] = None,
    no_deadline: Annotated[
        bool, typer.Option("--no-deadline", help="Clear the due date.")
    ] = False,
) -> None:
    """Edit a project's title, description or deadline."""
    due = _deadline_change(deadline, no_deadline)
    service = _service(ctx)
    _require_project(service, project_id)
    changes: dict[str, object] = {}
    if title is not None:
        changes["title"] = title
    if description is not None:
        changes["description"] = description
    if deadline is not None or no_deadline:
        changes["deadline"] = due
    service.update_project(project_id, ProjectUpdate(**changes))
    _print_project(_require_project(service, project_id))


@project_app.command("edit-item")
def project_edit_item(
    ctx: typer.Context,
    project_id: Annotated[str, typer.Argument(help="Project ID.")],
    item_id: Annotated[str, typer.Argument(help="Task ID.")],
    title: Annotated[Optional[str], typer.Option("--title", help="New task title.")] = None,
    deadline: Annotated[
        Optional[str], typer.Option("--deadline", help="New due date (YYYY-MM-DD).")
    ] = None,
    no_deadline: Annotated[
        bool, typer.Option("--no-deadline", help="Clear the due date.")
    ] = False,
) -> None:
    """Rename a task or change its due date."""
    due = _deadline_change(deadline, no_deadline)
    service = _service(ctx)
    project = _require_project(service, project_id)
    item = next((i for i in project.items if i.id == item_id), None)
    if item is None:
        console.print(f"[yellow]No task {item_id} in {escape(project.title)}[/yellow]")
        raise typer.Exit(1)

    changes: dict[str, object] = {}
    if title is not None:
        if not title.strip():
            console.print("[red]Error:[/red] A task needs a title.")
            raise typer.Exit(1)
        changes["title"] = title.strip()
    if deadline is not None or no_deadline:
        changes["deadline"] = due
    service.update_item(project_id, item.model_copy(update=changes))
    updated = ops.find_project(service.state, project_id)
    if updated is None:
        console.print("[green]Project complete and archived.[/green]")
        return
    _print_project(updated)


@project_app.command("breakdown")
def project_breakdown(
    ctx: typer.Context,
    project_id: Annotated[str, typer.Argument(help="Project ID.")],
) -> None:
    """Suggest next tasks for a project and add them."""
    service = _service(ctx)
    _require_project(service, project_id)
    with console.status("Breaking down project..."):
        added = asyncio.run(service.breakdown_project(project_id))
    if not added:
        console.print("[yellow]No tasks suggested.[/yellow]")
        return
    console.print(f"[green]Added {len(added)} task(s):[/green]")
    for item in added:
        console.print(f"  - {escape(item.title)}")


@project_app.command("archive")
def project_archive(
    ctx: typer.Context,
    project_id: Annotated[str, typer.Argument(help="Project ID.")],
    force: Annotated[
        bool, typer.Option("--force", help="Archive even with open tasks.")
    ] = False,
) -> None:
    """Move a finished project into Archives."""
    service = _service(ctx)
    _require_project(service, project_id)
    service.archive_project(project_id, force=force)
    if ops.find_project(service.state, project_id) is not None:
        console.print("[yellow]Project still has open tasks; use --force to archive anyway.[/yellow]")
        raise typer.Exit(1)
    console.print("[green]Archived.[/green]")


@project_app.command("delete")
def project_delete(
    ctx: typer.Context,
    project_id: Annotated[str, typer.Argument(help="Project ID.")],
) -> None:
    """Delete a project and its tasks."""
    service = _service(ctx)
    service.delete_project(project_id)
    console.print(f"Deleted {project_id}")
