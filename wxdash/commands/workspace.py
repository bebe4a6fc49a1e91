"""
Workspace commands for wxdash.

Create multi-city workspaces and manage the widgets placed on their
12-column grid.
"""

from datetime import datetime
from typing import List

import typer
from rich.table import Table

from wxdash.utils.output import console, print_json

from ._helpers import handle_command_error, services

app = typer.Typer(help="Manage multi-city workspaces")


def _format_ms(ms: int) -> str:
    if not ms:
        return ""
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M")


@app.command()
@handle_command_error("creating workspace")
def create(
    name: str = typer.Argument(..., help="Workspace name"),
    cities: List[str] = typer.Argument(..., help="City slugs"),
) -> None:
    """Create a workspace with live station data for each city."""
    workspace = services().workspaces.create(name, cities)
    console.print(f"[green]✅ Created workspace[/green] [cyan]{workspace.id}[/cyan] ({name})")


@app.command("list")
@handle_command_error("listing workspaces")
def list_workspaces(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List workspaces, most recently updated first."""
    workspaces = services().workspaces.list()

    if json_output:
        print_json([ws.to_dict() for ws in workspaces])
        return

    if not workspaces:
        console.print("[yellow]No workspaces[/yellow]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Cities")
    table.add_column("Widgets", justify="right")
    table.add_column("Updated", style="dim")

    for ws in workspaces:
        table.add_row(
            ws.id, ws.name, ", ".join(ws.cities), str(len(ws.widgets)), _format_ms(ws.updated_at)
        )

    console.print(table)


@app.command()
@handle_command_error("showing workspace")
def show(
    workspace_id: str = typer.Argument(..., help="Workspace id"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show a workspace's widgets and their grid positions."""
    workspace = services().workspaces.require(workspace_id)

    if json_output:
        print_json(workspace.to_dict())
        return

    console.print(f"\n[bold]{workspace.name}[/bold] [dim]{workspace.id}[/dim]")
    console.print(f"Cities: {', '.join(workspace.cities) or '-'}\n")

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Instance", style="cyan")
    table.add_column("Widget")
    table.add_column("City")
    table.add_column("X", justify="right")
    table.add_column("Y", justify="right")
    table.add_column("W", justify="right")
    table.add_column("H", justify="right")

    for widget in sorted(workspace.widgets, key=lambda w: (w.y, w.x)):
        table.add_row(
            widget.id,
            widget.widget_id,
            widget.city_slug,
            str(widget.x),
            str(widget.y),
            str(widget.w),
            str(widget.h),
        )

    console.print(table)


@app.command()
@handle_command_error("renaming workspace")
def rename(
    workspace_id: str = typer.Argument(..., help="Workspace id"),
    name: str = typer.Argument(..., help="New name"),
) -> None:
    """Rename a workspace."""
    services().workspaces.update(workspace_id, name=name)
    console.print(f"[green]✅ Renamed {workspace_id}[/green] to {name}")


@app.command()
@handle_command_error("adding widget")
def add(
    workspace_id: str = typer.Argument(..., help="Workspace id"),
    widget_id: str = typer.Argument(..., help="Widget kind (see 'wxdash workspace widgets')"),
    city: str = typer.Argument(..., help="City slug"),
) -> None:
    """Add a widget in the first free slot."""
    svc = services()
    if widget_id not in svc.workspaces.registry:
        console.print(f"[red]Error: Unknown widget '{widget_id}'[/red]")
        raise typer.Exit(1)
    widget = svc.workspaces.add_widget(workspace_id, widget_id, city)
    console.print(
        f"[green]✅ Added {widget_id}[/green] as [cyan]{widget.id}[/cyan] "
        f"at ({widget.x}, {widget.y})"
    )


@app.command()
@handle_command_error("removing widget")
def remove(
    workspace_id: str = typer.Argument(..., help="Workspace id"),
    instance_id: str = typer.Argument(..., help="Widget instance id"),
) -> None:
    """Remove a widget instance."""
    if not services().workspaces.remove_widget(workspace_id, instance_id):
        console.print(f"[red]Error: Widget '{instance_id}' not in workspace[/red]")
        raise typer.Exit(1)
    console.print(f"[green]✅ Removed {instance_id}[/green]")


@app.command()
@handle_command_error("replacing widget")
def replace(
    workspace_id: str = typer.Argument(..., help="Workspace id"),
    instance_id: str = typer.Argument(..., help="Widget instance id"),
    widget_id: str = typer.Argument(..., help="New widget kind"),
) -> None:
    """Swap a widget for another kind in the same slot."""
    svc = services()
    if widget_id not in svc.workspaces.registry:
        console.print(f"[red]Error: Unknown widget '{widget_id}'[/red]")
        raise typer.Exit(1)
    widget = svc.workspaces.replace_widget(workspace_id, instance_id, widget_id)
    console.print(f"[green]✅ Replaced {instance_id}[/green] with [cyan]{widget.id}[/cyan]")


@app.command()
@handle_command_error("deleting workspace")
def delete(
    workspace_id: str = typer.Argument(..., help="Workspace id"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
) -> None:
    """Delete a workspace."""
    if not force:
        typer.confirm(f"Delete workspace '{workspace_id}'?", abort=True)
    if not services().workspaces.delete(workspace_id):
        console.print(f"[red]Error: Workspace '{workspace_id}' not found[/red]")
        raise typer.Exit(1)
    console.print(f"[green]✅ Deleted {workspace_id}[/green]")


@app.command()
def widgets() -> None:
    """List widget kinds available on workspaces."""
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Widget", style="cyan")
    table.add_column("Name")
    table.add_column("Default", justify="right")
    table.add_column("Min", justify="right")
    table.add_column("Description", style="dim")

    for r in services().workspaces.registry.list_registrations():
        table.add_row(
            r.id, r.name, f"{r.default_w}x{r.default_h}", f"{r.min_w}x{r.min_h}", r.description
        )

    console.print(table)
