"""
Layout commands for wxdash.

One-shot access to a city dashboard's grid: show the rendered layout at
a given width, move or resize a widget, reset to the default template,
and list the widget catalog. Mutations go through the same grid engine
as the dashboard and are written before the command exits.
"""

from typing import List, Optional

import typer
from rich.table import Table

from wxdash.config.constants import DEFAULT_CONTAINER_WIDTH
from wxdash.layout.debounce import ManualScheduler
from wxdash.layout.engine import GridEngine
from wxdash.layout.expansion import should_expand
from wxdash.layout.types import GridItem
from wxdash.services.dashboard_service import DashboardServices
from wxdash.utils.output import console, print_json

from ._helpers import handle_command_error, services, split_ids

app = typer.Typer(help="Inspect and edit city dashboard layouts")

WIDTH_OPTION = typer.Option(
    DEFAULT_CONTAINER_WIDTH, "--width", help="Container width in px (sets the column count)"
)


def _open_engine(
    svc: DashboardServices, owner: str, width: int, absent: Optional[List[str]] = None
) -> GridEngine:
    engine = GridEngine(
        owner,
        svc.layouts,
        absent=split_ids(absent),
        scheduler=ManualScheduler(),
        thresholds=svc.thresholds,
    )
    engine.set_container_width(width)
    return engine


def _constraint_text(item: GridItem) -> str:
    c = item.constraint
    if c is None:
        return "[dim]-[/dim]"
    max_w = c.max_w if c.max_w is not None else "∞"
    max_h = c.max_h if c.max_h is not None else "∞"
    return f"{c.min_w}x{c.min_h} .. {max_w}x{max_h}"


@app.command()
@handle_command_error("showing layout")
def show(
    owner: str = typer.Argument(..., help="City slug or workspace id"),
    width: int = WIDTH_OPTION,
    absent: Optional[List[str]] = typer.Option(
        None, "--absent", "-a", help="Widget ids to leave out (repeatable or comma-separated)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show the layout as it renders at WIDTH."""
    svc = services()
    engine = _open_engine(svc, owner, width, absent)
    items = engine.render_items()
    thresholds = svc.thresholds

    if json_output:
        print_json(
            {
                "owner": owner,
                "columns": engine.columns,
                "interactive": engine.interactive,
                "items": [
                    {**item.to_dict(), "expanded": should_expand(item.id, item.w, item.h, thresholds)}
                    for item in items
                ],
            }
        )
        return

    mode = "interactive" if engine.interactive else "static"
    console.print(f"\n[bold]Layout: {owner}[/bold] [dim]({engine.columns} columns, {mode})[/dim]\n")

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Widget", style="cyan")
    table.add_column("X", justify="right")
    table.add_column("Y", justify="right")
    table.add_column("W", justify="right")
    table.add_column("H", justify="right")
    table.add_column("Limits")
    table.add_column("Expanded", justify="center")

    for item in sorted(items, key=lambda i: (i.y, i.x)):
        expanded = should_expand(item.id, item.w, item.h, thresholds)
        table.add_row(
            item.id,
            str(item.x),
            str(item.y),
            str(item.w),
            str(item.h),
            _constraint_text(item),
            "[green]yes[/green]" if expanded else "",
        )

    console.print(table)


@app.command()
@handle_command_error("moving widget")
def move(
    owner: str = typer.Argument(..., help="City slug or workspace id"),
    widget: str = typer.Argument(..., help="Widget id"),
    x: int = typer.Option(..., "--x", help="Target column"),
    y: int = typer.Option(..., "--y", help="Target row"),
    width: int = WIDTH_OPTION,
) -> None:
    """Drag a widget to a new cell."""
    engine = _open_engine(services(), owner, width)
    item = engine.move_item(widget, x, y)
    engine.flush()
    console.print(f"[green]✅ Moved {widget}[/green] to ({item.x}, {item.y})")


@app.command()
@handle_command_error("resizing widget")
def resize(
    owner: str = typer.Argument(..., help="City slug or workspace id"),
    widget: str = typer.Argument(..., help="Widget id"),
    w: int = typer.Option(..., "--w", help="Width in cells"),
    h: int = typer.Option(..., "--h", help="Height in cells"),
    width: int = WIDTH_OPTION,
) -> None:
    """Resize a widget (clamped to its limits and the grid)."""
    engine = _open_engine(services(), owner, width)
    item = engine.resize_item(widget, w, h)
    engine.flush()
    state = " [magenta](expanded)[/magenta]" if engine.is_expanded(widget) else ""
    console.print(f"[green]✅ Resized {widget}[/green] to {item.w}x{item.h}{state}")


@app.command()
@handle_command_error("resetting layout")
def reset(
    owner: str = typer.Argument(..., help="City slug or workspace id"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
) -> None:
    """Discard the saved arrangement and return to the default."""
    if not force:
        typer.confirm(f"Reset the layout for '{owner}'?", abort=True)
    engine = _open_engine(services(), owner, DEFAULT_CONTAINER_WIDTH)
    engine.reset()
    console.print(f"[green]✅ Reset layout for {owner}[/green]")


@app.command("list")
@handle_command_error("listing layouts")
def list_layouts(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List owners with a saved layout."""
    owners = services().layouts.list_owners()
    if json_output:
        print_json(owners)
        return
    if not owners:
        console.print("[yellow]No saved layouts[/yellow]")
        return
    for owner in owners:
        console.print(f"  • {owner}")


@app.command()
@handle_command_error("listing widgets")
def widgets(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List the city widget catalog with sizes and expansion thresholds."""
    svc = services()
    registrations = svc.registry.list_registrations()

    if json_output:
        print_json(
            [
                {
                    "id": r.id,
                    "name": r.name,
                    "category": r.category,
                    "default": [r.default_w, r.default_h],
                    "min": [r.min_w, r.min_h],
                    "max": [r.max_w, r.max_h],
                    "expand": (
                        [svc.thresholds[r.id].expand_w, svc.thresholds[r.id].expand_h]
                        if r.id in svc.thresholds
                        else None
                    ),
                }
                for r in registrations
            ]
        )
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Widget", style="cyan")
    table.add_column("Name")
    table.add_column("Category", style="dim")
    table.add_column("Default", justify="right")
    table.add_column("Min", justify="right")
    table.add_column("Max", justify="right")
    table.add_column("Expands at", justify="right")

    for r in registrations:
        threshold = svc.thresholds.get(r.id)
        table.add_row(
            r.id,
            r.name,
            r.category,
            f"{r.default_w}x{r.default_h}",
            f"{r.min_w}x{r.min_h}",
            f"{r.max_w or '∞'}x{r.max_h or '∞'}",
            f"{threshold.expand_w}w / {threshold.expand_h}h" if threshold else "",
        )

    console.print(table)
