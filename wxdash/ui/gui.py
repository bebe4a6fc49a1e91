"""
GUI entry point for wxdash - the Textual city dashboard
"""

from typing import List, Optional

import typer

from wxdash.commands._helpers import split_ids
from wxdash.utils.output import console


def gui(
    city: str = typer.Argument(..., help="City slug"),
    absent: Optional[List[str]] = typer.Option(
        None, "--absent", "-a", help="Widget ids to hide (e.g. alerts when none are active)"
    ),
):
    """Open the interactive dashboard for a city."""
    from wxdash.ui.dashboard_app import DashboardApp
    from wxdash.utils.logging_utils import setup_tui_logging

    setup_tui_logging(__name__)
    try:
        DashboardApp(city, absent=split_ids(absent)).run()
    except KeyboardInterrupt:
        pass
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from e
