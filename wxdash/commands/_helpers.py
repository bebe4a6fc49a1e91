"""Shared command helpers.

- @handle_command_error: print wxdash errors and exit 1
- services(): the dashboard services for a one-shot command
- split_ids(): parse repeated / comma-separated widget id options
"""

from functools import wraps
from typing import Any, Callable, Iterable, List, Optional, TypeVar

import typer

from wxdash.exceptions import WxdashError
from wxdash.services.dashboard_service import DashboardServices
from wxdash.utils.output import console

F = TypeVar("F", bound=Callable[..., Any])


def handle_command_error(operation: Optional[str] = None) -> Callable[[F], F]:
    """Decorator printing ``WxdashError`` as ``Error: ...`` and exiting with 1.

    Example:
        @app.command()
        @handle_command_error("moving widget")
        def move(owner: str, widget: str, ...):
            ...
    """

    def decorator(func: F) -> F:
        op = operation or func.__name__.replace("_", " ")

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except typer.Exit:
                raise
            except WxdashError as e:
                console.print(f"[red]Error {op}: {e}[/red]")
                raise typer.Exit(1) from e

        return wrapper  # type: ignore[return-value]

    return decorator


def services() -> DashboardServices:
    """Uncached services; each command is its own short session."""
    return DashboardServices.from_environment()


def split_ids(values: Optional[Iterable[str]]) -> List[str]:
    """``--absent a --absent b,c`` -> ["a", "b", "c"]"""
    ids: List[str] = []
    for value in values or ():
        ids.extend(part.strip() for part in value.split(",") if part.strip())
    return ids
