# SPDX-License-Identifier: MIT

import logging
from contextlib import contextmanager
from typing import Iterator

import typer

from stronghabit.app_context import AppContext
from stronghabit.errors import StrongHabitError

logger = logging.getLogger(__name__)


def get_app_context(ctx: typer.Context) -> AppContext:
    app_context = ctx.find_root().obj
    if not isinstance(app_context, AppContext):
        raise RuntimeError("application context is not initialized")
    return app_context


@contextmanager
def report_errors(operation: str) -> Iterator[None]:
    """Print a failed operation and exit with status 1."""
    try:
        yield
    except StrongHabitError as error:
        logger.debug("failed to %s", operation, exc_info=True)
        typer.echo(f"Failed to {operation}: {error}")
        raise typer.Exit(1)
