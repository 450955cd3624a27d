"""
liveness.cli
------------
AUTHOR: carter-vin

Operator / container entrypoint

Key contract:
- `liveness check` exits 0 (healthy) or 1 (unhealthy); nothing on stdout
- exit 2 means the check itself failed (unreadable data dir)
- `liveness beat` / `liveness stop` let shell-driven jobs take part
- events go to stderr as JSON lines
"""

from __future__ import annotations

import asyncio

import typer

from liveness.config import (
    DEFAULT_MODULE_NAME,
    DEFAULT_STALE_INTERVAL_MS,
)
from liveness.healthcheck import healthcheck
from liveness.logging import emit_event
from liveness.module import ModuleHeartbeat
from liveness.store import RecordStore

# Explicit multi-command CLI
app = typer.Typer(
    add_completion=False,
    help="liveness: file-based heartbeat and healthcheck for background tasks",
)

# Checker could not read its data; distinct from "unhealthy"
EXIT_CHECK_ERROR = 2


# -----------------------------
# ROOT COMMAND BEHAVIOR
# -----------------------------
@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """
    Root command behavior: print a hint when no subcommand is given
    """
    if ctx.invoked_subcommand is None:
        typer.echo("No command provided. Try: liveness --help")


# -----------------------------
# CLI COMMANDS
# -----------------------------
@app.command("check")
def check(
    stale_interval: int = typer.Option(
        DEFAULT_STALE_INTERVAL_MS,
        "--stale-interval",
        help="Milliseconds a heartbeat may stay unchanged before the module is unhealthy.",
        min=0,
    ),
    data_dir: str | None = typer.Option(
        None,
        "--data-dir",
        help="Heartbeat data directory (default: $LIVENESS_DATA_DIR or XDG data dir).",
    ),
) -> None:
    """
    Run one healthcheck and exit with its status

    Failure semantics:
    - store errors are logged and exit with EXIT_CHECK_ERROR (never 0 or 1)
    """
    store = RecordStore.default(data_dir)

    try:
        code = asyncio.run(healthcheck(stale_interval, store=store))
    except Exception as e:
        emit_event(
            "healthcheck_failed",
            data_dir=str(store.root),
            error_type=type(e).__name__,
            message=str(e),
        )
        raise typer.Exit(code=EXIT_CHECK_ERROR) from e

    raise typer.Exit(code=code)


@app.command("beat")
def beat(
    module: str = typer.Option(
        DEFAULT_MODULE_NAME,
        "--module",
        help="Module name to signal.",
    ),
    data_dir: str | None = typer.Option(
        None,
        "--data-dir",
        help="Heartbeat data directory (default: $LIVENESS_DATA_DIR or XDG data dir).",
    ),
) -> None:
    """
    Signal a single heartbeat for a module
    """
    heartbeat = ModuleHeartbeat(module, store=RecordStore.default(data_dir))
    asyncio.run(heartbeat.signal())


@app.command("stop")
def stop(
    module: str = typer.Option(
        DEFAULT_MODULE_NAME,
        "--module",
        help="Module name to stop tracking.",
    ),
    data_dir: str | None = typer.Option(
        None,
        "--data-dir",
        help="Heartbeat data directory (default: $LIVENESS_DATA_DIR or XDG data dir).",
    ),
) -> None:
    """
    Stop tracking a module (removes its records)
    """
    heartbeat = ModuleHeartbeat(module, store=RecordStore.default(data_dir))
    asyncio.run(heartbeat.stop())


if __name__ == "__main__":
    app()
