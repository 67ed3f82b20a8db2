"""Click command surface for ``graceful-exit`` and ``python -m graceful_exit``.

Purpose
-------
Offer operators a quick look at the reason-code vocabulary and a live demo of
the shutdown sequence (signals, deadline, exit report) without writing code.

Contents
--------
* :func:`cli` – root group with the global ``--traceback`` and
  ``--use-dotenv`` toggles; runs :func:`info` when no subcommand is given.
* :func:`info`, :func:`codes`, :func:`demo` – subcommands.
* :func:`main` – entry point delegating to :func:`lib_cli_exit_tools.run_cli`.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Any, Sequence

import click
import lib_cli_exit_tools
from rich.console import Console
from rich.table import Table

from . import __init__conf__
from . import config as dotenv_config
from .application.use_cases import DEFAULT_TIMEOUT_MS
from .domain import ReasonCodeTable, ShutdownReason, coerce_code
from .runtime import setup, summary_info

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.group(
    help=__init__conf__.title,
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=True,
)
@click.version_option(
    version=__init__conf__.version,
    prog_name=__init__conf__.shell_command,
    message=f"{__init__conf__.shell_command} version {__init__conf__.version}",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors.",
)
@click.option(
    "--use-dotenv/--no-use-dotenv",
    default=False,
    help="Load environment variables from a nearby .env before running commands.",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool, use_dotenv: bool) -> None:
    """Root command storing global flags."""

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback

    explicit: bool | None = None
    if ctx.get_parameter_source("use_dotenv") is not click.core.ParameterSource.DEFAULT:
        explicit = use_dotenv
    if dotenv_config.should_use_dotenv(explicit=explicit, env_value=os.getenv(dotenv_config.DOTENV_ENV_VAR)):
        dotenv_config.enable_dotenv()

    if ctx.invoked_subcommand is None:
        ctx.invoke(info)


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def info() -> None:
    """Print resolved metadata so users can inspect installation details."""

    click.echo(summary_info(), nl=False)


@cli.command("codes", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option(
    "--custom",
    "custom",
    multiple=True,
    metavar="CODE=TEXT",
    help="Extra or overriding reason code (repeatable).",
)
def codes(custom: tuple[str, ...]) -> None:
    """Render the reason-code table as it would be active after setup."""

    table = ReasonCodeTable(_parse_custom_codes(custom))
    rendered = Table(title="Shutdown reason codes")
    rendered.add_column("Code", justify="right", style="bold")
    rendered.add_column("Description")
    for code, description in table.items():
        rendered.add_row(str(code), description)
    Console(highlight=False, soft_wrap=True).print(rendered)


@cli.command("demo", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option(
    "--timeout-ms",
    type=click.IntRange(min=0),
    default=DEFAULT_TIMEOUT_MS,
    show_default=True,
    help="Forced-exit deadline for the cleanup phase.",
)
@click.option(
    "--cleanup-seconds",
    type=click.FloatRange(min=0.0),
    default=1.0,
    show_default=True,
    help="How long the demo cleanup handler sleeps.",
)
@click.option(
    "--log-path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the primary log (exit report) to this file.",
)
@click.option(
    "--debug-label",
    default="graceful-exit:demo",
    show_default=True,
    help="Label of the diagnostic stream; enable it with DEBUG=<label>.",
)
def demo(timeout_ms: int, cleanup_seconds: float, log_path: Path | None, debug_label: str) -> None:
    """Install the coordinator and wait for SIGINT, SIGUSR1 or SIGUSR2.

    The process exits through the shutdown sequence; press Ctrl+C twice to
    force the exit while cleanup is still running.
    """

    _run_demo(
        timeout_ms=timeout_ms,
        cleanup_seconds=cleanup_seconds,
        log_path=log_path,
        debug_label=debug_label,
    )


def _run_demo(*, timeout_ms: int, cleanup_seconds: float, log_path: Path | None, debug_label: str) -> None:
    """Run the demo event loop until a trigger terminates the process."""

    async def _cleanup(reason: ShutdownReason) -> None:
        click.echo(f"Cleaning up after {reason.description} (code {reason.code}) for {cleanup_seconds:g}s ...", err=True)
        await asyncio.sleep(cleanup_seconds)
        click.echo("Cleanup finished", err=True)

    async def _wait_forever() -> None:
        handle = setup(
            callbacks=[_cleanup],
            log_path=log_path,
            debug_label=debug_label,
            logger=None if log_path is not None else click.echo,
            timeout_ms=timeout_ms,
            loop=asyncio.get_running_loop(),
        )
        handle.context["command"] = "demo"
        handle.context["cleanup_seconds"] = cleanup_seconds
        click.echo(f"PID {os.getpid()} waiting for SIGINT, SIGUSR1 or SIGUSR2 (Ctrl+C to stop)")
        await asyncio.Event().wait()

    asyncio.run(_wait_forever())


def _parse_custom_codes(entries: Sequence[str]) -> dict[int, str]:
    parsed: dict[int, str] = {}
    for entry in entries:
        code, separator, text = entry.partition("=")
        if not separator or not text.strip():
            raise click.BadParameter(f"expected CODE=TEXT, got {entry!r}", param_hint="--custom")
        try:
            parsed[coerce_code(code)] = text.strip()
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="--custom") from exc
    return parsed


def main(argv: Sequence[str] | None = None, **kwargs: Any) -> int:
    """Execute the CLI via :func:`lib_cli_exit_tools.run_cli`.

    The traceback preferences of :mod:`lib_cli_exit_tools` are restored
    afterwards so embedding callers keep their own settings.
    """

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        return lib_cli_exit_tools.run_cli(
            cli,
            argv=list(argv) if argv is not None else None,
            prog_name=__init__conf__.shell_command,
            **kwargs,
        )
    finally:
        lib_cli_exit_tools.config.traceback = previous_traceback
        lib_cli_exit_tools.config.traceback_force_color = previous_force_color


__all__ = ["cli", "main"]
