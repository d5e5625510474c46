"""CLI adapter for ``lib_layered_bindings`` built on ``lib_cli_exit_tools``.

Purpose
-------
Let operators inspect which bindings a container would see, and with which
strategy each one was recognised, without writing Python code.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command wiring global traceback handling into
  ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata.
* :func:`cli_list` – scans a binding root and prints the bindings as JSON.
* :func:`cli_generate_examples` – writes the sample binding tree.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
The CLI lives in the outermost ring. It calls the composition root and never
reaches into strategy internals. ``lib_cli_exit_tools`` centralises exit codes
so all commands behave consistently across shells and CI.
"""

from __future__ import annotations

import json
import sys
from importlib import metadata
from pathlib import Path
from typing import Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .adapters.path_resolvers.default import DefaultRootPathResolver
from .core import STRATEGY_TYPES, LayeredServiceBindingAccessor, strategies_by_name
from .examples import generate_examples as _generate_examples

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000
_DIST_NAME: Final[str] = "lib_layered_bindings"


def _resolve_version() -> str:
    """Return the installed package version, ``"0.0.0"`` when not installed."""

    try:
        return metadata.version(_DIST_NAME)
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Inspect layered service bindings",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name=_DIST_NAME,
    message="lib_layered_bindings version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Root command configuring traceback handling for all subcommands.

    Side Effects
        Mutates ``lib_cli_exit_tools.config.traceback`` and
        ``lib_cli_exit_tools.config.traceback_force_color``.
    """

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata(_DIST_NAME)
    except metadata.PackageNotFoundError:
        click.echo(f"{_DIST_NAME} (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', _DIST_NAME)}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.11')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


@cli.command("list", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option(
    "--root",
    "root",
    type=click.Path(path_type=Path, file_okay=False, dir_okay=True),
    default=None,
    help="Binding root (defaults to $LIB_LAYERED_BINDINGS_ROOT or /etc/secrets/sapbtp)",
)
@click.option(
    "--strategy",
    "strategy_names",
    multiple=True,
    type=click.Choice(tuple(STRATEGY_TYPES), case_sensitive=False),
    help="Parsing strategy to try, in priority order (repeatable)",
)
@click.option("--encoding", default=None, help="File encoding (defaults to UTF-8)")
@click.option(
    "--indent",
    type=int,
    default=None,
    help="Pretty-print JSON output with the provided indent size",
)
def cli_list(
    root: Optional[Path],
    strategy_names: Sequence[str],
    encoding: Optional[str],
    indent: Optional[int],
) -> None:
    """Scan the binding root and print every recognised binding as JSON.

    Credentials are printed verbatim; redirect the output accordingly.
    """

    encoding = encoding or DefaultRootPathResolver().encoding()
    strategies = strategies_by_name([name.lower() for name in strategy_names], encoding=encoding) if strategy_names else None
    accessor = LayeredServiceBindingAccessor(root, strategies, encoding=encoding)
    payload = [binding.as_dict() for binding in accessor.get_service_bindings()]
    click.echo(json.dumps(payload, indent=indent, separators=(",", ":"), ensure_ascii=False, default=str))


@cli.command("generate-examples", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option(
    "--destination",
    type=click.Path(path_type=Path, file_okay=False, dir_okay=True, resolve_path=True),
    required=True,
    help="Directory that will receive the sample binding tree",
)
@click.option(
    "--force/--no-force",
    default=False,
    help="Overwrite existing example files if set",
    show_default=True,
)
def cli_generate_examples(destination: Path, force: bool) -> None:
    """Generate one sample binding per supported layout under *destination*."""

    created = _generate_examples(destination, force=force)
    click.echo(json.dumps([str(path) for path in created], indent=2))


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name=_DIST_NAME,
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))
