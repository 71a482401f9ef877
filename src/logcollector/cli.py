"""Command line interface for logcollector."""

from __future__ import annotations

import codecs
import logging
from pathlib import Path
from typing import Any, Callable

import click
import yaml
from rich.console import Console
from rich.table import Table

from logcollector.config import CollectorConfig, ConfigError, ConfigManager, env_variable
from logcollector.log_setup import configure_logging
from logcollector.runner import CollectionRequest, CollectionResult, CollectionRunner
from logcollector.state import CollectionStatus, StatusStore, StorageError

LOGGER = logging.getLogger(__name__)

console = Console()


def _validate_encoding(ctx: click.Context, param: click.Parameter, value: str | None) -> str | None:
    """Reject encoding names Python does not know.

    Args:
        ctx: Active Click context.
        param: Parameter being validated.
        value: Encoding name supplied on the command line.

    Returns:
        str | None: The validated encoding name.

    Raises:
        click.BadParameter: If the encoding cannot be found.
    """
    if value is None:
        return None
    try:
        codecs.lookup(value)
    except LookupError as exc:
        raise click.BadParameter(f"unknown encoding: {value}") from exc
    return value


def _gating_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the options shared by every collection command."""
    func = click.option(
        "--dry-run",
        is_flag=True,
        help="Collect and print, but neither move the file nor update the status file.",
    )(func)
    func = click.option(
        "--status-file",
        type=click.Path(dir_okay=False, path_type=Path),
        help="Keep the last collection time in this file to collect at most once a day.",
    )(func)
    func = click.option(
        "--hour",
        type=click.IntRange(0, 23),
        help="Collect only during this hour of the day (0-23).",
    )(func)
    return func


def _load_config(overrides: dict[str, Any]) -> CollectorConfig:
    """Resolve settings and set up the stderr error channel.

    A broken configuration file or environment value never blocks a scheduled
    collection: the error is logged and the defaults plus ``overrides`` apply.

    Args:
        overrides: Settings taken from command line options.

    Returns:
        CollectorConfig: Effective settings.
    """
    configure_logging()
    try:
        config = ConfigManager().load(overrides)
    except ConfigError as exc:
        LOGGER.error("Ignoring configuration: %s", exc)
        config = CollectorConfig.model_validate(
            {key: value for key, value in overrides.items() if value is not None}
        )
    configure_logging(config.log_level)
    return config


def _emit_content(result: CollectionResult) -> None:
    """Write collected bytes to stdout unchanged; absent content prints nothing."""
    if result.content is None:
        return
    click.echo(result.content, nl=False)


def _format_timestamp(status: CollectionStatus) -> str:
    if status.last_collection_time is None:
        return "never"
    return status.last_collection_time.isoformat()


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="logcollector")
def cli() -> None:
    """Collect a log file or command output at most once per scheduled window.

    Returns:
        None: This function is invoked for its side effects.
    """


@cli.command("read")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--encoding",
    callback=_validate_encoding,
    help="Encoding of the file to collect, such as utf-8 or shift_jis. Default: shift_jis.",
)
@click.option(
    "--move",
    is_flag=True,
    help="Rename the file with a `.collected` suffix after collecting it.",
)
@_gating_options
def read_command(
    path: Path,
    encoding: str | None,
    move: bool,
    hour: int | None,
    status_file: Path | None,
    dry_run: bool,
) -> None:
    """Print the contents of the log file at PATH.

    A missing file is not an error; nothing is printed.

    Args:
        path: File to collect.
        encoding: Optional encoding override.
        move: Whether to rename the file after collecting it.
        hour: Optional hour-of-day restriction.
        status_file: Optional status file for daily deduplication.
        dry_run: Whether to skip the rename and the status update.
    """
    config = _load_config({"encoding": encoding})

    request = CollectionRequest(
        source=str(path),
        variant="file",
        hour=hour,
        status_file=status_file,
        dry_run=dry_run,
        encoding=config.encoding,
        move=move,
        consumed_suffix=config.consumed_suffix,
    )
    _emit_content(CollectionRunner().run(request))


@cli.command("exec")
@click.argument("command")
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    help="Kill the command after this many seconds. Default: wait indefinitely.",
)
@_gating_options
def exec_command(
    command: str,
    timeout: float | None,
    hour: int | None,
    status_file: Path | None,
    dry_run: bool,
) -> None:
    """Run COMMAND through the shell and print its standard output.

    A failing command is reported on stderr; the exit status stays 0 and the status
    file is left untouched so the next scheduled run tries again.

    Args:
        command: Trusted shell command line.
        timeout: Optional time limit in seconds.
        hour: Optional hour-of-day restriction.
        status_file: Optional status file for daily deduplication.
        dry_run: Whether to skip the status update.
    """
    config = _load_config({"command_timeout_seconds": timeout})

    request = CollectionRequest(
        source=command,
        variant="command",
        hour=hour,
        status_file=status_file,
        dry_run=dry_run,
        command_timeout=config.command_timeout_seconds,
    )
    _emit_content(CollectionRunner().run(request))


@cli.command()
@click.argument("status_file", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--json", "json_output", is_flag=True, help="Emit the status record as JSON.")
def status(status_file: Path, json_output: bool) -> None:
    """Show the last collection time recorded in STATUS_FILE.

    Args:
        status_file: Status file to inspect.
        json_output: Whether to print JSON instead of a table.

    Raises:
        click.ClickException: If the status file cannot be read.
    """
    record = CollectionStatus()
    if status_file.exists():
        try:
            record = StatusStore(status_file).read()
        except StorageError as exc:
            raise click.ClickException(str(exc)) from exc

    if json_output:
        payload = {"path": str(status_file), **record.model_dump(mode="json")}
        console.print_json(data=payload)
        return

    table = Table(title=f"Collection status: {status_file}")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("schema_version", str(record.schema_version))
    table.add_row("last_collection_time", _format_timestamp(record))
    console.print(table)


@cli.group()
def config() -> None:
    """Manage logcollector configuration files and overrides.

    Returns:
        None: This function is invoked for its side effects.
    """


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore LOGCOLLECTOR_* environment variables.")
def config_view(no_env: bool) -> None:
    """Display the effective settings and where each can be overridden.

    Args:
        no_env: If True, ignore environment-derived overrides.

    Raises:
        click.ClickException: If the configuration cannot be loaded.
    """
    manager = ConfigManager()
    try:
        settings = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    table = Table(title=f"Configuration: {manager.config_path}")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_column("Environment variable", style="dim")
    for name, value in settings.model_dump(mode="json").items():
        table.add_row(name, "null" if value is None else str(value), env_variable(name))
    console.print(table)


@config.command("set")
@click.argument("setting")
@click.option("--value", required=True, help="YAML literal to store, such as utf-8 or 30.")
def config_set(setting: str, value: str) -> None:
    """Store SETTING in the configuration file.

    Args:
        setting: Name of the setting, such as ``encoding``.
        value: YAML-literal value to write into the configuration file.

    Raises:
        click.ClickException: If parsing, validation, or writing fails.
    """
    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    manager = ConfigManager()
    try:
        previous, updated = manager.set_value(setting, parsed_value)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    if previous == updated:
        console.print(f"[yellow]No changes applied; {setting} is already {updated!r}.[/yellow]")
        return
    console.print(f"[green]Updated {setting}:[/green] {previous!r} -> {updated!r}")


def main() -> None:
    """Invoke the Click CLI as the console script entry point.

    Returns:
        None: This function is invoked for its side effects.
    """
    cli()


if __name__ == "__main__":
    main()
