"""Command line interface entry point."""

from __future__ import annotations

import logging
import sys

import click

from node_bootstrap.artifact_catalog import UnsupportedArchitectureError, select_artifacts
from node_bootstrap.configuration import (
    DEFAULT_CONFIG_FILENAME,
    ConfigurationError,
    load_configuration,
    write_placeholder_configuration,
)
from node_bootstrap.orchestration import BootstrapError, run_node_bootstrap
from node_bootstrap.subscription import create_app, serve

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class CliError(Exception):
    """Custom CLI error."""


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="node-bootstrap")
def cli() -> None:
    """Bootstrap a proxy node and serve its subscription."""


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the YAML node configuration template to write",
)
def generate_config(output_path: str) -> None:
    """Generate a placeholder YAML node configuration with guidance comments."""
    try:
        resolved_output = write_placeholder_configuration(output_path)
    except (FileExistsError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


@cli.command(name="show-artifacts")
@click.option(
    "--config",
    "config_path",
    required=False,
    type=click.Path(path_type=str),
    help="Path to the YAML node configuration file (environment variables also apply)",
)
def show_artifacts(config_path: str | None) -> None:
    """List the artifacts that start would download, without downloading them."""
    try:
        configuration = load_configuration(config_path)
        specs = select_artifacts(configuration)
    except (ConfigurationError, UnsupportedArchitectureError) as exc:
        raise CliError(str(exc)) from exc
    for spec in specs:
        click.echo(f"{spec.name.value}\t{spec.filename}\t{spec.url}")


@cli.command(name="start")
@click.option(
    "--config",
    "config_path",
    required=False,
    type=click.Path(path_type=str),
    help="Path to the YAML node configuration file (environment variables also apply)",
)
@click.option(
    "--log-level",
    default="INFO",
    show_default=True,
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Log level for bootstrap and server output",
)
def start(config_path: str | None, log_level: str) -> None:
    """Install and start every daemon, then serve the subscription route."""
    logging.basicConfig(level=log_level.upper(), format=LOG_FORMAT)
    try:
        configuration = load_configuration(config_path)
        outcome = run_node_bootstrap(configuration)
    except (ConfigurationError, BootstrapError) as exc:
        raise CliError(str(exc)) from exc
    app = create_app(configuration, outcome.tunnel)
    serve(app, port=configuration.http_port, log_level=log_level)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=list(argv), standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
