#!/usr/bin/env python3
"""
fuzzfleet - fuzzer instance manager

CLI interface using Click for command-line interaction.
"""

import sys
import threading

import click
from rich.console import Console

from fuzzfleet import __version__
from fuzzfleet.core.errors import FleetError

console = Console(stderr=True)


@click.command()
@click.version_option(version=__version__)
@click.option("-c", "--config", "config_path", required=True, help="Configuration file")
@click.option("-v", "--verbosity", default=0, type=int, help="Verbosity level")
@click.option("--log-file", default=None, type=click.Path(dir_okay=False), help="Also write logs to this file")
def cli(config_path, verbosity, log_file):
    """Start and supervise the configured fuzzer instances."""
    from fuzzfleet.utils.logging import setup_logging
    setup_logging(verbosity=verbosity, log_file=log_file)

    from fuzzfleet.core.config import load_config
    from fuzzfleet.manager import create_instances, run_instances

    try:
        cfg, syscalls = load_config(config_path)
    except FleetError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        sys.exit(1)

    try:
        instances = create_instances(cfg, syscalls)
    except FleetError as e:
        console.print(f"[bold red]Error:[/bold red] failed to create an instance: {e}")
        sys.exit(1)

    stop = threading.Event()
    try:
        run_instances(instances, stop)
    except KeyboardInterrupt:
        stop.set()
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
