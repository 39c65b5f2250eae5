#!/usr/bin/env python3
"""
Equinode CLI
A Python CLI tool for provisioning Equilibria test nodes in Docker containers.
"""

import logging

import click
from rich.logging import RichHandler

from equinode import __version__
from equinode.commands import create, ports


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def cli(verbose):
    """Equinode CLI - Provision Equilibria test nodes in Docker containers."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(show_path=False)],
        )


cli.add_command(create)
cli.add_command(ports)


def main():
    """Main entry point for the equinode CLI."""
    cli()


if __name__ == "__main__":
    main()
