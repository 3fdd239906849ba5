"""CLI entrypoint for running darwin as a module."""

from darwin.cli import cli

if __name__ == "__main__":
    cli()
