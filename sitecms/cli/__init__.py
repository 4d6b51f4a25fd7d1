"""Command-line interface."""

from sitecms.cli.main import cli


__all__ = ["cli"]
