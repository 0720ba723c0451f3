"""Command-line interface for sqlregress."""

from sqlregress.cli.main import app

__all__ = ["app"]
