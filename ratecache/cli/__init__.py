"""CLI entry points."""

from __future__ import annotations

from flask import Flask

from .cache import clear_cache, warm_cache


def register_cli(app: Flask) -> None:
    """Register CLI commands on the given Flask app."""

    app.cli.add_command(warm_cache)
    app.cli.add_command(clear_cache)
