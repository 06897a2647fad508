"""Rates blueprint module."""

from __future__ import annotations

from flask_smorest import Blueprint

blp = Blueprint("Rates", __name__, description="Cached historical exchange rates")

from . import routes  # noqa: E402,F401
