"""Liveness and cache-state endpoints."""

from __future__ import annotations

from flask_smorest import Blueprint

blp = Blueprint("Health", __name__, description="Liveness and restricted-credential state")

from . import routes  # noqa: E402,F401
