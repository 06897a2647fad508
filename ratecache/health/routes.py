"""Route handlers for health checks."""

from __future__ import annotations

from flask import current_app
from flask.views import MethodView

from ratecache.providers.restrictions import RestrictedCredentials
from ratecache.schemas import HealthCacheSchema, HealthStatusSchema

from . import blp


@blp.route("")
class HealthStatus(MethodView):
    @blp.response(200, HealthStatusSchema())
    def get(self):
        provider = current_app.extensions.get("rate_provider")
        return {
            "status": "ok",
            "app": current_app.config.get("APP_NAME", "fixer-rate-cache"),
            "provider": getattr(provider, "name", "unknown"),
        }


@blp.route("/cache")
class HealthCache(MethodView):
    @blp.response(200, HealthCacheSchema())
    def get(self):
        restrictions: RestrictedCredentials | None = current_app.extensions.get(
            "restricted_credentials"
        )
        return {
            "status": "ok",
            "restricted_credentials": len(restrictions) if restrictions is not None else 0,
        }
