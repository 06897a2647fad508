"""Schemas for API requests and responses."""

from __future__ import annotations

from marshmallow import Schema, fields


class HealthStatusSchema(Schema):
    status = fields.String(required=True)
    app = fields.String()
    provider = fields.String()


class HealthCacheSchema(Schema):
    status = fields.String(required=True)
    restricted_credentials = fields.Integer(required=True)


class RatesQuerySchema(Schema):
    # Left as raw strings; validation.py produces the structured error bodies.
    symbols = fields.String(load_default=None)
    access_key = fields.String(load_default=None)
    base = fields.String(load_default=None)


class CacheEntryQuerySchema(Schema):
    base = fields.String(load_default=None)


class RatesResponseSchema(Schema):
    """Same shape as the upstream historical-rates success body."""

    success = fields.Boolean(required=True)
    historical = fields.Boolean(required=True)
    date = fields.String(required=True)
    timestamp = fields.Integer(required=True)
    base = fields.String(required=True)
    rates = fields.Dict(keys=fields.String(), values=fields.Float(), required=True)


class ErrorResponseSchema(Schema):
    timestamp = fields.String(required=True)
    status = fields.Integer(required=True)
    error = fields.String(required=True)
    error_code = fields.String(required=True)
    message = fields.String(required=True)
    description = fields.String()
    path = fields.String()
