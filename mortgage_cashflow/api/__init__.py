"""HTTP API."""

from mortgage_cashflow.api.app import create_app

__all__ = ["create_app"]
