"""Kudos HTTP API layer.

This package provides the Falcon Asynchronous Server Gateway Interface
(ASGI) application that receives reconciliation payloads.

Public API
----------
create_app
    Application factory that configures the Falcon ASGI app with health
    endpoints and, when a reconciliation service is provided, the
    reconciliation webhook.
"""

from kudos.api.app import create_app

__all__ = ["create_app"]
