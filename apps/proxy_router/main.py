"""HTTP entry point for the proxy router.

Every path and every method lands on one catch-all endpoint that delegates
to :class:`apps.proxy_router.ProxyRouter`.  Methods other than GET and POST
are accepted at this layer on purpose so the router can answer them with its
own 405 body.
"""

import os

from fastapi import FastAPI, Request

from apps.proxy_router import ProxyRouter
from lib.config.proxy_router_loader import DEFAULT_CONFIG_PATH
from lib.telemetry.logger import configure_logging

ACCEPTED_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS", "TRACE"]


def create_app(router: ProxyRouter) -> FastAPI:
    # No docs routes: every path belongs to the backends.
    app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)

    @app.api_route("/{path:path}", methods=ACCEPTED_METHODS, include_in_schema=False)
    async def proxy(request: Request):
        """Route the request to its backend."""

        return await router.handle(request)

    return app


router = ProxyRouter(config_path=os.environ.get("PROXY_ROUTER_CONFIG", DEFAULT_CONFIG_PATH))
configure_logging(router.config.log_level)
app = create_app(router)
