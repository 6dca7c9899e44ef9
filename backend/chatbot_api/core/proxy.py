"""WSGI proxy middleware configuration helper."""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix


def init_app(app: Flask) -> None:
    """Trust ``X-Forwarded-*`` headers when ``USE_PROXYFIX`` is set.

    The rate limiter keys on ``request.remote_addr``; behind a load balancer
    that is the balancer itself unless the forwarded client address is
    honoured here. ``PROXYFIX_HOPS`` (default 1) is the number of trusted
    proxies in front of the app.
    """
    if not app.config.get("USE_PROXYFIX", True):
        return
    hops = int(app.config.get("PROXYFIX_HOPS", 1))
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops, x_host=hops, x_prefix=hops)
