"""Run a router under the pounce ASGI server.

pounce is an optional dependency (``pip install perch[server]``). Any
other ASGI server can host a Router directly, since it is an ASGI app.
"""

import logging

from perch.errors import ConfigurationError

logger = logging.getLogger("perch.server")


def run_server(app: object, host: str, port: int, *, workers: int = 1) -> None:
    """Start a pounce server with the given ASGI app.

    Pounce's ``run()`` takes an import string (e.g., ``"myapp:router"``),
    but here we have a live Router object, so ``pounce.Server`` is used
    directly with the ASGI callable.
    """
    try:
        from pounce.config import ServerConfig
        from pounce.server import Server
    except ImportError as exc:
        msg = "Serving requires pounce. Install it with: pip install perch[server]"
        raise ConfigurationError(msg) from exc

    config = ServerConfig(host=host, port=port, workers=workers)
    logger.info("Serving on http://%s:%d", host, port)
    Server(config, app).run()
