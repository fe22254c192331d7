"""Serving an App with pounce.

Pounce's ``run()`` takes an import string (e.g., ``"myapp:app"``), but
``App.run`` has a live object. We use ``pounce.Server`` directly with
the ASGI callable. Pounce is the ``server`` extra; it is imported only
when serving so the core has no hard dependency on it.
"""

from reverie.errors import ConfigurationError


def run_server(app: object, host: str, port: int) -> None:
    """Serve *app* on *host*:*port* until interrupted.

    Pounce delivers the ASGI lifespan shutdown on Ctrl+C, which is where
    the app stops taking requests and drains the ones in flight.
    """
    try:
        from pounce.config import ServerConfig
        from pounce.server import Server
    except ImportError:
        msg = "App.run() requires the 'pounce' package. Install it with: pip install reverie[server]"
        raise ConfigurationError(msg) from None

    config = ServerConfig(host=host, port=port, workers=1)
    server = Server(config, app)
    server.run()
