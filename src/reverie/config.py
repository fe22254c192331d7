"""Application configuration.

Read once when an ``App`` is built and validated there; an invalid
value raises ``ConfigurationError`` before any request is served.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, port=3000, prefix="/app")
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8080
    greeting: bool = True  # Log the URL on startup

    # Debug dumps in error responses. Off by default so no internal
    # detail leaks to clients by accident.
    debug: bool = False

    # Site prefix for apps not mounted at the root of their domain.
    # Requests outside the prefix receive 404 from the host.
    prefix: str = ""

    # Security. Empty means a random secret per server process.
    secret: str = ""

    # Logging
    log_level: str = "info"

    # Seconds in-flight requests may keep running after stop()
    graceful_stop: float = 1.0
