"""Reverie: composable async HTTP handlers.

Applications are plain functions from request to response, wrapped in
middleware and routed by path::

    from reverie import App, get, logger, not_found, pipeline, respond, router

    async def echo(request):
        return await respond(request.crumb("word"))

    app = App(
        pipeline([logger, router([get("/echo/:word", echo)])])(not_found)
    )

    app.run()

Serving with ``App.run`` needs the server extra (``pip install reverie[server]``);
``App`` itself is an ASGI callable that any ASGI server can host.
"""

import importlib

__version__ = "0.1.0"

# Public name -> module that defines it
_EXPORTS: dict[str, str] = {
    # Application
    "App": "reverie.app",
    "AppConfig": "reverie.config",
    # Errors
    "ReverieError": "reverie.errors",
    "ConfigurationError": "reverie.errors",
    "MissingCrumb": "reverie.errors",
    "ClientDisconnected": "reverie.errors",
    # Messages
    "Request": "reverie.http.request",
    "crumb": "reverie.http.request",
    "Response": "reverie.http.response",
    "response": "reverie.http.response",
    "respond": "reverie.http.response",
    "html": "reverie.http.response",
    "json": "reverie.http.response",
    "redirect": "reverie.http.response",
    "empty": "reverie.http.response",
    "Headers": "reverie.http.headers",
    "sort_headers": "reverie.http.headers",
    "Method": "reverie.http.method",
    "OtherMethod": "reverie.http.method",
    "to_method": "reverie.http.method",
    "method_to_string": "reverie.http.method",
    "Status": "reverie.http.status",
    "to_status": "reverie.http.status",
    "status_to_int": "reverie.http.status",
    "status_to_reason": "reverie.http.status",
    "status_to_string": "reverie.http.status",
    "is_informational": "reverie.http.status",
    "is_successful": "reverie.http.status",
    "is_redirection": "reverie.http.status",
    "is_client_error": "reverie.http.status",
    "is_server_error": "reverie.http.status",
    # Variables
    "Local": "reverie.variables",
    "Global": "reverie.variables",
    "new_local": "reverie.variables",
    "new_global": "reverie.variables",
    # Middleware
    "Handler": "reverie.middleware.protocol",
    "Middleware": "reverie.middleware.protocol",
    "Next": "reverie.middleware.protocol",
    "identity": "reverie.middleware.pipeline",
    "pipeline": "reverie.middleware.pipeline",
    "middleware": "reverie.middleware.pipeline",
    "logger": "reverie.middleware.logger",
    "sessions": "reverie.middleware.sessions",
    "sessions_in_memory": "reverie.middleware.sessions",
    "session": "reverie.middleware.sessions",
    "set_session": "reverie.middleware.sessions",
    "all_session_values": "reverie.middleware.sessions",
    "invalidate_session": "reverie.middleware.sessions",
    "session_key": "reverie.middleware.sessions",
    "session_id": "reverie.middleware.sessions",
    "session_expires_at": "reverie.middleware.sessions",
    # Routing
    "router": "reverie.routing.router",
    "Router": "reverie.routing.router",
    "not_found": "reverie.routing.router",
    "get": "reverie.routing.builders",
    "post": "reverie.routing.builders",
    "put": "reverie.routing.builders",
    "delete": "reverie.routing.builders",
    "head": "reverie.routing.builders",
    "connect": "reverie.routing.builders",
    "options": "reverie.routing.builders",
    "trace": "reverie.routing.builders",
    "patch": "reverie.routing.builders",
    "any_method": "reverie.routing.builders",
    "scope": "reverie.routing.builders",
    # Errors and logging
    "Error": "reverie.server.errors",
    "Layer": "reverie.server.errors",
    "CausedBy": "reverie.server.errors",
    "ErrorHandler": "reverie.server.errors",
    "error_template": "reverie.server.errors",
    "default_error_handler": "reverie.server.errors",
    "debug_dump": "reverie.server.debug_dump",
    "LogLevel": "reverie.log",
    "sub_log": "reverie.log",
    "initialize_log": "reverie.log",
    "request_id": "reverie.log",
    "get_request": "reverie.context",
    # Security
    "random": "reverie.security",
    "to_base64url": "reverie.security",
    "from_base64url": "reverie.security",
}

__all__ = sorted(_EXPORTS)


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import reverie`` fast while providing a clean top-level API.
    """
    module = _EXPORTS.get(name)
    if module is None:
        msg = f"module 'reverie' has no attribute {name!r}"
        raise AttributeError(msg)
    return getattr(importlib.import_module(module), name)
