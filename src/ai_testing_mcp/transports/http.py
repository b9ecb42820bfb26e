"""
HTTP transport.

FastAPI application that accepts one JSON-RPC message per POST and answers
with one JSON-RPC envelope, served by uvicorn.

Routes:
    OPTIONS *            Empty 200 (CORS preflight), before anything else
    POST /auth           Reports whether the supplied credentials are valid
    POST / , /mcp, *mcp* JSON-RPC endpoint
    GET / , *mcp*        Static status document
    anything else        404 {"error": "Not found"}

Every response carries the CORS headers. JSON-RPC error envelopes are sent
with HTTP 500, results (including ``isError`` tool results) with 200, and
the bearer-token gate rejects with 401 before the body is read.
"""

import logging
import secrets
import socket
from typing import Any

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from ai_testing_mcp.__version__ import __version__
from ai_testing_mcp.models import DEFAULT_CONFIG, JSONRPCErrorCode, ServerConfig
from ai_testing_mcp.protocol import ProtocolHandler, error_response, is_error_response

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-API-Key",
}

UNAUTHORIZED_MESSAGE = "Unauthorized. Please provide a valid API key in Authorization header."


def is_rpc_path(path: str) -> bool:
    """Return True for paths that accept JSON-RPC (root, /mcp, or containing "mcp")."""
    return path in ("", "/") or "mcp" in path


def extract_token(authorization: str | None) -> str | None:
    """Token from an Authorization header, as "Bearer <token>" or the raw token.

    Example:
        >>> extract_token("Bearer abc")
        'abc'
    """
    if not authorization:
        return None
    if authorization.startswith("Bearer "):
        return authorization[len("Bearer ") :]
    return authorization


def status_document(handler: ProtocolHandler, config: ServerConfig) -> dict[str, Any]:
    auth = "required" if config.auth_enabled else "disabled"
    return {
        "name": "AI Testing MCP Server",
        "version": __version__,
        "status": "running",
        "authentication": auth,
        "protocol": "MCP over HTTP",
        "endpoints": {
            "mcp": "POST / or POST /mcp",
            "auth": "POST /auth",
            "health": "GET /",
        },
        "tools": [d.name for d in handler.registry.list_tools()],
        "usage": {
            "authentication": 'Include "Authorization: Bearer <your-api-key>" header',
            "example": (
                'curl -H "Authorization: Bearer your-key" -X POST '
                '-d \'{"jsonrpc":"2.0","id":1,"method":"tools/list"}\' /'
            ),
        },
    }


def create_app(handler: ProtocolHandler, config: ServerConfig | None = None) -> FastAPI:
    """Build the FastAPI application for the HTTP transport.

    Args:
        handler: Shared JSON-RPC method router.
        config: Server configuration; drives the auth gate.

    Returns:
        FastAPI application. No OpenAPI or docs routes are exposed, so every
        GET other than the status paths is a 404.

    Example:
        >>> client = TestClient(create_app(ProtocolHandler(REGISTRY)))
        >>> client.get("/").json()["status"]
        'running'
    """
    config = config or DEFAULT_CONFIG
    app = FastAPI(
        title="AI Testing MCP Server",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    def authenticated(request: Request) -> bool:
        token = extract_token(request.headers.get("authorization"))
        if token is None or config.auth_token is None:
            return False
        return secrets.compare_digest(token.encode(), config.auth_token.encode())

    @app.middleware("http")
    async def cors_middleware(request: Request, call_next):
        if request.method == "OPTIONS":
            response = Response(status_code=200)
        else:
            response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    @app.post("/auth")
    async def auth_check(request: Request) -> JSONResponse:
        if not config.auth_enabled:
            return JSONResponse({"authenticated": True, "message": "Authentication is disabled"})
        if authenticated(request):
            return JSONResponse({"authenticated": True, "message": "API key is valid"})
        return JSONResponse(
            {"authenticated": False, "message": "Invalid or missing API key"}, status_code=401
        )

    @app.post("/{path:path}")
    async def rpc(request: Request, path: str) -> JSONResponse:
        if not is_rpc_path(path):
            return JSONResponse({"error": "Not found"}, status_code=404)
        if config.auth_enabled and not authenticated(request):
            logger.warning(f"Rejected unauthenticated request from {request.client}")
            return JSONResponse(
                error_response(None, JSONRPCErrorCode.UNAUTHORIZED, UNAUTHORIZED_MESSAGE),
                status_code=401,
            )

        response = await handler.handle_raw(await request.body())
        status = 500 if is_error_response(response) else 200
        return JSONResponse(response, status_code=status)

    @app.get("/{path:path}")
    async def status(path: str) -> JSONResponse:
        if not is_rpc_path(path):
            return JSONResponse({"error": "Not found"}, status_code=404)
        return JSONResponse(status_document(handler, config))

    return app


async def serve_http(handler: ProtocolHandler, config: ServerConfig) -> int:
    """Bind the configured port and serve until uvicorn receives a stop signal.

    Args:
        handler: Shared JSON-RPC method router.
        config: Server configuration (host, port, auth, log level).

    Returns:
        0 after an orderly shutdown, 1 if the port cannot be bound.
    """
    try:
        sock = socket.create_server((config.host, config.port))
    except OSError as e:
        logger.error(f"Cannot bind {config.host}:{config.port}: {e}")
        return 1

    server = uvicorn.Server(
        uvicorn.Config(
            create_app(handler, config),
            log_config=None,
            log_level=logging.getLevelNamesMapping()[config.log_level],
        )
    )
    logger.info(f"AI Testing MCP server running on HTTP port {config.port}")
    try:
        await server.serve(sockets=[sock])
    finally:
        sock.close()
    return 0
