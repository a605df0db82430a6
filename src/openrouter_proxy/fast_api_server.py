# OpenAI to OpenRouter proxy server.
# Run with: openrouter-proxy
# Or:       uvicorn openrouter_proxy.fast_api_server:app --port 3000
from typing import Any

import requests
import uvicorn
from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response, StreamingResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from openrouter_proxy.app.config import SERVICE_NAME, ProxySettings, get_settings
from openrouter_proxy.app.main import (
    ProxyContext,
    chat_completions,
    health,
    list_models,
    not_found,
)
from openrouter_proxy.infrastructure.local_platform_manager import create_logger
from openrouter_proxy.services.upstream_service import create_upstream_session

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]


def _process_response(handler_resp: dict[str, Any]) -> Response:
    """
    Convert a handler response into a FastAPI Response.

    Args:
        handler_resp (dict): A dict like:
            {
                "statusCode": int,
                "headers": {"Content-Type": str, ...},
                "body": dict | Iterator[bytes],
            }

    Returns:
        Response: JSONResponse for dict bodies, StreamingResponse for byte iterators.
    """
    status_code = handler_resp.get("statusCode", 200)
    headers = handler_resp.get("headers", {})
    body = handler_resp.get("body", {})

    if isinstance(body, dict):
        return JSONResponse(content=body, status_code=status_code)

    return StreamingResponse(content=body, status_code=status_code, headers=headers)


def _context(request: Request) -> ProxyContext:
    return request.app.state.context


def create_app(
    settings: ProxySettings | None = None,
    session: requests.Session | None = None,
) -> FastAPI:
    """Build the proxy application around one immutable settings value."""
    settings = settings or get_settings()
    logger = create_logger(settings.log_level, logs_dir=settings.log_dir)

    app = FastAPI(title=SERVICE_NAME)
    app.state.context = ProxyContext(
        settings=settings,
        session=session or create_upstream_session(settings),
        logger=logger,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.api_route("/health", methods=["GET", "HEAD"])
    def health_check(request: Request) -> Response:
        return _process_response(health(_context(request)))

    @app.api_route("/v1/models", methods=["GET", "HEAD"])
    def models(request: Request) -> Response:
        return _process_response(list_models(_context(request)))

    @app.post("/v1/chat/completions")
    async def completions(request: Request) -> Response:
        body = await request.body()
        handler_resp = await run_in_threadpool(chat_completions, _context(request), body)
        return _process_response(handler_resp)

    # --- catch-all for unsupported endpoints; must be registered last ---
    @app.api_route("/{path:path}", methods=ALL_METHODS)
    def unsupported(request: Request) -> Response:
        return _process_response(not_found(request.url.path))

    # Methods outside ALL_METHODS never reach the catch-all route
    @app.exception_handler(StarletteHTTPException)
    async def unmatched_route(request: Request, exc: StarletteHTTPException) -> Response:
        if exc.status_code in (404, 405):
            return _process_response(not_found(request.url.path))
        return await http_exception_handler(request, exc)

    return app


def run() -> None:
    """Start the proxy with settings read from the environment."""
    settings = get_settings()
    logger = create_logger(settings.log_level, logs_dir=settings.log_dir)
    logger.info(f"{SERVICE_NAME} running on port {settings.port}")
    logger.info(f"Health check: http://localhost:{settings.port}/health")
    logger.info(f"API Key configured: {settings.api_connected}")
    uvicorn.run(app, host=settings.host, port=settings.port)


app: FastAPI = create_app()


if __name__ == "__main__":
    run()
