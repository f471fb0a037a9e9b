"""Request context middleware for correlation ID tracking."""

import uuid
from collections.abc import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from src.core.logging import owner_ctx, request_id_ctx

RequestResponseEndpoint = Callable[[Request], Awaitable[Response]]


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind a request id to the log context and echo it back.

    Uses the incoming X-Request-ID header or generates a UUID.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        request_token = request_id_ctx.set(request_id)
        owner_token = owner_ctx.set(None)
        try:
            response = await call_next(request)
        finally:
            owner_ctx.reset(owner_token)
            request_id_ctx.reset(request_token)

        response.headers["X-Request-ID"] = request_id
        return response
