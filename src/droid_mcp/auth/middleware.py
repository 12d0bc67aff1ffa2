"""Bearer token authentication middleware for FastMCP HTTP/SSE transports."""

import logging
import secrets

from fastmcp.server.middleware import Middleware, MiddlewareContext

logger = logging.getLogger(__name__)


def _bearer_token(header: str | None) -> str | None:
    if header and header.startswith("Bearer "):
        return header[7:]
    return None


class BearerAuthMiddleware(Middleware):
    """FastMCP middleware that validates a Bearer token on every request.

    Only installed for HTTP/SSE transports; stdio is local to the client
    process.
    """

    def __init__(self, api_key: str):
        self._api_key = api_key

    @staticmethod
    def _extract_token(context: MiddlewareContext) -> str | None:
        ctx = getattr(context, "fastmcp_context", None)
        if ctx is not None and ctx.session and ctx.session.client_params:
            meta = getattr(ctx.session.client_params, "meta", None)
            if isinstance(meta, dict):
                token = _bearer_token(meta.get("authorization", meta.get("Authorization", "")))
                if token is not None:
                    return token

        request = getattr(context, "request", None)
        if request is not None and hasattr(request, "headers"):
            return _bearer_token(request.headers.get("authorization", ""))
        return None

    async def __call__(self, context: MiddlewareContext, call_next):
        token = self._extract_token(context)
        if token is None or not secrets.compare_digest(token, self._api_key):
            logger.warning("Unauthorized request: invalid or missing Bearer token")
            raise PermissionError("Unauthorized: invalid or missing API key")
        return await call_next(context)
