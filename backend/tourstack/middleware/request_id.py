"""
TourStack Backend — Request ID Middleware
===========================================

What:  Assigns a short correlation id to each request and echoes it back.
Why:   Every log line written while serving a request, and the error body
       the editor shows, can be matched up by this id.
How:   Reuses the client's X-Request-ID when sent, otherwise generates one;
       stores it in a ContextVar and in request.state, and sets the
       X-Request-ID response header.
When:  Outermost middleware, so the access log and exception handlers see it.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on the same event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
