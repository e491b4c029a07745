# middleware/request_logging.py
# Tags every request with an id, logs it and feeds the Prometheus metrics.

import time
import uuid
import logging
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from headpress.core.errors import error_response
from headpress.core.logging_config import log_api_request
from headpress.core.metrics import api_requests_total, api_request_duration_seconds

logger = logging.getLogger(__name__)


def generate_request_id() -> str:
    return f'req_{uuid.uuid4().hex[:12]}'


def _route_label(request: Request) -> str:
    # Route template keeps metric cardinality bounded (/posts/{post_id}, not /posts/42).
    route = request.scope.get('route')
    return getattr(route, 'path', None) or 'unmatched'


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = generate_request_id()
        request.state.request_id = request_id
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                f'Unhandled error on {request.method} {request.url.path}',
                extra={'request_id': request_id},
            )
            response = error_response('rest_internal_error', 'Internal server error.', 500)

        elapsed = time.perf_counter() - started
        route = _route_label(request)
        api_requests_total.labels(method=request.method, endpoint=route, status=response.status_code).inc()
        api_request_duration_seconds.labels(method=request.method, endpoint=route).observe(elapsed)
        log_api_request(
            logger,
            request.method,
            request.url.path,
            status_code=response.status_code,
            response_time_ms=int(elapsed * 1000),
            user_id=getattr(request.state, 'user_id', None),
            request_id=request_id,
        )

        response.headers['X-Request-ID'] = request_id
        return response
