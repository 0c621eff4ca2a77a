from __future__ import annotations

import functools
import time
from typing import Any, Awaitable, Callable, Optional

from fastapi import Request
from prometheus_client import CollectorRegistry, Counter, Histogram
from starlette.exceptions import HTTPException

Handler = Callable[..., Awaitable[Any]]


class InstrumentationMiddleware:
    """Per-handler request counters and latency histograms."""

    def __init__(self, registry: Optional[CollectorRegistry] = None) -> None:
        self.registry = registry if registry is not None else CollectorRegistry()
        self.requests_total = Counter(
            "http_requests_total",
            "Tracks the number of HTTP requests.",
            ["handler", "method", "code"],
            registry=self.registry,
        )
        self.request_duration = Histogram(
            "http_request_duration_seconds",
            "Tracks the latencies for HTTP requests.",
            ["handler", "method"],
            buckets=(0.001, 0.01, 0.1, 0.3, 0.6, 1, 3, 6, 9, 20, 30, 60, 90, 120),
            registry=self.registry,
        )

    def new_handler(self, name: str, handler: Handler) -> Handler:
        """Wrap ``handler`` so each call is counted and timed under ``name``.

        The wrapper keeps the handler's signature so FastAPI still resolves
        its parameters.
        """

        @functools.wraps(handler)
        async def instrumented(*args: Any, **kwargs: Any) -> Any:
            request = kwargs.get("request")
            method = request.method if isinstance(request, Request) else "GET"
            code = 500
            start = time.perf_counter()
            try:
                response = await handler(*args, **kwargs)
                code = getattr(response, "status_code", 200)
                return response
            except HTTPException as exc:
                code = exc.status_code
                raise
            finally:
                self.request_duration.labels(handler=name, method=method).observe(time.perf_counter() - start)
                self.requests_total.labels(handler=name, method=method, code=str(code)).inc()

        return instrumented
