"""
Mock metrics HTTP server.

Each configured URI answers like a metrics backend query API. The value in the
response comes from the first configured version whose query parameter
patterns match the request.
"""

import logging
import random
import time
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

from .engine import NoMatch, Unauthorized, evaluate
from .generator import BetaSampler, ProcessClock
from .models import EndpointConfig
from .providers import render

logger = logging.getLogger(__name__)

# Prometheus metrics about the mock server itself
REQUEST_COUNT = Counter(
    'metricsgen_requests_total',
    'Total requests to configured endpoints',
    ['uri', 'outcome']
)

REQUEST_LATENCY = Histogram(
    'metricsgen_request_duration_seconds',
    'Time spent answering configured endpoints',
    ['uri']
)

UNAUTHORIZED_BODY = "headers are not matching"
NO_MATCH_BODY = "500 - cannot find any matching version in request!"


def make_handler(endpoint: EndpointConfig, clock: ProcessClock, sampler: BetaSampler):
    async def handler(request: Request):
        start_time = time.time()
        outcome_label = "value"
        try:
            query = {name: request.query_params.getlist(name) for name in request.query_params.keys()}
            outcome = evaluate(endpoint, query, request.headers, clock, sampler)

            if isinstance(outcome, Unauthorized):
                outcome_label = "unauthorized"
                return PlainTextResponse(UNAUTHORIZED_BODY, status_code=401)
            if isinstance(outcome, NoMatch):
                outcome_label = "no_match"
                return PlainTextResponse(NO_MATCH_BODY, status_code=500)
            return JSONResponse(render(endpoint.provider, outcome.value))
        finally:
            REQUEST_COUNT.labels(uri=endpoint.uri, outcome=outcome_label).inc()
            REQUEST_LATENCY.labels(uri=endpoint.uri).observe(time.time() - start_time)

    handler.__name__ = f"serve_{endpoint.uri.strip('/').replace('/', '_') or 'root'}"
    return handler


def create_app(
    endpoints: tuple,
    clock: Optional[ProcessClock] = None,
    sampler: Optional[BetaSampler] = None,
) -> FastAPI:
    """Build the application serving the given endpoint configs."""
    clock = clock or ProcessClock.start()
    sampler = sampler or random.betavariate

    app = FastAPI(title="Mock Metrics Server")
    app.state.endpoints = endpoints
    app.state.clock = clock

    configured = set()
    for endpoint in endpoints:
        logger.info(f"Registering {endpoint.uri} ({endpoint.provider.value}, {len(endpoint.variants)} versions)")
        app.add_api_route(
            endpoint.uri,
            make_handler(endpoint, clock, sampler),
            methods=["GET", "POST"],
            include_in_schema=False,
        )
        configured.add(endpoint.uri)

    if "/metrics" not in configured:
        @app.get("/metrics", include_in_schema=False)
        async def metrics():
            """Prometheus metrics endpoint."""
            return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
    else:
        logger.warning("/metrics is configured as a mock endpoint, not exposing server metrics")

    if "/healthz" not in configured:
        @app.get("/healthz", include_in_schema=False)
        async def healthz():
            """Health check endpoint."""
            return {"status": "ok", "endpoints": len(endpoints)}

    return app
