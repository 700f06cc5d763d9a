"""Middleware package for the EcoTracker API."""

from ecotracker.middleware.correlation import CORRELATION_ID_HEADER, CorrelationIdMiddleware
from ecotracker.middleware.rate_limit import limiter, rate_limit_exceeded_handler

__all__ = [
    "CORRELATION_ID_HEADER",
    "CorrelationIdMiddleware",
    "limiter",
    "rate_limit_exceeded_handler",
]
