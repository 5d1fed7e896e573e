"""
Simple in-memory rate limiter for unauthenticated auth endpoints.
"""
import logging
import time
from collections import defaultdict
from typing import Dict

from fastapi import Request
from crosscareers.core.errors import TooManyRequests

logger = logging.getLogger(__name__)

# {"<scope>:<ip>": [timestamps]}
rate_limit_store: Dict[str, list] = defaultdict(list)


def get_client_ip(request: Request) -> str:
    """Extract client IP address from request."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


def check_rate_limit(request: Request, scope: str, max_requests: int = 10, window_seconds: int = 60) -> None:
    """
    Record a hit for ``scope`` from the client IP.

    Raises:
        TooManyRequests: if the client already made ``max_requests`` within the window
    """
    key = f"{scope}:{get_client_ip(request)}"
    now = time.time()
    cutoff = now - window_seconds
    rate_limit_store[key] = [ts for ts in rate_limit_store[key] if ts > cutoff]

    if len(rate_limit_store[key]) >= max_requests:
        logger.warning(f"Rate limit exceeded for {key} ({max_requests} requests in {window_seconds}s)")
        raise TooManyRequests(
            f"Rate limit exceeded. Maximum {max_requests} requests per {window_seconds} seconds."
        )

    rate_limit_store[key].append(now)


def rate_limiter(scope: str, max_requests: int = 10, window_seconds: int = 60):
    """Dependency factory wrapping check_rate_limit."""
    def dependency(request: Request) -> None:
        check_rate_limit(request, scope, max_requests, window_seconds)
    return dependency
