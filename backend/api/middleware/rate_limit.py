"""
Request throttling for the public endpoints (slowapi).

Stripe retries failed deliveries with backoff, so the webhook limit only has
to absorb redelivery bursts. Counters live in Redis when ``REDIS_URL`` is set
so every worker shares them; without Redis each process counts on its own.
"""

import ipaddress
import logging

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from infrastructure.config.settings import Settings, settings

logger = logging.getLogger(__name__)

RATE_LIMITS = {
    "webhook": "100/minute",
    "default": "100/minute",
}

# Checked in order; only the first hop of X-Forwarded-For is the client
PROXY_HEADERS = ("x-forwarded-for", "x-real-ip")


def _public_address(value: str) -> str | None:
    """Normalised address when *value* is a routable IP, else None.

    Private, loopback and link-local values in proxy headers are trivially
    spoofed and would let a caller share someone else's bucket.
    """
    try:
        addr = ipaddress.ip_address(value.strip())
    except ValueError:
        return None
    if addr.is_private or addr.is_loopback or addr.is_link_local:
        return None
    return str(addr)


def client_address(request: Request) -> str:
    """Rate-limit key: the public client IP from proxy headers, else the peer."""
    for header in PROXY_HEADERS:
        raw = request.headers.get(header)
        if not raw:
            continue
        address = _public_address(raw.split(",")[0])
        if address:
            return address
    return get_remote_address(request)


def build_limiter(config: Settings) -> Limiter:
    if config.redis_url:
        storage_uri = config.redis_url
    else:
        storage_uri = "memory://"
        if config.is_production:
            logger.warning("Rate limiter has no REDIS_URL; webhook limits are per process")

    return Limiter(
        key_func=client_address,
        storage_uri=storage_uri,
        default_limits=[RATE_LIMITS["default"]],
    )


def get_rate_limit(endpoint: str) -> str:
    """Limit string for *endpoint*, falling back to the default."""
    return RATE_LIMITS.get(endpoint, RATE_LIMITS["default"])


limiter = build_limiter(settings)
