# plpgen/lib/rate_limit.py
# Default: 100 requests per minute per IP
# Configure via RATE_LIMIT env var (e.g., "50/minute")
from slowapi import Limiter
from slowapi.util import get_remote_address

from plpgen.core.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit],
    enabled=settings.rate_limit_enabled,
)
