from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import settings

# Shared between app.state and the per-route decorators
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=settings.RATE_LIMIT_DEFAULT,
    enabled=settings.RATE_LIMIT_ENABLED,
)
