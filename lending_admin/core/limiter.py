from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from lending_admin.core.settings import settings


def client_address(request: Request) -> str:
    """Rate-limit key: the caller's address, honouring the first proxy hop when trusted."""
    if settings.trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return get_remote_address(request)


limiter = Limiter(
    key_func=client_address,
    default_limits=[f"{settings.rate_limit_per_minute}/minute"],
    storage_uri=settings.redis_url,
)

__all__ = ["client_address", "limiter"]
