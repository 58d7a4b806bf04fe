"""
Rate limiter for dashboard login to prevent brute-force attacks.
Counters live in Redis keyed by client IP and email; Redis outages fail open.
"""
import logging

import redis
from starlette.requests import Request

from wifidash.core.config import settings

logger = logging.getLogger("auth")


def get_client_ip(request: Request) -> str:
    """Client IP (supports X-Forwarded-For from proxy)."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded and settings.app_env == "production":
        trusted = settings.trusted_proxy_ips_set
        if trusted and request.client and request.client.host in trusted:
            return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "127.0.0.1"


def _key(client_ip: str, email: str) -> str:
    return f"wifidash:login_attempts:{client_ip}:{email.strip().lower()}"


def _redis() -> redis.Redis:
    return redis.Redis.from_url(settings.redis_url, decode_responses=True)


def check_login_rate_limit(client_ip: str, email: str) -> bool:
    """True if this attempt is allowed. Every call counts as an attempt."""
    try:
        client = _redis()
        key = _key(client_ip, email)
        current = client.incr(key)
        if current == 1:
            client.expire(key, settings.login_rate_limit_window_seconds)
        if current > settings.login_rate_limit_attempts:
            logger.warning("login_rate_limited", extra={"path": "/auth/login", "errors": current})
            return False
        return True
    except redis.RedisError as e:
        logger.warning("login_rate_limit_redis_error", extra={"error": str(e)})
        return True


def reset_login_attempts(client_ip: str, email: str) -> None:
    """Clear the counter after a successful login."""
    try:
        _redis().delete(_key(client_ip, email))
    except redis.RedisError as e:
        logger.warning("login_rate_limit_redis_error", extra={"error": str(e)})
