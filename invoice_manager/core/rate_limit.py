"""
Rate Limiting Middleware
Throttles authentication endpoints and invoice/bank account writes per client
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Dict, Tuple, Optional
import threading
import logging

from invoice_manager.core.config import settings
from invoice_manager.core.exceptions import AuthenticationError
from invoice_manager.core.security import decode_access_token

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Thread-safe in-memory rate limiter using a sliding window.
    Counters are per process.
    """

    def __init__(self):
        self._requests: Dict[str, list] = defaultdict(list)
        self._lock = threading.Lock()
        self._last_sweep = datetime.utcnow()

        # (max requests, window seconds) keyed by path prefix
        self.limits = {
            '/api/v1/auth/login': (5, 60),
            '/api/v1/auth/register': (3, 300),
            '/api/v1/invoices': (30, 60),
            '/api/v1/bankaccounts': (20, 60),
            'default': (100, 60),
        }

    def _get_client_ip(self, request: Request) -> str:
        """Get client IP address from request"""
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

        if request.client:
            return request.client.host

        return "unknown"

    def _get_rate_limit_key(self, request: Request) -> str:
        """Combine IP address with the user id of a valid bearer token"""
        ip = self._get_client_ip(request)

        user_id = "anonymous"
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            try:
                payload = decode_access_token(auth_header[7:])
            except AuthenticationError:
                # Rejected later by the route; throttled with anonymous callers
                payload = {}
            if payload.get("user_id") is not None:
                user_id = f"user{payload['user_id']}"

        return f"{ip}:{user_id}"

    def _limit_for(self, path: str) -> Tuple[str, int, int]:
        # Longest matching prefix wins
        best = None
        for pattern in self.limits:
            if pattern != 'default' and path.startswith(pattern):
                if best is None or len(pattern) > len(best):
                    best = pattern
        pattern = best or 'default'
        limit, window = self.limits[pattern]
        return pattern, limit, window

    def _cleanup_old_requests(self, key: str, window_seconds: int):
        cutoff = datetime.utcnow() - timedelta(seconds=window_seconds)
        self._requests[key] = [
            timestamp for timestamp in self._requests[key]
            if timestamp > cutoff
        ]
        if not self._requests[key]:
            del self._requests[key]

    def _sweep_idle_keys(self, now: datetime):
        """Drop buckets whose newest request is older than the longest window"""
        longest = max(window for _, window in self.limits.values())
        if now - self._last_sweep < timedelta(seconds=longest):
            return
        cutoff = now - timedelta(seconds=longest)
        for key in [k for k, stamps in self._requests.items() if not stamps or stamps[-1] <= cutoff]:
            del self._requests[key]
        self._last_sweep = now

    def is_allowed(self, request: Request) -> Tuple[bool, Optional[Dict]]:
        """
        Check if the request is allowed under rate limiting rules.

        Returns:
            Tuple of (is_allowed, rate_limit_info)
        """
        path = request.url.path
        method = request.method

        # Reads are only throttled on auth endpoints
        if method in ['GET', 'HEAD', 'OPTIONS'] and not path.startswith('/api/v1/auth'):
            return True, None

        pattern, limit, window = self._limit_for(path)
        key = f"{pattern}:{self._get_rate_limit_key(request)}"

        with self._lock:
            self._sweep_idle_keys(datetime.utcnow())
            self._cleanup_old_requests(key, window)
            current_count = len(self._requests[key])

            if current_count >= limit:
                oldest_request = min(self._requests[key])
                retry_after = int((oldest_request + timedelta(seconds=window) - datetime.utcnow()).total_seconds())

                logger.warning(f"Rate limit exceeded for {key}: {current_count}/{limit} requests")

                return False, {
                    'limit': limit,
                    'remaining': 0,
                    'reset': retry_after,
                    'retry_after': max(1, retry_after)
                }

            self._requests[key].append(datetime.utcnow())

            return True, {
                'limit': limit,
                'remaining': limit - current_count - 1,
                'reset': window
            }


class RateLimitMiddleware(BaseHTTPMiddleware):
    """FastAPI middleware for rate limiting"""

    def __init__(self, app, rate_limiter: Optional[RateLimiter] = None):
        super().__init__(app)
        self.rate_limiter = rate_limiter or RateLimiter()

    async def dispatch(self, request: Request, call_next):
        if not settings.RATE_LIMIT_ENABLED:
            return await call_next(request)

        if not request.url.path.startswith('/api/'):
            return await call_next(request)

        is_allowed, rate_info = self.rate_limiter.is_allowed(request)

        if not is_allowed:
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    'detail': 'Too many requests. Please try again later.',
                    'retry_after': rate_info.get('retry_after', 60)
                },
                headers={
                    'Retry-After': str(rate_info.get('retry_after', 60)),
                    'X-RateLimit-Limit': str(rate_info.get('limit', 0)),
                    'X-RateLimit-Remaining': '0',
                    'X-RateLimit-Reset': str(rate_info.get('reset', 60))
                }
            )

        response = await call_next(request)

        if rate_info:
            response.headers['X-RateLimit-Limit'] = str(rate_info['limit'])
            response.headers['X-RateLimit-Remaining'] = str(rate_info['remaining'])
            response.headers['X-RateLimit-Reset'] = str(rate_info['reset'])

        return response
