"""
Socket.IO utilities for the message board.
"""
from .rate_limiter import RateLimiter, RateLimitEntry

__all__ = [
    'RateLimiter',
    'RateLimitEntry',
]
