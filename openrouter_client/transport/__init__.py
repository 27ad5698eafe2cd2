"""
OpenRouter HTTP components.

Clean separation of concerns:
- transport.py: one HTTP round trip, header injection, status classification
- retry_policy.py: capped exponential backoff with cancellation
- response_parser.py: JSON decoding into typed models
- http_session.py: thread-local requests sessions
"""

from .http_session import ThreadLocalSessionManager
from .transport import OpenRouterTransport, is_success
from .retry_policy import RetryPolicy
from .response_parser import ResponseParser

__all__ = [
    'ThreadLocalSessionManager',
    'OpenRouterTransport',
    'is_success',
    'RetryPolicy',
    'ResponseParser',
]
