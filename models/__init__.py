"""
Models package initialization.
"""

from .enums import RunState, QueryState
from .schema import (
    UserMetrics,
    TwitterUser,
    TweetMetrics,
    Tweet,
    Includes,
    TweetListResponse,
    UserResponse,
)

__all__ = [
    "RunState",
    "QueryState",
    "UserMetrics",
    "TwitterUser",
    "TweetMetrics",
    "Tweet",
    "Includes",
    "TweetListResponse",
    "UserResponse",
]
