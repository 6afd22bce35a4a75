"""
Connectors package initialization.
"""

from .twitter import TwitterClient, TweetQueryRunner, decode_response, tweet_to_record

__all__ = [
    "TwitterClient",
    "TweetQueryRunner",
    "decode_response",
    "tweet_to_record",
]
