"""
Twitter v2 API connector.

The caller supplies an httpx.Client that already signs requests (OAuth 1.0a
user context); this module only maps requests and responses. Response
bodies are decoded strictly: a body that does not match the schema raises
MalformedResponse rather than yielding empty objects.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from models.schema import Tweet, TweetListResponse, TwitterUser, UserResponse
from scraper.errors import FetchError, MalformedResponse, RateLimited
from scraper.runner import SearchRunner
from scraper.text import normalize_text
from scraper.types import SearchRecord

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.twitter.com/2"

ModelT = TypeVar("ModelT", bound=BaseModel)


def decode_response(body: str, model: Type[ModelT], query: str = "") -> ModelT:
    """Decode a JSON body into ``model`` or raise MalformedResponse."""
    try:
        return model.model_validate_json(body)
    except ValidationError as e:
        raise MalformedResponse(
            f"unexpected {model.__name__} payload: {e.error_count()} error(s)",
            query=query,
        ) from e


class TwitterClient:
    """Typed access to the handful of endpoints the fetcher uses."""

    def __init__(self, http_client: httpx.Client, base_url: str = API_BASE_URL):
        self._http = http_client
        self._base_url = base_url.rstrip("/")

    def get_authenticated_user(self) -> TwitterUser:
        """Return the account the client is signed in as."""
        body = self._get("/users/me", params={"user.fields": "public_metrics"})
        return decode_response(body, UserResponse).data

    def fetch_user_tweets(self, user_id: str, max_results: int = 5) -> List[Tweet]:
        """Most recent tweets posted by ``user_id``."""
        body = self._get(
            f"/users/{user_id}/tweets",
            params={
                "max_results": max_results,
                "tweet.fields": "created_at,public_metrics",
            },
        )
        return decode_response(body, TweetListResponse).data

    def search_recent(self, query: str, max_results: int = 10) -> TweetListResponse:
        """Recent-search endpoint with author expansion."""
        body = self._get(
            "/tweets/search/recent",
            params={
                "query": query,
                "max_results": max_results,
                "tweet.fields": "created_at,public_metrics,author_id",
                "expansions": "author_id",
                "user.fields": "username,name",
            },
            query=query,
        )
        return decode_response(body, TweetListResponse, query=query)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _get(self, path: str, params: Optional[Dict] = None, query: str = "") -> str:
        url = f"{self._base_url}{path}"
        try:
            resp = self._http.get(url, params=params)
        except httpx.HTTPError as e:
            raise FetchError(f"request to {path} failed: {e}", query=query) from e

        if resp.status_code == 429:
            raise RateLimited(
                "Twitter API rate limit reached", query=query, status_code=429
            )
        if resp.status_code != 200:
            logger.warning("API error (status: %d) for %s", resp.status_code, path)
            raise FetchError(
                f"API error (status: {resp.status_code})",
                query=query,
                status_code=resp.status_code,
            )
        return resp.text


def tweet_to_record(tweet: Tweet, users: Dict[str, TwitterUser]) -> SearchRecord:
    """Flatten a tweet into the common record shape."""
    author = users.get(tweet.author_id or "")
    if author:
        title = f"@{author.username}"
        url = f"https://twitter.com/{author.username}/status/{tweet.id}"
    else:
        title = "Unknown"
        url = f"https://twitter.com/i/web/status/{tweet.id}"
    return SearchRecord(title=title, url=url, description=normalize_text(tweet.text))


class TweetQueryRunner(SearchRunner):
    """Adapts tweet search to the orchestrator's runner interface."""

    def __init__(self, client: TwitterClient, max_results: int = 10):
        self._client = client
        self._max_results = max_results

    def run(self, query: str) -> List[SearchRecord]:
        response = self._client.search_recent(query, max_results=self._max_results)
        users = response.users_by_id()
        return [tweet_to_record(tweet, users) for tweet in response.data]
