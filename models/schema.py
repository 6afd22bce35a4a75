"""
Pydantic data models for the Twitter v2 API responses.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class UserMetrics(BaseModel):
    """Public counters on a user profile."""
    followers_count: int = Field(0, ge=0)
    following_count: int = Field(0, ge=0)
    tweet_count: int = Field(0, ge=0)


class TwitterUser(BaseModel):
    """Twitter account."""
    id: str = Field(..., description="User ID")
    name: str = Field(..., description="Display name")
    username: str = Field(..., description="Handle without the @")
    description: Optional[str] = Field(None, description="Profile bio")
    location: Optional[str] = Field(None, description="Free-text location")
    created_at: Optional[str] = Field(None, description="ISO-8601 creation time")
    public_metrics: UserMetrics = Field(default_factory=UserMetrics)

    class Config:
        json_schema_extra = {
            "example": {
                "id": "13334762",
                "name": "GitHub",
                "username": "github",
                "public_metrics": {
                    "followers_count": 2500000,
                    "following_count": 300,
                    "tweet_count": 9000,
                },
            }
        }


class TweetMetrics(BaseModel):
    """Engagement counters on a tweet."""
    retweet_count: int = Field(0, ge=0)
    like_count: int = Field(0, ge=0)
    reply_count: int = Field(0, ge=0)
    quote_count: int = Field(0, ge=0)


class Tweet(BaseModel):
    """Single tweet."""
    id: str = Field(..., description="Tweet ID")
    text: str = Field(..., description="Tweet body")
    created_at: Optional[str] = Field(None, description="ISO-8601 post time")
    author_id: Optional[str] = Field(None, description="ID of the posting user")
    public_metrics: TweetMetrics = Field(default_factory=TweetMetrics)


class Includes(BaseModel):
    """Expanded objects referenced by the primary data."""
    users: List[TwitterUser] = Field(default_factory=list)


class TweetListResponse(BaseModel):
    """Response of the tweet search and user timeline endpoints."""
    data: List[Tweet] = Field(default_factory=list)
    meta: Optional[Dict[str, Any]] = None
    includes: Optional[Includes] = None

    def users_by_id(self) -> Dict[str, TwitterUser]:
        """Map author IDs to expanded user objects."""
        if not self.includes:
            return {}
        return {user.id: user for user in self.includes.users}


class UserResponse(BaseModel):
    """Response of the /users/me endpoint."""
    data: TwitterUser
