from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class UserProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    login: str
    display_name: str
    follower_count: int = Field(0, ge=0)
    following_count: int = Field(0, ge=0)


class FollowingEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    login: str
    display_name: str


__all__ = ["UserProfile", "FollowingEntry"]
