from typing import Any, Literal

from pydantic import BaseModel, Field

from github_profile_roast.clients.models.github import Profile

RoastMode = Literal["enhanced", "basic", "standard", "error"]


class RoastResult(BaseModel):
    """The outcome of one roast."""

    platform: str = Field(description="The platform that was roasted, e.g. github.")
    roast: str = Field(description="The roast text.")
    mode: RoastMode = Field(description="How much data the roast was based on.")
    session_id: str | None = Field(default=None, description="The identifier of the recorded roast session, if it was recorded.")
    profile: Profile | None = Field(default=None, description="The GitHub profile the roast was based on, if one was fetched.")


def summarize_profile(profile: Profile) -> dict[str, Any]:
    """The profile fields recorded alongside a GitHub roast session."""
    return {
        "username": profile.username,
        "followers": profile.followers,
        "repos": profile.public_repos,
        "contributions": profile.total_contributions,
        "tier": profile.tier.value,
    }
