from datetime import UTC, datetime
from enum import Enum
from typing import Literal, Self

from githubkit.versions.v2022_11_28.models import MinimalRepository as GitHubKitMinimalRepository
from githubkit.versions.v2022_11_28.models import SocialAccount as GitHubKitSocialAccount
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

UNKNOWN = "Unknown"
CAPPED = "100+"

ActivityCount = int | Literal["Unknown"]
CappedActivityCount = int | Literal["100+", "Unknown"]


class ProfileTier(str, Enum):
    ENHANCED = "enhanced"
    BASIC = "basic"


class ProfileRepository(BaseModel):
    """A repository owned by the profile's user."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="The name of the repository.")
    description: str | None = Field(default=None, description="The description of the repository.")
    stars: int = Field(default=0, description="The number of stars the repository has.")
    language: str | None = Field(default=None, description="The primary language of the repository.")
    url: str = Field(description="The URL of the repository.")
    updated_at: datetime | None = Field(default=None, description="The date and time the repository was last updated.")

    @classmethod
    def from_minimal_repository(cls, minimal_repository: GitHubKitMinimalRepository) -> Self:
        return cls(
            name=minimal_repository.name,
            description=minimal_repository.description,
            stars=minimal_repository.stargazers_count or 0,
            language=minimal_repository.language or None,
            url=minimal_repository.html_url,
            updated_at=minimal_repository.updated_at or None,
        )


class SocialLink(BaseModel):
    """A social account linked from the profile."""

    model_config = ConfigDict(frozen=True)

    provider: str = Field(description="The provider of the social account, e.g. linkedin.")
    url: str = Field(description="The URL of the social account.")

    @classmethod
    def from_social_account(cls, social_account: GitHubKitSocialAccount) -> Self:
        return cls(provider=social_account.provider, url=social_account.url)


def dedupe_social_links(social_links: list[SocialLink]) -> list[SocialLink]:
    seen: set[tuple[str, str]] = set()
    deduped: list[SocialLink] = []

    for social_link in social_links:
        key = (social_link.provider, social_link.url)
        if key in seen:
            continue
        seen.add(key)
        deduped.append(social_link)

    return deduped


class Profile(BaseModel):
    """A GitHub user's aggregated profile."""

    model_config = ConfigDict(frozen=True)

    username: str = Field(description="The login of the user.")
    name: str = Field(description="The display name of the user, or the login when unset.")
    bio: str = Field(default="", description="The bio of the user.")
    location: str = Field(default="", description="The location of the user.")
    avatar_url: str = Field(default="", description="The URL of the user's avatar.")
    profile_url: str = Field(description="The URL of the user's profile page.")

    followers: int = Field(default=0, description="The number of followers.")
    following: int = Field(default=0, description="The number of users followed.")
    public_repos: int = Field(default=0, description="The number of repositories.")

    total_contributions: ActivityCount = Field(default=UNKNOWN, description="Contributions over the last 12 months.")
    repositories_contributed_to: ActivityCount = Field(default=UNKNOWN, description="Repositories contributed to.")
    pull_requests_merged: CappedActivityCount = Field(default=UNKNOWN, description="Merged pull requests over the last 12 months.")
    issues_closed: CappedActivityCount = Field(default=UNKNOWN, description="Closed issues over the last 12 months.")

    repositories: list[ProfileRepository] = Field(default_factory=list, description="Repositories, most recently updated first.")
    social_links: list[SocialLink] = Field(default_factory=list, description="Social accounts, deduplicated by provider and URL.")
    readme: str | None = Field(default=None, description="The content of the user's profile README.")

    tier: ProfileTier = Field(description="Whether the profile came from the enhanced or the basic source.")
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC), description="When the profile was assembled.")

    @field_validator("social_links")
    @classmethod
    def validate_social_links(cls, value: list[SocialLink]) -> list[SocialLink]:
        return dedupe_social_links(value)

    @model_validator(mode="after")
    def validate_tier(self) -> Self:
        activity = [self.total_contributions, self.repositories_contributed_to, self.pull_requests_merged, self.issues_closed]

        if self.tier == ProfileTier.BASIC:
            if any(value != UNKNOWN for value in activity):
                msg = "A basic profile cannot carry activity metrics."
                raise ValueError(msg)
            if self.social_links or self.readme:
                msg = "A basic profile cannot carry social links or a README."
                raise ValueError(msg)

        elif any(value == UNKNOWN for value in activity):
            msg = "An enhanced profile must carry every activity metric."
            raise ValueError(msg)

        return self

    @property
    def is_enhanced(self) -> bool:
        return self.tier == ProfileTier.ENHANCED
