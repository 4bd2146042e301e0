from typing import Annotated

from pydantic import Field

GITHUB_PROFILE_URL = Annotated[str, Field(description="A GitHub profile URL, repository URL, or bare username.")]

SOCIAL_PLATFORM = Annotated[str, Field(description="The platform of the profile: linkedin or instagram.")]
SOCIAL_PROFILE_URL = Annotated[str, Field(description="The URL of the profile to roast.")]

IMAGE_URLS = Annotated[list[str], Field(description="URLs of photos of the outfit to roast.")]

PROFILES = Annotated[dict[str, str], Field(description="Profile URLs keyed by platform: github, linkedin, or instagram.")]
