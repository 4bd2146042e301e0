import asyncio
from collections.abc import Sequence
from logging import Logger
from typing import Any

from fastmcp.server import FastMCP
from fastmcp.tools import Tool
from fastmcp.utilities.logging import get_logger
from github_profile_roast.clients.errors.gemini import GenerationError, GenerationErrorKind
from github_profile_roast.clients.errors.github import ProfileError
from github_profile_roast.clients.gemini import GeminiClient
from github_profile_roast.clients.github import GitHubProfileClient, extract_username_from_url
from github_profile_roast.clients.models.gemini import GenerationRequest
from github_profile_roast.clients.models.github import Profile
from github_profile_roast.clients.sessions import InMemoryRoastSessionStore, RoastSessionStore
from github_profile_roast.insights import build_basic_prompt, build_narrative_prompt
from github_profile_roast.servers.models.roast import RoastMode, RoastResult, summarize_profile
from github_profile_roast.servers.prompts.roast import SOCIAL_PLATFORM_PROMPTS, build_outfit_prompt, build_social_prompt
from github_profile_roast.servers.shared.annotations import GITHUB_PROFILE_URL, IMAGE_URLS, PROFILES, SOCIAL_PLATFORM, SOCIAL_PROFILE_URL
from github_profile_roast.servers.shared.errors import ServerError, UnresolvableProfileUrlError, UnsupportedPlatformError
from github_profile_roast.servers.shared.utility import preview

GITHUB_PLATFORM = "github"

API_KEY_MESSAGE = (
    "Our roast engine is having technical difficulties. The irony is not lost on us. Please check your Gemini API key configuration."
)

FALLBACK_MESSAGES: dict[GenerationErrorKind, str] = {
    GenerationErrorKind.CONTENT_BLOCKED: (
        "Your request was too spicy even for our roast bot. Try toning it down a notch, you absolute savage."
    ),
    GenerationErrorKind.RATE_LIMIT_EXHAUSTED: (
        "Whoa there, speed demon! You've hit the API rate limit. Please wait a bit and try again, "
        "or consider upgrading your Gemini API plan for more requests."
    ),
    GenerationErrorKind.UNCONFIGURED: API_KEY_MESSAGE,
    GenerationErrorKind.ACCESS_FORBIDDEN: API_KEY_MESSAGE,
    GenerationErrorKind.BAD_REQUEST: "Your request was so bad it confused our AI. That's... actually kind of impressive in a sad way.",
}


def contextual_fallback(prompt: str) -> str:
    """A canned roast chosen by keywords in the prompt, for failures without a specific message."""
    if "fashion" in prompt or "outfit" in prompt:
        return "Your fashion sense is so questionable, even our AI had to look away. That's an achievement in itself."
    if "typing" in prompt or "WPM" in prompt:
        return "Your typing skills are so bad, even our roast generator gave up trying to find appropriate words."
    if "GitHub" in prompt or "LinkedIn" in prompt or "Instagram" in prompt:
        return "Your online presence is so cringe, it broke our AI. Congratulations on that unique achievement."
    return "Something went so wrong that even our AI couldn't process it. That's... actually impressive."


def fallback_message(error: GenerationError, prompt: str) -> str:
    return FALLBACK_MESSAGES.get(error.kind) or contextual_fallback(prompt)


def error_roast(platform: str) -> str:
    return f"Your {platform} is so bad, even our AI refuses to look at it. That's saying something."


class RoastServer:
    profile_client: GitHubProfileClient
    gemini_client: GeminiClient
    session_store: RoastSessionStore
    logger: Logger

    def __init__(
        self,
        profile_client: GitHubProfileClient | None = None,
        gemini_client: GeminiClient | None = None,
        session_store: RoastSessionStore | None = None,
        logger: Logger | None = None,
    ):
        self.logger = logger or get_logger(name=__name__)
        self.profile_client = profile_client or GitHubProfileClient()
        self.gemini_client = gemini_client or GeminiClient()
        self.session_store = session_store or InMemoryRoastSessionStore()

    def register_tools(self, fastmcp: FastMCP[Any]) -> FastMCP[Any]:
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.roast_github_profile))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.roast_social_profile))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.roast_outfit))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.roast_profiles))

        return fastmcp

    async def generate_text(self, prompt: str, image_urls: Sequence[str] = (), enrich: bool = False) -> str:
        """Generate text, substituting a canned message for any classified generation failure."""

        request = GenerationRequest(prompt=prompt, attachments=tuple(image_urls), enrich=enrich)

        try:
            return await self.gemini_client.generate(request)
        except GenerationError as e:
            self.logger.exception(f"Generation failed ({e.kind.value}) for prompt {preview(prompt, length=200)!r}")
            return fallback_message(error=e, prompt=prompt)

    async def record_session(self, platform: str, input_data: dict[str, Any], roast: str) -> str | None:
        """Record the roast. A failure to record is logged and does not fail the roast."""

        try:
            return await self.session_store.create_session(platform=platform, input_data=input_data, roast_result=roast)
        except Exception:
            self.logger.exception(f"Failed to save the {platform} roast session")
            return None

    async def roast_github_profile(
        self,
        profile_url: GITHUB_PROFILE_URL,
    ) -> RoastResult:
        """Roast a GitHub profile, using the user's profile data when it can be fetched."""

        if not (username := extract_username_from_url(profile_url)):
            raise UnresolvableProfileUrlError(profile_url=profile_url)

        profile: Profile | None = None

        try:
            profile = await self.profile_client.fetch_profile(username)
        except ProfileError as e:
            self.logger.warning(f"Profile fetch failed for {username}, using the basic roast prompt: {e}")

        if profile:
            prompt = build_narrative_prompt(profile)
            mode: RoastMode = "enhanced" if profile.is_enhanced else "basic"
        else:
            prompt = build_basic_prompt(username=username, profile_url=profile_url)
            mode = "basic"

        roast = await self.generate_text(prompt=prompt, enrich=profile is None)

        session_id = await self.record_session(
            platform=GITHUB_PLATFORM,
            input_data={
                "platform": GITHUB_PLATFORM,
                "profile_url": profile_url,
                "roast_mode": mode,
                "enhanced_data": summarize_profile(profile) if profile else None,
            },
            roast=roast,
        )

        return RoastResult(platform=GITHUB_PLATFORM, roast=roast, mode=mode, session_id=session_id, profile=profile)

    async def roast_social_profile(
        self,
        platform: SOCIAL_PLATFORM,
        profile_url: SOCIAL_PROFILE_URL,
    ) -> RoastResult:
        """Roast a LinkedIn or Instagram profile from its URL."""

        platform = platform.lower()

        if platform not in SOCIAL_PLATFORM_PROMPTS:
            raise UnsupportedPlatformError(platform=platform, supported=[GITHUB_PLATFORM, *SOCIAL_PLATFORM_PROMPTS])

        roast = await self.generate_text(prompt=build_social_prompt(platform=platform, profile_url=profile_url), enrich=True)

        session_id = await self.record_session(
            platform=platform,
            input_data={"platform": platform, "profile_url": profile_url, "roast_mode": "standard"},
            roast=roast,
        )

        return RoastResult(platform=platform, roast=roast, mode="standard", session_id=session_id)

    async def roast_outfit(
        self,
        image_urls: IMAGE_URLS,
    ) -> RoastResult:
        """Roast the outfit in the given photos."""

        roast = await self.generate_text(prompt=build_outfit_prompt(), image_urls=image_urls)

        session_id = await self.record_session(platform="outfit", input_data={"image_urls": image_urls}, roast=roast)

        return RoastResult(platform="outfit", roast=roast, mode="standard", session_id=session_id)

    async def roast_profile(self, platform: str, profile_url: str) -> RoastResult:
        """Roast a profile on any supported platform. Any failure becomes an error roast."""

        try:
            if platform.lower() == GITHUB_PLATFORM:
                return await self.roast_github_profile(profile_url=profile_url)

            return await self.roast_social_profile(platform=platform, profile_url=profile_url)
        except ServerError as e:
            self.logger.warning(f"Error roasting {platform} profile {profile_url}: {e}")
        except Exception:
            self.logger.exception(f"Unexpected error roasting {platform} profile {profile_url}")

        roast = error_roast(platform)

        session_id = await self.record_session(
            platform=platform,
            input_data={"platform": platform, "profile_url": profile_url, "error": True},
            roast=roast,
        )

        return RoastResult(platform=platform, roast=roast, mode="error", session_id=session_id)

    async def roast_profiles(
        self,
        profiles: PROFILES,
    ) -> list[RoastResult]:
        """Roast several profiles at once, one per platform."""

        return list(
            await asyncio.gather(
                *[self.roast_profile(platform=platform, profile_url=profile_url) for platform, profile_url in profiles.items() if profile_url]
            )
        )
