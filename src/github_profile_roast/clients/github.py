import re
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta
from logging import Logger, getLogger
from typing import Any, override

from githubkit import GitHub as GitHubKit
from githubkit.auth.token import TokenAuthStrategy
from githubkit.exception import GitHubException as GitHubKitGitHubException
from githubkit.exception import GraphQLFailed as GitHubKitGraphQLFailed
from githubkit.exception import RequestFailed as GitHubKitRequestFailed
from githubkit.response import Response as GitHubKitResponse
from githubkit.retry import RetryServerError
from githubkit.versions.v2022_11_28.models import ContentFile as GitHubKitContentFile
from githubkit.versions.v2022_11_28.models import MinimalRepository as GitHubKitMinimalRepository
from githubkit.versions.v2022_11_28.models import PrivateUser as GitHubKitPrivateUser
from githubkit.versions.v2022_11_28.models import PublicUser as GitHubKitPublicUser
from githubkit.versions.v2022_11_28.models import SocialAccount as GitHubKitSocialAccount
from pydantic import ValidationError

from github_profile_roast.clients.errors.github import InvalidUsernameError, ProfileNotFoundError, ProfileSourceError
from github_profile_roast.clients.models.github import CAPPED, CappedActivityCount, Profile, ProfileRepository, ProfileTier, SocialLink
from github_profile_roast.config import GitHubSettings
from github_profile_roast.models.graphql.queries import MAX_PROFILE_NODES, GqlCreatedAt, GqlGetUserProfile, GqlUser
from github_profile_roast.servers.shared.utility import decode_content

GITHUB_LOGIN_PATTERN = re.compile(r"[a-zA-Z0-9](?:[a-zA-Z0-9]|-(?=[a-zA-Z0-9])){0,38}")

GITHUB_URL_PATTERNS = [
    re.compile(r"github\.com/([a-zA-Z0-9_-]+)/?$"),
    re.compile(r"github\.com/([a-zA-Z0-9_-]+)/[^/]*$"),
    re.compile(r"^([a-zA-Z0-9_-]+)$"),
]

# First match per provider wins, in this order.
README_SOCIAL_PATTERNS: dict[str, list[re.Pattern[str]]] = {
    "linkedin": [re.compile(r"https?://(?:www\.)?linkedin\.com/in/[a-zA-Z0-9_-]+/?", re.IGNORECASE)],
    "medium": [
        re.compile(r"https?://(?:www\.)?medium\.com/@?[a-zA-Z0-9_-]+/?", re.IGNORECASE),
        re.compile(r"https?://[a-zA-Z0-9_-]+\.medium\.com/?", re.IGNORECASE),
    ],
    "twitter": [re.compile(r"https?://(?:www\.)?(?:twitter\.com|x\.com)/[a-zA-Z0-9_]+/?", re.IGNORECASE)],
}

BASIC_REPOSITORIES_LIMIT = 10
ACTIVITY_WINDOW = timedelta(days=365)


def validate_username(username: str) -> bool:
    """Whether the username is a valid GitHub login: alphanumerics and single inner hyphens, at most 39 characters."""
    if not username or not isinstance(username, str):  # pyright: ignore[reportUnnecessaryIsInstance]
        return False

    return GITHUB_LOGIN_PATTERN.fullmatch(username) is not None


def extract_username_from_url(url: str) -> str | None:
    """Get the username from a GitHub profile URL, a repository URL, or a bare username."""
    url = url.strip()

    for pattern in GITHUB_URL_PATTERNS:
        if (match := pattern.search(url)) and validate_username(match.group(1)):
            return match.group(1)

    return None


def extract_social_links(readme: str) -> list[SocialLink]:
    """Scan README text for LinkedIn, Medium, and Twitter links."""
    social_links: list[SocialLink] = []

    for provider, patterns in README_SOCIAL_PATTERNS.items():
        for pattern in patterns:
            if match := pattern.search(readme):
                social_links.append(SocialLink(provider=provider, url=match.group(0)))
                break

    return social_links


def count_recent(nodes: list[GqlCreatedAt], since: datetime) -> CappedActivityCount:
    recent = sum(1 for node in nodes if node.created_at > since)
    return recent if recent < MAX_PROFILE_NODES else CAPPED


def get_githubkit_client(settings: GitHubSettings) -> GitHubKit[Any]:
    # Retry server errors, rate limits are surfaced to the caller as failures
    retry_server_error = RetryServerError()

    if settings.has_token and settings.token:
        return GitHubKit[TokenAuthStrategy](auth=TokenAuthStrategy(token=settings.token), auto_retry=retry_server_error)

    return GitHubKit(auto_retry=retry_server_error)


class ProfileSource(ABC):
    """A way of assembling a profile for a username that has already been validated."""

    name: str
    githubkit_client: GitHubKit[Any]
    logger: Logger

    def __init__(self, githubkit_client: GitHubKit[Any], logger: Logger | None = None):
        self.githubkit_client = githubkit_client
        self.logger = logger or getLogger(__name__)

    @abstractmethod
    async def fetch(self, username: str) -> Profile: ...

    async def _perform_rest_request[T](
        self,
        action: str,
        *,
        method: Callable[..., Awaitable[GitHubKitResponse[T]]],
        **request_args: Any,  # pyright: ignore[reportAny]
    ) -> T:
        """Perform a request and extract the parsed response.

        Raises:
            ProfileSourceError: If the request fails or the response does not match the expected model.
        """

        self.logger.debug(f"Performing {action} using {method.__name__} with kwargs {request_args}")

        try:
            response: GitHubKitResponse[T] = await method(**request_args)
            return response.parsed_data
        except GitHubKitRequestFailed as e:
            raise ProfileSourceError(
                source=self.name,
                message=f"{action} failed",
                extra_info={"status_code": str(e.response.status_code)},
            ) from e
        except GitHubKitGitHubException as e:
            raise ProfileSourceError(source=self.name, message=f"{action} failed: {e}") from e
        except ValidationError as e:
            raise ProfileSourceError(source=self.name, message=f"{action} returned an unexpected payload") from e


class BasicProfileSource(ProfileSource):
    """Public REST endpoints only. Activity metrics are unknown."""

    name = "basic"

    @override
    async def fetch(self, username: str) -> Profile:
        self.logger.info(f"Fetching basic profile for {username}")

        try:
            user: GitHubKitPrivateUser | GitHubKitPublicUser = await self._perform_rest_request(
                action="Get user",
                method=self.githubkit_client.rest.users.async_get_by_username,
                username=username,
            )
        except ProfileSourceError as e:
            raise ProfileNotFoundError(username=username, message=str(e)) from e

        repositories: list[ProfileRepository] = await self.fetch_repositories(username=username)

        return Profile(
            username=username,
            name=user.name or username,
            bio=user.bio or "",
            location=user.location or "",
            avatar_url=user.avatar_url or "",
            profile_url=user.html_url or f"https://github.com/{username}",
            followers=user.followers,
            following=user.following,
            public_repos=user.public_repos,
            repositories=repositories,
            tier=ProfileTier.BASIC,
        )

    async def fetch_repositories(self, username: str) -> list[ProfileRepository]:
        """The most recently updated public repositories. A failure yields no repositories."""

        try:
            minimal_repositories: list[GitHubKitMinimalRepository] = await self._perform_rest_request(
                action="List repositories",
                method=self.githubkit_client.rest.repos.async_list_for_user,
                username=username,
                sort="updated",
                per_page=BASIC_REPOSITORIES_LIMIT,
            )
        except ProfileSourceError as e:
            self.logger.warning(f"Failed to fetch repositories for {username}, continuing without them: {e}")
            return []

        return [ProfileRepository.from_minimal_repository(minimal_repository) for minimal_repository in minimal_repositories]


class EnhancedProfileSource(ProfileSource):
    """The authenticated GraphQL query, plus the user's social links."""

    name = "enhanced"

    @override
    async def fetch(self, username: str) -> Profile:
        now = datetime.now(tz=UTC)
        since = now - ACTIVITY_WINDOW

        user: GqlUser = await self.fetch_user(username=username, since=since)

        social_links: list[SocialLink] = await self.fetch_social_links(username=username)

        return Profile(
            username=username,
            name=user.name or username,
            bio=user.bio or "",
            location=user.location or "",
            avatar_url=user.avatar_url or "",
            profile_url=user.url or f"https://github.com/{username}",
            followers=user.followers.total_count,
            following=user.following.total_count,
            public_repos=user.repositories.total_count,
            total_contributions=user.contributions_collection.contribution_calendar.total_contributions,
            repositories_contributed_to=user.repositories_contributed_to.total_count,
            pull_requests_merged=count_recent(user.pull_requests.nodes, since=since),
            issues_closed=count_recent(user.issues.nodes, since=since),
            repositories=[
                ProfileRepository(
                    name=repository.name,
                    description=repository.description,
                    stars=repository.stargazer_count,
                    language=repository.primary_language.name if repository.primary_language else None,
                    url=repository.url,
                    updated_at=repository.updated_at,
                )
                for repository in user.repositories.nodes
            ],
            social_links=social_links,
            readme=user.readme or None,
            tier=ProfileTier.ENHANCED,
            fetched_at=now,
        )

    async def fetch_user(self, username: str, since: datetime) -> GqlUser:
        """Run the combined profile query.

        Raises:
            ProfileSourceError: On transport failures, query-level errors, or when the user resolves to no data.
        """

        variables = GqlGetUserProfile.to_graphql_query_variables(login=username, since=since)

        self.logger.info(f"Executing GraphQL query {GqlGetUserProfile.__name__} with variables {variables}")

        try:
            raw_response = await self.githubkit_client.async_graphql(query=GqlGetUserProfile.graphql_query(), variables=variables)
        except GitHubKitGraphQLFailed as e:
            messages = ". ".join([error.message for error in e.response.errors or []])
            raise ProfileSourceError(source=self.name, message="GraphQL query failed", extra_info={"graphql_errors": messages}) from e
        except GitHubKitGitHubException as e:
            raise ProfileSourceError(source=self.name, message=f"GraphQL request failed: {e}") from e

        try:
            gql_get_user_profile = GqlGetUserProfile.model_validate(raw_response)
        except ValidationError as e:
            raise ProfileSourceError(source=self.name, message="GraphQL query returned an unexpected payload") from e

        if gql_get_user_profile.user is None:
            raise ProfileSourceError(source=self.name, message=f"User '{username}' not found or query returned no data")

        return gql_get_user_profile.user

    async def fetch_social_links(self, username: str) -> list[SocialLink]:
        """The social accounts endpoint, falling back to scanning the profile README. Never raises."""

        try:
            social_accounts: list[GitHubKitSocialAccount] = await self._perform_rest_request(
                action="List social accounts",
                method=self.githubkit_client.rest.users.async_list_social_accounts_for_user,
                username=username,
            )
        except ProfileSourceError as e:
            self.logger.warning(f"Failed to fetch social accounts for {username}, scanning the README instead: {e}")
        else:
            return [SocialLink.from_social_account(social_account) for social_account in social_accounts]

        try:
            readme_file: GitHubKitContentFile = await self._perform_rest_request(
                action="Get profile README",
                method=self.githubkit_client.rest.repos.async_get_readme,
                owner=username,
                repo=username,
            )
            return extract_social_links(decode_content(readme_file.content))
        except (ProfileSourceError, ValueError) as e:
            self.logger.warning(f"Failed to extract social links from the README of {username}: {e}")
            return []


class GitHubProfileClient:
    """Assembles profiles, degrading from the enhanced source to the basic source."""

    settings: GitHubSettings
    githubkit_client: GitHubKit[Any]
    logger: Logger

    enhanced_source: EnhancedProfileSource
    basic_source: BasicProfileSource

    def __init__(
        self,
        settings: GitHubSettings | None = None,
        githubkit_client: GitHubKit[Any] | None = None,
        logger: Logger | None = None,
    ):
        self.settings = settings or GitHubSettings.from_env()
        self.githubkit_client = githubkit_client or get_githubkit_client(settings=self.settings)
        self.logger = logger or getLogger(__name__)

        self.enhanced_source = EnhancedProfileSource(githubkit_client=self.githubkit_client, logger=self.logger)
        self.basic_source = BasicProfileSource(githubkit_client=self.githubkit_client, logger=self.logger)

    def sources(self) -> list[ProfileSource]:
        """The sources to try, in order. Without a token the enhanced source is never attempted."""
        if self.settings.has_token:
            return [self.enhanced_source, self.basic_source]

        self.logger.info("No GitHub token configured, using basic profile fetching")
        return [self.basic_source]

    async def fetch_profile(self, username: str) -> Profile:
        """Fetch the profile of a GitHub user.

        Raises:
            InvalidUsernameError: If the username is not a valid GitHub login. No request is made.
            ProfileNotFoundError: If even the public user record could not be fetched.
        """

        if not validate_username(username):
            raise InvalidUsernameError(username=username)

        *fallible_sources, final_source = self.sources()

        for source in fallible_sources:
            try:
                return await source.fetch(username)
            except ProfileSourceError as e:
                self.logger.warning(f"The {source.name} profile source failed for {username}, falling back: {e}")
            except Exception:
                self.logger.exception(f"Unexpected error from the {source.name} profile source for {username}, falling back")

        return await final_source.fetch(username)
