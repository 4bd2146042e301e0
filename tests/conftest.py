from collections.abc import AsyncGenerator, Sequence
from typing import Any

import pytest
from pydantic import BaseModel

from github_profile_roast.clients.gemini import GeminiClient
from github_profile_roast.clients.github import GitHubProfileClient
from github_profile_roast.config import GeminiSettings, GitHubSettings
from tests.mocks import FakeSleep, MockGeminiApi, MockGitHubApi

TEST_GITHUB_TOKEN = "ghp_test_token"  # noqa: S105
TEST_GEMINI_API_KEY = "test-gemini-key"


@pytest.fixture
def github_api() -> MockGitHubApi:
    return MockGitHubApi()


@pytest.fixture
def basic_profile_client(github_api: MockGitHubApi) -> GitHubProfileClient:
    return GitHubProfileClient(settings=GitHubSettings(), githubkit_client=github_api.githubkit_client())


@pytest.fixture
def enhanced_profile_client(github_api: MockGitHubApi) -> GitHubProfileClient:
    return GitHubProfileClient(
        settings=GitHubSettings(token=TEST_GITHUB_TOKEN),
        githubkit_client=github_api.githubkit_client(token=TEST_GITHUB_TOKEN),
    )


@pytest.fixture
def gemini_api() -> MockGeminiApi:
    return MockGeminiApi()


@pytest.fixture
def fake_sleep() -> FakeSleep:
    return FakeSleep()


@pytest.fixture
def gemini_settings() -> GeminiSettings:
    return GeminiSettings(api_key=TEST_GEMINI_API_KEY, text_model="gemini-text", vision_model="gemini-vision")


@pytest.fixture
async def gemini_client(
    gemini_api: MockGeminiApi, gemini_settings: GeminiSettings, fake_sleep: FakeSleep
) -> AsyncGenerator[GeminiClient, Any]:
    async with gemini_api.http_client() as http_client:
        yield GeminiClient(settings=gemini_settings, http_client=http_client, sleep=fake_sleep)


def handle_exclude_keys(dumped: dict[str, Any], exclude_keys: list[str] | None) -> dict[str, Any]:
    return {key: value for key, value in dumped.items() if key not in (exclude_keys or [])}  # pyright: ignore[reportAny]


def dump_for_snapshot(basemodel: BaseModel | None, /, exclude_keys: list[str] | None = None, **dump_kwargs: Any) -> dict[str, Any] | None:  # pyright: ignore[reportAny]
    if basemodel is None:
        return None

    return handle_exclude_keys(basemodel.model_dump(mode="json", exclude_none=True, **dump_kwargs), exclude_keys)  # pyright: ignore[reportAny]


def dump_list_for_snapshot(
    basemodels: Sequence[BaseModel] | None,
    /,
    exclude_keys: list[str] | None = None,
    **dump_kwargs: Any,  # pyright: ignore[reportAny]
) -> list[dict[str, Any] | None]:
    return [dump_for_snapshot(basemodel, exclude_keys=exclude_keys, **dump_kwargs) for basemodel in basemodels or []]  # pyright: ignore[reportAny]
