import os
from typing import Self

from google.genai.types import GenerateContentConfig
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/"
DEFAULT_GEMINI_API_VERSION = "v1beta"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_GEMINI_TIMEOUT = 60.0


def get_env(*env_vars: str) -> str | None:
    """Return the first non-blank value among the given environment variables."""
    for env_var in env_vars:
        if (value := os.getenv(env_var)) and value.strip():
            return value.strip()
    return None


def default_generation_config() -> GenerateContentConfig:
    return GenerateContentConfig(
        temperature=0.9,
        top_k=40,
        top_p=0.95,
        max_output_tokens=1024,
        stop_sequences=[],
    )


class GeminiSettings(BaseModel):
    """Settings for the Gemini client, resolved once at process start."""

    model_config = ConfigDict(frozen=True)

    api_key: str | None = Field(default=None, description="The Gemini API key.", repr=False)
    text_model: str = Field(default=DEFAULT_GEMINI_MODEL, description="The model used for text-only requests.")
    vision_model: str = Field(default=DEFAULT_GEMINI_MODEL, description="The model used for requests with image attachments.")
    base_url: str = Field(default=DEFAULT_GEMINI_BASE_URL, description="The base URL of the Gemini API.")
    api_version: str = Field(default=DEFAULT_GEMINI_API_VERSION, description="The version of the Gemini API.")
    timeout: float = Field(default=DEFAULT_GEMINI_TIMEOUT, description="The timeout in seconds for each HTTP request.")
    generation_config: GenerateContentConfig = Field(default_factory=default_generation_config)

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    @property
    def timeout_ms(self) -> int:
        return int(self.timeout * 1000)

    @classmethod
    def from_env(cls) -> Self:
        text_model = get_env("GOOGLE_MODEL", "GEMINI_MODEL") or DEFAULT_GEMINI_MODEL
        return cls(
            api_key=get_env("GOOGLE_API_KEY", "GEMINI_API_KEY"),
            text_model=text_model,
            vision_model=get_env("GOOGLE_VISION_MODEL", "GEMINI_VISION_MODEL") or text_model,
        )


class GitHubSettings(BaseModel):
    """Settings for the GitHub profile client."""

    model_config = ConfigDict(frozen=True)

    token: str | None = Field(default=None, description="The token that enables the enhanced profile query.", repr=False)

    @property
    def has_token(self) -> bool:
        return bool(self.token and self.token.strip())

    @classmethod
    def from_env(cls) -> Self:
        return cls(token=get_env("GITHUB_TOKEN", "GITHUB_PERSONAL_ACCESS_TOKEN"))
