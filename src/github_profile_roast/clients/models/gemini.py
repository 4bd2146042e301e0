from google.genai.types import BlockedReason, FinishReason
from pydantic import BaseModel, ConfigDict, Field

BLOCKED_FINISH_REASONS: set[FinishReason] = {
    FinishReason.SAFETY,
    FinishReason.RECITATION,
    FinishReason.BLOCKLIST,
    FinishReason.PROHIBITED_CONTENT,
    FinishReason.SPII,
}

NORMAL_FINISH_REASONS: set[FinishReason] = {
    FinishReason.STOP,
    FinishReason.MAX_TOKENS,
}

UNSPECIFIED_BLOCK_REASON: BlockedReason = BlockedReason.BLOCKED_REASON_UNSPECIFIED


class GenerationRequest(BaseModel):
    """A single generation call: a prompt, optional image URLs, and whether to ground the answer in web search."""

    model_config = ConfigDict(frozen=True)

    prompt: str = Field(description="The prompt to generate content for.")
    attachments: tuple[str, ...] = Field(default=(), description="URLs of images to embed in the request.")
    enrich: bool = Field(default=False, description="Whether to add context from the internet.")
