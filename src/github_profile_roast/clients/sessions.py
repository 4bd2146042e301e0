import uuid
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field


class RoastSession(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(description="The identifier of the session.")
    section_type: str = Field(description="The kind of roast, e.g. profile_roast.")
    platform: str = Field(description="The platform that was roasted.")
    input_data: dict[str, Any] = Field(description="The input the roast was produced from.")
    roast_result: str = Field(description="The roast text.")


class RoastSessionStore(Protocol):
    """Records roasts and returns the identifier of the recorded session."""

    async def create_session(self, platform: str, input_data: dict[str, Any], roast_result: str) -> str: ...


class InMemoryRoastSessionStore:
    """Keeps sessions for the lifetime of the process."""

    sessions: dict[str, RoastSession]
    section_type: str

    def __init__(self, section_type: str = "profile_roast"):
        self.sessions = {}
        self.section_type = section_type

    async def create_session(self, platform: str, input_data: dict[str, Any], roast_result: str) -> str:
        session = RoastSession(
            id=str(uuid.uuid4()),
            section_type=self.section_type,
            platform=platform,
            input_data=input_data,
            roast_result=roast_result,
        )
        self.sessions[session.id] = session
        return session.id

    def get_session(self, session_id: str) -> RoastSession | None:
        return self.sessions.get(session_id)
