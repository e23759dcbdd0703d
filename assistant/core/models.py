from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    role: Literal["user", "assistant", "system"] = Field(
        ..., description="'user', 'assistant' or 'system'"
    )
    content: str


class PetContext(BaseModel):
    name: Optional[str] = None
    breed: Optional[str] = None
    birthdate: Optional[str] = Field(default=None, description="ISO date, e.g. 2021-04-30")


class SensorSnapshot(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    activity_status: Optional[str] = Field(default=None, alias="activityStatus")
    heart_rate: Optional[float] = Field(default=None, alias="heartRate")
    danger_mode: Optional[bool] = Field(default=None, alias="dangerMode")


class ProviderMessage(BaseModel):
    """One turn in the shape the generation backend expects."""

    role: Literal["user", "model"]
    parts: List[str]

    @property
    def text(self) -> str:
        return self.parts[0] if self.parts else ""
