from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from assistant.core.models import ChatMessage, PetContext, SensorSnapshot


class GenerateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Left optional so an absent list is reported as "messages required" rather than a schema error
    messages: Optional[List[ChatMessage]] = Field(
        default=None, description="Conversation so far, oldest first"
    )
    pet_data: Optional[PetContext] = Field(default=None, alias="petData")
    sensor_data: Optional[SensorSnapshot] = Field(default=None, alias="sensorData")


class GenerateResponse(BaseModel):
    content: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    service: str
    timestamp: str
