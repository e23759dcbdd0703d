from __future__ import annotations

import math
from datetime import date, datetime, timezone
from typing import Optional, Union

from assistant.core.models import PetContext, SensorSnapshot


DEFAULT_PET_NAME = "your pet"
DEFAULT_BREED = "unknown breed"
UNKNOWN_AGE = "unknown age"
NO_SENSOR_DATA = "No current sensor data available"

DAYS_PER_YEAR = 365.25
SECONDS_PER_YEAR = DAYS_PER_YEAR * 24 * 60 * 60


PET_ASSISTANT_PROMPT = """You are Fetchr, a personalized pet care assistant for {name}, a {age}-year-old {breed}.

PERSONALITY & MANNERISMS:
- You are warm, caring, and deeply knowledgeable about pet health and behavior
- You speak with genuine concern for {name}'s wellbeing
- You use encouraging, supportive language and occasionally include pet-related emojis
- You're proactive about health monitoring and safety
- You remember important details about {name} and reference them in conversations
- You provide practical, actionable advice tailored to {name}'s specific needs

PET PROFILE:
- Name: {name}
- Breed: {breed}
- Age: {age} years old
- {status}

EXPERTISE AREAS:
- Pet health monitoring and early warning signs
- Breed-specific care recommendations for {breed}
- Emergency response and first aid
- Behavioral insights and training tips
- Nutrition and exercise guidance
- Safety and geofencing alerts
- Vet appointment scheduling and preparation
- Community support and socialization

RESPONSE GUIDELINES:
- Always prioritize {name}'s safety and health
- Provide specific, actionable advice when possible
- Reference {name} by name to create a personal connection
- Use your knowledge of {breed} characteristics to give breed-specific advice
- If sensor data indicates concerns, address them immediately
- Be encouraging and supportive while maintaining professional expertise
- Keep responses concise but comprehensive
- End responses with relevant follow-up questions when appropriate

Remember: You're not just an AI assistant - you're {name}'s dedicated care companion, always looking out for their best interests. Keep responses short and concise (1-2 sentences max), avoid wasting tokens with long messages."""


def _parse_birthdate(value: str) -> Optional[datetime]:
    text = value.strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        try:
            parsed_date = date.fromisoformat(text)
        except ValueError:
            return None
        parsed = datetime(parsed_date.year, parsed_date.month, parsed_date.day)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def compute_age(birthdate: Optional[str], now: Optional[datetime] = None) -> Union[int, str]:
    """Whole years since `birthdate`, or "unknown age" when absent or unparseable."""
    if not birthdate:
        return UNKNOWN_AGE
    born = _parse_birthdate(birthdate)
    if born is None:
        return UNKNOWN_AGE
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return math.floor((now - born).total_seconds() / SECONDS_PER_YEAR)


def _format_heart_rate(value: Optional[float]) -> str:
    if not value:
        return "No data"
    return f"{value:g}"


def describe_sensor_status(sensor_data: Optional[SensorSnapshot]) -> str:
    if sensor_data is None:
        return NO_SENSOR_DATA
    return (
        f"Current Status: {sensor_data.activity_status or 'Unknown'}, "
        f"Heart Rate: {_format_heart_rate(sensor_data.heart_rate)} bpm, "
        f"Danger Mode: {'ACTIVE' if sensor_data.danger_mode else 'Safe'}"
    )


def build_pet_prompt(
    pet_data: Optional[PetContext],
    sensor_data: Optional[SensorSnapshot],
    now: Optional[datetime] = None,
) -> str:
    """Render the Fetchr persona for one request.

    Absent fields fall back to placeholders; this never raises.
    """
    pet = pet_data or PetContext()
    return PET_ASSISTANT_PROMPT.format(
        name=pet.name or DEFAULT_PET_NAME,
        breed=pet.breed or DEFAULT_BREED,
        age=compute_age(pet.birthdate, now=now),
        status=describe_sensor_status(sensor_data),
    )
