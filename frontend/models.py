"""
Pydantic models for dashboard API requests.
"""

from typing import Dict

from pydantic import BaseModel, Field, field_validator


class PrefillQuery(BaseModel):
    """Query string for a pre-filled interest form link."""

    role_title: str = Field(..., min_length=1, description="Role title as listed in the roles sheet.")
    division: str = Field("", description="Division of the role (e.g., 'Elementary').")


class SubmissionPayload(BaseModel):
    """Body posted by the form-submission trigger."""

    answers: Dict[str, str] = Field(
        default_factory=dict,
        description="Question label -> answer text for one response.",
    )

    @field_validator("answers", mode="before")
    @classmethod
    def stringify_answers(cls, value):
        # Sheet triggers send dates and numbers as non-strings
        if isinstance(value, dict):
            return {str(key): "" if item is None else str(item) for key, item in value.items()}
        return value
