"""Pydantic request/response schemas for all API routes.

Route files import from here; they never define BaseModel subclasses directly.
"""

from typing import Literal

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Fit assessment
# ---------------------------------------------------------------------------


class FitAssessmentRequest(BaseModel):
    # Older clients send "prompt"; "input" wins when both are present.
    input: str | None = None
    prompt: str | None = None

    def job_description_input(self) -> str | None:
        """Return the submitted text or URL, or None when nothing usable was sent."""
        for value in (self.input, self.prompt):
            if value and value.strip():
                return value
        return None


class TokenUsage(BaseModel):
    input_tokens: int = 0
    output_tokens: int = 0


class FitAssessmentResponse(BaseModel):
    assessment: str
    model: str
    input_type: Literal["text", "url"]
    extracted_url: str | None = None
    usage: TokenUsage = Field(default_factory=TokenUsage)


class ErrorResponse(BaseModel):
    error: str
