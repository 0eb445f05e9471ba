"""Structured outputs for the image relevance check"""

from typing import Optional
from pydantic import BaseModel, Field


class ImageRelevanceOutput(BaseModel):
    """Structured verdict returned by the vision model"""
    is_relevant: bool = Field(
        ..., description="True if the photo clearly shows the declared civic issue"
    )
    description: Optional[str] = Field(
        None,
        description="When relevant: 2-3 sentence factual description of the issue visible in the photo, "
                    "written as the citizen would report it"
    )
    reason: Optional[str] = Field(
        None,
        description="When not relevant: short explanation of why the photo does not match the issue type"
    )


class MediaAnalysisResult(BaseModel):
    """Outcome of the media gate for one upload"""
    is_relevant: bool
    description: Optional[str] = None
    reason: Optional[str] = None
    discard_media: bool = Field(
        False, description="Caller must drop its reference to the uploaded media"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "is_relevant": True,
                "description": "A deep pothole filled with rainwater spans half the lane outside the market.",
                "reason": None,
                "discard_media": False
            }
        }
    }
