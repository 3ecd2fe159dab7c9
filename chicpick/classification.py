"""Garment classification through the vision model, with a fixed fallback."""

from __future__ import annotations

import json
import logging
import re

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from chicpick.api.aitunnel_client import AITunnelClient, AITunnelRequestError
from chicpick.imaging import strip_data_url

logger = logging.getLogger(__name__)

CLASSIFY_PROMPT = (
    "Analyze this clothing item. Identify the primary category (e.g., Dress, Top, Pants), "
    "the dominant color, and the best suited occasion (e.g., Casual, Formal, Party, Work). "
    "Return valid JSON with the keys category, color and occasion."
)

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)


class GarmentAttributes(BaseModel):
    """Shape the model must answer with."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    category: str = Field(min_length=1)
    color: str = Field(min_length=1)
    occasion: str = Field(min_length=1)


class AnalysisResult(BaseModel):
    """Classification triple plus whether the fixed fallback was applied."""

    model_config = ConfigDict(frozen=True)

    category: str
    color: str
    occasion: str
    fallback_used: bool = False


FALLBACK_ANALYSIS = AnalysisResult(
    category="Uncategorized",
    color="Unknown",
    occasion="Casual",
    fallback_used=True,
)


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences the model sometimes wraps JSON in."""

    return _FENCE_RE.sub("", text).strip()


def parse_analysis(text: str | None) -> AnalysisResult:
    """Parse the model reply; raises ``ValueError`` or ``ValidationError`` on bad input."""

    if not text or not text.strip():
        raise ValueError("empty response from vision model")
    attributes = GarmentAttributes.model_validate(json.loads(strip_code_fences(text)))
    return AnalysisResult(**attributes.model_dump())


class ClassificationAdapter:
    """Makes one classification attempt per image and never raises."""

    def __init__(self, client: AITunnelClient) -> None:
        self._client = client

    async def classify(self, image: str) -> AnalysisResult:
        """Return category, color and occasion for an encoded image."""

        if not self._client.configured:
            logger.warning("AITUNNEL_API_KEY is not configured, using fallback classification.")
            return FALLBACK_ANALYSIS

        payload = strip_data_url(image)
        messages = [
            {
                "role": "user",
                "content": [
                    {
                        "type": "image_url",
                        "image_url": {"url": f"data:image/jpeg;base64,{payload}"},
                    },
                    {"type": "text", "text": CLASSIFY_PROMPT},
                ],
            },
        ]
        try:
            response = await self._client.chat_completion(
                messages,
                response_format={"type": "json_object"},
            )
            return parse_analysis(AITunnelClient.first_choice_content(response))
        except AITunnelRequestError as exc:
            logger.warning("Vision model unavailable, using fallback: %s", exc)
        except (ValidationError, ValueError, TypeError, AttributeError, KeyError, IndexError) as exc:
            logger.warning("Unusable vision model reply, using fallback: %s", exc)
        return FALLBACK_ANALYSIS
