from __future__ import annotations

import json
import logging
from typing import Any, List, Optional, Sequence

from langchain_core.language_models import BaseChatModel
from langchain_google_genai import ChatGoogleGenerativeAI

from agent.core.errors import (
    EmptyResponseError,
    GenerationError,
    InvalidResponseFormatError,
    MissingCredentialsError,
)
from agent.core.models import Location, LocationResponse, NearbyPlace
from agent.core.prompt import build_prompt
from agent.tools import format_places, reconcile_points_of_interest
from config.settings import Settings, get_settings


logger = logging.getLogger(__name__)


def build_llm(settings: Optional[Settings] = None) -> ChatGoogleGenerativeAI:
    settings = settings or get_settings()
    if not settings.google_api_key:
        raise MissingCredentialsError()

    return ChatGoogleGenerativeAI(
        model=settings.gemini_model,
        google_api_key=settings.google_api_key,
        temperature=settings.temperature,
        top_p=settings.top_p,
        response_mime_type="application/json",
    )


def _content_text(content: Any) -> str:
    # Gemini may return a list of content parts instead of a plain string.
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: List[str] = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text") or "")
        return "".join(parts)
    return ""


def parse_model_output(content: str) -> LocationResponse:
    """Strict JSON parse of the model's answer; no fence stripping or recovery."""
    if not content or not content.strip():
        raise EmptyResponseError()
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        logger.error("Failed to parse model response: %s", content[:500])
        raise InvalidResponseFormatError(content) from exc
    if not isinstance(data, dict):
        logger.error("Model response is not a JSON object: %s", content[:500])
        raise InvalidResponseFormatError(content)
    return LocationResponse.from_model_output(data)


class LocationResponseGenerator:
    """Turns (message, location, persona, nearby places) into a structured answer."""

    def __init__(
        self,
        llm: BaseChatModel,
        max_places: int = 5,
        restrict_to_places: bool = False,
    ) -> None:
        self.llm = llm
        self.max_places = max_places
        self.restrict_to_places = restrict_to_places
        self.prompt = build_prompt()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "LocationResponseGenerator":
        settings = settings or get_settings()
        return cls(
            build_llm(settings),
            max_places=settings.max_nearby_places,
            restrict_to_places=settings.restrict_pois_to_places,
        )

    def build_messages(
        self,
        message: str,
        location: Location,
        persona_prompt: str,
        places: Sequence[NearbyPlace] = (),
    ):
        return self.prompt.format_messages(
            persona=persona_prompt,
            location=location.label(),
            places_section=format_places(places, limit=self.max_places),
            input=message,
        )

    def generate(
        self,
        message: str,
        location: Location,
        persona_prompt: str,
        places: Sequence[NearbyPlace] = (),
    ) -> LocationResponse:
        messages = self.build_messages(message, location, persona_prompt, places)
        logger.info(
            "Calling model: location=%s places=%s message_len=%s",
            location.label(),
            min(len(places), self.max_places),
            len(message),
        )
        try:
            result = self.llm.invoke(messages)
        except GenerationError:
            raise
        except Exception as exc:
            logger.exception("Model call failed: %s", exc)
            raise GenerationError(str(exc)) from exc

        answer = parse_model_output(_content_text(getattr(result, "content", result)))
        supplied = list(places)[: self.max_places]
        answer.points_of_interest = reconcile_points_of_interest(
            answer.points_of_interest, supplied, restrict=self.restrict_to_places
        )
        logger.info("Model responded with %s points of interest", len(answer.points_of_interest))
        return answer
