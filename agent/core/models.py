from __future__ import annotations

"""Pydantic types shared by the store, the generator and the API."""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)


POINTS_OF_INTEREST = "points_of_interest"


class Coordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float


def _has_lat_lng(value: Any) -> bool:
    return isinstance(value, dict) and all(
        isinstance(value.get(k), (int, float)) and not isinstance(value.get(k), bool) for k in ("lat", "lng")
    )


def _lift_geometry(values: Any) -> Any:
    """Copy ``geometry.location`` into ``coordinates`` unless ``coordinates`` is already usable."""
    if not isinstance(values, dict) or _has_lat_lng(values.get("coordinates")):
        return values
    geometry = values.get("geometry")
    if isinstance(geometry, dict) and isinstance(geometry.get("location"), dict):
        values = dict(values)
        values["coordinates"] = geometry["location"]
    return values


class Location(BaseModel):
    model_config = ConfigDict(frozen=True)

    # strict: numeric strings such as "40.7" are rejected, ints are accepted
    lat: float = Field(..., ge=-90, le=90, strict=True, allow_inf_nan=False)
    lng: float = Field(..., ge=-180, le=180, strict=True, allow_inf_nan=False)
    address: Optional[str] = Field(default=None, description="Reverse-geocoded label")

    def label(self) -> str:
        return self.address or f"coordinates ({self.lat}, {self.lng})"


class NearbyPlace(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    vicinity: Optional[str] = None
    rating: Optional[float] = None
    coordinates: Optional[Coordinates] = None

    @model_validator(mode="before")
    @classmethod
    def _normalize_geometry(cls, values):
        return _lift_geometry(values)


class PointOfInterest(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = ""
    description: str = ""
    coordinates: Optional[Coordinates] = None

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, values):
        # Models sometimes list bare place names instead of objects.
        if not isinstance(values, dict):
            values = {"name": values if isinstance(values, str) else json.dumps(values)}
        values = _lift_geometry(values)
        values = {k: v for k, v in values.items() if k != "geometry"}
        for key in ("name", "description"):
            if key in values and not isinstance(values[key], str):
                values[key] = "" if values[key] is None else str(values[key])
        return values

    @field_validator("coordinates", mode="wrap")
    @classmethod
    def _usable_coordinates(cls, value, handler):
        try:
            return handler(value)
        except ValidationError:
            return None

    def to_dict(self) -> Dict[str, Any]:
        # Only the keys the model wrote (plus normalized coordinates).
        return self.model_dump(mode="json", exclude_unset=True)


class LocationResponse(BaseModel):
    """The model's JSON object, with its points of interest normalized.

    ``data`` keeps the keys exactly as the model returned them, in order;
    ``to_json`` writes it back with only ``points_of_interest`` replaced.
    """

    data: Dict[str, Any]
    points_of_interest: List[PointOfInterest] = Field(default_factory=list)

    @classmethod
    def from_model_output(cls, data: Dict[str, Any]) -> "LocationResponse":
        entries = data.get(POINTS_OF_INTEREST)
        pois = [PointOfInterest.model_validate(e) for e in entries] if isinstance(entries, list) else []
        return cls(data=data, points_of_interest=pois)

    @property
    def description(self) -> Optional[Any]:
        return self.data.get("description")

    @property
    def fun_fact(self) -> Optional[Any]:
        return self.data.get("fun_fact")

    def to_json(self) -> str:
        out = dict(self.data)
        if isinstance(out.get(POINTS_OF_INTEREST), list):
            out[POINTS_OF_INTEREST] = [p.to_dict() for p in self.points_of_interest]
        return json.dumps(out, ensure_ascii=False)


class ChatInput(BaseModel):
    """Body of ``POST /api/chat``."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(..., min_length=1, description="User's question")
    location: Location
    system_prompt: Optional[str] = Field(default=None, alias="systemPrompt")
    persona: Optional[str] = Field(default=None, description="Persona id from /api/personas")
    places: List[NearbyPlace] = Field(default_factory=list)
    # Older clients send an empty ``response`` along with the request.
    response: Optional[str] = Field(default=None, exclude=True)

    @field_validator("message")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("message must not be blank")
        return value


class NewChat(BaseModel):
    """Everything the store needs to create a record; id and timestamp are its own."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    message: str
    response: str
    system_prompt: str = Field(..., alias="systemPrompt")
    location: Location


class ChatRecord(BaseModel):
    """A persisted question/answer/location tuple. Immutable once created."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    message: str
    response: str
    system_prompt: str = Field(..., alias="systemPrompt")
    location: Location
    timestamp: datetime

