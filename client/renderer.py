from __future__ import annotations

"""Turn a stored ``response`` string into chat text and clickable POI references.

Stored responses are normally JSON objects written by the API, but records can
come from older servers or other writers, so parsing never raises: anything
that is not a JSON object is shown verbatim.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from agent.core.models import ChatRecord, Coordinates


POINTS_OF_INTEREST = "points_of_interest"
SEGMENT_SEPARATOR = "\n\n"


@dataclass(frozen=True)
class StructuredResponse:
    data: Dict[str, Any]


@dataclass(frozen=True)
class RawResponse:
    text: str


ParsedResponse = Union[StructuredResponse, RawResponse]


@dataclass(frozen=True)
class TextSegment:
    text: str


@dataclass(frozen=True)
class PoiReference:
    """A point of interest the user can activate; ``index`` is its position in the list."""

    chat_id: int
    index: int
    name: str
    description: str = ""

    @property
    def text(self) -> str:
        if self.description:
            return f"- {self.name}: {self.description}"
        return f"- {self.name}"


Segment = Union[TextSegment, PoiReference]


@dataclass
class RenderedChat:
    chat_id: int
    segments: List[Segment] = field(default_factory=list)

    @property
    def text(self) -> str:
        return SEGMENT_SEPARATOR.join(s.text for s in self.segments)

    @property
    def references(self) -> List[PoiReference]:
        return [s for s in self.segments if isinstance(s, PoiReference)]


@dataclass(frozen=True)
class PoiSelection:
    points: List[Dict[str, Any]]
    selected_index: int

    @property
    def selected(self) -> Dict[str, Any]:
        return self.points[self.selected_index]


def parse_response(response: str) -> ParsedResponse:
    try:
        data = json.loads(response)
    except (TypeError, ValueError):
        return RawResponse(response)
    if not isinstance(data, dict):
        return RawResponse(response)
    return StructuredResponse(data)


def _format_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def _poi_field(entry: Any, key: str) -> str:
    if isinstance(entry, Mapping):
        value = entry.get(key)
        if value is not None:
            return _format_value(value)
    return ""


def render_response(chat_id: int, response: str) -> RenderedChat:
    rendered = RenderedChat(chat_id=chat_id)
    parsed = parse_response(response)
    if isinstance(parsed, RawResponse):
        rendered.segments.append(TextSegment(parsed.text))
        return rendered

    for key, value in parsed.data.items():
        if key == POINTS_OF_INTEREST and isinstance(value, list):
            for index, entry in enumerate(value):
                rendered.segments.append(
                    PoiReference(
                        chat_id=chat_id,
                        index=index,
                        name=_poi_field(entry, "name") or f"Place {index + 1}",
                        description=_poi_field(entry, "description"),
                    )
                )
        else:
            rendered.segments.append(TextSegment(f"{key}: {_format_value(value)}"))
    return rendered


def render_chat(record: ChatRecord) -> RenderedChat:
    return render_response(record.id, record.response)


def _as_coordinates(value: Any) -> Optional[Coordinates]:
    if not isinstance(value, Mapping):
        return None
    lat, lng = value.get("lat"), value.get("lng")
    if isinstance(lat, bool) or isinstance(lng, bool):
        return None
    if not isinstance(lat, (int, float)) or not isinstance(lng, (int, float)):
        return None
    return Coordinates(lat=lat, lng=lng)


def poi_coordinates(entry: Any) -> Optional[Coordinates]:
    """``coordinates`` if usable, else ``geometry.location``, else ``None``."""
    if not isinstance(entry, Mapping):
        return None
    coords = _as_coordinates(entry.get("coordinates"))
    if coords is not None:
        return coords
    geometry = entry.get("geometry")
    if isinstance(geometry, Mapping):
        return _as_coordinates(geometry.get("location"))
    return None


def activate_reference(
    records: Iterable[ChatRecord],
    chat_id: int,
    index: int,
) -> Optional[PoiSelection]:
    """Re-locate the chat a reference came from and select its ``index``-th POI."""
    record = next((r for r in records if r.id == chat_id), None)
    if record is None:
        return None
    parsed = parse_response(record.response)
    if not isinstance(parsed, StructuredResponse):
        return None
    points = parsed.data.get(POINTS_OF_INTEREST)
    if not isinstance(points, list) or not 0 <= index < len(points):
        return None
    return PoiSelection(points=points, selected_index=index)
