from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from agent.core.models import Coordinates
from client.renderer import PoiSelection, poi_coordinates


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MapMarker:
    position: Coordinates
    label: str
    title: str


@dataclass
class MarkerSet:
    markers: List[MapMarker] = field(default_factory=list)
    selected_id: Optional[str] = None

    @property
    def selected(self) -> Optional[MapMarker]:
        if self.selected_id is None:
            return None
        return next((m for m in self.markers if m.label == str(int(self.selected_id) + 1)), None)


def place_markers(points: Sequence[Any], selected_index: Optional[int] = None) -> MarkerSet:
    """One marker per point with usable coordinates; labels are 1-based positions."""
    markers: List[MapMarker] = []
    for index, poi in enumerate(points):
        position = poi_coordinates(poi)
        if position is None:
            logger.warning("Invalid coordinates for POI: %s", poi)
            continue
        title = poi.get("name") if isinstance(poi, dict) else None
        markers.append(
            MapMarker(position=position, label=str(index + 1), title=str(title or f"Place {index + 1}"))
        )
    selected_id = str(selected_index) if selected_index is not None else None
    return MarkerSet(markers=markers, selected_id=selected_id)


def show_selection(selection: PoiSelection) -> MarkerSet:
    return place_markers(selection.points, selection.selected_index)
