from __future__ import annotations

"""Nearby-places context supplied by the client's map integration."""

import logging
from typing import Dict, List, Sequence

from agent.core.models import NearbyPlace, PointOfInterest
from agent.core.prompt import NO_PLACES, PLACES_RULES


logger = logging.getLogger(__name__)


def _describe_place(place: NearbyPlace) -> str:
    parts = [place.name]
    if place.vicinity:
        parts.append(place.vicinity)
    if place.rating is not None:
        parts.append(f"rating {place.rating}")
    line = " - ".join(parts)
    if place.coordinates is not None:
        line += f" (lat: {place.coordinates.lat}, lng: {place.coordinates.lng})"
    return f"- {line}"


def format_places(places: Sequence[NearbyPlace], limit: int = 5) -> str:
    """Compact listing for the system prompt; at most ``limit`` places."""
    selected = list(places)[:max(limit, 0)]
    if not selected:
        return NO_PLACES
    listing = "\n".join(_describe_place(p) for p in selected)
    return PLACES_RULES.format(listing=listing)


def _key(name: str) -> str:
    return " ".join(name.lower().split())


def reconcile_points_of_interest(
    pois: List[PointOfInterest],
    places: Sequence[NearbyPlace],
    restrict: bool = False,
) -> List[PointOfInterest]:
    """Snap POIs that name a supplied place onto that place's coordinates.

    With ``restrict`` set, POIs that match no supplied place are dropped.
    Without places there is nothing to check against and ``pois`` is returned as is.
    """
    if not places:
        return pois

    known: Dict[str, NearbyPlace] = {_key(p.name): p for p in places}
    reconciled: List[PointOfInterest] = []
    for poi in pois:
        place = known.get(_key(poi.name))
        if place is None:
            logger.warning("Model returned point of interest not in nearby places: %s", poi.name)
            if not restrict:
                reconciled.append(poi)
            continue
        if place.coordinates is not None and poi.coordinates != place.coordinates:
            poi = poi.model_copy(update={"coordinates": place.coordinates})
        reconciled.append(poi)
    return reconciled
