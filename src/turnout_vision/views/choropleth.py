"""Choropleth map layer: GeoJSON features shaded by turnout."""

from __future__ import annotations

import logging
from typing import Any, Iterator, Sequence

from turnout_vision.core.types import PrecinctRecord
from turnout_vision.views.models import LatLng, LegendEntry, MapLayer, PrecinctDetails

logger = logging.getLogger(__name__)

GEOMETRY_TYPES = frozenset({
    "Point",
    "MultiPoint",
    "LineString",
    "MultiLineString",
    "Polygon",
    "MultiPolygon",
    "GeometryCollection",
})

# (lower bound in percent, exclusive) -> fill colour, darkest first.
COLOR_SCALE: tuple[tuple[float, str], ...] = (
    (80, "#3F51B5"),
    (70, "#5C6BC0"),
    (60, "#7986CB"),
    (50, "#9FA8DA"),
    (40, "#C5CAE9"),
    (30, "#E8EAF6"),
)
FALLBACK_COLOR = "#FFEB3B"
STROKE_COLOR = "#3F51B5"


def turnout_color(turnout: float) -> str:
    """Fill colour for a turnout ratio."""
    percentage = turnout * 100
    for lower, color in COLOR_SCALE:
        if percentage > lower:
            return color
    return FALLBACK_COLOR


def legend() -> list[LegendEntry]:
    entries = [LegendEntry(label=f"> {COLOR_SCALE[0][0]:g}", color=COLOR_SCALE[0][1])]
    for (upper, _), (lower, color) in zip(COLOR_SCALE, COLOR_SCALE[1:]):
        entries.append(LegendEntry(label=f"{lower:g}-{upper:g}", color=color))
    return entries


def as_feature(boundary: Any) -> dict[str, Any] | None:
    """Coerce a parsed boundary into a GeoJSON Feature, or None if it can't be."""
    if not isinstance(boundary, dict):
        return None
    kind = boundary.get("type")
    if kind == "Feature":
        return boundary
    if kind in GEOMETRY_TYPES:
        return {"type": "Feature", "geometry": boundary, "properties": {}}
    return None


def _iter_positions(coords: Any) -> Iterator[tuple[float, float]]:
    if (
        isinstance(coords, (list, tuple))
        and len(coords) >= 2
        and all(isinstance(c, (int, float)) and not isinstance(c, bool) for c in coords[:2])
    ):
        yield float(coords[0]), float(coords[1])
        return
    if isinstance(coords, (list, tuple)):
        for item in coords:
            yield from _iter_positions(item)


def _geometry_positions(geometry: Any) -> Iterator[tuple[float, float]]:
    if not isinstance(geometry, dict):
        return
    if geometry.get("type") == "GeometryCollection":
        for child in geometry.get("geometries") or []:
            yield from _geometry_positions(child)
        return
    yield from _iter_positions(geometry.get("coordinates"))


def _bbox(positions: Iterator[tuple[float, float]]) -> list[float] | None:
    lngs: list[float] = []
    lats: list[float] = []
    for lng, lat in positions:
        lngs.append(lng)
        lats.append(lat)
    if not lngs:
        return None
    return [min(lngs), min(lats), max(lngs), max(lats)]


def label_position(record: PrecinctRecord) -> LatLng | None:
    """Centre of the first ring's bounding box for Polygon boundaries."""
    feature = as_feature(record.boundary)
    if feature is None:
        return None
    geometry = feature.get("geometry")
    if not isinstance(geometry, dict) or geometry.get("type") != "Polygon":
        return None
    rings = geometry.get("coordinates") or []
    if not rings:
        return None
    bbox = _bbox(_iter_positions(rings[0]))
    if bbox is None:
        return None
    return LatLng(lat=(bbox[1] + bbox[3]) / 2, lng=(bbox[0] + bbox[2]) / 2)


def build_map_layer(records: Sequence[PrecinctRecord]) -> MapLayer:
    """FeatureCollection for the filtered records with per-feature fill colours.

    Records whose boundary is not a GeoJSON object are listed in ``skipped``
    instead of being rendered.
    """
    features: list[dict[str, Any]] = []
    skipped: list[str] = []

    for record in records:
        feature = as_feature(record.boundary)
        if feature is None:
            skipped.append(record.precinct_id)
            continue
        properties = {
            **(feature.get("properties") or {}),
            **record.attributes,
            "precinct_id": record.precinct_id,
            "total_registered_voters": record.total_registered_voters,
            "votes_cast": record.votes_cast,
            "turnout": record.turnout,
            "fill_color": turnout_color(record.turnout),
        }
        features.append({**feature, "id": record.precinct_id, "properties": properties})

    if skipped:
        logger.debug("Skipped %d precincts without renderable boundaries", len(skipped))

    bounds = _bbox(
        position
        for feature in features
        for position in _geometry_positions(feature.get("geometry"))
    )
    return MapLayer(features=features, bounds=bounds, legend=legend(), skipped=skipped)


def find_precinct(
    records: Sequence[PrecinctRecord], precinct_id: str
) -> PrecinctRecord | None:
    """First record with *precinct_id*, in row order."""
    return next((r for r in records if r.precinct_id == precinct_id), None)


def precinct_details(record: PrecinctRecord) -> PrecinctDetails:
    percent = record.turnout_percent
    return PrecinctDetails(
        precinct_id=record.precinct_id,
        turnout_percent=percent,
        turnout_label=f"{percent:.2f}%",
        total_registered_voters=record.total_registered_voters,
        votes_cast=record.votes_cast,
        position=label_position(record),
        attributes=dict(record.attributes),
    )
