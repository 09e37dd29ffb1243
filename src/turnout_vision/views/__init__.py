"""Pure derived views over the filtered record set."""

from turnout_vision.views.choropleth import (
    build_map_layer,
    find_precinct,
    precinct_details,
    turnout_color,
)
from turnout_vision.views.extremes import turnout_extremes
from turnout_vision.views.histogram import turnout_histogram

__all__ = [
    "build_map_layer",
    "find_precinct",
    "precinct_details",
    "turnout_color",
    "turnout_extremes",
    "turnout_histogram",
]
