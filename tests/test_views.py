"""Tests for histogram, extremes and choropleth views."""

from __future__ import annotations

import pytest

from turnout_vision.core.types import PrecinctRecord
from turnout_vision.views.choropleth import (
    FALLBACK_COLOR,
    build_map_layer,
    find_precinct,
    label_position,
    legend,
    precinct_details,
    turnout_color,
)
from turnout_vision.views.extremes import turnout_extremes
from turnout_vision.views.histogram import turnout_histogram
from tests.conftest import make_record, square_feature


def _counts(bins):
    return {b.name: b.count for b in bins if b.count}


class TestTurnoutHistogram:
    def test_example_bins(self):
        records = [make_record("P1", 100, 80), make_record("P2", 50, 10)]
        bins = turnout_histogram(records)
        assert len(bins) == 10
        assert bins[0].name == "0-10%"
        assert bins[-1].name == "90-100%"
        assert _counts(bins) == {"80-90%": 1, "20-30%": 1}

    def test_exactly_full_turnout_in_last_bin(self):
        bins = turnout_histogram([make_record("P1", 100, 100)])
        assert _counts(bins) == {"90-100%": 1}

    def test_zero_turnout_in_first_bin(self):
        bins = turnout_histogram([make_record("P1", 0, 0), make_record("P2", 100, 0)])
        assert _counts(bins) == {"0-10%": 2}

    def test_over_full_turnout_not_counted(self):
        bins = turnout_histogram([make_record("P1", 100, 150)])
        assert sum(b.count for b in bins) == 0

    def test_empty_records(self):
        assert turnout_histogram([]) == []

    def test_custom_bin_count(self):
        bins = turnout_histogram([make_record("P1", 4, 1), make_record("P2", 4, 3)], bin_count=4)
        assert [b.name for b in bins] == ["0-25%", "25-50%", "50-75%", "75-100%"]
        assert [b.count for b in bins] == [0, 1, 0, 1]

    def test_deterministic(self):
        records = [make_record(f"P{i}", 100, i * 7) for i in range(12)]
        assert turnout_histogram(records) == turnout_histogram(records)


class TestTurnoutExtremes:
    def test_two_records_fill_both_groups(self):
        records = [make_record("P1", 100, 80), make_record("P2", 50, 10)]
        entries = turnout_extremes(records)
        top = [e.precinct_id for e in entries if e.group == "Top 5"]
        bottom = [e.precinct_id for e in entries if e.group == "Bottom 5"]
        assert top == ["P1", "P2"]
        assert bottom == ["P2", "P1"]

    def test_top_then_bottom(self):
        records = [make_record(f"P{i}", 100, i * 5) for i in range(12)]
        entries = turnout_extremes(records)
        assert len(entries) == 10
        assert [e.precinct_id for e in entries[:5]] == ["P11", "P10", "P9", "P8", "P7"]
        assert [e.precinct_id for e in entries[5:]] == ["P0", "P1", "P2", "P3", "P4"]
        assert entries[0].turnout_percent == pytest.approx(55.0)

    def test_custom_limit(self):
        records = [make_record(f"P{i}", 100, i) for i in range(6)]
        entries = turnout_extremes(records, limit=2)
        assert [(e.precinct_id, e.group) for e in entries] == [
            ("P5", "Top 2"),
            ("P4", "Top 2"),
            ("P0", "Bottom 2"),
            ("P1", "Bottom 2"),
        ]

    def test_empty(self):
        assert turnout_extremes([]) == []

    def test_ties_keep_input_order(self):
        records = [make_record("A", 100, 50), make_record("B", 100, 50)]
        bottom = [e.precinct_id for e in turnout_extremes(records) if e.group == "Bottom 5"]
        assert bottom == ["A", "B"]


class TestTurnoutColor:
    @pytest.mark.parametrize(
        "turnout,color",
        [
            (0.85, "#3F51B5"),
            (0.80, "#5C6BC0"),
            (0.75, "#5C6BC0"),
            (0.65, "#7986CB"),
            (0.55, "#9FA8DA"),
            (0.45, "#C5CAE9"),
            (0.35, "#E8EAF6"),
            (0.25, FALLBACK_COLOR),
            (0.0, FALLBACK_COLOR),
        ],
    )
    def test_scale(self, turnout, color):
        assert turnout_color(turnout) == color

    def test_legend(self):
        entries = legend()
        assert [e.label for e in entries] == ["> 80", "70-80", "60-70", "50-60", "40-50", "30-40"]
        assert entries[0].color == "#3F51B5"
        assert entries[-1].color == "#E8EAF6"


class TestMapLayer:
    def test_features_carry_id_and_properties(self):
        record = make_record("P1", 100, 90, region="North")
        layer = build_map_layer([record])
        assert layer.type == "FeatureCollection"
        feature = layer.features[0]
        assert feature["id"] == "P1"
        assert feature["geometry"]["type"] == "Polygon"
        props = feature["properties"]
        assert props["source"] == "test"
        assert props["region"] == "North"
        assert props["turnout"] == 0.9
        assert props["fill_color"] == "#3F51B5"

    def test_bounds_cover_all_features(self):
        records = [
            PrecinctRecord(
                precinct_id="A", total_registered_voters=1, votes_cast=1, turnout=1.0,
                boundary=square_feature(-74.0, 40.7),
            ),
            PrecinctRecord(
                precinct_id="B", total_registered_voters=1, votes_cast=0, turnout=0.0,
                boundary=square_feature(-73.5, 41.0, size=0.5),
            ),
        ]
        layer = build_map_layer(records)
        assert layer.bounds == pytest.approx([-74.0, 40.7, -73.0, 41.5])

    def test_bare_geometry_wrapped_as_feature(self):
        geometry = square_feature(-74.0, 40.7)["geometry"]
        record = PrecinctRecord(
            precinct_id="G", total_registered_voters=10, votes_cast=5, turnout=0.5, boundary=geometry
        )
        feature = build_map_layer([record]).features[0]
        assert feature["type"] == "Feature"
        assert feature["geometry"] == geometry

    def test_unrenderable_boundaries_skipped(self):
        records = [
            PrecinctRecord(precinct_id="X", total_registered_voters=1, votes_cast=1, turnout=1.0, boundary=[1, 2]),
            make_record("P1"),
        ]
        layer = build_map_layer(records)
        assert [f["id"] for f in layer.features] == ["P1"]
        assert layer.skipped == ["X"]

    def test_empty(self):
        layer = build_map_layer([])
        assert layer.features == []
        assert layer.bounds is None
        assert len(layer.legend) == 6

    def test_source_boundary_not_mutated(self):
        record = make_record("P1")
        before = dict(record.boundary)
        build_map_layer([record])
        assert record.boundary == before
        assert "id" not in record.boundary


class TestPrecinctLookup:
    def test_find_returns_first_match(self):
        records = [make_record("P1", 100, 10), make_record("P1", 100, 90), make_record("P2")]
        assert find_precinct(records, "P1").votes_cast == 10

    def test_find_missing(self):
        assert find_precinct([make_record("P1")], "P9") is None

    def test_details(self):
        details = precinct_details(make_record("P1", 3, 2, region="North"))
        assert details.precinct_id == "P1"
        assert details.turnout_label == "66.67%"
        assert details.total_registered_voters == 3
        assert details.votes_cast == 2
        assert details.attributes == {"region": "North"}
        assert details.position.lat == pytest.approx(40.705)
        assert details.position.lng == pytest.approx(-73.995)

    def test_label_position_only_for_polygons(self):
        multi = {
            "type": "Feature",
            "geometry": {"type": "MultiPolygon", "coordinates": [[[[0, 0], [1, 0], [1, 1], [0, 0]]]]},
        }
        record = PrecinctRecord(
            precinct_id="M", total_registered_voters=1, votes_cast=1, turnout=1.0, boundary=multi
        )
        assert label_position(record) is None
