import json
from datetime import datetime, timezone

from agent.core.models import ChatRecord, Coordinates, Location
from client.map_layer import place_markers, show_selection
from client.renderer import (
    PoiReference,
    RawResponse,
    StructuredResponse,
    TextSegment,
    activate_reference,
    parse_response,
    poi_coordinates,
    render_chat,
    render_response,
)


def _record(chat_id: int, response: str) -> ChatRecord:
    return ChatRecord(
        id=chat_id,
        message="q",
        response=response,
        system_prompt="p",
        location=Location(lat=1, lng=2),
        timestamp=datetime.now(timezone.utc),
    )


def test_parse_response_variants():
    assert parse_response('{"a": 1}') == StructuredResponse({"a": 1})
    assert parse_response("not json") == RawResponse("not json")
    assert parse_response("[1, 2]") == RawResponse("[1, 2]")


def test_render_structured_response(sample_response):
    rendered = render_chat(_record(7, json.dumps(sample_response)))

    assert rendered.segments == [
        TextSegment("description: X"),
        PoiReference(chat_id=7, index=0, name="A", description="d"),
        TextSegment("fun_fact: F"),
    ]
    assert rendered.text == "description: X\n\n- A: d\n\nfun_fact: F"
    assert len(rendered.references) == 1


def test_raw_response_is_returned_unchanged():
    rendered = render_response(3, "not json")
    assert rendered.text == "not json"
    assert rendered.references == []


def test_non_list_points_of_interest_render_as_text():
    rendered = render_response(1, '{"points_of_interest": "none nearby", "rating": 4}')
    assert rendered.text == "points_of_interest: none nearby\n\nrating: 4"


def test_activating_a_reference_yields_its_coordinates(sample_response):
    records = [_record(1, "not json"), _record(2, json.dumps(sample_response))]
    (ref,) = render_chat(records[1]).references

    selection = activate_reference(records, ref.chat_id, ref.index)

    assert selection is not None
    assert selection.selected_index == 0
    assert selection.points == sample_response["points_of_interest"]
    assert poi_coordinates(selection.selected) == Coordinates(lat=1, lng=2)


def test_activation_of_unknown_reference():
    records = [_record(1, '{"points_of_interest": [{"name": "A"}]}'), _record(2, "not json")]
    assert activate_reference(records, 9, 0) is None
    assert activate_reference(records, 1, 1) is None
    assert activate_reference(records, 2, 0) is None


def test_coordinates_fall_back_to_geometry_location():
    assert poi_coordinates({"geometry": {"location": {"lat": 5, "lng": 6}}}) == Coordinates(lat=5, lng=6)
    assert poi_coordinates({"coordinates": {"lat": "x"}, "geometry": {"location": {"lat": 5, "lng": 6}}}) == Coordinates(lat=5, lng=6)
    assert poi_coordinates({"name": "nowhere"}) is None


def test_markers_one_per_point_and_selected_highlighted():
    points = [
        {"name": "A", "coordinates": {"lat": 1, "lng": 2}},
        {"name": "B"},
        {"name": "C", "geometry": {"location": {"lat": 3, "lng": 4}}},
    ]
    markers = place_markers(points, selected_index=2)

    assert [(m.label, m.title) for m in markers.markers] == [("1", "A"), ("3", "C")]
    assert markers.selected_id == "2"
    assert markers.selected.title == "C"


def test_show_selection(sample_response):
    selection = activate_reference([_record(1, json.dumps(sample_response))], 1, 0)
    markers = show_selection(selection)
    assert markers.selected.position == Coordinates(lat=1, lng=2)
