from __future__ import annotations

import orjson
import pytest

from event_sink.errors import InvalidEventError
from event_sink.models.events import MESSAGE_FIELDS, RawEvent
from event_sink.transform.event_transformer import (
    serialize_batch,
    serialize_message,
    transform_batch,
    transform_event,
)


def _event(**fields) -> RawEvent:
    fields.setdefault("uuid", "0189f0a2-0000-7000-8000-000000000001")
    return RawEvent.from_dict(fields)


def test_missing_maps_default_to_empty():
    message = transform_event(_event(event="pageview", distinct_id="u1"))

    assert message.properties == {}
    assert message.elements == []
    assert message.people_set == {}
    assert message.people_set_once == {}


def test_autocapture_moves_elements_out_of_properties():
    raw = _event(
        event="$autocapture",
        properties={"$elements": [{"tag": "div"}], "x": 1},
    )

    message = transform_event(raw)

    assert message.elements == [{"tag": "div"}]
    assert message.properties == {"x": 1}
    # 원본 properties는 건드리지 않는다.
    assert raw.properties == {"$elements": [{"tag": "div"}], "x": 1}


def test_other_events_keep_elements_in_properties():
    elements = [{"tag": "a", "href": "/"}]
    message = transform_event(
        _event(event="pageview", properties={"$elements": elements, "x": 1})
    )

    assert message.properties == {"$elements": elements, "x": 1}
    assert message.elements == []


def test_autocapture_with_empty_elements_keeps_properties():
    message = transform_event(
        _event(event="$autocapture", properties={"$elements": [], "x": 1})
    )

    assert message.properties == {"$elements": [], "x": 1}
    assert message.elements == []


def test_ip_prefers_properties():
    message = transform_event(
        _event(event="pageview", ip="9.9.9.9", properties={"$ip": "1.2.3.4"})
    )
    assert message.ip == "1.2.3.4"


def test_ip_falls_back_to_event_field():
    message = transform_event(_event(event="pageview", ip="9.9.9.9", properties={}))
    assert message.ip == "9.9.9.9"


@pytest.mark.parametrize(
    ("fields", "expected"),
    [
        (
            {"timestamp": "T0", "properties": {"timestamp": "P"}, "now": "N", "sent_at": "S"},
            "T0",
        ),
        ({"properties": {"timestamp": "P"}, "now": "N", "sent_at": "S"}, "P"),
        ({"properties": {}, "now": "N", "sent_at": "S"}, "N"),
        ({"sent_at": "T1"}, "T1"),
        ({"timestamp": "", "now": "", "sent_at": "T1"}, "T1"),
        ({}, None),
    ],
)
def test_timestamp_fallback_chain(fields, expected):
    message = transform_event(_event(event="pageview", **fields))
    assert message.timestamp == expected


def test_people_set_copied_from_dollar_fields():
    message = transform_event(
        RawEvent.from_dict(
            {
                "event": "$identify",
                "uuid": "u-1",
                "$set": {"email": "a@example.com"},
                "$set_once": {"first_seen": "2024-01-01"},
            }
        )
    )

    assert message.people_set == {"email": "a@example.com"}
    assert message.people_set_once == {"first_seen": "2024-01-01"}


def test_direct_fields_are_copied():
    message = transform_event(
        _event(
            event="signup",
            distinct_id="user-7",
            team_id=2,
            site_url="https://app.example.com",
            uuid="abc",
        )
    )

    assert (message.event, message.distinct_id, message.team_id) == ("signup", "user-7", 2)
    assert message.site_url == "https://app.example.com"
    assert message.uuid == "abc"


def test_unknown_fields_are_dropped():
    raw = RawEvent.from_dict({"uuid": "u", "event": "x", "offset": 42, "kafka_key": "k"})
    payload = orjson.loads(serialize_message(transform_event(raw)))

    assert set(payload) == set(MESSAGE_FIELDS)


def test_serialized_message_has_every_key():
    payload = orjson.loads(serialize_message(transform_event(_event(event="pageview"))))

    assert list(payload) == sorted(MESSAGE_FIELDS)
    assert payload["properties"] == {}
    assert payload["elements"] == []
    assert payload["people_set"] == {}
    assert payload["people_set_once"] == {}
    assert payload["ip"] is None


def test_serialization_is_key_order_independent():
    first = transform_event(_event(event="e", properties={"b": 1, "a": 2}))
    second = transform_event(_event(event="e", properties={"a": 2, "b": 1}))

    assert serialize_message(first) == serialize_message(second)


def test_missing_uuid_is_rejected():
    with pytest.raises(InvalidEventError, match="uuid"):
        transform_event(RawEvent.from_dict({"event": "pageview"}))


def test_batch_reports_index_of_bad_event():
    events = [{"event": "a", "uuid": "1"}, {"event": "b"}]

    with pytest.raises(InvalidEventError) as excinfo:
        transform_batch(events)

    assert excinfo.value.index == 1


def test_batch_rejects_non_mapping_records():
    with pytest.raises(InvalidEventError, match="unsupported"):
        transform_batch([["not", "a", "record"]])


def test_unserializable_property_is_rejected():
    messages = transform_batch([{"event": "a", "uuid": "1", "properties": {"x": object()}}])

    with pytest.raises(InvalidEventError, match="serializable"):
        serialize_batch(messages)
