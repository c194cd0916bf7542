import json
from types import SimpleNamespace

from botocore.exceptions import ClientError

from logshipper.events import build_event, describe_error, route_of


def _request(path, query=""):
    return SimpleNamespace(url=SimpleNamespace(path=path, query=query))


def test_error_event_without_context_has_empty_route() -> None:
    event = build_event("error", "mongo connection failed", None, error=RuntimeError("down"))
    payload = json.loads(event.serialize())

    assert payload["level"] == "error"
    assert payload["route"] == ""
    assert payload["error"] == {"type": "RuntimeError", "message": "down"}


def test_extra_fields_cannot_overwrite_reserved_fields() -> None:
    extra = {"level": "debug", "message": "spoofed", "route": "/other", "user_id": 7}
    event = build_event("info", "user created", _request("/users"), extra)
    payload = json.loads(event.serialize())

    assert payload == {"level": "info", "message": "user created", "route": "/users", "user_id": 7}


def test_reserved_fields_come_first_in_serialized_message() -> None:
    event = build_event("info", "x", None, {"a": 1})
    assert event.serialize() == '{"level":"info","message":"x","route":"","a":1}'


def test_non_mapping_extra_is_nested_under_data() -> None:
    users = [{"nome": "Ana"}, {"nome": "Rui"}]
    payload = json.loads(build_event("info", "users found", None, users).serialize())
    assert payload["data"] == users


def test_error_field_only_present_when_supplied() -> None:
    payload = json.loads(build_event("error", "oops").serialize())
    assert "error" not in payload


def test_route_keeps_query_string() -> None:
    assert route_of(_request("/buckets", "page=2")) == "/buckets?page=2"
    assert route_of(_request("/buckets")) == "/buckets"
    assert route_of("/startup") == "/startup"
    assert route_of(SimpleNamespace()) == ""


def test_describe_client_error_carries_code() -> None:
    err = ClientError({"Error": {"Code": "NoSuchBucket", "Message": "nope"}}, "ListObjectsV2")
    detail = describe_error(err)
    assert detail["code"] == "NoSuchBucket"
    assert detail["type"] == "ClientError"


def test_unserializable_extras_are_stringified() -> None:
    marker = object()
    payload = json.loads(build_event("info", "x", None, {"obj": marker}).serialize())
    assert payload["obj"] == str(marker)


def test_event_timestamp_is_epoch_millis() -> None:
    event = build_event("info", "x")
    assert event.timestamp > 1_600_000_000_000
    assert event.to_cloudwatch()["timestamp"] == event.timestamp
