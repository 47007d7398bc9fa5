"""Tests for the ECS event model."""

from __future__ import annotations

import json

from ecs_logger.ecs import ECS_VERSION, build_event, file_name, format_timestamp
from ecs_logger.levels import Level

TS_NANOS = 1_637_775_501_000_098_765


def test_format_timestamp_keeps_nanoseconds():
    assert format_timestamp(TS_NANOS) == "2021-11-24T17:38:21.000098765Z"
    assert format_timestamp(1_680_254_706_576_136_800) == "2023-03-31T09:25:06.576136800Z"
    assert format_timestamp(0) == "1970-01-01T00:00:00.000000000Z"


def test_file_name_handles_both_separators():
    assert file_name("src/server.py") == "server.py"
    assert file_name("C:\\app\\src\\server.py") == "server.py"
    assert file_name("mixed/dirs\\server.py") == "server.py"
    assert file_name("server.py") == "server.py"
    assert file_name(None) is None
    assert file_name("") is None


def test_build_event_error_with_call_site():
    event = build_event(
        TS_NANOS,
        Level.ERROR,
        "Error!",
        "myApp",
        source_file="src/server.py",
        source_line=144,
        module_path="my_app.server",
    )

    document = event.to_document()

    assert document["log.level"] == "ERROR"
    assert document["message"] == "Error!"
    assert document["log.origin"]["file"] == {"line": 144, "name": "server.py"}
    assert document["log.origin"]["python"] == {
        "target": "myApp",
        "module_path": "my_app.server",
        "file_path": "src/server.py",
    }


def test_event_serializes_in_documented_shape():
    event = build_event(
        TS_NANOS,
        Level.TRACE,
        "tracing msg",
        "myCustomTarget123",
        source_file="src/path/to/your/file.py",
        source_line=1234,
        module_path="my_app.path.to.your.file",
    )

    encoded = json.dumps(event.to_document(), separators=(",", ":"))

    assert encoded == (
        '{"@timestamp":"2021-11-24T17:38:21.000098765Z","log.level":"TRACE",'
        '"message":"tracing msg","ecs.version":"1.12.1","log.origin":{"file":'
        '{"line":1234,"name":"file.py"},"python":{"target":"myCustomTarget123",'
        '"module_path":"my_app.path.to.your.file","file_path":"src/path/to/your/file.py"}}}'
    )


def test_absent_optional_fields_are_omitted_not_null():
    event = build_event(TS_NANOS, Level.WARN, "bare", "target")

    document = event.to_document()
    encoded = json.dumps(document)

    assert "null" not in encoded
    assert set(document) == {"@timestamp", "log.level", "message", "ecs.version", "log.origin"}
    assert document["log.origin"] == {"file": {}, "python": {"target": "target"}}
    assert document["log.level"] == "WARN"
    assert document["ecs.version"] == ECS_VERSION


def test_line_zero_is_kept():
    document = build_event(TS_NANOS, Level.INFO, "m", "t", source_line=0).to_document()

    assert document["log.origin"]["file"] == {"line": 0}


def test_round_trip_key_set_matches_schema():
    event = build_event(
        TS_NANOS, Level.DEBUG, "msg", "t", source_file="/srv/app/main.py", source_line=3
    )

    parsed = json.loads(json.dumps(event.to_document()))

    assert list(parsed) == ["@timestamp", "log.level", "message", "ecs.version", "log.origin"]
    assert set(parsed["log.origin"]) == {"file", "python"}
    assert set(parsed["log.origin"]["file"]) == {"line", "name"}
    assert set(parsed["log.origin"]["python"]) == {"target", "file_path"}
    assert parsed["log.origin"]["file"]["name"] == "main.py"
    assert parsed["log.origin"]["python"]["file_path"].endswith(parsed["log.origin"]["file"]["name"])
