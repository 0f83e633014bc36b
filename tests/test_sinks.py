from __future__ import annotations

import json
import logging
from unittest.mock import MagicMock

from mqtt_sensors.models.sensor_models import MetadataRecord, OutputRecord
from mqtt_sensors.services.sinks import (
    LoggingDeltaSink,
    LoggingStatusSink,
    MqttDeltaSink,
    meta_delta,
    values_delta,
)


def test_values_delta_shape() -> None:
    records = [OutputRecord("environment.outside.pressure", 101325.0)]

    assert values_delta(records) == {
        "updates": [{"values": [{"path": "environment.outside.pressure", "value": 101325.0}]}]
    }
    assert values_delta([], "mqtt-sensors") == {
        "updates": [{"source": {"label": "mqtt-sensors"}, "values": []}]
    }


def test_meta_delta_shape() -> None:
    records = [MetadataRecord("environment.inside.temperature", "K")]

    assert meta_delta(records) == {
        "updates": [{"meta": [{"path": "environment.inside.temperature", "value": {"units": "K"}}]}]
    }


def test_logging_delta_sink_writes_json(caplog) -> None:
    sink = LoggingDeltaSink("label")

    with caplog.at_level(logging.INFO):
        sink.publish_values([OutputRecord("a.b", 1)])

    logged = caplog.records[-1].getMessage().split(" ", 1)[1]
    assert json.loads(logged)["updates"][0]["values"] == [{"path": "a.b", "value": 1}]


def test_mqtt_delta_sink_publishes_documents() -> None:
    client = MagicMock()
    sink = MqttDeltaSink(client, "signalk/delta", "label", qos=1)

    sink.publish_values([OutputRecord("a.b", 2)])
    sink.publish_metadata([MetadataRecord("a.b", "Pa")])

    values_call, meta_call = client.publish_message.call_args_list
    assert values_call.args == ("signalk/delta", values_delta([OutputRecord("a.b", 2)], "label"), 1)
    assert meta_call.args == ("signalk/delta", meta_delta([MetadataRecord("a.b", "Pa")]), 1)
    assert meta_call.kwargs == {"retain": True}


def test_status_sink_keeps_history(caplog) -> None:
    sink = LoggingStatusSink()

    with caplog.at_level(logging.INFO):
        sink.report_status("Connected to mqtt://broker", False)
        sink.report_status("Connection error: refused", True)

    assert sink.last_status == {"message": "Connection error: refused", "is_error": True}
    assert len(sink.history) == 2
    assert "Error: Connection error: refused" in caplog.text


def _strict_loads(text: str):
    def reject(token: str):
        raise ValueError(token)

    return json.loads(text, parse_constant=reject)


def test_non_finite_values_become_null() -> None:
    records = [OutputRecord("a.b", float("nan")), OutputRecord("a.c", float("inf"))]

    assert values_delta(records)["updates"][0]["values"] == [
        {"path": "a.b", "value": None},
        {"path": "a.c", "value": None},
    ]


def test_logging_delta_sink_emits_strict_json_for_nan(caplog) -> None:
    sink = LoggingDeltaSink()

    with caplog.at_level(logging.INFO):
        sink.publish_values([OutputRecord("a.b", float("nan"))])

    logged = caplog.records[-1].getMessage().split(" ", 1)[1]
    assert "NaN" not in logged
    assert _strict_loads(logged)["updates"][0]["values"] == [{"path": "a.b", "value": None}]


def test_status_sink_history_is_bounded() -> None:
    sink = LoggingStatusSink(max_history=3)

    for attempt in range(5):
        sink.report_status(f"Attempting to reconnect ({attempt})", False)

    assert len(sink.history) == 3
    assert [entry["message"] for entry in sink.history] == [
        "Attempting to reconnect (2)",
        "Attempting to reconnect (3)",
        "Attempting to reconnect (4)",
    ]
    assert sink.last_status["message"] == "Attempting to reconnect (4)"
