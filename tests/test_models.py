"""Tests for trigger configuration, alarm and block graph models."""

from datetime import datetime, timedelta

import pytest

from pyblockflow.models import (
    AlarmInfo,
    Block,
    BlockGraph,
    DayEntry,
    IntervalParams,
    SpecificDayParams,
    TriggerConfiguration,
    TriggerKind,
    VisitWebParams,
    parse_registration_key,
    registration_key,
)


def test_trigger_kind_parses_persisted_tags():
    assert TriggerKind.parse("interval") is TriggerKind.INTERVAL
    assert TriggerKind.parse("date") is TriggerKind.SPECIFIC_DATE
    assert TriggerKind.parse("specific-day") is TriggerKind.SPECIFIC_DAY
    assert TriggerKind.parse("on-startup") is TriggerKind.ON_STARTUP


def test_trigger_kind_unknown_tag_is_none():
    assert TriggerKind.parse("manual") is None
    assert TriggerKind.parse(None) is None


def test_registration_key_forms():
    assert registration_key("wf1", "t1") == "trigger:wf1:t1"
    assert registration_key("wf1") == "wf1"


def test_parse_registration_key_roundtrip():
    assert parse_registration_key("trigger:wf1:t1") == ("wf1", "t1")
    assert parse_registration_key("wf1") == ("wf1", None)
    # A bare "trigger:" prefix without a trigger id is a legacy key
    assert parse_registration_key("trigger:wf1") == ("trigger:wf1", None)


def test_configuration_list_form_wins_over_legacy():
    config = TriggerConfiguration.from_dict(
        {
            "type": "interval",
            "interval": 10,
            "triggers": [{"id": "t1", "type": "visit-web", "data": {"url": "a.test"}}],
        }
    )

    assert not config.is_legacy
    assert len(config) == 1
    entry = config.entries[0]
    assert entry.kind is TriggerKind.VISIT_WEB
    assert entry.registration_key("wf1") == "trigger:wf1:t1"
    assert entry.params() == VisitWebParams(url="a.test", is_url_regex=False)


def test_configuration_legacy_form():
    config = TriggerConfiguration.from_dict({"type": "interval", "interval": "5", "delay": 2})

    assert config.is_legacy
    entry = config.entries[0]
    assert entry.registration_key("wf1") == "wf1"
    assert entry.params() == IntervalParams(interval=5.0, delay=2.0, fixed_delay=False)


def test_configuration_empty_list_registers_nothing():
    config = TriggerConfiguration.from_dict({"type": "interval", "triggers": []})
    assert len(config) == 0
    assert not config.is_legacy


def test_configuration_without_triggers_or_type():
    assert len(TriggerConfiguration.from_dict({})) == 0
    assert len(TriggerConfiguration.from_dict(None)) == 0


def test_unknown_kind_params_raise():
    config = TriggerConfiguration.from_dict({"triggers": [{"id": "x", "type": "manual"}]})
    with pytest.raises(ValueError, match="Unknown trigger type"):
        config.entries[0].params()


def test_specific_day_params_accept_both_day_shapes():
    params = SpecificDayParams.from_dict(
        {"days": [{"id": 1, "times": ["10:00:00", "18:00"]}, 3], "time": "07:30"}
    )
    assert params.days == (DayEntry(id=1, times=("10:00:00", "18:00")), 3)
    assert params.time == "07:30"


def test_alarm_next_occurrence_skips_missed_periods():
    start = datetime(2024, 5, 8, 12, 0)
    alarm = AlarmInfo(name="wf1", scheduled_time=start, period_in_minutes=10)

    rearmed = alarm.next_occurrence(start + timedelta(minutes=25))

    assert rearmed.scheduled_time == start + timedelta(minutes=30)
    assert rearmed.period_in_minutes == 10


def test_alarm_dict_roundtrip():
    alarm = AlarmInfo(
        name="trigger:wf1:t1", scheduled_time=datetime(2024, 5, 8, 12, 0, 30, 5), period_in_minutes=2.5
    )
    assert AlarmInfo.from_dict(alarm.to_dict()) == alarm


def test_block_connection_resolves_first_output():
    block = Block.from_dict(
        {
            "id": "b1",
            "name": "google-sheets",
            "data": {"range": "A1"},
            "outputs": {
                "output-1": {"connections": [{"node": "b2", "output": "input-1"}, {"node": "b3"}]}
            },
        }
    )

    assert block.kind == "google-sheets"
    assert block.connection() == "b2"
    assert block.connection(2) is None


def test_block_connection_input_port_comes_from_output_key():
    block = Block.from_dict(
        {
            "id": "b1",
            "name": "trigger",
            "outputs": {
                "output-1": {"connections": [{"node": "b2", "output": "input-2"}, {"node": "b3"}]}
            },
        }
    )

    first, second = block.outputs["output-1"]
    assert (first.node, first.input) == ("b2", "input-2")
    assert (second.node, second.input) == ("b3", "input-1")


def test_block_graph_from_drawing_format():
    graph = BlockGraph.from_dict(
        {
            "drawflow": {
                "Home": {
                    "data": {
                        "t": {"id": "t", "name": "trigger", "outputs": {}},
                        "s": {"id": "s", "name": "google-sheets", "data": {}},
                    }
                }
            }
        }
    )

    assert len(graph) == 2
    assert graph.trigger_block().id == "t"
    assert graph.get("s").kind == "google-sheets"
    assert graph.get("missing") is None


def test_block_graph_from_plain_list():
    graph = BlockGraph.from_dict([{"id": "x", "kind": "google-sheets"}])
    assert [block.id for block in graph] == ["x"]
    assert graph.trigger_block() is None
