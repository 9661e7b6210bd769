import pytest

from homecare.utils.notes_config import (
    build_config_line,
    build_rate_config,
    merge_notes_with_config,
    parse_notes_config,
)


def test_no_config_line():
    assert parse_notes_config("  Weekend only.\n") == (None, "Weekend only.")
    assert parse_notes_config(None) == (None, "")


def test_config_line_is_extracted():
    notes = 'Weekend only.\r\n\r\n[CONFIG] {"levelType":"RATIO","rate":18.5}\r\nSee contract.'
    config, free = parse_notes_config(notes)
    assert config == {"levelType": "RATIO", "rate": 18.5}
    assert free == "Weekend only.\n\nSee contract."


def test_only_first_config_line_is_read():
    notes = '[CONFIG] {"a":1}\n[CONFIG] {"b":2}'
    config, free = parse_notes_config(notes)
    assert config == {"a": 1}
    assert free == '[CONFIG] {"b":2}'


def test_broken_config_line_is_dropped():
    config, free = parse_notes_config("Keep me\n[CONFIG] {not json")
    assert config is None
    assert free == "Keep me"


def test_build_config_line_is_compact():
    assert build_config_line({"level": "1:1", "rate": 20.0}) == '[CONFIG] {"level":"1:1","rate":20.0}'


def test_merge_notes_with_config():
    cfg = {"levelType": "ZONE"}
    assert merge_notes_with_config("", cfg) == '[CONFIG] {"levelType":"ZONE"}'
    assert merge_notes_with_config(" Call first \r\n", cfg) == 'Call first\n\n[CONFIG] {"levelType":"ZONE"}'


def test_merge_then_parse_keeps_free_notes():
    cfg = {"levelType": "RATIO", "level": "1:2"}
    assert parse_notes_config(merge_notes_with_config("line one\nline two", cfg)) == (cfg, "line one\nline two")


def test_ratio_config():
    assert build_rate_config("ratio", service_type="HCSS", level="1:1", format="HOURLY", rate=22) == {
        "serviceType": "HCSS",
        "levelType": "RATIO",
        "level": "1:1",
        "format": "HOURLY",
        "rate": 22.0,
    }


def test_zone_config_is_mileage():
    cfg = build_rate_config("ZONE", service_type="TRANS", level="Zone 2", format="HOURLY", rate_per_mile=0.65)
    assert cfg["format"] == "MILEAGE"
    assert cfg["ratePerMile"] == 0.65
    assert "rate" not in cfg


@pytest.mark.parametrize("kwargs, message", [
    ({"level_type": "FLAT"}, "Invalid level type."),
    ({"level_type": "RATIO", "level": "1:1", "format": "HOURLY"}, "Missing/invalid fields: rate"),
    ({"level_type": "RATIO", "rate": 10}, "Missing/invalid fields: level, format"),
    ({"level_type": "ZONE", "level": "Zone 1", "rate_per_mile": -1}, "Missing/invalid fields: ratePerMile"),
])
def test_invalid_configs(kwargs, message):
    with pytest.raises(ValueError, match=message.replace(".", r"\.")):
        build_rate_config(**kwargs)
