import pytest

from rsfmtpy.format import FormatConfig
from rsfmtpy.format.config import parse_limit, parse_switch


def test_defaults() -> None:
    config = FormatConfig()

    assert config.max_width == 120
    assert config.root_splits is False
    assert config.split_brace_threshold == 1
    assert config.split_attributes is True
    assert config.split_where is True
    assert config.comment_width == 80
    assert config.comment_errors_fatal is False


def test_from_mapping_reads_toml_values() -> None:
    config = FormatConfig.from_mapping(
        {
            "max_width": 100,
            "root_splits": True,
            "split_brace_threshold": "off",
            "split_where": "off",
            "comment_width": False,
        }
    )

    assert config.max_width == 100
    assert config.root_splits is True
    assert config.split_brace_threshold is None
    assert config.split_where is False
    assert config.comment_width is None
    assert config.split_attributes is True


def test_from_mapping_rejects_unknown_keys() -> None:
    with pytest.raises(ValueError, match="Unknown format option"):
        FormatConfig.from_mapping({"max_widht": 80})


@pytest.mark.parametrize(
    "values",
    [
        {"max_width": "wide"},
        {"max_width": True},
        {"split_brace_threshold": "many"},
        {"split_attributes": "maybe"},
        {"max_width": 0},
        {"split_brace_threshold": -1},
    ],
)
def test_from_mapping_rejects_bad_values(values: dict) -> None:
    with pytest.raises(ValueError):
        FormatConfig.from_mapping(values)


def test_with_overrides_keeps_other_fields() -> None:
    config = FormatConfig(max_width=80).with_overrides(split_where=False)

    assert config.max_width == 80
    assert config.split_where is False


def test_parse_switch() -> None:
    assert parse_switch("x", "on") is True
    assert parse_switch("x", "off") is False
    assert parse_switch("x", True) is True
    with pytest.raises(ValueError, match="on/off"):
        parse_switch("x", "sometimes")


def test_parse_limit() -> None:
    assert parse_limit("x", "off") is None
    assert parse_limit("x", "3") == 3
    with pytest.raises(ValueError, match="integer or 'off'"):
        parse_limit("x", "three")
