import pytest

from autocrop.exceptions import ConfigurationError
from autocrop.processing.settings import AccumulationSettings


def test_defaults():
    s = AccumulationSettings()
    assert s.crop_fraction == 0.1
    assert s.aggregation_window_s == 10.0
    assert s.enabled


@pytest.mark.parametrize("value, expected", [(-0.5, 0.0), (0.24, 0.24), (1.7, 1.0)])
def test_crop_fraction_is_clamped(value, expected):
    assert AccumulationSettings(crop_fraction=value).crop_fraction == expected


@pytest.mark.parametrize("value, expected", [(-3, 0.0), (60, 60.0), (500, 120.0)])
def test_aggregation_window_is_clamped(value, expected):
    s = AccumulationSettings()
    s.aggregation_window_s = value
    assert s.aggregation_window_s == expected


def test_zero_fraction_disables():
    assert not AccumulationSettings(crop_fraction=0).enabled


def test_from_config(config):
    config.set("autocrop.crop_fraction", 0.24)
    config.set("autocrop.aggregation_window_s", 300)
    s = AccumulationSettings.from_config(config)
    assert s.crop_fraction == 0.24
    assert s.aggregation_window_s == 120.0
    assert s.to_dict() == {"crop_fraction": 0.24, "aggregation_window_s": 120.0}


def test_from_config_disabled_flag(config):
    config.set("autocrop.enabled", False)
    assert AccumulationSettings.from_config(config).crop_fraction == 0.0


def test_non_numeric_value_raises(config):
    config.set("autocrop.crop_fraction", "a lot")
    with pytest.raises(ConfigurationError):
        AccumulationSettings.from_config(config)
