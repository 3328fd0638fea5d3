import pytest

from breaker_sizing.config import EngineSettings, load_settings
from breaker_sizing.errors import ConfigError


def test_defaults():
    settings = load_settings(None)
    assert settings == EngineSettings()
    assert settings.derating_warning_threshold == 0.70
    assert settings.default_interrupting_rating_ka == 10.0


def test_yaml_overrides(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("derating_warning_threshold: 0.75\nlong_circuit_m: 250\n")
    settings = load_settings(path)
    assert settings.derating_warning_threshold == 0.75
    assert settings.long_circuit_m == 250.0
    assert settings.low_power_factor == 0.7


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("")
    assert load_settings(path) == EngineSettings()


@pytest.mark.parametrize("content", [
    "unknown_threshold: 1\n",
    "low_power_factor: low\n",
    "low_power_factor: true\n",
    "calculation_version: 2\n",
    "derating_warning_threshold: 1.5\n",
    "- just\n- a list\n",
    "key: [unclosed\n",
])
def test_bad_settings_raise_config_error(tmp_path, content):
    path = tmp_path / "settings.yaml"
    path.write_text(content)
    with pytest.raises(ConfigError):
        load_settings(path)


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        load_settings(tmp_path / "nope.yaml")
