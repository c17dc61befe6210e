import json

import pytest

from paintmate.config import CONFIG_ENV, AppConfig, load_config
from paintmate.errors import ConfigError


def _write(tmp_path, data, name="paintmate.json"):
    path = tmp_path / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_defaults_without_a_file(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV, raising=False)
    cfg = load_config()
    assert cfg == AppConfig()
    assert (cfg.default_width, cfg.default_height) == (800, 600)
    assert cfg.history_capacity == 50
    assert cfg.log_level == "INFO"


def test_file_overrides_defaults(tmp_path):
    cfg = load_config(_write(tmp_path, {"history_capacity": 10, "log_level": "DEBUG"}))
    assert cfg.history_capacity == 10
    assert cfg.log_level == "DEBUG"
    assert cfg.default_width == 800


def test_env_var_points_at_the_file(tmp_path, monkeypatch):
    monkeypatch.setenv(CONFIG_ENV, _write(tmp_path, {"default_width": 64}))
    assert load_config().default_width == 64


def test_ints_are_accepted_for_floats(tmp_path):
    cfg = load_config(_write(tmp_path, {"max_zoom": 4, "brush_size": 3}))
    assert cfg.max_zoom == 4.0 and isinstance(cfg.max_zoom, float)
    assert cfg.brush_size == 3.0


def test_unknown_keys_are_ignored(tmp_path, caplog):
    cfg = load_config(_write(tmp_path, {"theme": "dark"}))
    assert cfg == AppConfig()
    assert "theme" in caplog.text


def test_missing_file_falls_back_to_defaults(tmp_path):
    assert load_config(str(tmp_path / "absent.json")) == AppConfig()


@pytest.mark.parametrize("data", [
    {"history_capacity": "many"},
    {"history_capacity": True},
    {"history_capacity": 0},
    {"min_zoom": 5.0, "max_zoom": 2.0},
    {"min_zoom": 0},
    {"zoom_step": 0},
    {"zoom_step": 1.0},
    {"brush_size": 0},
    {"brush_size": -2.5},
    {"default_width": 0},
    ["not", "an", "object"],
])
def test_invalid_values_raise(tmp_path, data):
    with pytest.raises(ConfigError):
        load_config(_write(tmp_path, data))


def test_malformed_json_raises(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{history_capacity: 3", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(str(path))
