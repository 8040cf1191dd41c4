import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from src.tugs import CONFIG_KEYS, apply_overrides, config_from_dict, config_to_dict, get_config


def test_apply_overrides_rejects_unknown_key():
    base = config_to_dict(get_config("default"))
    with pytest.raises(ValueError):
        apply_overrides(base, {"unknown_key": 1})


def test_apply_overrides_type_check():
    base = config_to_dict(get_config("default"))
    with pytest.raises(ValueError):
        apply_overrides(base, {"strict_lengths": "yes"})
    with pytest.raises(ValueError):
        apply_overrides(base, {"static_assets": "./app.js"})


def test_apply_overrides_rejects_blank_cache_version():
    base = config_to_dict(get_config("default"))
    with pytest.raises(ValueError):
        apply_overrides(base, {"cache_version": "  "})


def test_apply_overrides_bumps_cache_generation():
    base = config_to_dict(get_config("default"))
    merged = apply_overrides(base, {"cache_version": "v7"})
    assert base["cache_version"] == "v6"
    assert config_from_dict(merged).cache_name == "mmp-mintug-static-v7"


def test_profiles():
    assert get_config("default").strict_lengths is False
    assert get_config(" Strict ").strict_lengths is True
    with pytest.raises(ValueError):
        get_config("nope")


def test_config_round_trips_through_dict():
    config = get_config("default")
    data = config_to_dict(config)
    assert tuple(data) == CONFIG_KEYS
    assert config_from_dict(data) == config
    assert "./" in config.static_assets
