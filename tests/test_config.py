"""Tests for YAML configuration loading."""
import pytest
import yaml

from fingerprint_registration.utils.config import (
    DEFAULT_CONFIG,
    config_from_dict,
    load_config,
    merge_configs,
)


def write_yaml(path, data):
    path.write_text(yaml.safe_dump(data))
    return path


def test_defaults_match_historical_values():
    assert DEFAULT_CONFIG.registration.background_value == 255
    assert DEFAULT_CONFIG.overlap.kernel_shape == "rect"
    assert DEFAULT_CONFIG.overlap.kernel_size == 1
    assert DEFAULT_CONFIG.overlap.png_strategy == "default"


def test_load_partial_config(tmp_path):
    path = write_yaml(tmp_path / "cfg.yaml", {'overlap': {'kernel_size': 3, 'kernel_shape': 'Ellipse'}})
    config = load_config(path)

    assert config.overlap.kernel_size == 3
    assert config.overlap.kernel_shape == "ellipse"
    assert config.registration.interpolation == "linear"


def test_load_with_base_config(tmp_path):
    base = write_yaml(tmp_path / "base.yaml", {
        'registration': {'background_value': 0, 'interpolation': 'cubic'},
        'logging': {'level': 'DEBUG'},
    })
    override = write_yaml(tmp_path / "override.yaml", {'registration': {'background_value': 128}})

    config = load_config(override, base_config_path=base)

    assert config.registration.background_value == 128
    assert config.registration.interpolation == "cubic"
    assert config.logging.level == "DEBUG"


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config(path) == DEFAULT_CONFIG


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


@pytest.mark.parametrize("data", [
    {'registration': {'background_value': 300}},
    {'registration': {'interpolation': 'lanczos9'}},
    {'overlap': {'kernel_shape': 'star'}},
    {'overlap': {'kernel_size': -2}},
    {'overlap': {'png_strategy': 'zip'}},
])
def test_invalid_values_rejected(data):
    with pytest.raises(ValueError):
        config_from_dict(data)


def test_merge_configs_is_recursive():
    merged = merge_configs({'a': {'b': 1, 'c': 2}, 'd': 3}, {'a': {'c': 5}})
    assert merged == {'a': {'b': 1, 'c': 5}, 'd': 3}


def test_config_is_read_only():
    with pytest.raises(Exception):
        DEFAULT_CONFIG.overlap.kernel_size = 5


def test_flags():
    import cv2
    config = config_from_dict({'registration': {'interpolation': 'nearest'}, 'overlap': {'png_strategy': 'rle'}})
    assert config.registration.interpolation_flag == cv2.INTER_NEAREST
    assert config.overlap.png_strategy_flag == cv2.IMWRITE_PNG_STRATEGY_RLE


def test_shipped_default_config_loads():
    from pathlib import Path
    path = Path(__file__).parent.parent / "configs" / "default.yaml"
    assert load_config(path) == DEFAULT_CONFIG
