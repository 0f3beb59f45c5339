"""
Configuration management for fingerprint registration.

This module provides utilities for loading, validating, and accessing
configuration parameters from YAML files. Configuration objects are
frozen once built and may be shared read-only between registrations.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union
import yaml

from ..imaging.cv_ops import INTERPOLATIONS, MORPH_SHAPES, PNG_STRATEGIES


@dataclass(frozen=True)
class RegistrationConfig:
    """Configuration for the transform stage."""
    background_value: int = 255
    interpolation: str = "linear"

    @property
    def interpolation_flag(self) -> int:
        """OpenCV interpolation flag for ``interpolation``."""
        return INTERPOLATIONS[self.interpolation]


@dataclass(frozen=True)
class OverlapConfig:
    """Configuration for the overlap (ROI) computation."""
    kernel_shape: str = "rect"
    kernel_size: int = 1
    png_strategy: str = "default"

    @property
    def png_strategy_flag(self) -> int:
        """OpenCV PNG strategy flag for ``png_strategy``."""
        return PNG_STRATEGIES[self.png_strategy]


@dataclass(frozen=True)
class LoggingConfig:
    """Configuration for logging."""
    level: str = "INFO"
    log_dir: str = "logs"
    save_results: bool = True


@dataclass(frozen=True)
class OutputConfig:
    """Configuration for files written by batch runs."""
    output_dir: str = "outputs"
    save_padded: bool = False
    save_overlay: bool = True
    save_blob: bool = False


@dataclass(frozen=True)
class Config:
    """
    Main configuration container for fingerprint registration.

    Attributes:
        registration: Transform settings (background fill, interpolation)
        overlap: Dilation kernel and PNG encoding settings
        logging: Logging configuration
        output: Output file settings for batch runs
    """
    registration: RegistrationConfig = field(default_factory=RegistrationConfig)
    overlap: OverlapConfig = field(default_factory=OverlapConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


def load_yaml(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        path: Path to the YAML file

    Returns:
        Dictionary containing the configuration

    Raises:
        FileNotFoundError: If the configuration file does not exist
        yaml.YAMLError: If the YAML file is malformed
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path, 'r') as f:
        return yaml.safe_load(f) or {}


def merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge two configuration dictionaries.

    The override dictionary values take precedence over base values.

    Args:
        base: Base configuration dictionary
        override: Override configuration dictionary

    Returns:
        Merged configuration dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def validate_config(config: Config) -> Config:
    """
    Check enumerated and numeric values.

    Args:
        config: Configuration to check

    Returns:
        The same configuration

    Raises:
        ValueError: If a value is out of range or unknown
    """
    if not 0 <= config.registration.background_value <= 255:
        raise ValueError(
            f"background_value must be in [0, 255], got {config.registration.background_value}"
        )
    if config.registration.interpolation not in INTERPOLATIONS:
        raise ValueError(
            f"Unknown interpolation '{config.registration.interpolation}'. "
            f"Available: {sorted(INTERPOLATIONS)}"
        )
    if config.overlap.kernel_shape not in MORPH_SHAPES:
        raise ValueError(
            f"Unknown kernel_shape '{config.overlap.kernel_shape}'. "
            f"Available: {sorted(MORPH_SHAPES)}"
        )
    if config.overlap.kernel_size < 0:
        raise ValueError(f"kernel_size must be >= 0, got {config.overlap.kernel_size}")
    if config.overlap.png_strategy not in PNG_STRATEGIES:
        raise ValueError(
            f"Unknown png_strategy '{config.overlap.png_strategy}'. "
            f"Available: {sorted(PNG_STRATEGIES)}"
        )
    return config


def config_from_dict(config_dict: Dict[str, Any]) -> Config:
    """
    Build a Config from a (possibly partial) dictionary.

    Missing keys fall back to the defaults.

    Args:
        config_dict: Nested dictionary as read from YAML

    Returns:
        Validated Config object
    """
    registration_dict = config_dict.get('registration', {}) or {}
    overlap_dict = config_dict.get('overlap', {}) or {}
    logging_dict = config_dict.get('logging', {}) or {}
    output_dict = config_dict.get('output', {}) or {}

    registration_config = RegistrationConfig(
        background_value=int(registration_dict.get('background_value', 255)),
        interpolation=str(registration_dict.get('interpolation', 'linear')).lower()
    )

    overlap_config = OverlapConfig(
        kernel_shape=str(overlap_dict.get('kernel_shape', 'rect')).lower(),
        kernel_size=int(overlap_dict.get('kernel_size', 1)),
        png_strategy=str(overlap_dict.get('png_strategy', 'default')).lower()
    )

    logging_config = LoggingConfig(
        level=logging_dict.get('level', 'INFO'),
        log_dir=logging_dict.get('log_dir', 'logs'),
        save_results=logging_dict.get('save_results', True)
    )

    output_config = OutputConfig(
        output_dir=output_dict.get('output_dir', 'outputs'),
        save_padded=output_dict.get('save_padded', False),
        save_overlay=output_dict.get('save_overlay', True),
        save_blob=output_dict.get('save_blob', False)
    )

    return validate_config(Config(
        registration=registration_config,
        overlap=overlap_config,
        logging=logging_config,
        output=output_config
    ))


def load_config(
    config_path: Union[str, Path],
    base_config_path: Optional[Union[str, Path]] = None
) -> Config:
    """
    Load configuration from YAML files.

    Optionally merges with a base configuration file.

    Args:
        config_path: Path to the main configuration file
        base_config_path: Optional path to base configuration to merge with

    Returns:
        Config object with loaded settings
    """
    config_dict = load_yaml(config_path)

    if base_config_path is not None:
        base_dict = load_yaml(base_config_path)
        config_dict = merge_configs(base_dict, config_dict)

    return config_from_dict(config_dict)


# Default configuration instance
DEFAULT_CONFIG = Config()
