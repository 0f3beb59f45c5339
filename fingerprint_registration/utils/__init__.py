"""
Utility modules for fingerprint registration.
"""

from .config import (
    Config,
    RegistrationConfig,
    OverlapConfig,
    LoggingConfig,
    OutputConfig,
    load_config,
    load_yaml,
    merge_configs,
    config_from_dict,
    validate_config,
    DEFAULT_CONFIG
)
from .logger import (
    RegistrationLogger,
    ProgressTracker,
    get_logger,
    PACKAGE_LOGGER_NAME
)
from .io import (
    ManifestEntry,
    POINT_COLUMNS,
    read_bytes,
    write_bytes,
    load_image,
    save_image,
    load_manifest,
    save_manifest,
    load_json,
    save_json,
    save_text_lines
)

__all__ = [
    # Config
    'Config',
    'RegistrationConfig',
    'OverlapConfig',
    'LoggingConfig',
    'OutputConfig',
    'load_config',
    'load_yaml',
    'merge_configs',
    'config_from_dict',
    'validate_config',
    'DEFAULT_CONFIG',
    # Logger
    'RegistrationLogger',
    'ProgressTracker',
    'get_logger',
    'PACKAGE_LOGGER_NAME',
    # IO
    'ManifestEntry',
    'POINT_COLUMNS',
    'read_bytes',
    'write_bytes',
    'load_image',
    'save_image',
    'load_manifest',
    'save_manifest',
    'load_json',
    'save_json',
    'save_text_lines',
]
