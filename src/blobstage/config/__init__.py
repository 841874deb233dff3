"""Config – 12-factor settings and loaders."""

from blobstage.config.settings import (
    DotenvSettingsLoader,
    EnvSettingsLoader,
    S3Settings,
    Settings,
    SettingsLoader,
    StagingSettings,
)
from blobstage.config.validation import (
    ConfigError,
    InvalidSettingValueError,
    MissingRequiredSettingError,
)

__all__ = [
    "ConfigError",
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "S3Settings",
    "Settings",
    "SettingsLoader",
    "StagingSettings",
]
