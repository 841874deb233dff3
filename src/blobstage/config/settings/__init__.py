"""Config settings – 12-factor env-based configuration."""
from blobstage.config.settings.base import Settings
from blobstage.config.settings.loaders import DotenvSettingsLoader, EnvSettingsLoader, SettingsLoader
from blobstage.config.settings.staging import S3Settings, StagingSettings

__all__ = [
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "S3Settings",
    "Settings",
    "SettingsLoader",
    "StagingSettings",
]
