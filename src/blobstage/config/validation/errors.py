"""Config validation errors.

Both setting errors carry the environment key (``BLOBSTAGE_MAX_CONCURRENCY``)
rather than the dataclass field, so the message points at what an operator
has to change.
"""
from __future__ import annotations

from typing import Any

from blobstage.kernel.errors import ApplicationError


class ConfigError(ApplicationError):
    """Raised when configuration is invalid or loading failed."""
    default_code = "config_error"


class MissingRequiredSettingError(ConfigError):
    default_code = "missing_required_setting"

    def __init__(self, setting_name: str) -> None:
        super().__init__(
            f"Required setting '{setting_name}' is missing",
            detail={"setting": setting_name},
        )
        self.setting_name = setting_name


class InvalidSettingValueError(ConfigError):
    """A setting is present but unusable.

    With ``secret=True`` the value is left out of the message and the
    detail payload; pass an already-masked *value* in that case.
    """
    default_code = "invalid_setting_value"

    def __init__(self, setting_name: str, value: object, reason: str, *, secret: bool = False) -> None:
        shown = "" if secret else f" {value!r}"
        detail: dict[str, Any] = {"setting": setting_name, "reason": reason}
        if not secret:
            detail["value"] = value
        super().__init__(f"Setting '{setting_name}' has invalid value{shown}: {reason}", detail=detail)
        self.setting_name = setting_name
        self.value = value
        self.reason = reason
        self.secret = secret


__all__ = ["ConfigError", "InvalidSettingValueError", "MissingRequiredSettingError"]
