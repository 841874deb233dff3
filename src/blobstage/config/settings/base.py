"""Config settings – Settings base class."""
from __future__ import annotations

import dataclasses
from typing import Any, ClassVar

from blobstage.config.validation import InvalidSettingValueError

REDACTED = "[REDACTED]"


@dataclasses.dataclass
class Settings:
    """Base class for 12-factor settings.

    Subclasses set ``_prefix`` (the environment namespace, e.g.
    ``BLOBSTAGE_S3``) and list credential fields in ``_secret_fields``.
    Validation failures name the field by its environment key; neither they
    nor :meth:`as_log_dict` echo a secret value.
    """

    _prefix: ClassVar[str] = ""
    _secret_fields: ClassVar[frozenset[str]] = frozenset()

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        """Override to add cross-field validation; report failures with :meth:`_reject`."""

    @classmethod
    def env_key(cls, field_name: str) -> str:
        """``{PREFIX}_{FIELD}`` upper-cased; just the field when there is no prefix."""
        return f"{cls._prefix}_{field_name}".upper().lstrip("_")

    def _reject(self, field_name: str, reason: str) -> InvalidSettingValueError:
        secret = field_name in self._secret_fields
        value = REDACTED if secret else getattr(self, field_name)
        return InvalidSettingValueError(self.env_key(field_name), value, reason, secret=secret)

    def as_log_dict(self) -> dict[str, Any]:
        """Field values keyed by name, secrets masked when set."""
        values: dict[str, Any] = {}
        for field in dataclasses.fields(self):
            value = getattr(self, field.name)
            if field.name in self._secret_fields and value:
                value = REDACTED
            values[field.name] = value
        return values


__all__ = ["REDACTED", "Settings"]
