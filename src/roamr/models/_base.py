"""Base model for roamr domain and wire models.

Every model inherits from :class:`RoamrBaseModel` which provides:

* ``frozen=True`` so instances can be shared across observers.
* ``alias_generator=to_camel`` so camelCase wire keys (``vehicleId``)
  map automatically to snake_case fields.
* ``populate_by_name=True`` so models can be built from either form.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel


def parse_wire_timestamp(value: Any) -> Any:
    """Coerce ISO-8601 strings with a ``Z`` suffix and make datetimes UTC-aware.

    Anything else is passed through for pydantic to validate (and reject).
    """
    if isinstance(value, str) and value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return value
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def format_wire_timestamp(value: datetime) -> str:
    """Render *value* as ISO-8601 UTC with a ``Z`` suffix (second precision)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


WireTimestamp = Annotated[datetime, BeforeValidator(parse_wire_timestamp)]
"""Annotated type accepting ISO-8601 strings and returning UTC-aware datetimes."""


class RoamrBaseModel(BaseModel):
    """Base for roamr models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_wire(self) -> dict[str, Any]:
        """Dump using wire (camelCase) keys and JSON-compatible values."""
        return self.model_dump(mode="json", by_alias=True)
