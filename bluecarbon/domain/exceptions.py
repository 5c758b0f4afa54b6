"""Root of the Blue Carbon error hierarchy."""

from enum import Enum
from typing import Any


class BlueCarbonError(Exception):
    """Base class for registry errors.

    The lifecycle controller turns every BlueCarbonError into a
    non-applied command result. Subclasses store the identifiers they
    were raised for as public attributes; context() exposes them as flat
    log fields.
    """

    def context(self) -> dict[str, Any]:
        """Public attributes as log-friendly values (enums by value)."""
        fields: dict[str, Any] = {}
        for name, value in vars(self).items():
            if name.startswith("_"):
                continue
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, list):
                value = [v.value if isinstance(v, Enum) else v for v in value]
            fields[name] = value
        return fields
