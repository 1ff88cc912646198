"""Required query and header parameter checks.

The validator never touches a request object directly. It asks a
ParameterSource for a named value, so callers can back a source with
whatever structure holds their request data.
"""

from collections.abc import Mapping
from typing import Protocol

from oas_validator.spec.models import Operation


class ParameterSource(Protocol):
    def get(self, name: str) -> str | None:
        """Return the value of a named parameter as text, or None if absent."""
        ...


class QueryParams:
    """Query parameters, case-sensitive. Multi-valued entries yield their first value."""

    def __init__(self, values: Mapping[str, str | list[str]] | None = None):
        self._values = dict(values or {})

    def get(self, name: str) -> str | None:
        value = self._values.get(name)
        if isinstance(value, (list, tuple)):
            return value[0] if value else None
        return value


class Headers:
    """Request headers, looked up case-insensitively."""

    def __init__(self, values: Mapping[str, str | list[str]] | None = None):
        self._values = {}
        for name, value in (values or {}).items():
            if isinstance(value, (list, tuple)):
                value = ", ".join(value) if value else None
            self._values[name.lower()] = value

    def get(self, name: str) -> str | None:
        return self._values.get(name.lower())


def validate_parameters(
    operation: Operation, query_source: ParameterSource, header_source: ParameterSource
) -> list[str]:
    """Return every missing required parameter, tagged by location.

    Tags are "qparam:<name>" and "header:<name>", in declaration order.
    An empty list means all required parameters are present.
    """
    missing = []
    for p in operation.parameters:
        if not p.required:
            continue
        if p.location == "query" and query_source.get(p.name) is None:
            missing.append(f"qparam:{p.name}")
        elif p.location == "header" and header_source.get(p.name) is None:
            missing.append(f"header:{p.name}")
    return missing
