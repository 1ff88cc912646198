"""Classify a spec identifier into the kind of source it names.

The rules form a closed, ordered list; the first match wins and the
order must not change.
"""

from enum import Enum


class SpecSourceKind(str, Enum):
    URL = "url"
    INLINE_JSON = "inline-json"
    INLINE_YAML = "inline-yaml"
    RESOURCE = "resource"


def _is_url(spec_id: str) -> bool:
    return spec_id.startswith(("http://", "https://"))


def _is_inline_json(spec_id: str) -> bool:
    return spec_id.startswith("{") and spec_id.endswith("}")


def _is_inline_yaml(spec_id: str) -> bool:
    return spec_id.startswith("---")


RULES = (
    (_is_url, SpecSourceKind.URL),
    (_is_inline_json, SpecSourceKind.INLINE_JSON),
    (_is_inline_yaml, SpecSourceKind.INLINE_YAML),
)


def detect_source(spec_id: str) -> SpecSourceKind:
    """Return the source kind for a spec identifier.

    Anything not matched by an earlier rule is taken to be the name of a
    bundled resource.
    """
    for matches, kind in RULES:
        if matches(spec_id):
            return kind
    return SpecSourceKind.RESOURCE
