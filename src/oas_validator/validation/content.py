"""Accept and Content-Type negotiation against an operation."""

from collections.abc import Sequence

from oas_validator.spec.models import Operation

WILDCARD = "*/*"


def split_accept(accept: str | Sequence[str] | None) -> list[str]:
    """Split an Accept value into trimmed, non-empty media-type tokens."""
    if accept is None:
        return []
    if isinstance(accept, str):
        accept = accept.split(",")
    return [t for t in (token.strip() for token in accept) if _media_type(t)]


def validate_accept(accept: str | Sequence[str] | None, operation: Operation) -> bool:
    """True when any accepted type is */* or declared as produced.

    An absent or blank Accept value is always valid.
    """
    tokens = split_accept(accept)
    if not tokens:
        return True
    return any(
        _media_type(t) == WILDCARD or _is_declared(t, operation.produces) for t in tokens
    )


def validate_content_type(content_type: str | None, operation: Operation) -> bool:
    """True when the content type is declared as consumed.

    A blank content type is never valid: a request carrying a body must
    say what it is sending.
    """
    content_type = (content_type or "").strip()
    if not _media_type(content_type):
        return False
    return _is_declared(content_type, operation.consumes)


def _is_declared(token: str, declared: Sequence[str]) -> bool:
    # an exact match wins; otherwise compare with parameters dropped on both sides
    if token in (d.strip() for d in declared):
        return True
    media_type = _media_type(token)
    return any(_media_type(d) == media_type for d in declared)


def _media_type(token: str) -> str:
    # "application/json; charset=utf-8" -> "application/json"
    return token.split(";", 1)[0].strip()
