"""Path and operation resolution against a SpecDocument."""

from oas_validator.spec.models import (
    SUPPORTED_METHODS,
    Operation,
    PathItem,
    SpecDocument,
    is_placeholder,
    split_segments,
)


def resolve_path(doc: SpecDocument, url_path: str) -> PathItem | None:
    """Find the declared path template matching url_path.

    Placeholder segments match any non-empty segment. When several
    templates match, the one with the fewest placeholders wins, so
    /items/latest is preferred over /items/{id}.
    """
    url_path = url_path.split("?", 1)[0].split("#", 1)[0]
    exact = doc.paths.get(url_path)
    if exact is not None:
        return exact

    segments = split_segments(url_path)
    best: PathItem | None = None
    best_score = -1
    for item in doc.paths.values():
        pattern = item.segments
        if len(pattern) != len(segments):
            continue
        score = _match(pattern, segments)
        if score is not None and (best is None or score < best_score):
            best, best_score = item, score
    return best


def resolve_operation(path: PathItem, verb: str) -> Operation | None:
    verb = verb.strip().upper()
    if verb not in SUPPORTED_METHODS:
        return None
    return path.operations.get(verb)


def _match(pattern: list[str], segments: list[str]) -> int | None:
    """Number of placeholders used, or None when the segments do not match."""
    placeholders = 0
    for expected, actual in zip(pattern, segments):
        if is_placeholder(expected):
            if not actual:
                return None
            placeholders += 1
        elif expected != actual:
            return None
    return placeholders
