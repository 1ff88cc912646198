"""Validation session: runs the conformance checks for one request.

Checks run in a fixed order and stop at the first failure:

    base path (optional) -> path -> verb -> parameters -> accept
        -> content-type + payload (skipped for GET, DELETE, OPTIONS)

Each check takes an immutable SessionState and returns either the next
state or a ValidationError. Checks that need a resolved operation raise
UsageContractViolation when given a state without one.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import BinaryIO

from oas_validator.cache import SpecCache, default_cache
from oas_validator.errors import PayloadFormatError, UsageContractViolation
from oas_validator.spec.models import Operation, PathItem, SpecDocument
from oas_validator.validation.content import split_accept, validate_accept, validate_content_type
from oas_validator.validation.params import Headers, ParameterSource, QueryParams, validate_parameters
from oas_validator.validation.paths import resolve_operation, resolve_path
from oas_validator.validation.payload import validate_payload

logger = logging.getLogger(__name__)

INVALID_BASEPATH = "invalid basepath"
INVALID_PATH = "invalid path"
INVALID_METHOD = "invalid method"
INVALID_PARAMETERS = "invalid parameters"
INVALID_ACCEPT = "invalid accept header"
INVALID_CONTENT_TYPE = "invalid content-type header"
INVALID_PAYLOAD = "invalid payload"

# Verbs treated as carrying no meaningful request body
SAFE_METHODS = frozenset({"GET", "DELETE", "OPTIONS"})


class Stage(IntEnum):
    START = 0
    BASE_PATH_CHECKED = 1
    PATH_RESOLVED = 2
    VERB_RESOLVED = 3
    PARAMETERS_CHECKED = 4
    ACCEPT_CHECKED = 5
    CONTENT_CHECKED = 6
    VALID = 7


@dataclass(frozen=True)
class ValidationError:
    code: str
    detail: str


@dataclass(frozen=True)
class SessionState:
    doc: SpecDocument
    stage: Stage = Stage.START
    path: PathItem | None = None
    operation: Operation | None = None

    def advance(self, stage: Stage, **changes) -> "SessionState":
        return replace(self, stage=stage, **changes)


@dataclass(frozen=True)
class RequestDescriptor:
    """Everything the session needs to know about one inbound request."""

    path: str
    verb: str
    base_path: str | None = None
    query: ParameterSource = field(default_factory=QueryParams)
    headers: ParameterSource = field(default_factory=Headers)
    accept: str | Sequence[str] | None = None
    content_type: str | None = None
    body: BinaryIO | bytes | str | None = None


@dataclass(frozen=True)
class ValidationResult:
    state: SessionState
    error: ValidationError | None = None
    cause: Exception | None = None

    @property
    def valid(self) -> bool:
        return self.error is None

    @property
    def code(self) -> str | None:
        return self.error.code if self.error else None

    @property
    def detail(self) -> str | None:
        return self.error.detail if self.error else None


Outcome = SessionState | ValidationError


def check_base_path(state: SessionState, base_path: str | None) -> Outcome:
    expected = state.doc.base_path
    if expected != base_path:
        return ValidationError(
            INVALID_BASEPATH,
            f"basepath of ({base_path}) does not match expected ({expected})",
        )
    return state.advance(Stage.BASE_PATH_CHECKED)


def check_path(state: SessionState, url_path: str) -> Outcome:
    path = resolve_path(state.doc, strip_base_path(state.doc.base_path, url_path))
    if path is None:
        return ValidationError(INVALID_PATH, f"no path found for ({url_path})")
    return state.advance(Stage.PATH_RESOLVED, path=path)


def check_verb(state: SessionState, verb: str) -> Outcome:
    if state.path is None:
        raise UsageContractViolation("resolve the path before checking the verb")
    operation = resolve_operation(state.path, verb)
    if operation is None:
        return ValidationError(INVALID_METHOD, f"no operation found for the verb of ({verb})")
    return state.advance(Stage.VERB_RESOLVED, operation=operation)


def check_parameters(state: SessionState, query: ParameterSource, headers: ParameterSource) -> Outcome:
    operation = _require_operation(state, "parameters")
    missing = validate_parameters(operation, query, headers)
    if missing:
        return ValidationError(INVALID_PARAMETERS, f"missing parameters [{', '.join(missing)}]")
    return state.advance(Stage.PARAMETERS_CHECKED)


def check_accept(state: SessionState, accept: str | Sequence[str] | None) -> Outcome:
    operation = _require_operation(state, "accept")
    if not validate_accept(accept, operation):
        return ValidationError(
            INVALID_ACCEPT,
            f"the accept values of [{', '.join(split_accept(accept))}] were not valid",
        )
    return state.advance(Stage.ACCEPT_CHECKED)


def check_content_type(state: SessionState, content_type: str | None) -> Outcome:
    operation = _require_operation(state, "content-type")
    if not validate_content_type(content_type, operation):
        if not (content_type or "").strip():
            return ValidationError(INVALID_CONTENT_TYPE, "content-type header is missing")
        return ValidationError(INVALID_CONTENT_TYPE, f"content-type of ({content_type}) is not supported")
    return state.advance(Stage.CONTENT_CHECKED)


def strip_base_path(base_path: str, url_path: str) -> str:
    """Remove the document base path from url_path when it is a prefix of it."""
    base_path = base_path.rstrip("/")
    if base_path and (url_path == base_path or url_path.startswith(base_path + "/")):
        return url_path[len(base_path):] or "/"
    return url_path


def _require_operation(state: SessionState, check: str) -> Operation:
    if state.operation is None:
        raise UsageContractViolation(f"resolve the verb before checking {check}")
    return state.operation


class ValidationSession:
    """Validates requests against one spec.

    The spec is resolved through the cache when the session is created,
    so a load failure surfaces as SpecResolutionError immediately.
    """

    def __init__(self, spec_id: str, cache: SpecCache | None = None, validate_base_path: bool = False):
        self.spec_id = spec_id
        self.cache = cache if cache is not None else default_cache()
        self.validate_base_path = validate_base_path
        self.doc = self.cache.get(spec_id)

    def validate(self, request: RequestDescriptor) -> ValidationResult:
        state = SessionState(doc=self.doc)

        steps = []
        if self.validate_base_path:
            steps.append(lambda s: check_base_path(s, request.base_path))
        steps += [
            lambda s: check_path(s, request.path),
            lambda s: check_verb(s, request.verb),
            lambda s: check_parameters(s, request.query, request.headers),
            lambda s: check_accept(s, request.accept),
        ]

        for step in steps:
            outcome = step(state)
            if isinstance(outcome, ValidationError):
                return self._fail(state, outcome)
            state = outcome

        if state.operation.method in SAFE_METHODS:
            return ValidationResult(state=state.advance(Stage.VALID))

        outcome = check_content_type(state, request.content_type)
        if isinstance(outcome, ValidationError):
            return self._fail(state, outcome)
        state = outcome

        try:
            validate_payload(request.body, state.operation)
        except PayloadFormatError as e:
            return self._fail(state, ValidationError(INVALID_PAYLOAD, str(e)), cause=e)

        return ValidationResult(state=state.advance(Stage.VALID))

    def _fail(self, state: SessionState, error: ValidationError, cause: Exception | None = None) -> ValidationResult:
        logger.debug("Request failed at %s: %s (%s)", state.stage.name, error.code, error.detail)
        return ValidationResult(state=state, error=error, cause=cause)


def validate_request(
    spec_id: str,
    request: RequestDescriptor,
    cache: SpecCache | None = None,
    validate_base_path: bool = False,
) -> ValidationResult:
    """Validate a single request; convenience wrapper around ValidationSession."""
    session = ValidationSession(spec_id, cache=cache, validate_base_path=validate_base_path)
    return session.validate(request)
