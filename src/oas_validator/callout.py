"""Gateway host adapter.

Reads request data from a message context, runs a validation session,
and publishes the outcome as oas_* context variables. Whether a failing
request aborts processing is decided by the suppress-fault property.
"""

import logging
import re
import traceback
from collections.abc import Mapping
from enum import Enum
from typing import Any, Protocol

from oas_validator.cache import SpecCache, default_cache
from oas_validator.validation.session import RequestDescriptor, ValidationSession

logger = logging.getLogger(__name__)

VAR_PREFIX = "oas_"

# {apiproxy.name} names a context variable; inline JSON never matches
VARIABLE_REF = re.compile(r"^\{([\w.\-]+)\}$")


class ExecutionResult(str, Enum):
    SUCCESS = "success"
    ABORT = "abort"


class MessageContext(Protocol):
    content: bytes | None

    def get_variable(self, name: str) -> Any: ...

    def set_variable(self, name: str, value: Any) -> None: ...

    def remove_variable(self, name: str) -> None: ...


class DictMessageContext:
    """A MessageContext backed by a plain dict of flow variables."""

    def __init__(self, variables: dict[str, Any] | None = None, content: bytes | None = None):
        self.variables = dict(variables or {})
        self.content = content

    def get_variable(self, name: str) -> Any:
        return self.variables.get(name)

    def set_variable(self, name: str, value: Any) -> None:
        self.variables[name] = value

    def remove_variable(self, name: str) -> None:
        self.variables.pop(name, None)


class _ContextSource:
    """ParameterSource over prefixed context variables, e.g. request.header.<name>."""

    def __init__(self, ctx: MessageContext, prefix: str, lower: bool = False):
        self.ctx = ctx
        self.prefix = prefix
        self.lower = lower

    def get(self, name: str) -> str | None:
        if self.lower:
            name = name.lower()
        value = self.ctx.get_variable(self.prefix + name)
        return None if value is None else str(value)


def var_name(name: str) -> str:
    return VAR_PREFIX + name


class ValidatorCallout:
    """Validates the current request against the spec named in properties."""

    def __init__(self, properties: Mapping[str, str], cache: SpecCache | None = None):
        self.properties = properties
        self.cache = cache

    def execute(self, ctx: MessageContext) -> ExecutionResult:
        try:
            ctx.remove_variable(var_name("error"))
            ctx.remove_variable(var_name("valid"))

            spec_id = self._get_spec(ctx)
            session = ValidationSession(
                spec_id,
                cache=self.cache if self.cache is not None else default_cache(),
                validate_base_path=self._get_flag("validate-basepath", ctx),
            )
            result = session.validate(self._build_request(ctx))

            ctx.set_variable(var_name("valid"), result.valid)
            if result.valid:
                return ExecutionResult.SUCCESS

            logger.warning("Request rejected: %s (%s)", result.code, result.detail)
            ctx.set_variable(var_name("error"), result.code)
            ctx.set_variable(var_name("error_detail"), result.detail)
            if self._get_flag("suppress-fault", ctx):
                return ExecutionResult.SUCCESS
            return ExecutionResult.ABORT

        except Exception as e:
            if self._get_debug():
                logger.exception("Validation callout failed")
            error = str(e) or type(e).__name__
            ctx.set_variable(var_name("exception"), f"{type(e).__name__}: {e}")
            ctx.set_variable(var_name("error"), error)
            ctx.set_variable(var_name("stacktrace"), traceback.format_exc())
            ctx.set_variable(var_name("success"), False)
            if self._get_flag("suppress-fault", ctx):
                return ExecutionResult.SUCCESS
            return ExecutionResult.ABORT

    def _get_spec(self, ctx: MessageContext) -> str:
        spec = self.properties.get("spec")
        if spec is None:
            raise ValueError("spec is not specified")
        spec = spec.strip()
        if not spec:
            raise ValueError("spec is empty")
        spec = self._resolve_property_value(spec, ctx)
        if not spec:
            raise ValueError("spec resolves to an empty string")
        spec = spec.strip()
        if self._get_debug():
            ctx.set_variable(var_name("specName"), spec[:200])
        return spec

    def _get_flag(self, name: str, ctx: MessageContext) -> bool:
        value = (self.properties.get(name) or "").strip()
        if not value:
            return False
        value = self._resolve_property_value(value, ctx)
        return (value or "").strip().lower() == "true"

    def _get_debug(self) -> bool:
        return (self.properties.get("debug") or "").strip().lower() == "true"

    def _resolve_property_value(self, value: str, ctx: MessageContext) -> str | None:
        """Dereference "{varname}" against the context; other values pass through."""
        match = VARIABLE_REF.match(value)
        if match:
            resolved = ctx.get_variable(match.group(1))
            return None if resolved is None else str(resolved)
        return value

    def _build_request(self, ctx: MessageContext) -> RequestDescriptor:
        verb = ctx.get_variable("request.verb") or ""
        return RequestDescriptor(
            path=ctx.get_variable("request.path") or "/",
            verb=str(verb),
            base_path=ctx.get_variable("proxy.basepath"),
            query=_ContextSource(ctx, "request.queryparam."),
            headers=_ContextSource(ctx, "request.header.", lower=True),
            accept=ctx.get_variable("request.header.accept"),
            content_type=ctx.get_variable("request.header.content-type"),
            body=ctx.content,
        )
