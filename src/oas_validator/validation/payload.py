"""Request body well-formedness check.

Bodies are parsed as JSON only to prove they are well-formed. The parsed
tree is not yet compared with Operation.body_schema.
"""

import json
from typing import BinaryIO

from oas_validator.errors import PayloadFormatError
from oas_validator.spec.models import Operation


def validate_payload(body: BinaryIO | bytes | str | None, operation: Operation):
    """Parse the body as JSON and return the parsed document.

    Streams are read exactly once. Raises PayloadFormatError when the
    body is missing or not well-formed JSON.
    """
    if body is None:
        raise PayloadFormatError(f"{operation.method} request has no body")
    raw = body if isinstance(body, (bytes, str)) else body.read()
    try:
        return json.loads(raw, parse_constant=_reject_constant)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise PayloadFormatError(f"body is not well-formed JSON: {e}") from e


def _reject_constant(name: str):
    raise PayloadFormatError(f"body is not well-formed JSON: {name} is not a JSON value")
