"""Exception types raised by the validator.

Ordinary non-conformance of a request is never raised; it is reported
through a ValidationResult. These exceptions signal faults.
"""


class OasValidatorError(Exception):
    """Base class for every exception raised by oas_validator."""


class SpecResolutionError(OasValidatorError):
    """A spec identifier could not be turned into a contract document."""

    def __init__(self, spec_id: str, message: str):
        self.spec_id = spec_id
        super().__init__(message)


class UsageContractViolation(OasValidatorError, RuntimeError):
    """A check was invoked before the state it depends on was reached."""


class PayloadFormatError(OasValidatorError, ValueError):
    """The request body is not well-formed JSON."""
