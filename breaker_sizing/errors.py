"""
Exception Types
Failures that indicate a caller defect rather than an engineering outcome.

Engineering infeasibility (oversized requirement, excessive voltage drop,
fault current above every interrupting rating) is never raised; it is
reported as a Warning inside the CalculationResult.
"""


class BreakerSizingError(Exception):
    """Base class for all package errors."""


class ContractViolation(BreakerSizingError):
    """The API was used in a way its contract does not allow."""


class ValidationFailed(ContractViolation):
    """Calculation requested on input that has field errors."""

    def __init__(self, errors):
        self.errors = tuple(errors)
        summary = "; ".join(f"{e.field}: {e.message}" for e in self.errors)
        super().__init__(f"Validation failed: {summary}")


class InvalidUnit(ContractViolation, ValueError):
    """Unit conversion requested for an unsupported unit."""


class StandardsLookupError(ContractViolation, KeyError):
    """Requested (category, key) does not exist in the standards table."""

    def __str__(self):
        return str(self.args[0]) if self.args else "standards lookup failed"


class ConfigError(BreakerSizingError):
    """Settings file is missing, malformed or has unknown keys."""


def unhandled(value):
    """Close an if/elif chain over enum members."""
    raise ContractViolation(f"Unhandled value: {value!r}")
