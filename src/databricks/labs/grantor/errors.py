from databricks.sdk.errors import DatabricksError

__all__ = ["ValidationError", "MalformedIdentifier", "DriverError"]


class ValidationError(ValueError):
    """Desired state is inconsistent: mutually exclusive or missing required fields."""


class MalformedIdentifier(ValueError):
    def __init__(self, message: str, segments: int):
        super().__init__(message)
        self.segments = segments


class DriverError(RuntimeError):
    """SQL execution failed while applying a grant, revoke or view statement."""

    def __init__(self, message: str, cause: DatabricksError):
        super().__init__(f"{message}: {cause}")
        self.cause = cause
