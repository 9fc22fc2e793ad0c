"""Exceptions raised by dts-critic.

Mismatches between a declaration and its module are never raised; they are
reported as diagnostics. These exceptions cover the cases where a check cannot
run at all.
"""


class CriticError(Exception):
    """Base exception for dts-critic errors."""
    pass


class CannotEvaluateError(CriticError):
    """Raised when a required input is missing or the module cannot be loaded."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NameMismatchError(CriticError):
    """Raised when the declaration name differs from the source name."""
    def __init__(self, dts_name: str, source_name: str):
        super().__init__(f"d.ts name '{dts_name}' must match source name '{source_name}'.")
        self.dts_name = dts_name
        self.source_name = source_name


class RegistryError(CriticError):
    """Raised when the npm registry cannot be queried."""
    def __init__(self, name: str, reason: str):
        super().__init__(f"Could not query the npm registry for '{name}': {reason}")
        self.name = name
        self.reason = reason


class HeaderParseError(CriticError):
    """Raised when a Definitely Typed header is malformed."""
    def __init__(self, message: str, line: int | None = None):
        super().__init__(message)
        self.message = message
        self.line = line
