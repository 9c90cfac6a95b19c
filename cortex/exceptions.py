"""Exception hierarchy for Cortex.

Expected "not found" conditions never raise: operations return None,
an empty list or False instead. Exceptions are reserved for caller
mistakes that would otherwise corrupt an entry or its indices.
"""


class CortexError(Exception):
    """Base exception for all Cortex errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class MemoryUpdateError(CortexError, ValueError):
    """Raised when an update names immutable or unknown entry fields."""

    def __init__(self, message: str, fields: list[str] | None = None) -> None:
        super().__init__(message)
        self.fields = fields or []
