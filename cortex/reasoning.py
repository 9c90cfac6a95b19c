"""Append-only log of decisions and the context they were made in."""

from datetime import UTC, datetime

from pydantic import AwareDatetime, BaseModel, Field


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class ReasoningRecord(BaseModel):
    """A decision and the context it was made in."""

    timestamp: AwareDatetime = Field(default_factory=utc_now)
    context: str
    decision: str


class ReasoningLog:
    """Chronological record of decisions; unbounded like the stores."""

    def __init__(self) -> None:
        self._records: list[ReasoningRecord] = []

    def add(self, context: str, decision: str) -> ReasoningRecord:
        record = ReasoningRecord(context=context, decision=decision)
        self._records.append(record)
        return record

    def get_history(self, limit: int = 10) -> list[ReasoningRecord]:
        """The most recent `limit` records, oldest first."""
        if limit <= 0:
            return []
        return self._records[-limit:]

    def clear(self) -> None:
        self._records.clear()
