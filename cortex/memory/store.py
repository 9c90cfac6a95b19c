"""In-memory MemoryStore with derived context, tag and timeline indices.

The entry map is the source of truth. The context index, tag index and
timeline are derived views rebuilt for an entry on every insert, update and
delete, so for any label the index holds exactly the ids of the entries
currently carrying it.

Storing an entry runs a similarity-linking pass against every existing
entry. That pass is O(n) per store() and the store has no capacity bound.
"""

import bisect
import itertools
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime, timedelta
from typing import Any

from cortex.config.models.memory import MemoryConfig
from cortex.exceptions import MemoryUpdateError
from cortex.memory.models import (
    ConsolidationPattern,
    ConsolidationResult,
    MemoryEntry,
    MemoryStats,
    TimeRange,
)
from cortex.memory.models.entry import utc_now
from cortex.memory.scoring import composite_score, relevance, similarity
from cortex.observability.logging import get_logger
from cortex.observability.metrics import observe_recall, record_memory_operation

logger = get_logger(__name__)

IMMUTABLE_FIELDS = frozenset({"id", "timestamp"})

# (timestamp, insertion sequence, id); the sequence breaks timestamp ties
TimelineKey = tuple[datetime, int, str]


class MemoryStore:
    """Scored, multi-indexed store of free-form memory entries.

    Each instance owns its own entry map and indices; instances never share
    state. Not safe for concurrent mutation.
    """

    def __init__(
        self,
        config: MemoryConfig | None = None,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize an empty store.

        Args:
            config: Ranking and linking configuration (model defaults if omitted)
            clock: Source of "now" for timestamps and recency scoring
        """
        self._config = config or MemoryConfig()
        self._clock = clock
        self._decay = timedelta(days=self._config.recency_decay_days)

        self._entries: dict[str, MemoryEntry] = {}
        self._context_index: dict[str, set[str]] = {}
        self._tag_index: dict[str, set[str]] = {}
        self._timeline: list[TimelineKey] = []
        self._timeline_keys: dict[str, TimelineKey] = {}
        self._sequence = itertools.count()

    # Storage
    def store(
        self,
        content: str,
        context: str | None = None,
        tags: Iterable[str] | None = None,
        importance: float | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> MemoryEntry:
        """Store a new entry and link it to similar existing entries."""
        entry = MemoryEntry(
            content=content,
            timestamp=self._clock(),
            context=context,
            tags=list(tags or []),
            importance=self._config.default_importance if importance is None else importance,
            metadata=dict(metadata or {}),
        )

        self._entries[entry.id] = entry
        self._index(entry)
        linked = self.link_related(entry)

        record_memory_operation("store")
        logger.debug(
            "memory_stored",
            memory_id=entry.id,
            context=entry.context,
            tag_count=len(entry.tags),
            linked_count=len(linked),
        )
        return entry

    def link_related(self, entry: MemoryEntry) -> list[str]:
        """Symmetrically link an entry to every sufficiently similar entry.

        Linking is idempotent: ids already present are not added twice.

        Returns:
            Ids of the entries whose similarity exceeded the threshold
        """
        linked: list[str] = []
        for other in self._entries.values():
            if other.id == entry.id:
                continue
            if similarity(entry, other) <= self._config.link_threshold:
                continue

            if other.id not in entry.related_memories:
                entry.related_memories.append(other.id)
            if entry.id not in other.related_memories:
                other.related_memories.append(entry.id)
            linked.append(other.id)

        if linked:
            logger.debug("memory_linked", memory_id=entry.id, related_ids=linked)
        return linked

    # Retrieval
    def get(self, memory_id: str) -> MemoryEntry | None:
        """Get an entry by id without counting it as an access."""
        return self._entries.get(memory_id)

    def recall(
        self,
        query: str | None = None,
        *,
        context: str | None = None,
        tags: Iterable[str] | None = None,
        min_importance: float | None = None,
        time_range: TimeRange | None = None,
        limit: int | None = None,
    ) -> list[MemoryEntry]:
        """Recall entries matching every given criterion, best first.

        Filters are conjunctive: exact context, at least one shared tag,
        importance >= min_importance, timestamp inside time_range. With a
        query, entries are ranked by relevance and non-matching ones are
        dropped; without one, they are ranked by composite score.

        Every returned entry has access_count incremented and last_accessed
        set, so recall is not read-only.
        """
        limit = self._config.default_limit if limit is None else max(limit, 0)
        candidates = self._filter(
            context=context,
            tags=tags,
            min_importance=min_importance,
            time_range=time_range,
        )

        if query:
            needle = query.lower()
            scored = [(relevance(entry, needle), entry) for entry in candidates]
            scored = [pair for pair in scored if pair[0] > 0]
            scored.sort(key=lambda pair: pair[0], reverse=True)
            ranked = [entry for _, entry in scored]
        else:
            now = self._clock()
            ranked = sorted(
                candidates,
                key=lambda entry: composite_score(entry, now, self._decay),
                reverse=True,
            )

        results = ranked[:limit]
        accessed_at = self._clock()
        for entry in results:
            entry.access_count += 1
            entry.last_accessed = accessed_at

        record_memory_operation("recall")
        observe_recall(len(results))
        return results

    def search(self, query: str, limit: int | None = None) -> list[MemoryEntry]:
        """Full-text search; shorthand for recall(query, limit=limit)."""
        return self.recall(query, limit=limit)

    def get_by_context(self, context: str, limit: int | None = None) -> list[MemoryEntry]:
        """Recall entries with the given context."""
        return self.recall(context=context, limit=limit)

    def get_by_tags(self, tags: Iterable[str], limit: int | None = None) -> list[MemoryEntry]:
        """Recall entries carrying at least one of the given tags."""
        return self.recall(tags=tags, limit=limit)

    def get_recent(self, limit: int | None = None) -> list[MemoryEntry]:
        """Newest entries first, by timestamp only.

        Reads the timeline directly; access counters are left untouched.
        """
        limit = self._config.default_limit if limit is None else max(limit, 0)
        newest = reversed(self._timeline)
        return [self._entries[memory_id] for _, _, memory_id in itertools.islice(newest, limit)]

    def get_important(
        self,
        min_importance: float | None = None,
        limit: int | None = None,
    ) -> list[MemoryEntry]:
        """Recall entries with importance at or above the threshold."""
        if min_importance is None:
            min_importance = self._config.important_threshold
        return self.recall(min_importance=min_importance, limit=limit)

    def get_by_entity(self, entity_id: str) -> list[MemoryEntry]:
        """Entries linked to a knowledge graph entity (no access side effect)."""
        return [entry for entry in self._entries.values() if entry.entity_id == entity_id]

    # Index views
    def context_ids(self, context: str) -> set[str]:
        """Ids currently indexed under a context."""
        return set(self._context_index.get(context, ()))

    def tag_ids(self, tag: str) -> set[str]:
        """Ids currently indexed under a tag."""
        return set(self._tag_index.get(tag, ()))

    # Mutation
    def update(self, memory_id: str, **fields: Any) -> MemoryEntry | None:
        """Merge partial fields into an entry and reindex it.

        Similarity linking is not re-run and related_memories symmetry is
        not enforced; callers editing related_memories own that invariant.

        Returns:
            The updated entry, or None if no entry has this id

        Raises:
            MemoryUpdateError: If fields name id, timestamp or an unknown field
        """
        immutable = sorted(IMMUTABLE_FIELDS & fields.keys())
        if immutable:
            raise MemoryUpdateError(
                f"Cannot update immutable fields: {', '.join(immutable)}", immutable
            )
        unknown = sorted(fields.keys() - MemoryEntry.model_fields.keys())
        if unknown:
            raise MemoryUpdateError(f"Unknown memory fields: {', '.join(unknown)}", unknown)

        entry = self._entries.get(memory_id)
        if entry is None:
            record_memory_operation("update", "not_found")
            logger.debug("memory_update_not_found", memory_id=memory_id)
            return None

        # Validate the merged result before touching the indices
        merged = MemoryEntry.model_validate({**entry.model_dump(), **fields})

        self._unindex_labels(entry)
        for name in fields:
            setattr(entry, name, getattr(merged, name))
        self._index_labels(entry)

        record_memory_operation("update")
        logger.debug("memory_updated", memory_id=memory_id, fields=sorted(fields))
        return entry

    def delete(self, memory_id: str) -> bool:
        """Delete an entry and unlink it from the entries it relates to.

        Cleanup is driven from the deleted entry's own related_memories.
        """
        entry = self._entries.pop(memory_id, None)
        if entry is None:
            record_memory_operation("delete", "not_found")
            return False

        self._unindex_labels(entry)
        self._unindex_timeline(entry)

        for related_id in entry.related_memories:
            related = self._entries.get(related_id)
            if related is not None and memory_id in related.related_memories:
                related.related_memories = [
                    rid for rid in related.related_memories if rid != memory_id
                ]

        record_memory_operation("delete")
        logger.debug("memory_deleted", memory_id=memory_id)
        return True

    # Reporting
    def get_stats(self) -> MemoryStats:
        """Entry count, distinct labels, timestamp span and mean importance."""
        entries = list(self._entries.values())
        if not entries:
            return MemoryStats(total_memories=0, total_contexts=0, total_tags=0)

        timestamps = [entry.timestamp for entry in entries]
        return MemoryStats(
            total_memories=len(entries),
            total_contexts=len(self._context_index),
            total_tags=len(self._tag_index),
            oldest_memory=min(timestamps),
            newest_memory=max(timestamps),
            avg_importance=sum(entry.importance for entry in entries) / len(entries),
        )

    def consolidate(self, context: str | None = None) -> ConsolidationResult:
        """Mine shared-tag patterns and summarize the most important entries.

        With a context, only entries in that context are considered.
        """
        entries = list(self._entries.values())
        if context:
            context_ids = self._context_index.get(context, set())
            entries = [entry for entry in entries if entry.id in context_ids]

        groups: dict[str, list[str]] = {}
        for entry in entries:
            for tag in entry.tags:
                groups.setdefault(tag, []).append(entry.id)

        patterns = [
            ConsolidationPattern(pattern=tag, count=len(ids), memory_ids=ids)
            for tag, ids in groups.items()
            if len(ids) > 1
        ]
        patterns.sort(key=lambda pattern: pattern.count, reverse=True)

        record_memory_operation("consolidate")
        return ConsolidationResult(patterns=patterns, summary=self._summarize(entries))

    # Bulk operations
    def export(self) -> list[MemoryEntry]:
        """Snapshot of every entry (deep copies)."""
        return [entry.model_copy(deep=True) for entry in self._entries.values()]

    def import_entries(self, entries: Iterable[MemoryEntry | Mapping[str, Any]]) -> int:
        """Upsert entries by id without running similarity linking.

        Every item is validated before anything is stored. An imported id that
        already exists replaces the old entry and its index entries.

        Returns:
            Number of entries imported
        """
        validated = [
            item.model_copy(deep=True)
            if isinstance(item, MemoryEntry)
            else MemoryEntry.model_validate(item)
            for item in entries
        ]

        for entry in validated:
            existing = self._entries.get(entry.id)
            if existing is not None:
                self._unindex_labels(existing)
                self._unindex_timeline(existing)
            self._entries[entry.id] = entry
            self._index(entry)

        record_memory_operation("import")
        logger.debug("memories_imported", count=len(validated))
        return len(validated)

    def clear(self) -> None:
        """Remove every entry and empty all indices."""
        self._entries.clear()
        self._context_index.clear()
        self._tag_index.clear()
        self._timeline.clear()
        self._timeline_keys.clear()
        logger.debug("memory_cleared")

    # Internals
    def _filter(
        self,
        *,
        context: str | None,
        tags: Iterable[str] | None,
        min_importance: float | None,
        time_range: TimeRange | None,
    ) -> list[MemoryEntry]:
        candidates = list(self._entries.values())

        if context:
            context_ids = self._context_index.get(context, set())
            candidates = [entry for entry in candidates if entry.id in context_ids]

        wanted = set(tags or ())
        if wanted:
            candidates = [entry for entry in candidates if wanted.intersection(entry.tags)]

        if min_importance is not None:
            candidates = [entry for entry in candidates if entry.importance >= min_importance]

        if time_range is not None:
            candidates = [entry for entry in candidates if time_range.contains(entry.timestamp)]

        return candidates

    def _summarize(self, entries: list[MemoryEntry]) -> str:
        if not entries:
            return "No memories to summarize."

        top = sorted(entries, key=lambda entry: entry.importance, reverse=True)
        chars = self._config.summary_preview_chars

        lines = [f"Summary of {len(entries)} memories:", "", "Most important memories:"]
        for rank, entry in enumerate(top[: self._config.summary_top_n], start=1):
            preview = entry.content[:chars]
            if len(entry.content) > chars:
                preview += "..."
            lines.append(f"{rank}. [{entry.timestamp.date().isoformat()}] {preview}")
        return "\n".join(lines)

    def _index(self, entry: MemoryEntry) -> None:
        self._index_labels(entry)
        key = (entry.timestamp, next(self._sequence), entry.id)
        bisect.insort(self._timeline, key)
        self._timeline_keys[entry.id] = key

    def _index_labels(self, entry: MemoryEntry) -> None:
        if entry.context:
            self._context_index.setdefault(entry.context, set()).add(entry.id)
        for tag in entry.tags:
            self._tag_index.setdefault(tag, set()).add(entry.id)

    def _unindex_labels(self, entry: MemoryEntry) -> None:
        if entry.context:
            _discard(self._context_index, entry.context, entry.id)
        for tag in entry.tags:
            _discard(self._tag_index, tag, entry.id)

    def _unindex_timeline(self, entry: MemoryEntry) -> None:
        key = self._timeline_keys.pop(entry.id, None)
        if key is None:
            return
        position = bisect.bisect_left(self._timeline, key)
        if position < len(self._timeline) and self._timeline[position] == key:
            del self._timeline[position]


def _discard(index: dict[str, set[str]], label: str, memory_id: str) -> None:
    """Remove an id from an index bucket, dropping the bucket once empty."""
    ids = index.get(label)
    if ids is None:
        return
    ids.discard(memory_id)
    if not ids:
        del index[label]
