"""Scoring functions used by MemoryStore.

All functions are pure: they read entries and never mutate them.
"""

import math
from datetime import datetime, timedelta

from cortex.memory.models import MemoryEntry

RECENCY_WEIGHT = 0.4
IMPORTANCE_WEIGHT = 0.4
ACCESS_WEIGHT = 0.2

# accessCount at which the access term of the composite score saturates
ACCESS_SATURATION = 10

CONTENT_MATCH_SCORE = 1.0
TAG_MATCH_SCORE = 0.5
CONTEXT_MATCH_SCORE = 0.5
ACCESS_BOOST = 0.1

DEFAULT_DECAY = timedelta(days=7)


def similarity(first: MemoryEntry, second: MemoryEntry) -> float:
    """Similarity of two entries in [0, 1].

    Half the score comes from sharing a non-empty context, half from the
    share of common tags relative to the larger tag set.
    """
    score = 0.0

    if first.context and second.context and first.context == second.context:
        score += 0.5

    if first.tags and second.tags:
        common = set(first.tags) & set(second.tags)
        score += 0.5 * len(common) / max(len(first.tags), len(second.tags))

    return score


def relevance(entry: MemoryEntry, query: str) -> float:
    """Query relevance of an entry.

    `query` must already be lowercased. Returns 0 when neither content,
    tags nor context contain the query, whatever the boosts.
    """
    score = 0.0

    if query in entry.content.lower():
        score += CONTENT_MATCH_SCORE

    score += TAG_MATCH_SCORE * sum(1 for tag in entry.tags if query in tag.lower())

    if entry.context and query in entry.context.lower():
        score += CONTEXT_MATCH_SCORE

    score *= 1 + entry.importance
    score *= 1 + math.log(entry.access_count + 1) * ACCESS_BOOST
    return score


def composite_score(
    entry: MemoryEntry,
    now: datetime,
    decay: timedelta = DEFAULT_DECAY,
) -> float:
    """Query-independent blend of recency, importance and access frequency."""
    age = (now - entry.timestamp) / decay
    recency = math.exp(-age)
    access = min(entry.access_count / ACCESS_SATURATION, 1.0)
    return RECENCY_WEIGHT * recency + IMPORTANCE_WEIGHT * entry.importance + ACCESS_WEIGHT * access
