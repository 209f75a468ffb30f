"""Type definitions for Nomor data structures.

TypedDicts describe the fixed-key structures that are persisted in storage
(questions, answers, history entries, sessions, managed apps) and the catalog
entries for career tracks. Structures keyed at runtime (per-track namespaces,
answers keyed by question index) stay as plain dicts.

IMPORTANT: This file must NOT import from coordinator.py or any manager to
avoid circular dependencies.

NOTE: TypedDict is STATIC ANALYSIS ONLY. Runtime validation of stored values
happens in the store (type coercion) and in the challenge engine (question
parsing).
"""

from typing import Any, Literal, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

TrackId = str  # catalog key, e.g. "swe"
AppId = str  # uuid hex
ISODatetime = str  # ISO 8601 datetime string "2026-01-18T12:30:00+00:00"
ISODate = str  # ISO 8601 date string (no time) "2026-01-18"

HistoryType = Literal["earn", "spend", "info"]
AppCategory = Literal["game", "music", "social"]
Difficulty = Literal["easy", "medium", "hard"]


# =============================================================================
# Catalog
# =============================================================================


class TrackInfo(TypedDict):
    """Immutable career track catalog entry."""

    id: TrackId
    name: str
    description: str
    icon: str
    skills: list[str]
    achievers: list[str]


# =============================================================================
# Challenge State
# =============================================================================


class QuestionData(TypedDict):
    """A generated multiple-choice question."""

    question: str
    options: list[str]
    correct: int
    difficulty: Difficulty


class AnswerRecord(TypedDict):
    """Write-once answer for one question index."""

    selected: int
    correct: bool


class ChallengeStateData(TypedDict):
    """Per-track challenge state, loaded wholesale on track switch."""

    dsa_streak: int
    dsa_completed_today: bool
    last_dsa_date: ISODate | None
    mcq_questions: list[QuestionData]
    mcq_answers: dict[int, AnswerRecord]
    mcq_completed_count: int
    last_mcq_date: ISODate | None
    mcq_streak: int
    last_mcq_completed_date: ISODate | None


# =============================================================================
# Currency / Session
# =============================================================================


class HistoryEntry(TypedDict):
    """Append-only currency ledger entry (newest first in storage)."""

    id: str
    type: HistoryType
    reason: str
    amount: float
    ts: ISODatetime


class ManagedApp(TypedDict):
    """User-managed external application."""

    id: AppId
    name: str
    path: str


class SessionData(TypedDict):
    """The single active timed-access session."""

    category: AppCategory
    app: ManagedApp
    started_at: ISODatetime
    ends_at: ISODatetime
    minutes: float


# Snapshot published by the coordinator to entities
CoordinatorSnapshot = dict[str, Any]
