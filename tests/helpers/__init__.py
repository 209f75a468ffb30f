"""Test helpers for Nomor integration tests.

This module re-exports all helpers for convenient imports:

    from tests.helpers import (
        # Generated content
        build_questions, questions_json, categorization_json,

        # Storage
        build_storage_data, track_bucket,

        # Entities
        get_entity_id, get_coordinator,
    )

See individual modules for full documentation:
- content.py: Fake text generation responses
- setup.py: Storage layouts and entity lookups
"""

from tests.helpers.content import (
    FAKE_QUOTE,
    build_questions,
    categorization_json,
    fake_generate_text,
    questions_json,
)
from tests.helpers.setup import (
    ENTRY_ID,
    build_storage_data,
    get_coordinator,
    get_entity_id,
    track_bucket,
)

__all__ = [
    "ENTRY_ID",
    "FAKE_QUOTE",
    "build_questions",
    "build_storage_data",
    "categorization_json",
    "fake_generate_text",
    "get_coordinator",
    "get_entity_id",
    "questions_json",
    "track_bucket",
]
