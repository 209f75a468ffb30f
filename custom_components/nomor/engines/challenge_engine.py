"""Challenge Engine - Pure logic for the daily DSA and MCQ challenges.

This engine provides stateless functions for:
- Streak arithmetic across calendar days (increment if yesterday, else restart)
- Daily rollover planning (which per-track fields reset at a new day)
- Prompt construction for quiz questions and motivation quotes
- Parsing and validating text-generation responses
- Answer evaluation and quiz scoring

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data.
State management belongs in ChallengeManager.
"""

from __future__ import annotations

from datetime import date
import json
import re
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils import dt_utils
from ..utils.math_utils import calculate_percentage

if TYPE_CHECKING:
    from ..type_defs import (
        AnswerRecord,
        ChallengeStateData,
        QuestionData,
        TrackInfo,
    )

_FENCE_JSON_RE = re.compile(r"```json\n?")
_FENCE_RE = re.compile(r"```\n?")


class ResponseParseError(ValueError):
    """Raised when generated text cannot be parsed into the expected shape."""


class QuestionParseError(ResponseParseError):
    """Raised when a generated quiz is malformed or has the wrong size."""


class ChallengeEngine:
    """Pure logic engine for challenge state transitions.

    All methods are static. Dates are ISO strings ("2026-01-18") as stored;
    `today` parameters exist so tests can pin the calendar.
    """

    # =========================================================================
    # State Defaults
    # =========================================================================

    @staticmethod
    def default_state() -> ChallengeStateData:
        """Return a fresh per-track challenge state."""
        return {
            const.DATA_DSA_STREAK: 0,
            const.DATA_DSA_COMPLETED_TODAY: False,
            const.DATA_LAST_DSA_DATE: None,
            const.DATA_MCQ_QUESTIONS: [],
            const.DATA_MCQ_ANSWERS: {},
            const.DATA_MCQ_COMPLETED_COUNT: 0,
            const.DATA_LAST_MCQ_DATE: None,
            const.DATA_MCQ_STREAK: 0,
            const.DATA_LAST_MCQ_COMPLETED_DATE: None,
        }  # type: ignore[return-value]

    # =========================================================================
    # Streaks and Rollover
    # =========================================================================

    @staticmethod
    def calculate_streak(
        current_streak: int,
        last_completed: str | None,
        today: date | None = None,
    ) -> int:
        """Calculate the streak after a completion today.

        Args:
            current_streak: Streak before this completion
            last_completed: ISO date of the previous completion, or None
            today: Optional override for the current local date

        Returns:
            current_streak + 1 if the previous completion was yesterday,
            otherwise 1 (first completion or a gap of two or more days).
        """
        if dt_utils.was_yesterday(last_completed, today):
            return current_streak + 1
        return 1

    @staticmethod
    def compute_rollover(
        state: ChallengeStateData, today: date | None = None
    ) -> dict[str, Any]:
        """Work out which fields change when a new day is observed.

        DSA and MCQ are evaluated independently:
        - DSA: completion flag clears on a new day; streak drops to 0 when the
          last completion was neither today nor yesterday.
        - MCQ: streak drops to 0 under the same rule on the last completion
          date; a stale question set with any answers is discarded.

        Returns:
            Mapping of field → new value. Empty when nothing changes.
        """
        updates: dict[str, Any] = {}

        last_dsa = state.get(const.DATA_LAST_DSA_DATE)
        if last_dsa and not dt_utils.is_today(last_dsa, today):
            if state.get(const.DATA_DSA_COMPLETED_TODAY):
                updates[const.DATA_DSA_COMPLETED_TODAY] = False
            if (
                not dt_utils.was_yesterday(last_dsa, today)
                and state.get(const.DATA_DSA_STREAK, 0) != 0
            ):
                updates[const.DATA_DSA_STREAK] = 0

        last_mcq_done = state.get(const.DATA_LAST_MCQ_COMPLETED_DATE)
        if (
            last_mcq_done
            and not dt_utils.is_today(last_mcq_done, today)
            and not dt_utils.was_yesterday(last_mcq_done, today)
            and state.get(const.DATA_MCQ_STREAK, 0) != 0
        ):
            updates[const.DATA_MCQ_STREAK] = 0

        last_mcq = state.get(const.DATA_LAST_MCQ_DATE)
        if (
            last_mcq
            and not dt_utils.is_today(last_mcq, today)
            and state.get(const.DATA_MCQ_QUESTIONS)
            and state.get(const.DATA_MCQ_COMPLETED_COUNT, 0) > 0
        ):
            updates[const.DATA_MCQ_QUESTIONS] = []
            updates[const.DATA_MCQ_ANSWERS] = {}
            updates[const.DATA_MCQ_COMPLETED_COUNT] = 0

        return updates

    @staticmethod
    def is_generation_allowed(
        questions: list[QuestionData],
        last_mcq_date: str | None,
        today: date | None = None,
    ) -> bool:
        """Return True when no set exists or the existing set is not from today."""
        return not questions or not dt_utils.is_today(last_mcq_date, today)

    # =========================================================================
    # Prompts
    # =========================================================================

    @staticmethod
    def build_mcq_prompt(track: TrackInfo) -> str:
        """Build the daily quiz prompt for a career track."""
        name = track[const.TRACK_NAME]
        skills = ", ".join(track[const.TRACK_SKILLS])
        return (
            f"You are creating a daily quiz for aspiring {name}s.\n\n"
            f"Generate exactly {const.MCQ_QUESTION_COUNT} multiple-choice "
            "questions focused on:\n"
            f"- Career: {name}\n"
            f"- Key skills: {skills}\n\n"
            "Requirements:\n"
            "1. Mix of difficulty levels (5 easy, 7 medium, 3 hard)\n"
            f"2. Cover different aspects of {name} work\n"
            "3. Each question has 4 options (A, B, C, D)\n"
            "4. Only ONE correct answer per question\n"
            "5. Questions should be practical and relevant\n\n"
            "Return ONLY valid JSON (no markdown, no backticks) in this exact "
            "format:\n"
            "[\n"
            "  {\n"
            '    "question": "Question text here?",\n'
            '    "options": ["Option A", "Option B", "Option C", "Option D"],\n'
            '    "correct": 0,\n'
            '    "difficulty": "easy"\n'
            "  }\n"
            "]\n\n"
            'The "correct" field is the index (0-3) of the correct option.\n'
            f"Generate all {const.MCQ_QUESTION_COUNT} questions now."
        )

    @staticmethod
    def build_motivation_prompt(track: TrackInfo) -> str:
        """Build the daily motivation prompt for a career track."""
        name = track[const.TRACK_NAME]
        return (
            f"You are a motivational coach for aspiring {name}s. Generate a "
            "single powerful, personalized motivational quote for someone "
            f"pursuing a career as a {name}.\n\n"
            "Context:\n"
            f"- Career: {name}\n"
            f"- Key skills they're building: {', '.join(track[const.TRACK_SKILLS])}\n"
            "- Inspirational figures in their field: "
            f"{', '.join(track[const.TRACK_ACHIEVERS])}\n\n"
            "Generate ONE motivational quote (2-3 sentences max) that:\n"
            f"1. Is specific to {name} career path\n"
            "2. Encourages consistent learning and practice\n"
            "3. Relates to their key skills or the journey ahead\n"
            "4. Is inspiring but realistic\n\n"
            "Return ONLY the quote, nothing else. No quotation marks, no preamble."
        )

    # =========================================================================
    # Response Parsing
    # =========================================================================

    @staticmethod
    def strip_code_fences(text: str) -> str:
        """Remove markdown code fences (```json / ```) and surrounding whitespace."""
        return _FENCE_RE.sub("", _FENCE_JSON_RE.sub("", text)).strip()

    @staticmethod
    def parse_questions(text: str) -> list[QuestionData]:
        """Parse and validate a generated quiz.

        Raises:
            QuestionParseError: Invalid JSON, not a list, wrong count, or any
                malformed entry. Nothing partial is ever returned.
        """
        try:
            payload = json.loads(ChallengeEngine.strip_code_fences(text))
        except (TypeError, ValueError) as err:
            raise QuestionParseError(f"Quiz response is not valid JSON: {err}") from err

        if not isinstance(payload, list):
            raise QuestionParseError("Quiz response is not a JSON array")
        if len(payload) != const.MCQ_QUESTION_COUNT:
            raise QuestionParseError(
                f"Expected {const.MCQ_QUESTION_COUNT} questions, got {len(payload)}"
            )

        return [
            ChallengeEngine.validate_question(item, index)
            for index, item in enumerate(payload)
        ]

    @staticmethod
    def validate_question(item: Any, index: int) -> QuestionData:
        """Validate one question entry and return a normalized copy."""
        if not isinstance(item, dict):
            raise QuestionParseError(f"Question {index + 1} is not an object")

        text = item.get(const.DATA_QUESTION_TEXT)
        options = item.get(const.DATA_QUESTION_OPTIONS)
        correct = item.get(const.DATA_QUESTION_CORRECT)
        difficulty = item.get(const.DATA_QUESTION_DIFFICULTY)

        if not isinstance(text, str) or not text.strip():
            raise QuestionParseError(f"Question {index + 1} has no text")
        if (
            not isinstance(options, list)
            or len(options) != const.MCQ_OPTION_COUNT
            or not all(isinstance(option, str) for option in options)
        ):
            raise QuestionParseError(
                f"Question {index + 1} must have {const.MCQ_OPTION_COUNT} options"
            )
        # bool is an int subclass; reject it explicitly
        if (
            not isinstance(correct, int)
            or isinstance(correct, bool)
            or not 0 <= correct < const.MCQ_OPTION_COUNT
        ):
            raise QuestionParseError(
                f"Question {index + 1} has an invalid correct index"
            )
        if (
            not isinstance(difficulty, str)
            or difficulty.lower() not in const.MCQ_DIFFICULTIES
        ):
            raise QuestionParseError(
                f"Question {index + 1} has an invalid difficulty"
            )

        return {
            const.DATA_QUESTION_TEXT: text,
            const.DATA_QUESTION_OPTIONS: list(options),
            const.DATA_QUESTION_CORRECT: correct,
            const.DATA_QUESTION_DIFFICULTY: difficulty.lower(),
        }  # type: ignore[return-value]

    # =========================================================================
    # Answers and Scoring
    # =========================================================================

    @staticmethod
    def evaluate_answer(question: QuestionData, option_index: int) -> AnswerRecord:
        """Build the answer record for a selected option."""
        return {
            const.DATA_ANSWER_SELECTED: option_index,
            const.DATA_ANSWER_CORRECT: option_index
            == question[const.DATA_QUESTION_CORRECT],
        }

    @staticmethod
    def count_correct(answers: dict[int, AnswerRecord]) -> int:
        """Count correct answer records."""
        return sum(1 for record in answers.values() if record[const.DATA_ANSWER_CORRECT])

    @staticmethod
    def calculate_score(answers: dict[int, AnswerRecord]) -> int:
        """Percentage of correct answers among answered questions.

        With all 15 answered this is the final quiz score (9 correct → 60).
        Returns 0 when nothing has been answered.
        """
        return calculate_percentage(ChallengeEngine.count_correct(answers), len(answers))
