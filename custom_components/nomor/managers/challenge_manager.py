"""Challenge Manager - Daily DSA and MCQ challenge lifecycle per career track.

This manager owns the in-memory challenge state of the selected track:
- DSA: once-per-day completion with a consecutive-day streak
- MCQ: a generated 15-question set answered once per question
- Daily rollover reconciliation (completion flags, broken streaks, stale sets)

ARCHITECTURE:
- ChallengeEngine = pure rules (streaks, rollover plan, parsing, scoring)
- ChallengeManager = STATEFUL per-track state, persisted through the store
- Coin rewards and info entries are emitted as signals; EconomyManager
  applies them synchronously

Track switching is a wholesale swap: load_track_state() builds the complete
state for the new track and replaces the old one in a single assignment.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.exceptions import HomeAssistantError

from .. import const
from ..engines.challenge_engine import ChallengeEngine, QuestionParseError
from ..llm_client import TextGenerationError
from ..utils import dt_utils
from .base_manager import BaseManager

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import NomorDataCoordinator
    from ..type_defs import AnswerRecord, ChallengeStateData, QuestionData


class ChallengeManager(BaseManager):
    """Manager for per-track daily challenges.

    Responsibilities:
    - Load and persist the selected track's challenge state
    - Guard DSA completion and MCQ answers against double application
    - Generate quiz questions with a single in-flight request per track
    - Reconcile state at the daily rollover

    NOT responsible for:
    - Coin balance (EconomyManager via REWARD_EARNED / ACTIVITY_LOGGED)
    - Scheduling automatic generation (Coordinator)
    """

    def __init__(self, hass: HomeAssistant, coordinator: NomorDataCoordinator) -> None:
        """Initialize the ChallengeManager."""
        super().__init__(hass, coordinator)
        self._track_id: str | None = None
        self._state: ChallengeStateData = ChallengeEngine.default_state()
        self._generating: set[str] = set()

    async def async_setup(self) -> None:
        """Load the selected track's state."""
        self.load_track_state()

    # =========================================================================
    # State loading / persistence
    # =========================================================================

    def _read_answers(self, track_id: str | None) -> dict[int, AnswerRecord]:
        raw = self.store.read_scoped(const.DATA_MCQ_ANSWERS, track_id, {})
        answers: dict[int, AnswerRecord] = {}
        for key, record in raw.items():
            try:
                index = int(key)
            except (TypeError, ValueError):
                continue
            if (
                isinstance(record, dict)
                and isinstance(record.get(const.DATA_ANSWER_SELECTED), int)
                and isinstance(record.get(const.DATA_ANSWER_CORRECT), bool)
            ):
                answers[index] = record  # type: ignore[assignment]
        return answers

    def _read_questions(self, track_id: str | None) -> list[QuestionData]:
        raw = self.store.read_scoped(const.DATA_MCQ_QUESTIONS, track_id, [])
        if not raw:
            return []
        try:
            if len(raw) != const.MCQ_QUESTION_COUNT:
                raise QuestionParseError(f"stored set has {len(raw)} questions")
            return [
                ChallengeEngine.validate_question(item, index)
                for index, item in enumerate(raw)
            ]
        except QuestionParseError as err:
            const.LOGGER.warning(
                "ChallengeManager: Discarding stored question set for %s: %s",
                track_id,
                err,
            )
            return []

    def load_track_state(self) -> None:
        """Reload all per-track state for the store's selected track.

        The new state is fully built before it replaces the old one, so no
        caller ever observes a mix of two tracks.
        """
        track_id = self.store.selected_track
        read = self.store.read_scoped

        questions = self._read_questions(track_id)
        answers = self._read_answers(track_id) if questions else {}

        state: ChallengeStateData = {
            const.DATA_DSA_STREAK: max(read(const.DATA_DSA_STREAK, track_id, 0), 0),
            const.DATA_DSA_COMPLETED_TODAY: read(
                const.DATA_DSA_COMPLETED_TODAY, track_id, False
            ),
            const.DATA_LAST_DSA_DATE: read(
                const.DATA_LAST_DSA_DATE, track_id, None, expected=str
            ),
            const.DATA_MCQ_QUESTIONS: questions,
            const.DATA_MCQ_ANSWERS: answers,
            # Count is derived from the answers to keep the invariant on load
            const.DATA_MCQ_COMPLETED_COUNT: len(answers),
            const.DATA_LAST_MCQ_DATE: read(
                const.DATA_LAST_MCQ_DATE, track_id, None, expected=str
            ),
            const.DATA_MCQ_STREAK: max(read(const.DATA_MCQ_STREAK, track_id, 0), 0),
            const.DATA_LAST_MCQ_COMPLETED_DATE: read(
                const.DATA_LAST_MCQ_COMPLETED_DATE, track_id, None, expected=str
            ),
        }  # type: ignore[typeddict-item]

        self._track_id = track_id
        self._state = state
        const.LOGGER.debug(
            "ChallengeManager: Loaded state for track %s (dsa_streak=%s, "
            "mcq_streak=%s, questions=%s, answered=%s)",
            track_id,
            state[const.DATA_DSA_STREAK],
            state[const.DATA_MCQ_STREAK],
            len(questions),
            len(answers),
        )

    def _persist(self, updates: dict[str, Any]) -> None:
        """Apply field updates in memory and write them to the track's bucket."""
        for field, value in updates.items():
            self._state[field] = value  # type: ignore[literal-required]
            if field == const.DATA_MCQ_ANSWERS:
                # JSON object keys are strings
                value = {str(index): record for index, record in value.items()}
            self.store.write_scoped(field, self._track_id, value)

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def track_id(self) -> str | None:
        """Track whose state is loaded."""
        return self._track_id

    @property
    def state(self) -> ChallengeStateData:
        """Copy of the loaded challenge state."""
        snapshot = dict(self._state)
        snapshot[const.DATA_MCQ_ANSWERS] = dict(self._state[const.DATA_MCQ_ANSWERS])
        snapshot[const.DATA_MCQ_QUESTIONS] = list(self._state[const.DATA_MCQ_QUESTIONS])
        return snapshot  # type: ignore[return-value]

    @property
    def questions(self) -> list[QuestionData]:
        """Current question set (empty when none)."""
        return list(self._state[const.DATA_MCQ_QUESTIONS])

    @property
    def answers(self) -> dict[int, AnswerRecord]:
        """Answer records keyed by question index."""
        return dict(self._state[const.DATA_MCQ_ANSWERS])

    @property
    def mcq_score(self) -> int:
        """Percentage of correct answers among answered questions."""
        return ChallengeEngine.calculate_score(self._state[const.DATA_MCQ_ANSWERS])

    @property
    def mcq_complete(self) -> bool:
        """True when every question of the current set has been answered."""
        return (
            bool(self._state[const.DATA_MCQ_QUESTIONS])
            and self._state[const.DATA_MCQ_COMPLETED_COUNT] >= const.MCQ_QUESTION_COUNT
        )

    def is_generating(self, track_id: str | None = None) -> bool:
        """Return True if a generation request is in flight for the track."""
        return (track_id or self._track_id) in self._generating

    @property
    def needs_generation(self) -> bool:
        """True when a track is active, today's set is missing and nothing is in flight."""
        return (
            self._track_id is not None
            and not self.is_generating()
            and not dt_utils.is_today(self._state[const.DATA_LAST_MCQ_DATE])
        )

    def _require_track(self) -> str:
        if self._track_id is None:
            raise HomeAssistantError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_NO_TRACK_SELECTED,
            )
        return self._track_id

    # =========================================================================
    # DSA
    # =========================================================================

    def complete_dsa(self) -> int:
        """Mark today's DSA challenge complete and credit the reward.

        Check and set run without any await in between, so a second call on
        the same day always sees the first one's result.

        Returns:
            New DSA streak

        Raises:
            HomeAssistantError: No track selected, or already completed today
        """
        track_id = self._require_track()
        last_date = self._state[const.DATA_LAST_DSA_DATE]
        if dt_utils.is_today(last_date):
            const.LOGGER.warning(
                "ChallengeManager: DSA already completed today for track %s",
                track_id,
            )
            raise HomeAssistantError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_ALREADY_COMPLETED,
            )

        new_streak = ChallengeEngine.calculate_streak(
            self._state[const.DATA_DSA_STREAK], last_date
        )
        self._persist(
            {
                const.DATA_DSA_STREAK: new_streak,
                const.DATA_LAST_DSA_DATE: dt_utils.dt_today_iso(),
                const.DATA_DSA_COMPLETED_TODAY: True,
            }
        )
        self.emit(
            const.SIGNAL_SUFFIX_REWARD_EARNED,
            amount=const.DSA_REWARD_COINS,
            reason=const.REASON_DSA_COMPLETED,
        )
        self.emit(
            const.SIGNAL_SUFFIX_DSA_COMPLETED, track_id=track_id, streak=new_streak
        )
        const.LOGGER.info(
            "ChallengeManager: DSA completed for track %s, streak now %s",
            track_id,
            new_streak,
        )
        return new_streak

    # =========================================================================
    # MCQ
    # =========================================================================

    async def async_generate_questions(self, *, automatic: bool = False) -> bool:
        """Generate today's question set for the selected track.

        Args:
            automatic: Background trigger; suppressed silently instead of
                raising when a request is already in flight or a set exists

        Returns:
            True if a new set was committed, False if the request was
            suppressed or its result discarded (track switched meanwhile)

        Raises:
            HomeAssistantError: No track, set already generated today, request
                in flight (explicit calls only), or generation failed
        """
        track_id = self._require_track()

        if track_id in self._generating:
            if automatic:
                const.LOGGER.debug(
                    "ChallengeManager: Generation already in flight for %s", track_id
                )
                return False
            raise HomeAssistantError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_GENERATION_IN_PROGRESS,
            )

        if not ChallengeEngine.is_generation_allowed(
            self._state[const.DATA_MCQ_QUESTIONS],
            self._state[const.DATA_LAST_MCQ_DATE],
        ):
            if automatic:
                return False
            raise HomeAssistantError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_QUESTIONS_EXIST,
            )

        track = const.CAREER_TRACKS[track_id]
        self._generating.add(track_id)
        const.LOGGER.info(
            "ChallengeManager: Generating questions for track %s", track_id
        )
        try:
            text = await self.coordinator.text_client.async_generate_text(
                ChallengeEngine.build_mcq_prompt(track)
            )
            questions = ChallengeEngine.parse_questions(text)
        except (TextGenerationError, QuestionParseError) as err:
            const.LOGGER.warning(
                "ChallengeManager: Question generation failed for track %s: %s",
                track_id,
                err,
            )
            raise HomeAssistantError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_GENERATION_FAILED,
                translation_placeholders={"error": str(err)},
            ) from err
        finally:
            self._generating.discard(track_id)

        if self._track_id != track_id:
            const.LOGGER.info(
                "ChallengeManager: Discarding questions for %s, active track is %s",
                track_id,
                self._track_id,
            )
            return False

        self._persist(
            {
                const.DATA_MCQ_QUESTIONS: questions,
                const.DATA_LAST_MCQ_DATE: dt_utils.dt_today_iso(),
                const.DATA_MCQ_ANSWERS: {},
                const.DATA_MCQ_COMPLETED_COUNT: 0,
            }
        )
        self.emit(
            const.SIGNAL_SUFFIX_QUESTIONS_GENERATED,
            track_id=track_id,
            count=len(questions),
        )
        const.LOGGER.info(
            "ChallengeManager: Stored %s questions for track %s",
            len(questions),
            track_id,
        )
        return True

    def select_answer(self, question_index: int, option_index: int) -> AnswerRecord:
        """Record the answer for one question (write-once).

        An already answered index returns its stored record unchanged and
        has no other effect.

        Returns:
            The stored AnswerRecord for question_index

        Raises:
            HomeAssistantError: No track selected, index outside the set, or
                the set was generated on an earlier day
        """
        track_id = self._require_track()
        questions = self._state[const.DATA_MCQ_QUESTIONS]
        if not 0 <= question_index < len(questions) or not (
            0 <= option_index < const.MCQ_OPTION_COUNT
        ):
            raise HomeAssistantError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_INVALID_QUESTION,
                translation_placeholders={"index": str(question_index)},
            )

        # Answers count only on the set generated today.
        last_date = self._state[const.DATA_LAST_MCQ_DATE]
        if not dt_utils.is_today(last_date):
            raise HomeAssistantError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_QUESTIONS_OUTDATED,
                translation_placeholders={"date": str(last_date)},
            )

        answers = self._state[const.DATA_MCQ_ANSWERS]
        if question_index in answers:
            const.LOGGER.debug(
                "ChallengeManager: Question %s already answered, ignoring",
                question_index,
            )
            return answers[question_index]

        record = ChallengeEngine.evaluate_answer(questions[question_index], option_index)
        new_answers = {**answers, question_index: record}
        completed = len(new_answers)
        self._persist(
            {
                const.DATA_MCQ_ANSWERS: new_answers,
                const.DATA_MCQ_COMPLETED_COUNT: completed,
            }
        )

        number = question_index + 1
        if record[const.DATA_ANSWER_CORRECT]:
            self.emit(
                const.SIGNAL_SUFFIX_REWARD_EARNED,
                amount=const.MCQ_CORRECT_REWARD,
                reason=const.REASON_MCQ_CORRECT.format(number=number),
            )
        else:
            self.emit(
                const.SIGNAL_SUFFIX_ACTIVITY_LOGGED,
                reason=const.REASON_MCQ_INCORRECT.format(number=number),
            )
        self.emit(
            const.SIGNAL_SUFFIX_MCQ_ANSWERED,
            track_id=track_id,
            question_index=question_index,
            correct=record[const.DATA_ANSWER_CORRECT],
        )

        if completed == const.MCQ_QUESTION_COUNT:
            self._complete_mcq(track_id)
        return record

    def _complete_mcq(self, track_id: str) -> None:
        new_streak = ChallengeEngine.calculate_streak(
            self._state[const.DATA_MCQ_STREAK],
            self._state[const.DATA_LAST_MCQ_COMPLETED_DATE],
        )
        self._persist(
            {
                const.DATA_MCQ_STREAK: new_streak,
                const.DATA_LAST_MCQ_COMPLETED_DATE: dt_utils.dt_today_iso(),
            }
        )
        score = self.mcq_score
        self.emit(
            const.SIGNAL_SUFFIX_MCQ_COMPLETED,
            track_id=track_id,
            streak=new_streak,
            score=score,
        )
        const.LOGGER.info(
            "ChallengeManager: Quiz complete for track %s, score %s%%, streak %s",
            track_id,
            score,
            new_streak,
        )

    # =========================================================================
    # Rollover
    # =========================================================================

    def reconcile_rollover(self) -> bool:
        """Apply the daily rollover rules to the loaded track.

        Returns:
            True if any field changed
        """
        if self._track_id is None:
            return False
        updates = ChallengeEngine.compute_rollover(self._state)
        if not updates:
            return False
        self._persist(updates)
        const.LOGGER.info(
            "ChallengeManager: Rollover for track %s reset %s",
            self._track_id,
            sorted(updates),
        )
        return True
