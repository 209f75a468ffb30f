"""Economy Engine - Pure logic for coin transactions and the history ledger.

This engine provides stateless, pure Python functions for:
- Coin arithmetic with consistent rounding
- History entry creation (newest entries first, never pruned)
- Lifetime earned and spent totals over the history
- Sufficient funds validation
- Coin-to-minutes conversion for timed sessions
- Reward amounts for manually reported activities

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data.
State management belongs in EconomyManager and SessionManager.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING
import uuid

from .. import const
from ..utils.math_utils import round_coins

if TYPE_CHECKING:
    from ..type_defs import HistoryEntry


class InsufficientFundsError(Exception):
    """Raised when a spend would take the balance below zero.

    Attributes:
        current_balance: Current coin balance
        requested_amount: Amount attempted to spend
        shortfall: How much more is needed (requested - current)
    """

    def __init__(self, current_balance: float, requested_amount: float) -> None:
        """Initialize InsufficientFundsError."""
        self.current_balance = current_balance
        self.requested_amount = requested_amount
        self.shortfall = round_coins(requested_amount - current_balance)
        super().__init__(
            f"Insufficient coins: balance={current_balance}, "
            f"requested={requested_amount}, shortfall={self.shortfall}"
        )


class EconomyEngine:
    """Pure logic engine for coin calculations and history operations.

    All methods are static - no instance state. This enables easy unit testing
    without any Home Assistant mocking.

    History types:
        - earn: coins credited (challenge rewards, manual earnings)
        - spend: coins debited (timed sessions)
        - info: zero-amount bookkeeping (wrong answers, session end, track switch)
    """

    @staticmethod
    def validate_sufficient_funds(balance: float, cost: float) -> bool:
        """Check if balance is sufficient for a spend.

        Args:
            balance: Current coin balance
            cost: Amount to spend (positive value)

        The cost is rounded to coin precision first and must stay positive.
        The balance is compared as stored, so a zero balance never covers
        a sub-cent cost.

        Returns:
            True if 0 < rounded cost <= balance, False otherwise
        """
        amount = round_coins(cost)
        return 0 < amount <= balance

    @staticmethod
    def calculate_new_balance(current_balance: float, delta: float) -> float:
        """Calculate new balance after applying delta, rounded."""
        return round_coins(current_balance + delta)

    @staticmethod
    def session_minutes(category: str, coins: float) -> float:
        """Convert coins to minutes of access for a category.

        Unknown categories convert to 0 minutes, which callers reject.

        Examples:
            session_minutes("music", 2) → 60
            session_minutes("game", 0.5) → 7.5
        """
        rate = const.COIN_RATES.get(category, 0)
        return round_coins(coins * rate)

    @staticmethod
    def format_number(value: float) -> str:
        """Format a number compactly for history reasons (60.0 → "60")."""
        return f"{value:g}"

    @staticmethod
    def create_history_entry(
        entry_type: str,
        reason: str,
        amount: float = 0.0,
        now_utc: datetime | None = None,
    ) -> HistoryEntry:
        """Create an immutable history entry.

        Args:
            entry_type: HISTORY_TYPE_EARN, HISTORY_TYPE_SPEND or HISTORY_TYPE_INFO
            reason: Free-text description shown to the user
            amount: Coin amount (always positive, 0 for info entries)
            now_utc: Optional timestamp override for deterministic tests

        Returns:
            HistoryEntry TypedDict
        """
        return {
            const.DATA_HISTORY_ID: uuid.uuid4().hex,
            const.DATA_HISTORY_TYPE: entry_type,
            const.DATA_HISTORY_REASON: reason,
            const.DATA_HISTORY_AMOUNT: round_coins(amount),
            const.DATA_HISTORY_TS: (now_utc or datetime.now(UTC)).isoformat(),
        }  # type: ignore[return-value]

    @staticmethod
    def prepend_history(
        history: list[HistoryEntry], entry: HistoryEntry
    ) -> list[HistoryEntry]:
        """Insert entry at the front. Entries are never dropped.

        Modifies the list in place and returns it for convenience.
        """
        history.insert(0, entry)
        return history

    @staticmethod
    def history_totals(history: list[HistoryEntry]) -> tuple[float, float]:
        """Return (total earned, total spent) over the whole history."""
        earned = spent = 0.0
        for entry in history:
            if entry[const.DATA_HISTORY_TYPE] == const.HISTORY_TYPE_EARN:
                earned += entry[const.DATA_HISTORY_AMOUNT]
            elif entry[const.DATA_HISTORY_TYPE] == const.HISTORY_TYPE_SPEND:
                spent += entry[const.DATA_HISTORY_AMOUNT]
        return round_coins(earned), round_coins(spent)

    @staticmethod
    def leetcode_reward(difficulty: str, help_used: bool = False) -> float:
        """Return coins for a solved LeetCode problem.

        Easy 1, medium 2, hard 3; halved when help was used.

        Raises:
            ValueError: Unknown difficulty
        """
        if difficulty not in const.LEETCODE_REWARDS:
            raise ValueError(f"Unknown difficulty: {difficulty}")
        reward = float(const.LEETCODE_REWARDS[difficulty])
        if help_used:
            reward /= 2
        return round_coins(reward)

    @staticmethod
    def study_reward(hours: float) -> float:
        """Return coins for hours of hackathon or self-study work."""
        if hours <= 0:
            raise ValueError(f"Hours must be positive, got {hours}")
        return round_coins(hours * const.STUDY_COINS_PER_HOUR)
