"""Economy Manager - Coin balance and history ledger.

This manager handles all coin-related operations:
- Credits (challenge rewards, manually reported activities)
- Spends with sufficient-funds checks (timed sessions)
- Zero-amount info entries for bookkeeping
- Event emission for balance changes

ARCHITECTURE:
- EconomyManager = "The Bank" (STATEFUL coin operations, global across tracks)
- EconomyEngine = Pure math and history logic (STATELESS)
- ChallengeManager emits REWARD_EARNED; this manager credits the coins
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.core import callback

from .. import const
from ..engines.economy_engine import EconomyEngine, InsufficientFundsError
from ..utils.math_utils import round_coins
from .base_manager import BaseManager

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import NomorDataCoordinator
    from ..type_defs import HistoryEntry


# Re-export exception for external use
__all__ = ["EconomyManager", "InsufficientFundsError"]


class EconomyManager(BaseManager):
    """Manager for the coin balance and the append-only history.

    Responsibilities:
    - Execute credits and spends
    - Maintain the newest-first history ledger
    - Emit SIGNAL_SUFFIX_COINS_CHANGED events

    NOT responsible for:
    - Deciding reward amounts for challenges (ChallengeManager)
    - Session timing (SessionManager)
    """

    def __init__(self, hass: HomeAssistant, coordinator: NomorDataCoordinator) -> None:
        """Initialize the EconomyManager."""
        super().__init__(hass, coordinator)
        self._balance: float = 0.0
        self._history: list[HistoryEntry] = []

    async def async_setup(self) -> None:
        """Load the balance and history, subscribe to reward events."""
        self._balance = float(
            self.store.read_global(const.DATA_COINS, 0.0, expected=float)
        )
        if self._balance < 0:
            const.LOGGER.warning(
                "EconomyManager: Stored balance %.2f is negative, resetting to 0",
                self._balance,
            )
            self._balance = 0.0
        self._history = self.store.read_global(const.DATA_HISTORY, [])
        self.listen(const.SIGNAL_SUFFIX_REWARD_EARNED, self._on_reward_earned)
        self.listen(const.SIGNAL_SUFFIX_ACTIVITY_LOGGED, self._on_activity_logged)

    @callback
    def _on_reward_earned(self, payload: dict[str, Any]) -> None:
        """Credit coins for a reward emitted by another manager."""
        self.add_coins(payload["amount"], payload["reason"])

    @callback
    def _on_activity_logged(self, payload: dict[str, Any]) -> None:
        """Record a zero-amount info entry emitted by another manager."""
        self.add_info(payload["reason"])

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def balance(self) -> float:
        """Current coin balance."""
        return self._balance

    def get_history(self, limit: int | None = None) -> list[HistoryEntry]:
        """Return history entries, newest first.

        Args:
            limit: Maximum entries to return (None returns all)
        """
        if limit is None:
            return list(self._history)
        return self._history[:limit]

    def get_totals(self) -> tuple[float, float]:
        """Return (total earned, total spent) over the full history."""
        return EconomyEngine.history_totals(self._history)

    # =========================================================================
    # Transactions
    # =========================================================================

    def _record(self, entry_type: str, reason: str, amount: float) -> None:
        entry = EconomyEngine.create_history_entry(entry_type, reason, amount)
        EconomyEngine.prepend_history(self._history, entry)
        self.store.write_global(const.DATA_HISTORY, self._history)

    def _set_balance(self, new_balance: float, delta: float, reason: str) -> None:
        old_balance = self._balance
        self._balance = new_balance
        self.store.write_global(const.DATA_COINS, new_balance)
        self.emit(
            const.SIGNAL_SUFFIX_COINS_CHANGED,
            old_balance=old_balance,
            new_balance=new_balance,
            delta=delta,
            reason=reason,
        )

    def add_coins(self, amount: float, reason: str) -> float:
        """Credit coins unconditionally and append an earn entry.

        Returns:
            New balance after the credit

        Raises:
            ValueError: If amount is not positive
        """
        if amount <= 0:
            raise ValueError(f"Credit amount must be positive, got {amount}")

        new_balance = EconomyEngine.calculate_new_balance(self._balance, amount)
        self._record(const.HISTORY_TYPE_EARN, reason, amount)
        self._set_balance(new_balance, amount, reason)
        const.LOGGER.debug(
            "EconomyManager: Credited %.2f (%s), balance %.2f",
            amount,
            reason,
            new_balance,
        )
        return new_balance

    def withdraw(self, amount: float, reason: str) -> float:
        """Debit coins and append a spend entry.

        Returns:
            New balance after the debit

        Raises:
            ValueError: If amount rounds to zero or less
            InsufficientFundsError: If amount exceeds the balance
        """
        amount = round_coins(amount)
        if amount <= 0:
            raise ValueError(f"Spend amount must be positive, got {amount}")

        if not EconomyEngine.validate_sufficient_funds(self._balance, amount):
            const.LOGGER.warning(
                "EconomyManager: Insufficient coins, balance=%.2f, requested=%.2f",
                self._balance,
                amount,
            )
            raise InsufficientFundsError(
                current_balance=self._balance, requested_amount=amount
            )

        new_balance = EconomyEngine.calculate_new_balance(self._balance, -amount)
        self._record(const.HISTORY_TYPE_SPEND, reason, amount)
        self._set_balance(new_balance, -amount, reason)
        const.LOGGER.debug(
            "EconomyManager: Spent %.2f (%s), balance %.2f",
            amount,
            reason,
            new_balance,
        )
        return new_balance

    def spend_coins(self, amount: float, reason: str) -> bool:
        """Debit coins if the balance allows it.

        Returns:
            True on success, False with no state change when the balance is
            too low or the amount is not positive.
        """
        try:
            self.withdraw(amount, reason)
        except (InsufficientFundsError, ValueError):
            return False
        return True

    def add_info(self, reason: str) -> None:
        """Append a zero-amount info entry."""
        self._record(const.HISTORY_TYPE_INFO, reason, 0.0)

    # =========================================================================
    # Manually reported activities
    # =========================================================================

    def earn_leetcode(self, difficulty: str, help_used: bool = False) -> float:
        """Credit coins for a solved LeetCode problem.

        Returns:
            Coins credited
        """
        amount = EconomyEngine.leetcode_reward(difficulty, help_used)
        reason = const.REASON_LEETCODE.format(difficulty=difficulty)
        if help_used:
            reason += const.REASON_LEETCODE_HELP
        self.add_coins(amount, reason)
        const.LOGGER.info("EconomyManager: %s earned %.2f coins", reason, amount)
        return amount

    def earn_study(self, hours: float, activity: str) -> float:
        """Credit coins for hackathon or self-study hours.

        Returns:
            Coins credited
        """
        amount = EconomyEngine.study_reward(hours)
        label = activity.replace("_", " ").capitalize()
        reason = const.REASON_STUDY.format(
            activity=label, hours=EconomyEngine.format_number(hours)
        )
        self.add_coins(amount, reason)
        const.LOGGER.info("EconomyManager: %s earned %.2f coins", reason, amount)
        return amount
