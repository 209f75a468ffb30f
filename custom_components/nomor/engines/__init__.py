"""Engine modules for the Nomor integration.

Contains pure computation engines:
- app_engine: Managed app entries, auto-categorization prompt and regrouping
- challenge_engine: Streaks, daily rollover, prompts, response parsing, scoring
- economy_engine: Coin arithmetic, history entries, session conversion
"""

# Use relative imports within package to avoid mypy module resolution issues
from .app_engine import AppEngine
from .challenge_engine import ChallengeEngine, QuestionParseError, ResponseParseError
from .economy_engine import EconomyEngine, InsufficientFundsError

__all__ = [
    "AppEngine",
    "ChallengeEngine",
    "EconomyEngine",
    "InsufficientFundsError",
    "QuestionParseError",
    "ResponseParseError",
]
