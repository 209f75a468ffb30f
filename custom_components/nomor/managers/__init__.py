"""Manager modules for the Nomor integration.

Managers hold state, persist it through the track-scoped store and talk to
each other through dispatcher signals. Rules live in the engines.
"""

from .base_manager import BaseManager
from .challenge_manager import ChallengeManager
from .economy_manager import EconomyManager
from .motivation_manager import MotivationManager
from .session_manager import SessionManager

__all__ = [
    "BaseManager",
    "ChallengeManager",
    "EconomyManager",
    "MotivationManager",
    "SessionManager",
]
