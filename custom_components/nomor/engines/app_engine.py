"""App Engine - Pure logic for managed application lists.

This engine provides stateless functions for:
- Creating managed app entries
- Building the auto-categorization prompt
- Parsing the categorization response
- Regrouping apps into game / music / social lists

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
State management belongs in SessionManager.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING
import uuid

from .. import const
from .challenge_engine import ChallengeEngine, ResponseParseError

if TYPE_CHECKING:
    from ..type_defs import ManagedApp

GROUP_GAMES = "games"
GROUP_MUSIC = "music"


class AppEngine:
    """Pure logic engine for managed app lists."""

    @staticmethod
    def empty_lists() -> dict[str, list[ManagedApp]]:
        """Return one empty list per category."""
        return {category: [] for category in const.APP_CATEGORIES}

    @staticmethod
    def create_app(name: str, path: str = "") -> ManagedApp:
        """Create a managed app entry with a fresh id."""
        return {
            const.DATA_APP_ID: uuid.uuid4().hex,
            const.DATA_APP_NAME: name.strip(),
            const.DATA_APP_PATH: path.strip(),
        }

    @staticmethod
    def all_apps(apps: dict[str, list[ManagedApp]]) -> list[ManagedApp]:
        """Flatten the category lists in category order."""
        return [app for category in const.APP_CATEGORIES for app in apps[category]]

    @staticmethod
    def build_categorize_prompt(app_names: list[str]) -> str:
        """Build the prompt that groups managed apps into games/music/other."""
        return (
            "You are an app categorization assistant. Categorize the following "
            'apps into three categories: "games", "music", or "other".\n\n'
            f"Apps to categorize: {', '.join(app_names)}\n\n"
            "Return ONLY a valid JSON object in this exact format (no markdown, "
            "no backticks):\n"
            "{\n"
            '  "games": ["app1.exe", "app2.exe"],\n'
            '  "music": ["app3.exe", "app4.exe"],\n'
            '  "other": ["app5.exe", "app6.exe"]\n'
            "}\n\n"
            "Rules:\n"
            '- "games": Video games, gaming applications, game launchers\n'
            '- "music": Music players, streaming services, audio editing tools\n'
            '- "other": Everything else (social media, productivity, browsers, '
            "etc.)\n\n"
            "Use the exact app names provided. Return only the JSON object."
        )

    @staticmethod
    def parse_categorization(text: str) -> dict[str, set[str]]:
        """Parse a categorization response into name sets.

        Returns:
            {"games": {...}, "music": {...}}; names in neither are "other".

        Raises:
            ResponseParseError: Invalid JSON or not an object.
        """
        try:
            payload = json.loads(ChallengeEngine.strip_code_fences(text))
        except (TypeError, ValueError) as err:
            raise ResponseParseError(
                f"Categorization response is not valid JSON: {err}"
            ) from err
        if not isinstance(payload, dict):
            raise ResponseParseError("Categorization response is not a JSON object")

        def _names(key: str) -> set[str]:
            value = payload.get(key) or []
            if not isinstance(value, list):
                return set()
            return {name for name in value if isinstance(name, str)}

        return {GROUP_GAMES: _names(GROUP_GAMES), GROUP_MUSIC: _names(GROUP_MUSIC)}

    @staticmethod
    def regroup(
        apps: list[ManagedApp], groups: dict[str, set[str]]
    ) -> dict[str, list[ManagedApp]]:
        """Distribute apps by name: games → game, music → music, rest → social."""
        result = AppEngine.empty_lists()
        for app in apps:
            name = app[const.DATA_APP_NAME]
            if name in groups.get(GROUP_GAMES, set()):
                result[const.CATEGORY_GAME].append(app)
            elif name in groups.get(GROUP_MUSIC, set()):
                result[const.CATEGORY_MUSIC].append(app)
            else:
                result[const.CATEGORY_SOCIAL].append(app)
        return result
