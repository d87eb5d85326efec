"""
models/user.py
--------------
Domain model for a Telegram user known to the bot.
"""

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class User:
    """
    A persisted chat user.

    Attributes:
        id: Database primary key.
        telegram_id: Telegram user ID (immutable natural key).
        username: Telegram @username, if any.
        first_name: Display first name.
        last_name: Display last name.
        language_code: Client locale reported by Telegram.
        is_active: False once the user went inactive; flipped back on contact.
        is_blocked: Blocked users get a refusal and nothing else.
        is_premium: Unlocks premium-only features.
        preferences: JSON-serialized preference map.
        last_activity: Timestamp of the last update from this user.
        created_at: Timestamp of the first update from this user.
    """
    id: int
    telegram_id: int
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    language_code: Optional[str] = None
    is_active: bool = True
    is_blocked: bool = False
    is_premium: bool = False
    preferences: str = "{}"
    last_activity: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def preference_map(self) -> dict:
        """Deserialize `preferences`, tolerating garbage in the column."""
        try:
            data = json.loads(self.preferences or "{}")
        except (TypeError, ValueError):
            return {}
        return data if isinstance(data, dict) else {}

    @property
    def display_name(self) -> str:
        return self.first_name or self.username or "أخي الكريم"
