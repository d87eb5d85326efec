"""
handlers/router.py
-------------------
Maps an update to exactly one feature handler.

Lookup order:
    1. commands      - exact name, then regex patterns (e.g. hadith_<id>)
    2. callbacks     - exact data, then prefixes (first registered wins)
    3. free text     - any non-command text message
    4. membership    - chat member joins/leaves and bot membership changes

Every handler is called as ``handler(update, context, session, *groups)``
where ``groups`` are the regex groups of a pattern command.
Unmatched updates are ignored.
"""

import re
from typing import Awaitable, Callable, Optional

from telegram import Update
from telegram.ext import ContextTypes

from utils.logger import get_logger
from utils.update_info import UpdateInfo, describe_update

logger = get_logger(__name__)

Handler = Callable[..., Awaitable[None]]


class Router:
    """Registration and pure lookup of feature handlers."""

    def __init__(self):
        self._commands: dict[str, Handler] = {}
        self._command_patterns: list[tuple[re.Pattern, Handler]] = []
        self._callbacks: dict[str, Handler] = {}
        self._callback_prefixes: list[tuple[str, Handler]] = []
        self._text_handler: Optional[Handler] = None
        self._membership_handler: Optional[Handler] = None

    # ── REGISTRATION ──────────────────────────────────────

    def command(self, names, handler: Handler) -> None:
        """Register one command name (or a list of aliases), without the slash."""
        if isinstance(names, str):
            names = [names]
        for name in names:
            self._commands[name.lower()] = handler

    def command_pattern(self, pattern: str, handler: Handler) -> None:
        """Register a regex matched in full against the command name."""
        self._command_patterns.append((re.compile(pattern), handler))

    def callback(self, data, handler: Handler) -> None:
        if isinstance(data, str):
            data = [data]
        for item in data:
            self._callbacks[item] = handler

    def callback_prefix(self, prefix: str, handler: Handler) -> None:
        self._callback_prefixes.append((prefix, handler))

    def text(self, handler: Handler) -> None:
        self._text_handler = handler

    def membership(self, handler: Handler) -> None:
        self._membership_handler = handler

    # ── LOOKUP ────────────────────────────────────────────

    def resolve(self, info: UpdateInfo) -> Optional[tuple[Handler, tuple]]:
        """
        Find the handler for an update.

        Returns:
            ``(handler, extra_args)`` or None when nothing matches.
        """
        if info.is_command:
            name = info.command or ""
            handler = self._commands.get(name.lower())
            if handler:
                return handler, ()
            for pattern, handler in self._command_patterns:
                match = pattern.fullmatch(name)
                if match:
                    return handler, match.groups()
            return None

        if info.is_callback:
            data = info.callback_data or ""
            handler = self._callbacks.get(data)
            if handler:
                return handler, ()
            for prefix, handler in self._callback_prefixes:
                if data.startswith(prefix):
                    return handler, ()
            return None

        if info.is_text and self._text_handler:
            return self._text_handler, ()

        if info.update_type == "chat_member" and self._membership_handler:
            return self._membership_handler, ()

        return None

    async def dispatch(
        self,
        update: Update,
        context: ContextTypes.DEFAULT_TYPE,
        session=None,
        info: Optional[UpdateInfo] = None,
    ) -> bool:
        """
        Run the matching handler.

        Returns:
            True if a handler ran, False if the update was ignored.
        """
        info = info or describe_update(update)
        route = self.resolve(info)
        if route is None:
            logger.debug(
                f"No handler for {info.update_type} "
                f"(command={info.command}, callback={info.callback_data})"
            )
            return False
        handler, args = route
        await handler(update, context, session, *args)
        return True
