"""
utils/update_info.py
--------------------
Flattens a telegram.Update into the handful of fields the pipeline,
the rate limiter and the error responder care about.
"""

from dataclasses import dataclass, field
from typing import Optional

from telegram import Update


@dataclass
class UpdateInfo:
    """
    Attributes:
        update_type: 'command', 'text', 'callback_query', 'chat_member' or 'other'.
        user_id: Telegram ID of the sender, if any.
        username: Sender @username, if any.
        chat_id: Chat the update belongs to.
        chat_type: 'private', 'group', 'supergroup' or 'channel'.
        message_id: ID of the message that triggered the update.
        text: Raw message text.
        command: Command name without '/' and '@botname' (case kept).
        command_args: Whitespace-separated words after the command.
        callback_data: Data of the pressed inline button.
    """
    update_type: str = "other"
    user_id: Optional[int] = None
    username: Optional[str] = None
    chat_id: Optional[int] = None
    chat_type: Optional[str] = None
    message_id: Optional[int] = None
    text: Optional[str] = None
    command: Optional[str] = None
    command_args: list[str] = field(default_factory=list)
    callback_data: Optional[str] = None

    @property
    def is_command(self) -> bool:
        return self.update_type == "command"

    @property
    def is_callback(self) -> bool:
        return self.update_type == "callback_query"

    @property
    def is_text(self) -> bool:
        return self.update_type == "text"


def parse_command(text: Optional[str]) -> tuple[Optional[str], list[str]]:
    """
    Split "/cmd@Bot arg1 arg2" into ("cmd", ["arg1", "arg2"]).

    Returns:
        (None, []) when the text is not a command.
    """
    if not text or not text.startswith("/"):
        return None, []
    head, *args = text.split()
    name = head[1:].split("@", 1)[0]
    if not name:
        return None, []
    return name, args


def describe_update(update: Update) -> UpdateInfo:
    """Extract an UpdateInfo from any update kind."""
    user = update.effective_user
    chat = update.effective_chat
    info = UpdateInfo(
        user_id=user.id if user else None,
        username=user.username if user else None,
        chat_id=chat.id if chat else None,
        chat_type=chat.type if chat else None,
    )

    if update.callback_query:
        info.update_type = "callback_query"
        info.callback_data = update.callback_query.data
        message = update.callback_query.message
        info.message_id = message.message_id if message else None
        return info

    if update.my_chat_member or update.chat_member:
        info.update_type = "chat_member"
        return info

    message = update.message
    if message is None:
        return info

    info.message_id = message.message_id
    if message.new_chat_members or message.left_chat_member:
        info.update_type = "chat_member"
        return info

    text = message.text
    if not text:
        return info

    info.text = text
    command, args = parse_command(text)
    if command:
        info.update_type = "command"
        info.command = command
        info.command_args = args
    else:
        info.update_type = "text"
    return info
