"""
Reply Rules.

Deterministic reply generation for chat messages and the registry of
inline keyboard commands. Both are plain data plus pure functions so the
set of recognized commands can be inspected and tested directly.

Usage:
    text = generate_reply("/start", user)
    text = resolve_callback_reply(callback_query)
"""

from collections.abc import Callable

from modules.backend.domain.markup import InlineButton, ReplyMarkup
from modules.backend.domain.models import DomainUser
from modules.backend.schemas.bot import CallbackQuery

WELCOME_TEXT = "Welcome! I am a helper bot. How can I help you?"
HELP_TEXT = "Available commands:\n/start - start the bot\n/help - show this help"
CALLBACK_HELP_TEXT = "I am a helper bot. Available commands:\n/help - show help\n"

HELP_CALLBACK = "help"

# Exact-match chat commands
COMMAND_REPLIES: dict[str, str] = {
    "/start": WELCOME_TEXT,
    "/help": HELP_TEXT,
}


def generate_reply(text: str, user: DomainUser | None = None) -> str:
    """
    Reply text for an incoming chat message.

    Commands win over everything else; otherwise the sender is greeted by
    first name when it is known, and the text is echoed when it is not.
    """
    if text in COMMAND_REPLIES:
        return COMMAND_REPLIES[text]
    if user is not None and user.first_name:
        return f"Hello, {user.first_name}! You wrote: {text}"
    return f"Echo: {text}"


def reply_markup_for(text: str) -> ReplyMarkup:
    """Keyboard attached to the reply; the welcome message offers a Help button."""
    if text == "/start":
        return ReplyMarkup.inline([[InlineButton("Help", callback_data=HELP_CALLBACK)]])
    return ReplyMarkup.none()


CallbackCommand = Callable[[CallbackQuery], str]


def _help_command(cb: CallbackQuery) -> str:
    return CALLBACK_HELP_TEXT


def unknown_command(cb: CallbackQuery) -> str:
    return f"Unknown command: {cb.data}"


CALLBACK_COMMANDS: dict[str, CallbackCommand] = {
    HELP_CALLBACK: _help_command,
}


def resolve_callback_reply(
    cb: CallbackQuery,
    commands: dict[str, CallbackCommand] | None = None,
) -> str:
    """Reply text for a callback query; unrecognized data never fails."""
    registry = CALLBACK_COMMANDS if commands is None else commands
    return registry.get(cb.data, unknown_command)(cb)
