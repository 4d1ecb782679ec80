"""Confirmation gate for bulk deletions.

A deletion whose arguments contain a ``*`` wildcard may remove many
subscriptions at once, so it is not executed straight away.  Instead the
user gets a yes/no prompt whose "yes" button carries the original command
verbatim as its ``callback_data``.  Pressing it sends the command back as a
callback, which is executed like any other command text.

No pending-confirmation state is kept in this process: the button *is* the
state.  Telegram caps ``callback_data`` at 64 bytes, so a gated command
longer than that cannot be confirmed.  :func:`build_prompt` refuses such
commands instead of truncating them, because a truncated payload would
execute a different command.
"""

from __future__ import annotations

import dataclasses
import re

from sdk.models import InlineKeyboardButton, InlineKeyboardMarkup

CANCEL_PAYLOAD = "CANCEL"
YES_LABEL = "是"
NO_LABEL = "否"

# Telegram rejects callback_data longer than this many UTF-8 bytes.
MAX_CALLBACK_DATA_BYTES = 64

_GATED_COMMAND = re.compile(r"^(?:刪除|刪除作者)+\s.*\*")


class PayloadTooLongError(ValueError):
    """The command does not fit into a button payload."""

    def __init__(self, command: str) -> None:
        self.command = command
        self.size = len(command.encode("utf-8"))
        super().__init__(
            f"command is {self.size} bytes, callback data allows {MAX_CALLBACK_DATA_BYTES}"
        )


@dataclasses.dataclass(frozen=True, slots=True)
class ConfirmationPrompt:
    """The message and buttons asking the user to confirm *yes_payload*."""
    prompt_text: str
    yes_payload: str
    no_payload: str = CANCEL_PAYLOAD

    def reply_markup(self) -> dict:
        """Render the two buttons as an ``InlineKeyboardMarkup`` payload."""
        markup = InlineKeyboardMarkup(
            inline_keyboard=[[
                InlineKeyboardButton(text=YES_LABEL, callback_data=self.yes_payload),
                InlineKeyboardButton(text=NO_LABEL, callback_data=self.no_payload),
            ]]
        )
        return markup.model_dump(exclude_none=True)


def requires_confirmation(text: str) -> bool:
    """Return ``True`` for ``刪除``/``刪除作者`` commands that use a wildcard."""
    return _GATED_COMMAND.match(text) is not None


def build_prompt(command: str) -> ConfirmationPrompt:
    """Build the prompt for *command*.

    Raises:
        PayloadTooLongError: If *command* exceeds :data:`MAX_CALLBACK_DATA_BYTES`.
    """
    if len(command.encode("utf-8")) > MAX_CALLBACK_DATA_BYTES:
        raise PayloadTooLongError(command)
    return ConfirmationPrompt(prompt_text=f"確定{command}？", yes_payload=command)
