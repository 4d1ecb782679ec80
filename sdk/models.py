"""Pydantic data models for the subset of the Telegram Bot API the channel uses.

Every class corresponds to a Telegram Bot API object.  Fields the API may
add later are ignored on validation, so raw updates can be parsed as-is.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class Update(BaseModel):
    """This [object](https://core.telegram.org/bots/api/#available-types) represents an incoming update. At most **one** of the optional parameters can be present in any given update."""

    update_id: int
    message: Optional["Message"] = None
    edited_message: Optional["Message"] = None
    channel_post: Optional["Message"] = None
    edited_channel_post: Optional["Message"] = None
    callback_query: Optional["CallbackQuery"] = None

    model_config = {"populate_by_name": True}


class User(BaseModel):
    """This object represents a Telegram user or bot."""

    id: int
    is_bot: bool
    first_name: str
    last_name: Optional[str] = None
    username: Optional[str] = None
    language_code: Optional[str] = None

    model_config = {"populate_by_name": True}


class Chat(BaseModel):
    """This object represents a chat."""

    id: int
    type: str
    title: Optional[str] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    model_config = {"populate_by_name": True}


class Message(BaseModel):
    """This object represents a message."""

    message_id: int
    date: int
    chat: "Chat"
    from_field: Optional["User"] = Field(None, alias="from")
    sender_chat: Optional["Chat"] = None
    text: Optional[str] = None
    entities: Optional[List["MessageEntity"]] = None
    reply_markup: Optional["InlineKeyboardMarkup"] = None

    model_config = {"populate_by_name": True}


class MessageEntity(BaseModel):
    """This object represents one special entity in a text message. For example, hashtags, usernames, URLs, etc."""

    type: str
    offset: int
    length: int
    url: Optional[str] = None
    user: Optional["User"] = None
    language: Optional[str] = None

    model_config = {"populate_by_name": True}


class ReplyKeyboardMarkup(BaseModel):
    """This object represents a [custom keyboard](https://core.telegram.org/bots#keyboards) with reply options."""

    keyboard: List[List["KeyboardButton"]]
    resize_keyboard: Optional[bool] = False
    one_time_keyboard: Optional[bool] = False
    selective: Optional[bool] = None

    model_config = {"populate_by_name": True}


class KeyboardButton(BaseModel):
    """This object represents one button of the reply keyboard."""

    text: str

    model_config = {"populate_by_name": True}


class ReplyKeyboardRemove(BaseModel):
    """Upon receiving a message with this object, Telegram clients will remove the current custom keyboard and display the default letter-keyboard."""

    remove_keyboard: bool
    selective: Optional[bool] = None

    model_config = {"populate_by_name": True}


class InlineKeyboardMarkup(BaseModel):
    """This object represents an [inline keyboard](https://core.telegram.org/bots#inline-keyboards-and-on-the-fly-updating) that appears right next to the message it belongs to."""

    inline_keyboard: List[List["InlineKeyboardButton"]]

    model_config = {"populate_by_name": True}


class InlineKeyboardButton(BaseModel):
    """This object represents one button of an inline keyboard. You **must** use exactly one of the optional fields."""

    text: str
    url: Optional[str] = None
    callback_data: Optional[str] = None

    model_config = {"populate_by_name": True}


class CallbackQuery(BaseModel):
    """This object represents an incoming callback query from a callback button in an [inline keyboard](/bots#inline-keyboards-and-on-the-fly-updating)."""

    id: str
    from_field: "User" = Field(..., alias="from")
    chat_instance: str
    message: Optional["Message"] = None
    inline_message_id: Optional[str] = None
    data: Optional[str] = None

    model_config = {"populate_by_name": True}


Update.model_rebuild()
Message.model_rebuild()
ReplyKeyboardMarkup.model_rebuild()
InlineKeyboardMarkup.model_rebuild()
CallbackQuery.model_rebuild()
