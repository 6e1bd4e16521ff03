from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Protocol, Tuple

from .models import Chat, MessageEnvelope, User


class UserLookup(Protocol):
    def get(self, user_id: int) -> Optional[User]:
        ...


class ChatLookup(Protocol):
    def get(self, chat_id: int) -> Optional[Chat]:
        ...


class MessageLookup(Protocol):
    def get(self, chat_id: int, message_id: int) -> Optional[MessageEnvelope]:
        ...


@dataclass
class UserStore:
    _users: Dict[int, User] = field(default_factory=dict)

    def add(self, user: User) -> None:
        self._users[user.user_id] = user

    def get(self, user_id: int) -> Optional[User]:
        return self._users.get(user_id)


@dataclass
class ChatStore:
    _chats: Dict[int, Chat] = field(default_factory=dict)

    def add(self, chat: Chat) -> None:
        self._chats[chat.chat_id] = chat

    def get(self, chat_id: int) -> Optional[Chat]:
        return self._chats.get(chat_id)


@dataclass
class MessageStore:
    """In-memory messages keyed by ``(chat_id, message_id)``."""

    _messages: Dict[Tuple[Optional[int], int], MessageEnvelope] = field(
        default_factory=dict
    )

    def add(self, message: MessageEnvelope) -> None:
        self._messages[(message.chat_id, message.message_id)] = message

    def extend(self, messages: Iterable[MessageEnvelope]) -> None:
        for message in messages:
            self.add(message)

    def get(self, chat_id: int, message_id: int) -> Optional[MessageEnvelope]:
        return self._messages.get((chat_id, message_id))
