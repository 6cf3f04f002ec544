"""Chat domain model - transcript messages and provider results."""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Union


class Author(Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ChatMessage:
    """One entry of the chat transcript; never mutated after insertion."""
    message_id: int
    text: str
    author: Author
    created_at: datetime

    @property
    def is_user(self) -> bool:
        return self.author is Author.USER


@dataclass(frozen=True)
class ChatSuccess:
    """Text generated by the language model."""
    text: str


@dataclass(frozen=True)
class ChatFailure:
    """Why the language model produced no usable reply."""
    reason: str


ChatResult = Union[ChatSuccess, ChatFailure]
