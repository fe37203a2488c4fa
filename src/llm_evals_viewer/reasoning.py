"""Parsing of the `reasoning` column of evaluation records.

The evaluation pipeline writing `reasoning` is not schema controlled and has
produced several layouts over time:

- a flat list of messages: ``[{"role": ..., "content": ...}, ...]``
- a list of conversations, each a flat list of messages
- a list of conversations, each a list of chats, each a list of messages

`normalize` accepts all of them and always returns the same tree:
conversations -> chats -> messages.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import orjson as json

from llm_evals_viewer.util import safe_render_value

logger = logging.getLogger(__name__)

ASSISTANT_ROLE = "assistant"
UNKNOWN_ROLE = "unknown"

# One level of nested braces only: \boxed{\frac{1}{2}} matches,
# \boxed{\frac{1}{\sqrt{2}}} does not.
BOXED_RE = re.compile(r"\\boxed\{([^{}]*(?:\{[^{}]*\}[^{}]*)*)\}")


@dataclass
class Message:
    role: str
    content: str

    @property
    def is_assistant(self) -> bool:
        return self.role == ASSISTANT_ROLE


@dataclass
class Chat:
    messages: list[Message] = field(default_factory=list)


@dataclass
class Conversation:
    chats: list[Chat] = field(default_factory=list)

    @property
    def messages(self) -> list[Message]:
        return [m for chat in self.chats for m in chat.messages]


@dataclass
class NormalizedReasoning:
    conversations: list[Conversation]
    parse_error: str | None = None


class ReasoningShape(str, Enum):
    NOT_A_LIST = "not_a_list"
    FLAT_MESSAGES = "flat_messages"
    FLAT_OTHER = "flat_other"
    CONVERSATIONS = "conversations"


class ConversationShape(str, Enum):
    FLAT_CHAT = "flat_chat"
    CHAT_LIST = "chat_list"
    INVALID = "invalid"


class ReasoningShapeError(ValueError):
    pass


def is_message(value: Any) -> bool:
    """An object with a `role` or a `content` key.

    Content-only objects count too, they get the `unknown` role; objects
    without either key are not messages.
    """
    return isinstance(value, dict) and ("role" in value or "content" in value)


def coerce_message(value: dict) -> Message:
    role = value.get("role")
    content = value.get("content")
    # plain truthiness: empty [] or {} also fall back, True renders as "True"
    return Message(
        role=safe_render_value(role) if role else UNKNOWN_ROLE,
        content=safe_render_value(content) if content else "",
    )


def classify_shape(parsed: Any) -> ReasoningShape:
    if not isinstance(parsed, list):
        return ReasoningShape.NOT_A_LIST
    if parsed and isinstance(parsed[0], list):
        return ReasoningShape.CONVERSATIONS
    if all(is_message(item) for item in parsed):
        return ReasoningShape.FLAT_MESSAGES
    return ReasoningShape.FLAT_OTHER


def classify_conversation(conversation: Any) -> ConversationShape:
    if not isinstance(conversation, list):
        return ConversationShape.INVALID
    if conversation and is_message(conversation[0]):
        return ConversationShape.FLAT_CHAT
    return ConversationShape.CHAT_LIST


def _messages_of(items: list) -> list[Message]:
    return [coerce_message(item) for item in items if is_message(item)]


def _empty_tree() -> list[Conversation]:
    return [Conversation(chats=[Chat(messages=[])])]


def _build_conversation(idx: int, conversation: Any) -> Conversation:
    shape = classify_conversation(conversation)
    if shape == ConversationShape.FLAT_CHAT:
        return Conversation(chats=[Chat(messages=_messages_of(conversation))])
    if shape == ConversationShape.CHAT_LIST:
        return Conversation(
            chats=[Chat(messages=_messages_of(chat) if isinstance(chat, list) else []) for chat in conversation]
        )
    raise ReasoningShapeError(f"conversation {idx} is a {type(conversation).__name__}, expected a list")


def build_tree(parsed: Any) -> list[Conversation]:
    """Turn already-parsed JSON into the conversation tree.

    Raises ReasoningShapeError when a conversation element is not a list.
    """
    shape = classify_shape(parsed)
    if shape == ReasoningShape.FLAT_MESSAGES:
        return [Conversation(chats=[Chat(messages=_messages_of(parsed))])]
    if shape == ReasoningShape.CONVERSATIONS:
        return [_build_conversation(idx, conversation) for idx, conversation in enumerate(parsed)]
    if shape == ReasoningShape.NOT_A_LIST:
        logger.warning(f"Reasoning is a {type(parsed).__name__}, not a list")
    return _empty_tree()


def normalize(raw: str | bytes | None) -> NormalizedReasoning:
    """Parse a `reasoning` blob; never raises, errors go to `parse_error`."""
    try:
        if raw is None:
            raise ReasoningShapeError("reasoning is empty")
        parsed = json.loads(raw)
        return NormalizedReasoning(conversations=build_tree(parsed))
    except (json.JSONDecodeError, ReasoningShapeError, TypeError) as e:
        logger.warning(f"Error parsing reasoning: {e}")
        return NormalizedReasoning(conversations=[], parse_error=str(e) or "Unknown parsing error")


def extract_boxed_answers(text: str) -> list[str]:
    if not text:
        return []
    return [m.group(1) for m in BOXED_RE.finditer(text)]


def boxed_answer_index(conversations: list[Conversation]) -> dict[int, list[str]]:
    """Boxed answers of assistant messages, per conversation index.

    Conversations without any boxed answer are left out.
    """
    index: dict[int, list[str]] = {}
    for conv_idx, conversation in enumerate(conversations):
        answers: list[str] = []
        for message in conversation.messages:
            if message.is_assistant:
                answers.extend(extract_boxed_answers(message.content))
        if answers:
            index[conv_idx] = answers
    return index
