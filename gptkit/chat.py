"""Chat message shapes and token-budget trimming of conversations."""

from __future__ import annotations

from dataclasses import dataclass, field

ROLE_SYSTEM = "system"
ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"
ROLE_TOOL = "tool"

_DEFAULT_BUDGET = 300_000


@dataclass
class FunctionCall:
    name: str = ""
    arguments: str = ""


@dataclass
class ToolCall:
    id: str = ""
    type: str = "function"
    function: FunctionCall = field(default_factory=FunctionCall)
    index: int | None = None


@dataclass
class ChatMessagePart:
    type: str = "text"
    text: str = ""


@dataclass
class ChatMessage:
    role: str = ""
    content: str = ""
    multi_content: list[ChatMessagePart] = field(default_factory=list)
    tool_calls: list[ToolCall] = field(default_factory=list)
    tool_call_id: str = ""
    name: str = ""


def _size(text: str) -> int:
    return len(text.encode("utf-8"))


def count_message(msg: ChatMessage) -> int:
    """Estimate the tokens in a message as a third of its byte length."""
    count = _size(msg.role) + _size(msg.content)
    count += sum(_size(part.text) for part in msg.multi_content)
    count += sum(_size(call.function.name) + _size(call.function.arguments) for call in msg.tool_calls)
    count += _size(msg.tool_call_id)
    return count // 3


def drop_messages_over_count(max_tokens: int, msgs: list[ChatMessage]) -> list[ChatMessage]:
    """Keep the leading system messages and as many recent messages as fit the budget."""
    budget = _DEFAULT_BUDGET if max_tokens == 0 else max_tokens * 3
    result: list[ChatMessage] = []
    last_system = 0
    within_budget = 0

    for i, msg in enumerate(msgs):
        if msg.role != ROLE_SYSTEM:
            break
        budget -= count_message(msg)
        last_system = i
        result.append(msg)

    for i in range(len(msgs) - 1, last_system, -1):
        within_budget = i
        budget -= count_message(msgs[i])
        if budget <= 0:
            break

    if within_budget == len(msgs) - 1:
        # Dropping every non-system message is useless; send them all and let it fail.
        return list(msgs)

    return result + msgs[within_budget:]