"""Completion messages and the merging of streamed response chunks into them."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field

from gptkit.chat import ToolCall

ROLE_SYSTEM = "system"
ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"
ROLE_TOOL = "tool"

_NAME_PREFIXES = ("namespace.", "@")


@dataclass
class CompletionFunctionCall:
    name: str = ""
    arguments: str = ""


@dataclass
class CompletionToolCall:
    index: int | None = None
    id: str = ""
    function: CompletionFunctionCall = field(default_factory=CompletionFunctionCall)


@dataclass
class ContentPart:
    text: str = ""
    tool_call: CompletionToolCall | None = None


@dataclass
class Usage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass
class CompletionMessage:
    """A message of a completion conversation."""

    role: str = ""
    content: list[ContentPart] = field(default_factory=list)
    tool_call: CompletionToolCall | None = None
    usage: Usage = field(default_factory=Usage)

    @property
    def text(self) -> str:
        """The text parts of the message joined together."""
        return "".join(part.text for part in self.content if part.tool_call is None)


@dataclass
class StreamDelta:
    """The change a streamed chunk makes to the message being built."""

    role: str = ""
    content: str = ""
    tool_calls: list[ToolCall] = field(default_factory=list)


@dataclass
class StreamResponse:
    """One chunk of a streamed chat completion."""

    id: str = ""
    model: str = ""
    usage: Usage = field(default_factory=Usage)
    choices: list[StreamDelta] = field(default_factory=list)


def _override(left: str, right: str) -> str:
    return right or left


def _trim_name(name: str) -> str:
    for prefix in _NAME_PREFIXES:
        if name.startswith(prefix):
            name = name[len(prefix):]
    return name


def append_message(msg: CompletionMessage, response: StreamResponse) -> CompletionMessage:
    """Return a new message with a streamed chunk merged into it."""
    msg = copy.deepcopy(msg)

    msg.usage.completion_tokens = msg.usage.completion_tokens or response.usage.completion_tokens
    msg.usage.prompt_tokens = msg.usage.prompt_tokens or response.usage.prompt_tokens
    msg.usage.total_tokens = msg.usage.total_tokens or response.usage.total_tokens

    if not response.choices:
        return msg

    delta = response.choices[0]
    msg.role = _override(msg.role, delta.role)

    for position, tool in enumerate(delta.tool_calls):
        idx = tool.index if tool.index is not None else position
        while len(msg.content) <= idx:
            msg.content.append(ContentPart(tool_call=CompletionToolCall(index=len(msg.content))))

        part = msg.content[idx]
        if part.tool_call is None:
            part.tool_call = CompletionToolCall()
        call = part.tool_call
        if tool.index is not None:
            call.index = tool.index
        call.id = _override(call.id, tool.id)
        if call.function.name != tool.function.name:
            call.function.name += tool.function.name
        call.function.name = _trim_name(call.function.name)
        call.function.arguments += tool.function.arguments

    if delta.content:
        for i, part in enumerate(msg.content):
            if part.tool_call is None:
                msg.content[i] = ContentPart(text=part.text + delta.content)
                break
        else:
            msg.content.append(ContentPart(text=delta.content))

    return msg