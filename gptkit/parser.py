"""Parser for tool definition files: parameter headers, instructions and skipped text blocks."""

from __future__ import annotations

import re
import struct
from dataclasses import dataclass, field
from typing import Any, Iterator, Union

_SPACE = r"[\t\n\f\r ]"
_SEP = re.compile(rf"{_SPACE}*---+{_SPACE}*")
_STRICT_SEP = "---\n"
_SKIP = re.compile(rf"![-.:0-9A-Za-z_]+{_SPACE}*")
_INTEGER = re.compile(r"[+-]?\d+")

_EXPORT_KEYS = {"export", "exporttool", "exports", "exporttools", "sharetool", "sharetools", "sharedtool", "sharedtools"}
_TOOL_KEYS = {"tool", "tools"}
_INPUT_FILTER_KEYS = {"inputfilter", "inputfilters"}
_EXPORT_INPUT_FILTER_KEYS = {"shareinputfilter", "shareinputfilters", "sharedinputfilter", "sharedinputfilters"}
_OUTPUT_FILTER_KEYS = {"outputfilter", "outputfilters"}
_EXPORT_OUTPUT_FILTER_KEYS = {"shareoutputfilter", "shareoutputfilters", "sharedoutputfilter", "sharedoutputfilters"}
_AGENT_KEYS = {"agent", "agents"}
_GLOBAL_TOOL_KEYS = {"globaltool", "globaltools"}
_EXPORT_CONTEXT_KEYS = {
    "exportcontext", "exportcontexts", "sharecontext", "sharecontexts", "sharedcontext", "sharedcontexts",
}
_ARG_KEYS = {"args", "arg", "param", "params", "parameters", "parameter"}
_MAX_TOKEN_KEYS = {"maxtoken", "maxtokens"}
_JSON_KEYS = {"jsonmode", "json", "jsonoutput", "jsonformat", "jsonresponse"}
_CREDENTIAL_KEYS = {"credentials", "creds", "credential", "cred"}
_EXPORT_CREDENTIAL_KEYS = {
    "sharecredentials", "sharecreds", "sharecredential", "sharecred",
    "sharedcredentials", "sharedcreds", "sharedcredential", "sharedcred",
}

_LIST_FIELDS = {
    "export": _EXPORT_KEYS,
    "tools": _TOOL_KEYS,
    "input_filters": _INPUT_FILTER_KEYS,
    "export_input_filters": _EXPORT_INPUT_FILTER_KEYS,
    "output_filters": _OUTPUT_FILTER_KEYS,
    "export_output_filters": _EXPORT_OUTPUT_FILTER_KEYS,
    "agents": _AGENT_KEYS,
    "global_tools": _GLOBAL_TOOL_KEYS,
    "export_context": _EXPORT_CONTEXT_KEYS,
    "context": {"context"},
}

_RENDERED_LISTS = (
    ("Share Tools", "export"),
    ("Tools", "tools"),
    ("Input Filters", "input_filters"),
    ("Share Input Filters", "export_input_filters"),
    ("Output Filters", "output_filters"),
    ("Share Output Filters", "export_output_filters"),
    ("Agents", "agents"),
    ("Global Tools", "global_tools"),
    ("Share Context", "export_context"),
    ("Context", "context"),
)


class ErrLine(ValueError):
    """An error tied to a line of a parsed file."""

    def __init__(self, path: str, line: int, err: BaseException) -> None:
        self.path = path
        self.line = line
        self.err = err
        if path:
            text = f"line {path}:{line}: {err}"
        else:
            text = f"line {line}: {err}"
        super().__init__(text)


def _to_float32(value: float) -> float:
    try:
        return struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError as exc:
        raise ValueError(f"value out of range: {value}") from exc


def _format_float32(value: float) -> str:
    for precision in range(1, 10):
        text = f"{value:.{precision}g}"
        if _to_float32(float(text)) == value:
            return text
    return repr(value)


@dataclass
class ToolSource:
    location: str = ""
    line_no: int = 0


@dataclass
class Tool:
    """A tool definition as read from a file."""

    name: str = ""
    description: str = ""
    type: str = ""
    model_provider: bool = False
    model_name: str = ""
    global_model_name: str = ""
    internal_prompt: bool | None = None
    chat: bool = False
    export: list[str] = field(default_factory=list)
    tools: list[str] = field(default_factory=list)
    input_filters: list[str] = field(default_factory=list)
    export_input_filters: list[str] = field(default_factory=list)
    output_filters: list[str] = field(default_factory=list)
    export_output_filters: list[str] = field(default_factory=list)
    agents: list[str] = field(default_factory=list)
    global_tools: list[str] = field(default_factory=list)
    export_context: list[str] = field(default_factory=list)
    context: list[str] = field(default_factory=list)
    arguments: dict[str, Any] | None = None
    max_tokens: int = 0
    cache: bool | None = None
    json_response: bool = False
    temperature: float | None = None
    credentials: list[str] = field(default_factory=list)
    export_credentials: list[str] = field(default_factory=list)
    instructions: str = ""
    meta_data: dict[str, str] | None = None
    source: ToolSource = field(default_factory=ToolSource)

    def __str__(self) -> str:
        lines: list[str] = []

        def add(key: str, value: str) -> None:
            lines.append(f"{key}: {value}")

        if self.name:
            add("Name", self.name)
        if self.description:
            add("Description", self.description)
        if self.type:
            add("Type", self.type)
        if self.model_provider:
            add("Model Provider", "true")
        if self.model_name:
            add("Model", self.model_name)
        if self.global_model_name:
            add("Global Model", self.global_model_name)
        if self.internal_prompt is not None:
            add("Internal Prompt", "true" if self.internal_prompt else "false")
        if self.chat:
            add("Chat", "true")
        for key, attr in _RENDERED_LISTS:
            values = getattr(self, attr)
            if values:
                add(key, ", ".join(values))
        if self.arguments:
            for arg_name, prop in (self.arguments.get("properties") or {}).items():
                add("Args", f"{arg_name}: {prop.get('description', '')}")
        if self.max_tokens:
            add("Max Tokens", str(self.max_tokens))
        if self.cache is not None:
            add("Cache", "true" if self.cache else "false")
        if self.json_response:
            add("JSON Response", "true")
        if self.temperature is not None:
            add("Temperature", _format_float32(self.temperature))
        for cred in self.credentials:
            add("Credential", cred)
        for cred in self.export_credentials:
            add("Share Credential", cred)

        out = "\n".join(lines) + "\n" if lines else ""
        if self.instructions:
            out += ("\n" if lines else "") + self.instructions + "\n"
        return out


@dataclass
class TextNode:
    text: str = ""


@dataclass
class ToolNode:
    tool: Tool = field(default_factory=Tool)


Node = Union[TextNode, ToolNode]


@dataclass
class Document:
    nodes: list[Node] = field(default_factory=list)

    @property
    def tools(self) -> list[Tool]:
        """The tools of the document, in order."""
        return [node.tool for node in self.nodes if isinstance(node, ToolNode)]

    def __str__(self) -> str:
        parts: list[str] = []
        last_text = False
        for node in self.nodes:
            if parts:
                if not last_text:
                    parts.append("\n")
                parts.append("---\n")
            if isinstance(node, TextNode):
                parts.append(node.text)
                last_text = True
            else:
                parts.append(str(node.tool))
                last_text = False
        return "".join(parts)


def _normalize(key: str) -> str:
    return key.replace(" ", "").lower().strip()


def _to_bool(value: str) -> bool:
    value = _normalize(value)
    if value in ("true", "t"):
        return True
    if value != "false":
        raise ValueError(f'invalid boolean parameter, must be "true" or "false", got [{value}]')
    return False


def _to_int(value: str) -> int:
    if not _INTEGER.fullmatch(value):
        raise ValueError(f"invalid syntax: {value!r}")
    return int(value)


def _to_float(value: str) -> float:
    if "_" in value:
        raise ValueError(f"invalid syntax: {value!r}")
    return _to_float32(float(value))


def _csv(value: str) -> list[str]:
    return [part.strip() for part in value.split(",")]


def _add_arg(value: str, tool: Tool) -> None:
    if tool.arguments is None:
        tool.arguments = {"type": "object", "properties": {}}
    key, sep, description = value.partition(":")
    if not sep:
        raise ValueError(f"invalid arg format: {value}")
    tool.arguments["properties"][key] = {"description": description.strip(), "type": "string"}


def _apply_param(line: str, tool: Tool) -> bool:
    """Apply a 'key: value' header line to the tool; report whether it was one."""
    key, sep, value = line.partition(":")
    if not sep:
        return False
    value = value.strip()
    key = _normalize(key)

    for attr, keys in _LIST_FIELDS.items():
        if key in keys:
            getattr(tool, attr).extend(_csv(value))
            return True

    if key == "name":
        tool.name = value
    elif key == "modelprovider":
        tool.model_provider = True
    elif key in ("model", "modelname"):
        tool.model_name = value
    elif key in ("globalmodel", "globalmodelname"):
        tool.global_model_name = value
    elif key == "description":
        tool.description = value
    elif key == "internalprompt":
        tool.internal_prompt = _to_bool(value)
    elif key == "chat":
        tool.chat = _to_bool(value)
    elif key in _ARG_KEYS:
        _add_arg(value, tool)
    elif key in _MAX_TOKEN_KEYS:
        tool.max_tokens = _to_int(value)
    elif key == "cache":
        tool.cache = _to_bool(value)
    elif key in _JSON_KEYS:
        tool.json_response = _to_bool(value)
    elif key == "temperature":
        tool.temperature = _to_float(value)
    elif key in _CREDENTIAL_KEYS:
        tool.credentials.append(value)
    elif key in _EXPORT_CREDENTIAL_KEYS:
        tool.export_credentials.append(value)
    elif key == "type":
        tool.type = value.lower()
    else:
        return False
    return True


def is_gptscript_hashbang(line: str) -> bool:
    """Report whether a line is an interpreter line naming gptscript."""
    if not line.startswith("#!"):
        return False
    parts = line.split()
    if parts[0] == "#!gptscript":
        return True
    return len(parts) > 1 and parts[0] in ("#!/usr/bin/env", "#!/bin/env") and parts[1] == "gptscript"


@dataclass
class _Context:
    tool: Tool = field(default_factory=Tool)
    instructions: list[str] = field(default_factory=list)
    in_body: bool = False
    skip_node: bool = False
    skip_lines: list[str] = field(default_factory=list)
    seen_param: bool = False

    def finish(self) -> Iterator[Node]:
        tool = self.tool
        tool.instructions = "".join(self.instructions).strip()
        if (
            tool.instructions
            or tool.name
            or tool.export
            or tool.tools
            or tool.global_model_name
            or tool.global_tools
            or tool.export_input_filters
            or tool.export_output_filters
            or tool.agents
            or tool.chat
        ):
            yield ToolNode(tool=tool)
        if self.skip_node and self.skip_lines:
            yield TextNode(text="".join(self.skip_lines))


def _lines(text: str) -> Iterator[str]:
    parts = text.split("\n")
    if parts and parts[-1] == "":
        parts.pop()
    for part in parts:
        yield part[:-1] if part.endswith("\r") else part


def _parse_nodes(text: str) -> list[Node]:
    nodes: list[Node] = []
    ctx = _Context()

    for line_no, raw in enumerate(_lines(text), start=1):
        if ctx.tool.source.line_no == 0:
            ctx.tool.source.line_no = line_no

        line = raw + "\n"

        if ctx.skip_node:
            if line == _STRICT_SEP:
                nodes.extend(ctx.finish())
                ctx = _Context()
                continue
            ctx.skip_lines.append(line)
            continue

        if _SEP.fullmatch(line):
            nodes.extend(ctx.finish())
            ctx = _Context()
            continue

        if not ctx.in_body:
            if line_no == 1 and is_gptscript_hashbang(line):
                continue
            if line.startswith("#") and not line.startswith("#!"):
                continue
            if not ctx.seen_param and _SKIP.fullmatch(line):
                ctx.skip_lines.append(line)
                ctx.skip_node = True
                continue
            if not line.strip():
                continue
            try:
                is_param = _apply_param(line, ctx.tool)
            except ValueError as exc:
                raise ErrLine("", line_no, exc) from exc
            if is_param:
                ctx.seen_param = True
                continue

        ctx.in_body = True
        ctx.instructions.append(line)

    nodes.extend(ctx.finish())
    return nodes


def _assign_metadata(nodes: list[Node]) -> None:
    metadata: dict[str, dict[str, str]] = {}
    for node in nodes:
        if not isinstance(node, TextNode) or not node.text.startswith("!metadata:"):
            continue
        body = node.text[len("!metadata:"):]
        line, sep, rest = body.partition("\n")
        if not sep:
            continue
        tool_name, sep, meta_key = line.strip().partition(":")
        if not sep:
            continue
        metadata.setdefault(tool_name, {})[meta_key] = rest.strip()

    if not metadata:
        return
    for node in nodes:
        if isinstance(node, ToolNode):
            node.tool.meta_data = metadata.get(node.tool.name)


def _assign_globals(tools: list[Tool]) -> None:
    global_model = ""
    global_tools: list[str] = []
    for tool in tools:
        if tool.global_model_name:
            if global_model:
                raise ValueError("global model name defined multiple times")
            global_model = tool.global_model_name
        for name in tool.global_tools:
            if name not in global_tools:
                global_tools.append(name)

    for tool in tools:
        if global_model and not tool.model_name:
            tool.model_name = global_model
        for name in global_tools:
            if name not in tool.tools:
                tool.tools.append(name)


def parse(text: str, assign_globals: bool = False, location: str = "") -> Document:
    """Parse a tool file into a document of tool and text nodes."""
    nodes = _parse_nodes(text)
    document = Document(nodes=nodes)

    if location:
        for tool in document.tools:
            if not tool.source.location:
                tool.source.location = location

    _assign_metadata(nodes)

    if assign_globals:
        _assign_globals(document.tools)
    return document


def parse_tools(text: str, assign_globals: bool = False, location: str = "") -> list[Tool]:
    """Parse a tool file and return only its tools."""
    return parse(text, assign_globals, location).tools