"""Live progress output for nested tool calls, and readable names for those calls."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from datetime import datetime
from typing import IO, Iterable, Mapping

_MAX_CHILD_LINE = 100


@dataclass
class CallRecord:
    """One tool call in a run, linked to its parent call by id."""

    id: str = ""
    parent_id: str = ""
    tool_id: str = ""
    input: str = ""
    output: str = ""
    start: datetime | None = None
    end: datetime | None = None
    messages: list = field(default_factory=list)

    def __str__(self) -> str:
        return self.id


class LivePrinter:
    """Streams the progress of the foremost active call and queues the rest.

    Only the first active call prints as its content grows; content of calls that
    finish while another is in front is printed once the front call finishes.
    """

    def __init__(self, call_ids: Mapping[str, str] | None = None, out: IO[str] | None = None) -> None:
        self.call_ids: Mapping[str, str] = call_ids if call_ids is not None else {}
        self.last_content: dict[str, str] = {}
        self.active_printers: list[str] = []
        self.to_print: list[str] = []
        self.needs_newline = False
        self._out = out

    @property
    def out(self) -> IO[str]:
        return self._out if self._out is not None else sys.stderr

    def _write(self, text: str) -> None:
        self.out.write(text)

    def end(self) -> None:
        """Finish the current line and forget what the front call printed."""
        if self.needs_newline:
            self._write("\n")
        self.needs_newline = False
        if self.active_printers:
            self.last_content.pop(self.active_printers[0], None)

    def progress_start(self, call_id: str) -> None:
        """Mark a call as active, so its progress may be printed."""
        if call_id not in self.active_printers:
            self.active_printers.append(call_id)
        self.to_print = [queued for queued in self.to_print if queued != call_id]

    def progress_end(self, call_id: str) -> None:
        """Mark a call as done, flushing queued output if it was the front call."""
        remaining: list[str] = []
        for position, active_id in enumerate(self.active_printers):
            if active_id != call_id:
                remaining.append(active_id)
                continue

            if position != 0:
                if active_id not in self.to_print:
                    self.to_print.append(active_id)
                continue

            for queued in self.to_print:
                content = self.last_content.pop(queued, "")
                if content:
                    self._write(content)
                    if not content.endswith("\n"):
                        self._write("\n")

            self.to_print = []
            remaining = self.active_printers[1:]
            if remaining:
                content = self.last_content.get(remaining[0], "")
                if content:
                    self._write(content)
                    self.needs_newline = not content.endswith("\n")
            break
        self.active_printers = remaining

    def format_content(self, content: str, call: CallRecord) -> str:
        """Prefix each line of the content; lines of child calls are shortened."""
        if not content:
            return content
        prefix = f"         content  [{self.call_ids.get(call.id, '')}] content | "
        lines = []
        for line in content.split("\n"):
            if call.parent_id and len(line) > _MAX_CHILD_LINE:
                line = line[:_MAX_CHILD_LINE] + " ..."
            lines.append(prefix + line)
        return "\n".join(lines)

    def print(self, content: str, call: CallRecord) -> None:
        """Record the latest content of a call and print what is new if it is in front."""
        formatted = self.format_content(content, call)
        last = self.last_content.get(call.id, "")
        self.last_content[call.id] = formatted

        if not (self.active_printers and self.active_printers[0] == call.id and formatted):
            return

        if formatted.startswith(last):
            line = formatted[len(last):]
        else:
            line = formatted
            if last:
                self._write("\n")
        if line:
            self._write(line)
            self.needs_newline = not line.endswith("\n")


def call_name(
    call: CallRecord,
    calls: Iterable[CallRecord],
    pretty_ids: Mapping[str, str],
    tool_names: Mapping[str, str],
    category: str = "",
    user_tool_name: str = "",
) -> str:
    """Describe a call as the chain of tool names from below the root down to it.

    tool_names maps a tool id to its display name. A call with a category is
    described by the category and the tool name as the user wrote it, if known.
    """
    if category:
        return f"{category}: {user_tool_name or call.tool_id}"

    all_calls = list(calls)
    names: list[str] = []
    seen: set[int] = set()
    current: CallRecord | None = call
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        name = tool_names.get(current.tool_id, "")
        if current.id != "1":
            name += f"({pretty_ids.get(current.id, '')})"
        names.append(name)
        current = next((parent for parent in all_calls if parent.id == current.parent_id), None)

    names.reverse()
    return "->".join(names[1:]) or "main"