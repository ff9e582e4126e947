# gptkit

Small, self-contained pieces for working with LLM tool scripts: reading
tool files, looking into OpenAPI documents, keeping a chat within a token
budget, assembling streamed completions and showing the progress of
nested calls.

## Modules

### `gptkit.parser`

Reads tool script text into a `Document` whose `nodes` are `ToolNode`
and `TextNode` entries.

- `parse(text, assign_globals=False, location="")` returns a `Document`.
  Sections are separated by `---` lines. Header lines such as `Name:`,
  `Description:`, `Tools:`, `Args:`, `Max Tokens:`, `Temperature:` or
  `Credential:` fill in the `Tool`. Everything after the header is the
  tool's `instructions`. A section that starts with a `!word` line is kept
  as a `TextNode`. `!metadata:<tool>:<key>` blocks are attached to the
  named tool's `meta_data`. With `assign_globals`, `Global Model` and
  `Global Tools` are applied to every tool. A global model defined twice
  raises `ValueError`.
- `parse_tools(...)` takes the same arguments and returns only the tools.
- `is_gptscript_hashbang(line)` recognises `#!gptscript`,
  `#!/usr/bin/env gptscript` and `#!/bin/env gptscript`.
- A malformed header line, such as a bad boolean or number, raises
  `ErrLine`. It carries `path`, `line` and the underlying `err`.
- `str(document)` and `str(tool)` render the parsed content back as text.

### `gptkit.openapi_list`

- `is_openapi(data)` reads JSON or YAML. It returns the major version
  from the `openapi` or `swagger` field, for example 2 or 3. It returns 0
  when the input is not such a document or has no paths.
- `list_operations(document, filter)` lists the operations of an OpenAPI
  v3 document, given as a dict. The result is a dict of `Operation`
  (description and summary) keyed by operation id. An empty filter, or
  `NO_FILTER`, lists everything. A filter containing `*` is treated as
  shell-style patterns separated by `|`. Any other filter must equal the
  operation id.
- `match_filters(filters, operation_id)` applies the shell-style
  patterns. A malformed pattern raises `ValueError`.

### `gptkit.chat`

Defines the `ChatMessage`, `ChatMessagePart`, `ToolCall` and
`FunctionCall` dataclasses.

- `count_message(msg)` estimates tokens as a third of the message's byte
  length.
- `drop_messages_over_count(max_tokens, msgs)` keeps the leading system
  messages and the most recent messages that fit in a budget of three
  times `max_tokens`. When `max_tokens` is 0, the budget is 300,000. If
  every non-system message would be dropped, the list is returned
  unchanged.

### `gptkit.completion`

Defines `CompletionMessage`, `ContentPart`, `CompletionToolCall`,
`CompletionFunctionCall`, `Usage`, `StreamDelta` and `StreamResponse`.

- `append_message(msg, response)` returns a new message with one streamed
  chunk merged in. The merge fills in the role and the usage, and adds
  tool-call fragments by index. It strips `namespace.` and `@` prefixes
  from function names and appends text to the first text part.

### `gptkit.live`

- `LivePrinter` streams the content of the foremost active call to
  `sys.stderr`, or to the `out` stream it is given. It queues the output
  of other calls until the front call ends. Its methods are
  `progress_start`, `progress_end`, `print`, `format_content` and `end`.
- `CallRecord` holds one call of a run.
- `call_name(call, calls, pretty_ids, tool_names, category="", user_tool_name="")`
  describes a call as the chain of tool names leading to it. It returns
  `main` for the top-level call.

## Example

```python
from gptkit.parser import parse_tools

tools = parse_tools("""
name: hello
tools: sys.echo

Say hello.
""")
print(tools[0].name, tools[0].instructions)
```

## What it does not do

The package only parses, inspects and formats data. It makes no network
requests, so it does not:

- call OpenAPI operations or apply their authentication;
- talk to a chat-completion service;
- fetch tool files from remote repositories;
- run a prompt server.

It has no command-line program and keeps no storage of its own.

## Installing and testing

```
pip install .
pip install ".[test]"
pytest
```