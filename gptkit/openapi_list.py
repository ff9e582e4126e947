"""Detection of OpenAPI documents and listing of their operations."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Iterable

import yaml

LIST_TOOL = "list"
NO_FILTER = "<none>"

_METHODS = ("connect", "delete", "get", "head", "options", "patch", "post", "put", "trace")
_INTEGER = re.compile(r"[+-]?\d+")


@dataclass
class Operation:
    description: str = ""
    summary: str = ""


def _fragment(doc: Any, lenient: bool) -> tuple[dict, str, str] | None:
    if doc is None:
        return {}, "", ""
    if not isinstance(doc, dict):
        return None
    paths = doc.get("paths")
    if paths is None:
        paths = {}
    elif not isinstance(paths, dict):
        return None
    versions = []
    for key in ("swagger", "openapi"):
        value = doc.get(key)
        if value is None:
            value = ""
        elif not isinstance(value, str):
            if not lenient or isinstance(value, (dict, list)):
                return None
            value = str(value)
        versions.append(value)
    return paths, versions[0], versions[1]


def _major(version: str) -> int | None:
    head = version.split(".", 1)[0]
    if not head:
        return None
    return int(head) if _INTEGER.fullmatch(head) else 0


def is_openapi(data: bytes | str) -> int:
    """Return the major OpenAPI version of a JSON or YAML document, or 0 if it is not one."""
    fragment = None
    try:
        fragment = _fragment(json.loads(data), lenient=False)
    except (ValueError, TypeError):
        fragment = None
    if fragment is None:
        try:
            fragment = _fragment(yaml.safe_load(data), lenient=True)
        except yaml.YAMLError:
            return 0
        if fragment is None:
            return 0

    paths, swagger, openapi = fragment
    if not paths:
        return 0
    for version in (openapi, swagger):
        major = _major(version)
        if major is not None:
            return major
    return 0


def _read_char(pattern: str, i: int) -> tuple[str, int]:
    if i >= len(pattern) or pattern[i] in "-]":
        raise ValueError("syntax error in pattern")
    if pattern[i] == "\\":
        i += 1
        if i >= len(pattern):
            raise ValueError("syntax error in pattern")
    return pattern[i], i + 1


def _translate(pattern: str) -> str:
    out: list[str] = []
    i = 0
    while i < len(pattern):
        char = pattern[i]
        if char == "*":
            out.append("[^/]*")
        elif char == "?":
            out.append("[^/]")
        elif char == "\\":
            i += 1
            if i >= len(pattern):
                raise ValueError("syntax error in pattern")
            out.append(re.escape(pattern[i]))
        elif char == "[":
            i += 1
            negated = i < len(pattern) and pattern[i] == "^"
            if negated:
                i += 1
            ranges: list[str] = []
            while True:
                if i >= len(pattern):
                    raise ValueError("syntax error in pattern")
                if pattern[i] == "]" and ranges:
                    break
                lo, i = _read_char(pattern, i)
                if i < len(pattern) and pattern[i] == "-":
                    hi, i = _read_char(pattern, i + 1)
                    if hi < lo:
                        raise ValueError("syntax error in pattern")
                    ranges.append(f"{re.escape(lo)}-{re.escape(hi)}")
                else:
                    ranges.append(re.escape(lo))
            out.append(f"[{'^' if negated else ''}{''.join(ranges)}]")
        else:
            out.append(re.escape(char))
        i += 1
    return "".join(out)


def match_filters(filters: Iterable[str], operation_id: str) -> bool:
    """Report whether an operation id matches any of the shell-style filters."""
    return any(re.fullmatch(_translate(pattern), operation_id, re.DOTALL) for pattern in filters)


def list_operations(document: dict[str, Any], filter: str) -> dict[str, Operation]:  # noqa: A002
    """List the operations of an OpenAPI v3 document, keyed by operation id."""
    operations: dict[str, Operation] = {}
    for path_item in (document.get("paths") or {}).values():
        if not isinstance(path_item, dict):
            continue
        for method in _METHODS:
            operation = path_item.get(method)
            if not isinstance(operation, dict):
                continue
            operation_id = operation.get("operationId") or ""
            if filter and filter != NO_FILTER:
                if "*" in filter:
                    match = match_filters(filter.split("|"), operation_id)
                else:
                    match = operation_id == filter
            else:
                match = True
            if match:
                operations[operation_id] = Operation(
                    description=operation.get("description") or "",
                    summary=operation.get("summary") or "",
                )
    return operations