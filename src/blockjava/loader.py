"""Load a workspace from its JSON description.

The layout follows Blockly's JSON serialization closely::

    {
      "variables": [{"name": "score", "type": "Number"}],
      "blocks": [
        {"type": "variables_set", "id": "a1", "fields": {"VAR": "score"},
         "inputs": {"VALUE": {"block": {"type": "math_number",
                                        "fields": {"NUM": "0"}}}},
         "next": {"block": {...}}}
      ]
    }

``blocks`` may also be Blockly's ``{"languageVersion": 0, "blocks": [...]}``.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

from blockjava.blocks import (
    VALUE_KINDS,
    Block,
    BlockKind,
    Input,
    InputKind,
    VariableBinding,
    Workspace,
)

# Input names Blockly uses for statement sockets.
_STATEMENT_INPUT = re.compile(r"DO\d*|ELSE|STACK|SUBSTACK\d*")


class LoadError(ValueError):
    """Raised when a workspace description is malformed."""


def load_workspace(path: Path) -> Workspace:
    """Read and parse a workspace JSON file."""
    try:
        return parse_workspace(json.loads(Path(path).read_text(encoding="utf-8")))
    except json.JSONDecodeError as e:
        raise LoadError(f"{path}: invalid JSON: {e}") from e
    except RecursionError:
        raise LoadError(f"{path}: blocks nested too deeply") from None


def parse_workspace(data: Any) -> Workspace:
    if not isinstance(data, dict):
        raise LoadError("workspace must be a JSON object")

    blocks_data = data.get("blocks", [])
    if isinstance(blocks_data, dict):
        blocks_data = blocks_data.get("blocks", [])
    if not isinstance(blocks_data, list):
        raise LoadError("'blocks' must be a list")

    variables: list[VariableBinding] = []
    for var in data.get("variables", []):
        if isinstance(var, str):
            variables.append(VariableBinding(var))
        elif isinstance(var, dict) and "name" in var:
            variables.append(VariableBinding(str(var["name"]), var.get("type")))
        else:
            raise LoadError(f"bad variable entry: {var!r}")

    return Workspace(
        blocks=[parse_block(b) for b in blocks_data],
        variables=variables,
    )


def parse_block(data: Any) -> Block:
    """Build a Block (and everything connected below it) from JSON."""
    first = prev = _parse_one(data)
    # ``next`` chains are walked iteratively; only inputs recurse.
    next_data = data.get("next")
    while next_data:
        if not isinstance(next_data, dict):
            raise LoadError(f"'next' of block '{prev.type}' must be an object")
        data = next_data.get("block", next_data)
        prev.next = _parse_one(data)
        prev = prev.next
        next_data = data.get("next")
    return first


def _parse_one(data: Any) -> Block:
    if not isinstance(data, dict) or "type" not in data:
        raise LoadError(f"block must be an object with a 'type': {data!r}")
    block_type = str(data["type"])

    inputs: list[Input] = []
    for name, spec in (data.get("inputs") or {}).items():
        inputs.append(_parse_input(str(name), spec))

    output = data.get("output")
    if output is None:
        output = BlockKind.from_tag(block_type) in VALUE_KINDS

    return Block(
        type=block_type,
        id=str(data.get("id", "")),
        fields={str(k): _field_text(v) for k, v in (data.get("fields") or {}).items()},
        inputs=inputs,
        output=bool(output),
        output_check=data.get("outputCheck"),
        comment=_comment_text(data),
        mutation=dict(data.get("extraState") or data.get("mutation") or {}),
    )


def _parse_input(name: str, spec: Any) -> Input:
    if not isinstance(spec, dict):
        raise LoadError(f"input '{name}' must be an object")
    if "kind" in spec:
        try:
            kind = InputKind(spec["kind"])
        except ValueError:
            raise LoadError(f"input '{name}' has unknown kind {spec['kind']!r}") from None
    elif _STATEMENT_INPUT.fullmatch(name):
        kind = InputKind.STATEMENT
    else:
        kind = InputKind.VALUE
    # Shadow blocks stand in when nothing real is plugged in.
    target = spec.get("block") or spec.get("shadow")
    return Input(name, kind, parse_block(target) if target else None)


def _field_text(value: Any) -> str:
    # Variable fields serialize as {"id": ..., "name": ...}.
    if isinstance(value, dict):
        return str(value.get("name", value.get("id", "")))
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    return str(value)


def _comment_text(data: dict[str, Any]) -> str | None:
    comment = data.get("comment")
    if isinstance(comment, str):
        return comment
    icons = data.get("icons") or {}
    icon = icons.get("comment")
    if isinstance(icon, dict):
        return icon.get("text")
    return None
