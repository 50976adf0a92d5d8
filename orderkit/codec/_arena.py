"""
Arena codec — cyclic-safe JSON for object graphs.

Every dict/list is stored once in an arena and addressed by index.
Wherever a container occurs in the graph, a {"$ref": n} marker is written,
so shared references and cycles survive the round trip.

    text = encode(graph)
    graph = decode(text)

Wire form:

    {"version": 1, "root": {"$ref": 0}, "arena": [{"dict": {...}}, {"list": [...]}]}
"""

from __future__ import annotations

import json
from typing import Any

VERSION = 1
REF = "$ref"

type Scalar = str | int | float | bool | None
type Graph = dict[str, Any] | list[Any] | Scalar


class CodecError(Exception):
    """Graph cannot be encoded, or text is not a valid arena document."""


# ═══════════════════════════════════════════════════════════════════════════════
# encode()
# ═══════════════════════════════════════════════════════════════════════════════


def encode(graph: Graph) -> str:
    """
    Serialize a graph of dicts, lists and JSON scalars.

    Tuples are written as lists. Anything else raises CodecError.
    """
    arena: list[dict[str, Any] | None] = []
    slots: dict[int, int] = {}
    pending: list[tuple[dict[str, Any] | list[Any] | tuple[Any, ...], int]] = []

    def ref(value: Any) -> Any:
        if value is None or isinstance(value, (str, bool, int, float)):
            return value
        if isinstance(value, (dict, list, tuple)):
            slot = slots.get(id(value))
            if slot is None:
                slot = len(arena)
                slots[id(value)] = slot
                arena.append(None)
                pending.append((value, slot))
            return {REF: slot}
        raise CodecError(f"Cannot encode value of type {type(value).__name__}")

    root = ref(graph)

    while pending:
        container, slot = pending.pop()
        if isinstance(container, dict):
            entry: dict[str, Any] = {}
            for key, value in container.items():
                if not isinstance(key, str):
                    raise CodecError(f"Dict keys must be str, got {type(key).__name__}")
                entry[key] = ref(value)
            arena[slot] = {"dict": entry}
        else:
            arena[slot] = {"list": [ref(value) for value in container]}

    try:
        return json.dumps(
            {"version": VERSION, "root": root, "arena": arena},
            allow_nan=False,
            separators=(",", ":"),
        )
    except ValueError as e:
        raise CodecError(str(e)) from e


# ═══════════════════════════════════════════════════════════════════════════════
# decode()
# ═══════════════════════════════════════════════════════════════════════════════


def decode(text: str) -> Graph:
    """Reverse encode(): same shape, same shared identity, same cycles."""
    try:
        doc = json.loads(text)
    except (TypeError, ValueError) as e:
        raise CodecError(f"Not JSON: {e}") from e

    if not isinstance(doc, dict) or doc.get("version") != VERSION:
        raise CodecError("Not an arena document")
    entries = doc.get("arena")
    if not isinstance(entries, list) or "root" not in doc:
        raise CodecError("Arena document is missing root or arena")

    # Allocate every container first so markers can point forward and back
    containers: list[dict[str, Any] | list[Any]] = []
    for entry in entries:
        if isinstance(entry, dict) and isinstance(entry.get("dict"), dict):
            containers.append({})
        elif isinstance(entry, dict) and isinstance(entry.get("list"), list):
            containers.append([])
        else:
            raise CodecError(f"Malformed arena entry: {entry!r}")

    def resolve(value: Any) -> Any:
        if isinstance(value, dict):
            slot = value.get(REF)
            if len(value) != 1 or not isinstance(slot, int) or isinstance(slot, bool):
                raise CodecError(f"Malformed reference: {value!r}")
            if not 0 <= slot < len(containers):
                raise CodecError(f"Dangling reference: {slot}")
            return containers[slot]
        if isinstance(value, list):
            raise CodecError("Inline list outside the arena")
        return value

    for entry, container in zip(entries, containers):
        if isinstance(container, dict):
            container.update({k: resolve(v) for k, v in entry["dict"].items()})
        else:
            container.extend(resolve(v) for v in entry["list"])

    return resolve(doc["root"])


__all__ = ("CodecError", "Graph", "encode", "decode")
