"""
Serialization helpers for form blocks and validation reports.

Converts between Block objects and the wire shape exchanged with the
form-storage service:

    {"id": ..., "type": ..., "groupId": ..., "groupType": ..., "payload": {...}}

and provides JSON/YAML round-trip via the intermediate dict representation.
"""
from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Union

import yaml

from formlogic.model import Block
from formlogic.report import ValidationReport


class BlockFormatError(ValueError):
    """Raised when a block mapping does not have the wire shape."""
    pass


def block_to_dict(b: Block) -> Dict[str, Any]:
    d: Dict[str, Any] = {"id": b.id, "type": b.type}
    if b.group_id is not None:
        d["groupId"] = b.group_id
    if b.group_type is not None:
        d["groupType"] = b.group_type
    d["payload"] = b.payload
    return d


def block_from_dict(d: Dict[str, Any]) -> Block:
    if not isinstance(d, dict):
        raise BlockFormatError(f"Block must be a mapping, got {type(d).__name__}")
    missing = [key for key in ("id", "type") if not d.get(key)]
    if missing:
        raise BlockFormatError(f"Block is missing required keys {missing}: {d!r}")
    payload = d.get("payload") or {}
    if not isinstance(payload, dict):
        raise BlockFormatError(f"Payload of block {d['id']} must be a mapping")
    return Block(
        id=str(d["id"]),
        type=str(d["type"]),
        payload=payload,
        group_id=d.get("groupId"),
        group_type=d.get("groupType"),
    )


def as_blocks(items: Iterable[Union[Block, Dict[str, Any]]]) -> List[Block]:
    """Accept Block objects or wire mappings; return Block objects."""
    return [item if isinstance(item, Block) else block_from_dict(item) for item in items]


def blocks_to_dicts(blocks: Iterable[Block]) -> List[Dict[str, Any]]:
    return [block_to_dict(b) for b in blocks]


def blocks_from_document(doc: Any) -> List[Block]:
    """
    Read blocks from a parsed document.

    Accepts either a plain list of blocks or a form mapping
    with a ``blocks`` key.
    """
    if doc is None:
        return []
    if isinstance(doc, dict):
        if "blocks" not in doc:
            raise BlockFormatError("Form document has no 'blocks' key")
        doc = doc["blocks"] or []
    if not isinstance(doc, list):
        raise BlockFormatError(f"Expected a list of blocks, got {type(doc).__name__}")
    return as_blocks(doc)


def blocks_to_json(blocks: Iterable[Block]) -> str:
    return json.dumps(blocks_to_dicts(blocks), sort_keys=True)


def blocks_from_json(s: str) -> List[Block]:
    return blocks_from_document(json.loads(s))


def blocks_to_yaml(blocks: Iterable[Block]) -> str:
    return yaml.safe_dump(blocks_to_dicts(blocks))


def blocks_from_yaml(s: str) -> List[Block]:
    return blocks_from_document(yaml.safe_load(s))


def report_to_dict(r: ValidationReport) -> Dict[str, Any]:
    return {
        "status": r.status.value,
        "issues": list(r.issues),
        "warnings": list(r.warnings),
        "recommendations": list(r.recommendations),
        "counts": dict(r.counts),
    }


def report_to_json(r: ValidationReport) -> str:
    return json.dumps(report_to_dict(r), indent=2)


def report_to_yaml(r: ValidationReport) -> str:
    return yaml.safe_dump(report_to_dict(r), sort_keys=False)
