"""
JSON I/O for statement trees, stage registries and call graphs.

Trees are stored as nested objects tagged with their node kind:
    {"kind": "ProducerScope", "name": "g", "body": {...}}
"""

import os
import json

from .. import ir
from ..core import make_registry

_NODE_CLASSES = {cls.__name__: cls for cls in ir.NODE_TYPES}


def tree_to_dict(node):
    """Converts a statement tree into JSON-compatible nested dicts."""
    payload = {"kind": type(node).__name__}
    for field in node._fields:
        payload[field] = _field_to_json(getattr(node, field))
    return payload


def _field_to_json(value):
    if isinstance(value, ir.IRNode):
        return tree_to_dict(value)
    if isinstance(value, (list, tuple)):
        return [_field_to_json(v) for v in value]
    return value


def tree_from_dict(payload):
    """Rebuilds a statement tree from tree_to_dict() output."""
    if not isinstance(payload, dict):
        raise ValueError(f"Tree node must be an object, got {type(payload).__name__}")
    kind = payload.get("kind")
    cls = _NODE_CLASSES.get(kind) if isinstance(kind, str) else None
    if cls is None:
        raise ValueError(f"Unknown node kind: {kind}")
    kwargs = {}
    for field in cls._fields:
        if field in payload:
            kwargs[field] = _field_from_json(payload[field])
    try:
        return cls(**kwargs)
    except TypeError as e:
        raise ValueError(f"Malformed {kind} node: {e}") from e


def _field_from_json(value):
    if isinstance(value, dict):
        return tree_from_dict(value)
    if isinstance(value, list):
        return [_field_from_json(v) for v in value]
    return value


def _write_json(payload, path):
    # Ensure output directory exists
    output_dir = os.path.dirname(path)
    if output_dir and not os.path.exists(output_dir):
        os.makedirs(output_dir, exist_ok=True)
    with open(path, "w") as f:
        json.dump(payload, f, indent=2)


def _read_json(path, what):
    if not os.path.exists(path):
        raise FileNotFoundError(f"{what} file not found: {path}")
    with open(path, "r") as f:
        return json.load(f)


def save_tree(tree, path):
    """Saves a statement tree as JSON."""
    _write_json(tree_to_dict(tree), path)


def load_tree(path):
    """Loads a statement tree from JSON."""
    return tree_from_dict(_read_json(path, "Tree"))


def save_registry(stages, path):
    """Saves a stage registry as {name: update_count}."""
    registry = make_registry(stages)
    _write_json({name: info.update_count for name, info in registry.items()}, path)


def load_registry(path):
    payload = _read_json(path, "Registry")
    if not isinstance(payload, dict):
        raise ValueError(f"Registry file must hold an object, got {type(payload).__name__}")
    return make_registry(payload)


def save_call_graph(call_graph, path):
    _write_json({caller: list(callees) for caller, callees in call_graph.items()}, path)


def load_call_graph(path):
    """Loads a call graph saved as {caller: [callee, ...]}."""
    payload = _read_json(path, "Call graph")
    if not isinstance(payload, dict) or not all(
        isinstance(v, list) for v in payload.values()
    ):
        raise ValueError("Call graph file must map callers to lists of callees")
    return {caller: list(callees) for caller, callees in payload.items()}
