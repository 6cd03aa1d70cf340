# flowaudit/model/mutate.py
"""
Copy-on-write edits of a Workflow.

Every function takes a Workflow and returns a new one; the input is never
modified. Connections are only checked for shape here. Whether their
endpoints exist is the structural validator's business, so edits compose on
partially built graphs.
"""

from __future__ import annotations

import uuid
from dataclasses import fields, replace
from typing import Any, Dict, Mapping, Optional, Tuple

from flowaudit.model.errors import DuplicateIdentifier, NodeNotFound
from flowaudit.model.workflow import (
    NODE_FIELD_ALIASES,
    ConnectionTarget,
    Connections,
    Node,
    Workflow,
)
from flowaudit.utils.logger import get_logger

logger = get_logger("mutate")

_NODE_ATTRS = {f.name for f in fields(Node)}


def _copy_connections(connections: Connections) -> Connections:
    # targets are tuples, so a two-level dict copy is enough
    return {src: dict(outputs) for src, outputs in connections.items()}


# ---------- factories ----------

def create_empty_workflow(name: str, description: Optional[str] = None) -> Workflow:
    settings: Dict[str, Any] = {}
    if description:
        settings["description"] = description
    return Workflow(id=str(uuid.uuid4()), name=name, settings=settings)


def create_node(
    type: str,
    name: str,
    position: Tuple[float, float] = (0, 0),
    parameters: Optional[Dict[str, Any]] = None,
    type_version: int = 1,
) -> Node:
    return Node(
        id=str(uuid.uuid4()),
        name=name,
        type=type,
        type_version=type_version,
        position=tuple(position),
        parameters=dict(parameters or {}),
    )


# ---------- lookups ----------

def find_node_by_id(workflow: Workflow, node_id: str) -> Optional[Node]:
    return workflow.get_node(node_id)


def find_node_by_name(workflow: Workflow, name: str) -> Optional[Node]:
    for n in workflow.nodes:
        if n.name == name:
            return n
    return None


def workflow_stats(workflow: Workflow) -> Dict[str, Any]:
    return {
        "node_count": len(workflow.nodes),
        "node_types": sorted({str(n.type) for n in workflow.nodes if n.type}),
        "connection_count": workflow.connection_count(),
        "is_active": workflow.active,
    }


# ---------- nodes ----------

def add_node(workflow: Workflow, node: Node) -> Workflow:
    if node.id in workflow.node_ids():
        raise DuplicateIdentifier(node.id)
    return replace(workflow, nodes=workflow.nodes + (node,))


def remove_node(workflow: Workflow, node_id: str) -> Workflow:
    """
    Remove a node and every connection touching it.

    The source entry of the node is dropped; in all other entries, targets
    pointing at the node are filtered out. Channel keys stay, possibly with an
    empty target tuple.
    """
    connections: Connections = {}
    for source_id, outputs in workflow.connections.items():
        if source_id == node_id:
            continue
        connections[source_id] = {
            channel: tuple(t for t in targets if t.node != node_id)
            for channel, targets in outputs.items()
        }
    return replace(
        workflow,
        nodes=tuple(n for n in workflow.nodes if n.id != node_id),
        connections=connections,
    )


def _normalize_updates(updates: Mapping[str, Any]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Split updates into dataclass attributes and extra (unknown) keys."""
    attrs: Dict[str, Any] = {}
    extra: Dict[str, Any] = {}
    for key, value in updates.items():
        attr = NODE_FIELD_ALIASES.get(key, key)
        if attr == "extra":
            extra.update(value or {})
        elif attr in _NODE_ATTRS:
            attrs[attr] = tuple(value) if attr == "position" and isinstance(value, list) else value
        else:
            extra[key] = value
    return attrs, extra


def update_node(
    workflow: Workflow,
    node_id: str,
    updates: Mapping[str, Any],
    strict: bool = False,
) -> Workflow:
    """
    Shallow-merge `updates` into the node `node_id`.

    Keys may be attribute names (`continue_on_fail`) or persisted keys
    (`continueOnFail`); anything else is merged into the node's `extra`.
    An unknown id returns the workflow unchanged unless `strict` is set,
    in which case NodeNotFound is raised. Changing the id rewrites every
    connection that names the node.
    """
    target = workflow.get_node(node_id)
    if target is None:
        if strict:
            raise NodeNotFound(node_id)
        logger.warning("update_node: node '%s' not found, workflow left unchanged", node_id)
        return workflow

    attrs, extra = _normalize_updates(updates)
    new_id = attrs.get("id", node_id)
    if new_id != node_id and new_id in workflow.node_ids():
        raise DuplicateIdentifier(new_id)
    if extra:
        attrs["extra"] = {**target.extra, **extra}

    updated = replace(target, **attrs)
    connections = workflow.connections
    if new_id != node_id:
        connections = _rename_in_connections(connections, node_id, new_id)
    return replace(
        workflow,
        nodes=tuple(updated if n is target else n for n in workflow.nodes),
        connections=connections,
    )


def _rename_in_connections(connections: Connections, old_id: str, new_id: str) -> Connections:
    """Re-key the source entry and retarget every edge naming `old_id`."""
    out: Connections = {}
    for source_id, outputs in connections.items():
        out[new_id if source_id == old_id else source_id] = {
            channel: tuple(replace(t, node=new_id) if t.node == old_id else t for t in targets)
            for channel, targets in outputs.items()
        }
    return out


# ---------- connections ----------

def add_connection(
    workflow: Workflow,
    source_id: str,
    source_channel: str,
    target_id: str,
    target_channel: str,
    target_index: int = 0,
) -> Workflow:
    if not source_channel or not target_channel:
        raise ValueError("Connection channels must be non-empty strings")
    if target_index < 0:
        raise ValueError(f"Connection index must be non-negative, got {target_index}")

    connections = _copy_connections(workflow.connections)
    outputs = connections.setdefault(source_id, {})
    outputs[source_channel] = outputs.get(source_channel, ()) + (
        ConnectionTarget(node=target_id, type=target_channel, index=target_index),
    )
    return replace(workflow, connections=connections)


def remove_connection(
    workflow: Workflow,
    source_id: str,
    source_channel: str,
    target_id: str,
    target_channel: str,
    target_index: int = 0,
) -> Workflow:
    """Remove targets matching node, channel and index exactly. No-op if absent."""
    targets = workflow.connections.get(source_id, {}).get(source_channel)
    if targets is None:
        return workflow

    wanted = ConnectionTarget(node=target_id, type=target_channel, index=target_index)
    connections = _copy_connections(workflow.connections)
    connections[source_id][source_channel] = tuple(t for t in targets if t != wanted)
    return replace(workflow, connections=connections)
