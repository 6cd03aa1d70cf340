# flowaudit/structural/checker.py

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Union

from flowaudit.model.workflow import Workflow
from flowaudit.utils.logger import get_logger

logger = get_logger("structural")


@dataclass
class StructureReport:
    """Outcome of a structural pass: every finding, not just the first."""
    valid: bool
    errors: List[str] = field(default_factory=list)
    # subset of errors that make the graph unusable for further analysis
    irrecoverable: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"valid": self.valid, "errors": list(self.errors)}


def _is_number(x: Any) -> bool:
    if isinstance(x, bool) or not isinstance(x, (int, float)):
        return False
    return not math.isnan(x)


def _is_identifier(x: Any) -> bool:
    """Hashable id usable as a connection key; bools are not ids."""
    return isinstance(x, (str, int)) and not isinstance(x, bool)


def _iter_entries(entries: list):
    """Flat targets, also accepting n8n-style nested target groups."""
    for entry in entries:
        if isinstance(entry, list):
            yield from entry
        else:
            yield entry


def validate_structure(workflow: Union[Workflow, Mapping[str, Any]]) -> StructureReport:
    """
    Walk a workflow and report integrity violations.

    Checks, in order, accumulating all failures:
      1) workflow id, name, nodes is a list, connections is a mapping
      2) per node: string id, name, type, 2-element numeric position
      3) connection sources reference existing nodes
      4) connection targets: string node id that exists, channel type, numeric index

    Duplicate node ids are a quality concern and are not reported here.
    """
    doc = workflow.to_dict() if isinstance(workflow, Workflow) else workflow
    errors: List[str] = []
    fatal: List[str] = []

    if not isinstance(doc, Mapping):
        msg = "Workflow must be an object"
        return StructureReport(valid=False, errors=[msg], irrecoverable=[msg])

    # 1) workflow-level shape
    if not doc.get("id"):
        errors.append("Workflow ID is required")
    if not doc.get("name"):
        errors.append("Workflow name is required")
    nodes = doc.get("nodes")
    if not isinstance(nodes, list):
        fatal.append("Workflow nodes must be an array")
        errors.append(fatal[-1])
        nodes = []
    connections = doc.get("connections")
    if not isinstance(connections, Mapping):
        fatal.append("Workflow connections must be an object")
        errors.append(fatal[-1])
        connections = {}

    # 2) nodes
    node_ids = set()
    for i, node in enumerate(nodes):
        if not isinstance(node, Mapping):
            fatal.append(f"Node {i}: must be an object")
            errors.append(fatal[-1])
            continue
        node_id = node.get("id")
        if not node_id:
            errors.append(f"Node {i}: ID is required")
        else:
            if _is_identifier(node_id):
                node_ids.add(node_id)
            if not isinstance(node_id, str):
                errors.append(f"Node {i}: ID must be a string")
        if not node.get("name"):
            errors.append(f"Node {i}: Name is required")
        if not node.get("type"):
            errors.append(f"Node {i}: Type is required")
        pos = node.get("position")
        if not isinstance(pos, (list, tuple)) or len(pos) != 2 or not all(_is_number(p) for p in pos):
            errors.append(f"Node {i}: Position must be an array of two numbers")

    # 3) + 4) connections
    for source_id, outputs in connections.items():
        if source_id not in node_ids:
            errors.append(f"Connection source node {source_id} not found")
        if not isinstance(outputs, Mapping):
            errors.append(f"Connections for {source_id} must be an object")
            continue

        for channel, entries in outputs.items():
            where = f"{source_id}.{channel}"
            if not isinstance(entries, (list, tuple)):
                errors.append(f"Connections for {where} must be an array")
                continue

            for idx, conn in enumerate(_iter_entries(list(entries))):
                prefix = f"Connection {where}[{idx}]"
                if not isinstance(conn, Mapping):
                    errors.append(f"{prefix}: must be an object")
                    continue
                target = conn.get("node")
                if not target:
                    errors.append(f"{prefix}: Target node is required")
                elif not isinstance(target, str):
                    errors.append(f"{prefix}: Target node must be a string")
                elif target not in node_ids:
                    errors.append(f"{prefix}: Target node {target} not found")
                if not conn.get("type"):
                    errors.append(f"{prefix}: Connection type is required")
                index = conn.get("index")
                if not _is_number(index):
                    errors.append(f"{prefix}: Connection index must be a number")
                elif index < 0:
                    errors.append(f"{prefix}: Connection index must be non-negative")

    if errors:
        logger.debug("structural check found %d problem(s)", len(errors))
    return StructureReport(valid=not errors, errors=errors, irrecoverable=fatal)
