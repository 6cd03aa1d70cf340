# flowaudit/model/workflow.py
"""
Immutable workflow graph model.

A workflow is an ordered sequence of typed nodes plus a connection map keyed
by source node id and output channel:

    connections[source_id][output_channel] = (ConnectionTarget, ...)

All values are frozen snapshots. Editing goes through flowaudit.model.mutate,
which always returns a new Workflow.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

# persisted (camelCase) key -> attribute name
NODE_FIELD_ALIASES = {
    "typeVersion": "type_version",
    "continueOnFail": "continue_on_fail",
    "retryOnFail": "retry_on_fail",
    "maxTries": "max_tries",
}

_NODE_KEYS = (
    "id", "name", "type", "typeVersion", "position", "parameters",
    "disabled", "continueOnFail", "retryOnFail", "maxTries", "notes",
)
_WORKFLOW_KEYS = ("id", "name", "nodes", "connections", "active", "settings")

Connections = Dict[str, Dict[str, Tuple["ConnectionTarget", ...]]]


@dataclass(frozen=True)
class ConnectionTarget:
    """One fan-out target of a source output channel."""
    node: str
    type: str = "main"  # input channel on the target
    index: int = 0

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "ConnectionTarget":
        # keep raw values; the structural validator reports bad ones
        return cls(node=d.get("node"), type=d.get("type"), index=d.get("index"))

    def to_dict(self) -> Dict[str, Any]:
        return {"node": self.node, "type": self.type, "index": self.index}


@dataclass(frozen=True)
class Node:
    id: Optional[str]
    name: Optional[str]
    type: Optional[str]
    type_version: int = 1
    position: Tuple[float, float] = (0, 0)
    parameters: Dict[str, Any] = field(default_factory=dict)
    disabled: bool = False
    continue_on_fail: bool = False
    retry_on_fail: bool = False
    max_tries: Optional[int] = None
    notes: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def type_name(self) -> str:
        """Trailing dotted segment of the type, e.g. 'httpRequest'."""
        return str(self.type or "").split(".")[-1]

    def parameters_text(self, exclude: Tuple[str, ...] = ()) -> str:
        """
        Serialized, lower-cased view of the parameter bag.

        Analyzers pattern-match this text instead of parsing parameters into a
        per-node-type schema. Top-level keys listed in `exclude` are dropped.
        """
        params = self.parameters
        if isinstance(params, dict) and exclude:
            params = {k: v for k, v in params.items() if k not in exclude}
        if not params:
            return ""
        return json.dumps(params, sort_keys=True, default=str).lower()

    def param(self, key: str, default: Any = None) -> Any:
        if isinstance(self.parameters, dict):
            return self.parameters.get(key, default)
        return default

    def has_notes(self) -> bool:
        return bool(self.notes and str(self.notes).strip())

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Node":
        position = d.get("position")
        if isinstance(position, list):
            position = tuple(position)
        params = d.get("parameters")
        return cls(
            id=d.get("id"),
            name=d.get("name"),
            type=d.get("type"),
            type_version=d.get("typeVersion", 1),
            position=position,
            parameters={} if params is None else params,
            disabled=bool(d.get("disabled", False)),
            continue_on_fail=bool(d.get("continueOnFail", False)),
            retry_on_fail=bool(d.get("retryOnFail", False)),
            max_tries=d.get("maxTries"),
            notes=d.get("notes"),
            extra={k: v for k, v in d.items() if k not in _NODE_KEYS},
        )

    def to_dict(self) -> Dict[str, Any]:
        position = self.position
        if isinstance(position, tuple):
            position = list(position)
        out: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "typeVersion": self.type_version,
            "position": position,
            "parameters": self.parameters,
        }
        if self.disabled:
            out["disabled"] = True
        if self.continue_on_fail:
            out["continueOnFail"] = True
        if self.retry_on_fail:
            out["retryOnFail"] = True
        if self.max_tries is not None:
            out["maxTries"] = self.max_tries
        if self.notes is not None:
            out["notes"] = self.notes
        out.update(self.extra)
        return out


def _targets_from_raw(entries: Any) -> Tuple[ConnectionTarget, ...]:
    """
    Accept both the flat shape  [ {node...}, {node...} ]
    and the n8n export shape    [ [ {node...} ], [ {node...} ] ].
    """
    out = []
    if not isinstance(entries, list):
        return ()
    for entry in entries:
        if isinstance(entry, Mapping):
            out.append(ConnectionTarget.from_dict(entry))
        elif isinstance(entry, list):
            out.extend(ConnectionTarget.from_dict(e) for e in entry if isinstance(e, Mapping))
    return tuple(out)


@dataclass(frozen=True)
class Workflow:
    id: Optional[str]
    name: Optional[str]
    nodes: Tuple[Node, ...] = ()
    connections: Connections = field(default_factory=dict)
    active: bool = False
    settings: Dict[str, Any] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)

    # ---------- lookups ----------
    def node_ids(self) -> set:
        return {n.id for n in self.nodes}

    def get_node(self, node_id: str) -> Optional[Node]:
        for n in self.nodes:
            if n.id == node_id:
                return n
        return None

    def iter_connections(self) -> Iterator[Tuple[str, str, ConnectionTarget]]:
        """Yield (source_id, output_channel, target) for every edge."""
        for source_id, outputs in self.connections.items():
            for channel, targets in outputs.items():
                for target in targets:
                    yield source_id, channel, target

    def connection_count(self) -> int:
        return sum(1 for _ in self.iter_connections())

    @property
    def description(self) -> Optional[str]:
        desc = (self.settings or {}).get("description") or self.extra.get("description")
        return desc if desc and str(desc).strip() else None

    # ---------- (de)serialization ----------
    @classmethod
    def from_dict(cls, doc: Mapping[str, Any]) -> "Workflow":
        nodes = doc.get("nodes") or []
        raw_conns = doc.get("connections") or {}
        connections: Connections = {}
        if isinstance(raw_conns, Mapping):
            for source_id, outputs in raw_conns.items():
                if not isinstance(outputs, Mapping):
                    continue
                connections[source_id] = {
                    channel: _targets_from_raw(entries) for channel, entries in outputs.items()
                }
        settings = doc.get("settings")
        return cls(
            id=doc.get("id"),
            name=doc.get("name"),
            nodes=tuple(Node.from_dict(n) for n in nodes if isinstance(n, Mapping)),
            connections=connections,
            active=bool(doc.get("active", False)),
            settings=dict(settings) if isinstance(settings, Mapping) else {},
            extra={k: v for k, v in doc.items() if k not in _WORKFLOW_KEYS},
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "nodes": [n.to_dict() for n in self.nodes],
            "connections": {
                source_id: {
                    channel: [t.to_dict() for t in targets]
                    for channel, targets in outputs.items()
                }
                for source_id, outputs in self.connections.items()
            },
            "active": self.active,
            "settings": dict(self.settings),
        }
        out.update(self.extra)
        return out
