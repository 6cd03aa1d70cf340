# flowaudit/utils/graph.py
from typing import List

import networkx as nx

from flowaudit.model.workflow import Node, Workflow

SENSITIVE_KEYWORDS = ("password", "secret", "key", "token", "auth")
EXPRESSION_MARKERS = ("{{", "$")
TRIGGER_KEYS = ("trigger", "webhook", "cron", "schedule", "interval")


def build_graph(workflow: Workflow) -> nx.DiGraph:
    """
    Directed view of the workflow keyed by node id.
    Edges whose endpoints are not nodes of the workflow are skipped;
    dangling references are reported by the structural validator.
    """
    G = nx.DiGraph()
    for n in workflow.nodes:
        if not isinstance(n.id, (str, int)):
            continue
        G.add_node(n.id, name=n.name, type=n.type)

    for source_id, channel, target in workflow.iter_connections():
        if not isinstance(target.node, (str, int)):
            continue
        if source_id in G and target.node in G:
            G.add_edge(source_id, target.node, channel=channel)
    return G


# ---------- node-kind predicates ----------

def _type(node: Node) -> str:
    return str(node.type or "").lower()


def is_http_node(node: Node) -> bool:
    return "http" in _type(node)


def is_loop_node(node: Node) -> bool:
    t = _type(node)
    return "loop" in t or "repeat" in t


def is_conditional_node(node: Node) -> bool:
    name = node.type_name.lower()
    return name in ("if", "switch") or "condition" in name


def is_error_trigger(node: Node) -> bool:
    return node.type_name.lower() == "errortrigger"


def is_trigger_node(node: Node) -> bool:
    t = _type(node)
    return any(k in t for k in TRIGGER_KEYS)


def is_note_node(node: Node) -> bool:
    """Sticky notes and comments carry no behavior."""
    t = _type(node)
    return "note" in t or "comment" in t


def has_iteration_cap(node: Node) -> bool:
    return bool(node.param("maxIterations") or node.param("limit"))


def has_authentication(node: Node) -> bool:
    auth = node.param("authentication")
    return bool(auth) and auth != "none"


def has_error_handling(node: Node) -> bool:
    return bool(
        node.continue_on_fail
        or node.retry_on_fail
        or node.param("continueOnFail")
        or node.param("retryOnFail")
    )


def has_hardcoded_secret(node: Node) -> bool:
    """
    Literal-looking sensitive data: a sensitive keyword in the serialized
    parameters with no expression marker anywhere in them. The top-level
    `authentication` selector names a credential type and is not scanned.
    """
    text = node.parameters_text(exclude=("authentication",))
    if not text:
        return False
    if any(m in text for m in EXPRESSION_MARKERS):
        return False
    return any(k in text for k in SENSITIVE_KEYWORDS)


def has_default_name(node: Node) -> bool:
    """Display name still embeds the node type, e.g. 'httpRequest1'."""
    type_name = node.type_name
    return bool(isinstance(node.name, str) and type_name and type_name in node.name)


def has_trigger(workflow: Workflow) -> bool:
    return any(is_trigger_node(n) for n in workflow.nodes)


def http_nodes(workflow: Workflow) -> List[Node]:
    return [n for n in workflow.nodes if is_http_node(n)]
