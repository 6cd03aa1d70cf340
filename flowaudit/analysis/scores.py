# flowaudit/analysis/scores.py
"""
Advisory 0-10 scores derived from graph shape.

These are a separate axis from the 0-100 category validation scores and are
never folded into them.
"""

from flowaudit.model.workflow import Workflow
from flowaudit.utils.graph import (
    has_authentication,
    has_default_name,
    has_hardcoded_secret,
    has_iteration_cap,
    http_nodes,
    is_conditional_node,
    is_loop_node,
)


def _node_count_bucket(n: int) -> int:
    if n == 0:
        return 0
    if n <= 3:
        return 1
    if n <= 8:
        return 2
    return 3


def _density_bucket(density: float) -> int:
    if density <= 0:
        return 0
    if density <= 1:
        return 1
    if density <= 2:
        return 2
    return 3


def complexity_score(workflow: Workflow) -> float:
    nodes = workflow.nodes
    n = len(nodes)

    score = float(min(_node_count_bucket(n), 5))
    score += min(len({x.type for x in nodes if isinstance(x.type, str) and x.type}) * 0.3, 2)
    density = workflow.connection_count() / max(n, 1)
    score += min(_density_bucket(density), 3)
    if any(is_loop_node(x) for x in nodes):
        score += 2
    if any(is_conditional_node(x) for x in nodes):
        score += 1

    return min(round(score, 1), 10)


def performance_score(workflow: Workflow) -> float:
    score = 10.0
    http_count = len(http_nodes(workflow))

    if http_count > 5:
        score -= 2
    if http_count > 10:
        score -= 3

    score -= 2 * sum(1 for x in workflow.nodes if is_loop_node(x) and not has_iteration_cap(x))

    # sequential-request heuristic: volume only, edges are not inspected
    if http_count > 3:
        score -= 1

    return max(score, 0.0)


def security_score(workflow: Workflow) -> float:
    score = 10.0
    if any(has_hardcoded_secret(x) for x in workflow.nodes):
        score -= 5
    score -= sum(1 for x in http_nodes(workflow) if not has_authentication(x))
    return max(score, 0.0)


def documentation_rate(workflow: Workflow) -> float:
    documented = sum(1 for x in workflow.nodes if x.has_notes())
    return documented / max(len(workflow.nodes), 1)


def maintainability_score(workflow: Workflow) -> float:
    score = 10.0

    rate = documentation_rate(workflow)
    if rate < 0.3:
        score -= 3
    elif rate < 0.6:
        score -= 1

    defaults = sum(1 for x in workflow.nodes if has_default_name(x))
    score -= min(defaults * 0.5, 3)

    if not workflow.description:
        score -= 1

    return max(round(score, 1), 0.0)
