# flowaudit/analysis/patterns.py
"""Keyword/shape matchers that label a workflow. Labels are advisory, never scored."""

import json
from typing import List

from flowaudit.model.workflow import Workflow
from flowaudit.utils.graph import http_nodes, is_error_trigger, is_trigger_node

MONOLITH_NODE_COUNT = 50


def _type_names(workflow: Workflow) -> List[str]:
    return [n.type_name.lower() for n in workflow.nodes]


def identify_patterns(workflow: Workflow) -> List[str]:
    patterns: List[str] = []
    names = _type_names(workflow)
    types = [str(n.type or "").lower() for n in workflow.nodes]

    if (any(is_trigger_node(n) for n in workflow.nodes)
            and any("transform" in t or name == "set" for t, name in zip(types, names))
            and any("http" in t or "database" in t for t in types)):
        patterns.append("ETL (Extract, Transform, Load)")

    if "webhook" in names:
        patterns.append("Webhook Integration")

    if "scheduletrigger" in names or "cron" in names:
        patterns.append("Scheduled Task")

    if len(http_nodes(workflow)) > 3:
        patterns.append("API Gateway/Proxy")

    if any(is_error_trigger(n) for n in workflow.nodes):
        patterns.append("Error Handling")

    if sum(1 for name in names if name in ("set", "merge", "if")) > 2:
        patterns.append("Data Processing Pipeline")

    return patterns


def _has_hardcoded_url(workflow: Workflow) -> bool:
    for node in workflow.nodes:
        if not node.parameters:
            continue
        text = json.dumps(node.parameters, default=str)
        if ("http://" in text or "https://" in text) and "{{" not in text:
            return True
    return False


def identify_anti_patterns(workflow: Workflow) -> List[str]:
    anti: List[str] = []

    if len(workflow.nodes) > MONOLITH_NODE_COUNT:
        anti.append("Monolithic workflow with too many nodes")

    if _has_hardcoded_url(workflow):
        anti.append("Hardcoded URLs or values")

    if not any(is_error_trigger(n) for n in workflow.nodes) \
            and not (workflow.settings or {}).get("errorWorkflow"):
        anti.append("No error handling mechanism")

    if len(http_nodes(workflow)) > 3:
        anti.append("Multiple sequential HTTP requests that could be parallelized")

    return anti
