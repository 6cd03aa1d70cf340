# flowaudit/confidence/scorer.py
"""
Weighted-factor confidence for a single recommendation.

The scorer is domain-agnostic arithmetic: each call site supplies its own
factor set (lookup tables, substring patterns, format regexes) and gets back
a 0.0-1.0 value, a band label and a readable reason.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Sequence, Union

from flowaudit.model.workflow import Workflow

# (upper bound, label), checked in order
CONFIDENCE_BANDS = (
    (0.4, "Very Low"),
    (0.6, "Low"),
    (0.8, "Medium"),
    (0.9, "High"),
)
TOP_BAND = "Very High"


@dataclass
class ConfidenceFactor:
    name: str
    weight: float
    matched: bool
    description: str = ""


@dataclass
class ConfidenceScore:
    value: float
    reason: str
    level: str
    factors: List[ConfidenceFactor] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "value": self.value,
            "reason": self.reason,
            "level": self.level,
            "factors": [vars(f).copy() for f in self.factors],
        }


FactorLike = Union[ConfidenceFactor, Mapping[str, Any]]


def confidence_level(score: float) -> str:
    for upper, label in CONFIDENCE_BANDS:
        if score < upper:
            return label
    return TOP_BAND


def _as_factor(i: int, f: FactorLike) -> ConfidenceFactor:
    if isinstance(f, ConfidenceFactor):
        return f
    return ConfidenceFactor(
        name=str(f.get("name") or f"factor-{i + 1}"),
        weight=float(f["weight"]),
        matched=bool(f["matched"]),
        description=str(f.get("description", "")),
    )


def score_confidence(factors: Iterable[FactorLike]) -> ConfidenceScore:
    """score = sum(weight * matched) / sum(weight), rounded to two decimals."""
    items = [_as_factor(i, f) for i, f in enumerate(factors)]
    total = sum(f.weight for f in items)
    matched = sum(f.weight for f in items if f.matched)
    value = round(matched / total, 2) if total > 0 else 0.0

    level = confidence_level(value)
    n_matched = sum(1 for f in items if f.matched)
    reason = f"{level} confidence ({round(value * 100)}%) - {n_matched} of {len(items)} factors matched"
    return ConfidenceScore(value=value, reason=reason, level=level, factors=items)


# ---------- call-site factor sets ----------

KNOWN_RESOURCE_LOCATOR_FIELDS = {
    "n8n-nodes-base.httpRequest": ("url", "baseUrl", "endpoint"),
    "n8n-nodes-base.webhook": ("path", "webhookUrl"),
    "n8n-nodes-base.slack": ("channel", "channelId"),
    "n8n-nodes-base.googleSheets": ("documentId", "sheetName"),
    "n8n-nodes-base.postgres": ("table", "schema"),
    "n8n-nodes-base.mysql": ("table", "database"),
    "n8n-nodes-base.mongodb": ("collection", "database"),
}

RESOURCE_LOCATOR_PATTERNS = (
    "url", "path", "endpoint", "table", "collection", "sheet",
    "channel", "database", "schema", "id", "name",
)

COMMON_NODE_TYPES = (
    "n8n-nodes-base.httpRequest",
    "n8n-nodes-base.webhook",
    "n8n-nodes-base.set",
    "n8n-nodes-base.if",
    "n8n-nodes-base.slack",
    "n8n-nodes-base.googleSheets",
)

_URL_RE = re.compile(r"^https?://")
_PATH_RE = re.compile(r"^/[a-zA-Z0-9_/-]+$")
_ID_RE = re.compile(r"^[a-zA-Z0-9_-]+$")


def _looks_like_locator(value: str) -> bool:
    if _URL_RE.match(value) or _PATH_RE.match(value) or _ID_RE.match(value):
        return True
    return "{{" in value and "}}" in value


def score_resource_locator(field_name: str, node_type: str, value: str) -> ConfidenceScore:
    """Is `field_name` of `node_type` likely a resource-locator field?"""
    lowered = field_name.lower()
    return score_confidence([
        ConfidenceFactor(
            "exact-field-match", 0.5,
            field_name in KNOWN_RESOURCE_LOCATOR_FIELDS.get(node_type, ()),
            f"Field name '{field_name}' is known to use resource locator in {node_type}",
        ),
        ConfidenceFactor(
            "field-pattern", 0.3,
            any(p in lowered for p in RESOURCE_LOCATOR_PATTERNS),
            f"Field name '{field_name}' matches common resource locator patterns",
        ),
        ConfidenceFactor(
            "value-format", 0.2,
            _looks_like_locator(value),
            "Value format suggests resource locator usage",
        ),
    ])


def score_node_type_suggestion(search_term: str, node_type: str, context: str = "") -> ConfidenceScore:
    """Does suggested `node_type` match what the user searched for?"""
    term = search_term.lower()
    type_name = node_type.split(".")[-1].lower()
    context_words = [w for w in context.lower().split() if w]
    type_parts = [p for p in node_type.lower().split(".") if p]

    return score_confidence([
        ConfidenceFactor(
            "exact-name-match", 0.4, type_name == term,
            "Exact match between search term and node type",
        ),
        ConfidenceFactor(
            "partial-name-match", 0.3, bool(term) and (term in type_name or type_name in term),
            "Partial match between search term and node type",
        ),
        ConfidenceFactor(
            "context-relevance", 0.2,
            any(w in p or p in w for w in context_words for p in type_parts),
            "Node type is relevant to the given context",
        ),
        ConfidenceFactor(
            "common-usage", 0.1, node_type in COMMON_NODE_TYPES,
            "Node type is commonly used",
        ),
    ])


def score_workflow_validation(workflow: Workflow, findings: Sequence[Mapping[str, Any]]) -> ConfidenceScore:
    """
    How much to trust a workflow given validation findings, each a mapping
    with a "type" of "error" or "warning".
    """
    nodes = workflow.nodes
    complete = bool(nodes) and workflow.connection_count() > 0
    best_practices = bool(nodes) and all(str(n.name or "").strip() for n in nodes) and any(
        "trigger" in str(n.type or "").lower() or "webhook" in str(n.type or "").lower()
        for n in nodes
    )
    return score_confidence([
        ConfidenceFactor(
            "no-errors", 0.4, not any(f.get("type") == "error" for f in findings),
            "Workflow has no validation errors",
        ),
        ConfidenceFactor(
            "no-warnings", 0.3, not any(f.get("type") == "warning" for f in findings),
            "Workflow has no validation warnings",
        ),
        ConfidenceFactor(
            "complete-structure", 0.2, complete,
            "Workflow has complete structure (nodes, connections)",
        ),
        ConfidenceFactor(
            "best-practices", 0.1, best_practices,
            "Workflow follows best practices",
        ),
    ])
