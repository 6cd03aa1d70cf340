# flowaudit/analysis/analyzer.py

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from flowaudit.analysis.patterns import identify_anti_patterns, identify_patterns
from flowaudit.analysis.scores import (
    complexity_score,
    documentation_rate,
    maintainability_score,
    performance_score,
    security_score,
)
from flowaudit.config import AuditConfig
from flowaudit.model.workflow import Workflow
from flowaudit.quality.validator import validate_categories
from flowaudit.structural.metrics import compute_graph_metrics
from flowaudit.utils.graph import (
    has_authentication,
    has_default_name,
    has_hardcoded_secret,
    has_iteration_cap,
    http_nodes,
    is_conditional_node,
    is_http_node,
    is_loop_node,
    is_trigger_node,
)
from flowaudit.utils.logger import get_logger, timed, workflow_logger

logger = get_logger("analysis")


@dataclass
class AnalysisIssue:
    severity: str  # "error" | "warning" | "info"
    category: str
    message: str
    node_id: Optional[str] = None
    suggestion: Optional[str] = None


@dataclass
class AnalysisResult:
    workflow_id: Optional[str]
    complexity: float
    performance: float
    security: float
    maintainability: float
    issues: List[AnalysisIssue] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    patterns: List[str] = field(default_factory=list)
    anti_patterns: List[str] = field(default_factory=list)
    metrics: Dict[str, Any] = field(default_factory=dict)

    @property
    def overall(self) -> float:
        return round((self.complexity + self.performance + self.security + self.maintainability) / 4, 1)

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["overall"] = self.overall
        return out


def complexity_metrics(workflow: Workflow) -> Dict[str, Any]:
    nodes = workflow.nodes
    metrics = {
        "node_count": len(nodes),
        "unique_node_types": len({n.type for n in nodes if isinstance(n.type, str) and n.type}),
        "connection_count": workflow.connection_count(),
        "logic_nodes": sum(1 for n in nodes if is_conditional_node(n) or is_loop_node(n)),
        "http_nodes": len(http_nodes(workflow)),
        "trigger_nodes": sum(1 for n in nodes if is_trigger_node(n)),
        "documentation_rate": round(documentation_rate(workflow), 2),
    }
    metrics["graph"] = compute_graph_metrics(workflow)
    return metrics


def _node_issues(workflow: Workflow) -> List[AnalysisIssue]:
    """Per-node findings, each pointing at the offending node."""
    issues: List[AnalysisIssue] = []
    for node in workflow.nodes:
        label = node.name or node.id
        if is_loop_node(node) and not has_iteration_cap(node):
            issues.append(AnalysisIssue(
                "error", "performance",
                f"Loop node '{label}' has no iteration limit",
                node_id=node.id,
                suggestion="Set maxIterations or limit on the loop",
            ))
        if has_hardcoded_secret(node):
            issues.append(AnalysisIssue(
                "error", "security",
                f"Node '{label}' may contain hardcoded sensitive data",
                node_id=node.id,
                suggestion="Reference credentials or expressions instead of literal values",
            ))
        if is_http_node(node) and not has_authentication(node):
            issues.append(AnalysisIssue(
                "warning", "security",
                f"HTTP node '{label}' has no authentication",
                node_id=node.id,
                suggestion="Configure an authentication method for the request",
            ))
        if has_default_name(node):
            issues.append(AnalysisIssue(
                "info", "naming",
                f"Node '{label}' still uses its default name",
                node_id=node.id,
                suggestion="Rename the node to describe its purpose",
            ))
    return issues


def generate_recommendations(result: AnalysisResult) -> List[str]:
    recs: List[str] = []
    if result.complexity > 7:
        recs.append("Consider breaking down this workflow into smaller, more manageable pieces")
    if result.performance < 7:
        recs.append("Optimize performance by parallelizing independent operations")
    if result.security < 8:
        recs.append("Review and improve security practices, especially credential management")
    if result.maintainability < 7:
        recs.append("Improve documentation and use more descriptive node names")
    if len(result.issues) > 5:
        recs.append("Address the identified issues to improve workflow quality")
    return recs


def analyze(
    workflow: Workflow,
    include_patterns: bool = True,
    include_validation: bool = False,
    config: Optional[AuditConfig] = None,
) -> AnalysisResult:
    """
    Composite 0-10 assessment of a workflow.

    Scores come from graph-shape heuristics, independent of the category
    validators. With `include_validation`, high-strictness category issues
    are appended as warnings.
    """
    log = workflow_logger(logger, workflow.id)
    log.debug("analyzing %d nodes", len(workflow.nodes))

    with timed(log, "composite scoring"):
        result = AnalysisResult(
            workflow_id=workflow.id,
            complexity=complexity_score(workflow),
            performance=performance_score(workflow),
            security=security_score(workflow),
            maintainability=maintainability_score(workflow),
            metrics=complexity_metrics(workflow),
        )
        result.issues.extend(_node_issues(workflow))

    if include_validation:
        validation = validate_categories(workflow, strictness="high", config=config)
        for category, cat in validation.categories.items():
            suggestion = cat.suggestions[0] if cat.suggestions else "Review and improve this aspect"
            for message in cat.issues:
                result.issues.append(AnalysisIssue("warning", category, message, suggestion=suggestion))

    if include_patterns:
        result.patterns = identify_patterns(workflow)
        result.anti_patterns = identify_anti_patterns(workflow)

    result.recommendations = generate_recommendations(result)
    log.info(
        "analyzed: complexity=%s performance=%s security=%s maintainability=%s",
        result.complexity, result.performance, result.security, result.maintainability,
    )
    return result
